"""Base model with camelCase serialization for API and catalog I/O."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every model that crosses a JSON boundary.

    Fields are snake_case in Python and camelCase on the wire, so the
    persisted catalog (``fileName``, ``nodeTypes``) and the browser payloads
    (``topK``, ``workflowJson``) round-trip without manual key mapping.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
