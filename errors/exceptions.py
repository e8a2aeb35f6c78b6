"""Domain-specific exceptions for the n8n Workflow Assistant.

These exceptions allow the service and API layers to distinguish between
different failure modes and respond with appropriate HTTP errors.  Each
class carries the ``status_code`` the API layer maps it to.
"""

from __future__ import annotations


class WorkflowAssistantError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500


class ConfigurationError(WorkflowAssistantError):
    """A required credential or endpoint is not configured.

    Raised before any I/O so that no partial work is attempted.
    """

    status_code = 503

    def __init__(self, setting: str, message: str = "") -> None:
        self.setting = setting
        super().__init__(
            message or f"{setting} is not set. Configure it in .env or pass it per request."
        )


class StoreLoadError(WorkflowAssistantError):
    """The persisted template or embedding catalog is missing or malformed."""

    status_code = 500

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Failed to load {path}: {message}")


class InvalidInputError(WorkflowAssistantError):
    """Caller input was rejected before any external call was made."""

    status_code = 400


class EmbeddingError(WorkflowAssistantError):
    """The embedding call failed or returned no vector."""

    status_code = 502


class GenerationError(WorkflowAssistantError):
    """The LLM produced no usable workflow document."""

    status_code = 502


class DeployError(WorkflowAssistantError):
    """The n8n server rejected the workflow or could not be reached.

    ``upstream_status`` is ``None`` for transport-level failures.
    """

    status_code = 502

    def __init__(self, message: str, upstream_status: int | None = None, url: str = "") -> None:
        self.upstream_status = upstream_status
        self.url = url
        prefix = f"n8n API {upstream_status}" if upstream_status is not None else "n8n API unreachable"
        super().__init__(f"{prefix}: {message}" + (f" ({url})" if url else ""))
