"""Structured output model for generated n8n workflows.

Only the keys n8n needs for import are required; everything else the model
emits (``settings``, ``typeVersion``, ``credentials`` …) is kept verbatim.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WorkflowNode(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    type: str = Field(description='n8n node type, e.g. "n8n-nodes-base.webhook"')
    parameters: dict[str, Any] = Field(default_factory=dict)


class GeneratedWorkflow(BaseModel):
    """An importable n8n workflow document."""

    model_config = ConfigDict(extra="allow")

    name: str
    nodes: list[WorkflowNode]
    connections: dict[str, Any] = Field(default_factory=dict)

    def to_n8n(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
