"""API request / response models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field

from models.base import CamelModel
from models.template import ScoredTemplateSummary, TemplateSummary


class ChatMessage(CamelModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(CamelModel):
    """POST /api/chat — request body."""

    message: str = Field(min_length=1)
    history: list[ChatMessage] = Field(default_factory=list)
    language: Literal["ja", "en"] = "ja"
    openai_api_key: str | None = None


class ChatResponse(CamelModel):
    """POST /api/chat — response body."""

    reply: str


class WorkflowGenerateRequest(CamelModel):
    """POST /api/workflows/generate — request body."""

    description: str = Field(min_length=1)
    top_k: int | None = None
    target_urls: list[str] | None = None
    enable_web_search: bool = False
    openai_api_key: str | None = None


class WorkflowGenerateResponse(CamelModel):
    """POST /api/workflows/generate — response body."""

    workflow_json: dict[str, Any]
    similar_templates: list[TemplateSummary]


class WorkflowDeployRequest(CamelModel):
    """POST /api/workflows/deploy — request body.

    ``n8nApiUrl`` / ``n8nApiKey`` override the server-side defaults.  The
    ``n8n`` fields carry explicit aliases; ``to_camel`` would yield ``n8NApiUrl``.
    """

    workflow_json: dict[str, Any]
    mode: Literal["create", "update"] = "create"
    workflow_id: str | None = None
    n8n_api_url: str | None = Field(default=None, alias="n8nApiUrl")
    n8n_api_key: str | None = Field(default=None, alias="n8nApiKey")


class WorkflowDeployResponse(CamelModel):
    """POST /api/workflows/deploy — response body."""

    success: bool
    n8n_workflow_id: str | None = Field(default=None, alias="n8nWorkflowId")
    raw: Any = None


class TemplateSearchRequest(CamelModel):
    """POST /api/templates/search — request body."""

    query: str = Field(min_length=1)
    top_k: int | None = None


class TemplateSearchResponse(CamelModel):
    templates: list[ScoredTemplateSummary]


class TemplateReloadResponse(CamelModel):
    templates: int
    embeddings: int
    policy: str
