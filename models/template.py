"""Template catalog models — stored example workflows and their embeddings."""

from __future__ import annotations

from typing import Any

from pydantic import Field, FiniteFloat

from models.base import CamelModel


class Template(CamelModel):
    """One example n8n workflow with its retrieval metadata.

    ``workflow`` is the full workflow definition; it is passed through to the
    generator unmodified.
    """

    id: str = Field(min_length=1)
    file_name: str = ""
    category: str = ""
    title: str = ""
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    node_types: list[str] = Field(default_factory=list)
    workflow: dict[str, Any] = Field(default_factory=dict)

    def summary(self) -> TemplateSummary:
        return TemplateSummary(
            id=self.id,
            title=self.title,
            category=self.category,
            tags=list(self.tags),
        )


class TemplateEmbedding(CamelModel):
    """Embedding record — ``id`` references a :class:`Template`."""

    id: str = Field(min_length=1)
    embedding: list[FiniteFloat]


class TemplateSummary(CamelModel):
    """Lightweight template view returned to the browser."""

    id: str
    title: str = ""
    category: str = ""
    tags: list[str] = Field(default_factory=list)


class ScoredTemplateSummary(TemplateSummary):
    score: float
