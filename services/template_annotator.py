"""Fill in missing template descriptions and tags with an LLM.

Used by ``scripts/annotate_templates.py``.  Only templates with a blank
description or no tags are sent to the model.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Sequence

from pydantic import BaseModel, Field, ValidationError

from config.llm_config import LLMConfig
from config.prompts.workflow import ANNOTATION_SYSTEM_PROMPT
from errors import GenerationError
from models.template import Template
from services.llm_service import LLMService

logger = logging.getLogger(__name__)

ANNOTATION_LLM_CONFIG = LLMConfig(temperature=0.2, response_format="json_object")
PREVIEW_NODE_LIMIT = 5


class Annotation(BaseModel):
    description: str
    tags: list[str] = Field(default_factory=list)


def needs_annotation(template: Template) -> bool:
    return not template.description.strip() or not template.tags


def build_workflow_preview(template: Template) -> str:
    """Name plus the first few nodes (name, type, notes) as pretty JSON."""
    nodes = template.workflow.get("nodes")
    if not isinstance(nodes, list):
        return "nodes: []"

    preview = {
        "name": template.workflow.get("name") or template.title,
        "nodes": [
            {
                "name": node.get("name"),
                "type": node.get("type"),
                "notes": node.get("notes") or "",
            }
            for node in nodes[:PREVIEW_NODE_LIMIT]
            if isinstance(node, dict)
        ],
    }
    return json.dumps(preview, ensure_ascii=False, indent=2)


def build_annotation_prompt(template: Template) -> str:
    return "\n".join([
        f"category: {template.category}",
        f"title: {template.title}",
        f"nodeTypes: {', '.join(template.node_types) or 'unknown'}",
        "workflowPreview:",
        build_workflow_preview(template),
    ])


def annotate_template(template: Template, llm: LLMService) -> Annotation:
    """Ask the model for a description and tags for *template*."""
    data = llm.complete_json(
        [{"role": "user", "content": build_annotation_prompt(template)}],
        system=ANNOTATION_SYSTEM_PROMPT,
    )
    try:
        return Annotation.model_validate(data)
    except ValidationError as exc:
        raise GenerationError(f"Annotation for {template.id} has an invalid shape") from exc


def annotate_templates(
    templates: Sequence[Template],
    llm: LLMService,
    delay: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> tuple[list[Template], int]:
    """Annotate every template that needs it.

    Returns:
        ``(templates, updated_count)`` — a new list in the original order;
        templates whose annotation failed are kept unchanged.
    """
    result: list[Template] = []
    updated = 0
    for template in templates:
        if not needs_annotation(template):
            result.append(template)
            continue

        try:
            annotation = annotate_template(template, llm)
        except Exception as exc:
            logger.error("Failed to annotate %s: %s", template.id, exc)
            result.append(template)
            continue

        result.append(template.model_copy(update={
            "description": annotation.description,
            "tags": annotation.tags,
        }))
        updated += 1
        if delay > 0:
            sleep(delay)

    return result, updated
