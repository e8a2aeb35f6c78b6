"""WorkflowGenerator — drafts an n8n workflow from a description + references.

Uses PydanticAI with ``output_type=GeneratedWorkflow`` for validated
structured output.  The retrieved templates are sent verbatim (including the
full workflow body) so the model can copy node types and parameter shapes.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from pydantic_ai import Agent

from agents.provider import create_model
from config.llm_config import LLMConfig
from config.prompts.workflow import WORKFLOW_SYSTEM_PROMPT
from errors import GenerationError, InvalidInputError
from models.template import Template
from models.workflow import GeneratedWorkflow
from services.concurrency import rate_limited_llm_call

logger = logging.getLogger(__name__)

# Agent-level LLM tuning — structured output, low temperature
GENERATOR_LLM_CONFIG = LLMConfig(temperature=0.2)

# Module-level agent — the model is chosen per run so that a per-request
# API key can be honoured.
_generator_agent = Agent(
    None,
    output_type=GeneratedWorkflow,
    system_prompt=WORKFLOW_SYSTEM_PROMPT,
    retries=2,
)


def build_user_payload(
    description: str,
    templates: Sequence[Template],
    external_context: str | None = None,
) -> dict[str, Any]:
    """Assemble the JSON user message sent to the generator."""
    return {
        "task_description": description,
        "reference_workflows": [
            {
                "id": t.id,
                "category": t.category,
                "title": t.title,
                "description": t.description,
                "tags": t.tags,
                "nodeTypes": t.node_types,
                "workflow": t.workflow,
            }
            for t in templates
        ],
        "external_context": external_context,
    }


async def generate_workflow(
    description: str,
    templates: Sequence[Template],
    external_context: str | None = None,
    api_key: str | None = None,
    model: str | None = None,
) -> dict[str, Any]:
    """Generate an importable n8n workflow document.

    Args:
        description: The user's automation requirement.
        templates: Reference templates, most relevant first.
        external_context: Optional notes from :mod:`services.external_context`.
        api_key: Optional per-request provider key.
        model: Optional model override (``provider/model``).

    Raises:
        InvalidInputError: *description* is blank.
        ConfigurationError: no provider key is available.
        GenerationError: the model produced no valid workflow.
    """
    if not description or not description.strip():
        raise InvalidInputError("description is required")

    llm = create_model(model, api_key=api_key)
    payload = build_user_payload(description, templates, external_context)

    logger.info(
        "Generating workflow with %d reference templates for: %s",
        len(templates), description[:80],
    )
    try:
        result = await rate_limited_llm_call(
            _generator_agent.run,
            json.dumps(payload, ensure_ascii=False),
            model=llm,
            model_settings=GENERATOR_LLM_CONFIG.to_model_settings(),
        )
    except Exception as exc:
        logger.exception("Workflow generation failed")
        raise GenerationError(f"Failed to generate workflow JSON: {exc}") from exc

    workflow = result.output.to_n8n()
    logger.info(
        "Workflow generated: %s (%d nodes)",
        workflow.get("name", ""), len(workflow.get("nodes", [])),
    )
    return workflow
