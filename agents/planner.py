"""PlannerAgent — conversational requirement planning before generation.

Acts as an n8n consultant: outlines a step-by-step plan and asks clarifying
questions.  It never produces workflow JSON; that is the generator's job.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic_ai import Agent
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    UserPromptPart,
)

from agents.provider import create_model
from config.prompts.workflow import build_planner_prompt
from config.settings import get_settings
from models.request import ChatMessage
from services.concurrency import rate_limited_llm_call

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I couldn't generate a response."

_planner_agent = Agent(None, output_type=str)


def build_message_history(
    history: Sequence[ChatMessage],
    language: str,
) -> list[ModelMessage]:
    """Convert chat turns into PydanticAI messages, system prompt first.

    The system prompt is carried in the history because PydanticAI only
    injects agent-level system prompts when the history is empty.
    """
    messages: list[ModelMessage] = [
        ModelRequest(parts=[SystemPromptPart(content=build_planner_prompt(language))])
    ]
    for turn in history:
        if turn.role == "user":
            messages.append(ModelRequest(parts=[UserPromptPart(content=turn.content)]))
        else:
            messages.append(ModelResponse(parts=[TextPart(content=turn.content)]))
    return messages


async def chat_with_planner(
    history: Sequence[ChatMessage],
    message: str,
    language: str = "ja",
    api_key: str | None = None,
    model: str | None = None,
) -> str:
    """Return the planner's reply to *message* given prior *history*."""
    llm = create_model(model or get_settings().chat_model, api_key=api_key)

    result = await rate_limited_llm_call(
        _planner_agent.run,
        message,
        model=llm,
        message_history=build_message_history(history, language),
    )
    reply = (result.output or "").strip()
    if not reply:
        logger.warning("Planner returned an empty reply")
        return FALLBACK_REPLY
    return reply
