"""Tests for agents/planner.py — planning chat."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from pydantic_ai.messages import (
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    UserPromptPart,
)
from pydantic_ai.models.function import AgentInfo, FunctionModel

from agents.planner import FALLBACK_REPLY, build_message_history, chat_with_planner
from config.prompts.workflow import PLANNER_SYSTEM_PROMPT, build_planner_prompt
from models.request import ChatMessage


# ── prompt & history ──────────────────────────────────────────


def test_planner_prompt_language():
    assert build_planner_prompt("ja").endswith("Respond in Japanese.\n")
    assert build_planner_prompt("en").endswith("Respond in English.\n")
    assert build_planner_prompt("fr").endswith("Respond in English.\n")
    assert build_planner_prompt("en").startswith(PLANNER_SYSTEM_PROMPT)


def test_message_history_order():
    history = [
        ChatMessage(role="user", content="I need a Slack alert"),
        ChatMessage(role="assistant", content="Which channel?"),
    ]

    messages = build_message_history(history, "en")

    assert len(messages) == 3
    assert isinstance(messages[0], ModelRequest)
    assert isinstance(messages[0].parts[0], SystemPromptPart)
    assert "Respond in English." in messages[0].parts[0].content
    assert isinstance(messages[1].parts[0], UserPromptPart)
    assert messages[1].parts[0].content == "I need a Slack alert"
    assert isinstance(messages[2], ModelResponse)
    assert isinstance(messages[2].parts[0], TextPart)
    assert messages[2].parts[0].content == "Which channel?"


# ── chat_with_planner ─────────────────────────────────────────


@pytest.mark.asyncio
async def test_chat_sends_system_prompt_history_and_message():
    seen = []

    def respond(messages, info: AgentInfo) -> ModelResponse:
        seen.extend(messages)
        return ModelResponse(parts=[TextPart(content="  1. Trigger on new row\n2. Post to Slack  ")])

    history = [ChatMessage(role="user", content="Hi"), ChatMessage(role="assistant", content="Hello")]
    with patch("agents.planner.create_model", return_value=FunctionModel(respond)) as mock_create:
        reply = await chat_with_planner(
            history, "Post sheet rows to Slack", language="en", api_key="sk-request"
        )

    assert reply == "1. Trigger on new row\n2. Post to Slack"
    assert mock_create.call_args.kwargs["api_key"] == "sk-request"

    system_parts = [
        p for m in seen if isinstance(m, ModelRequest) for p in m.parts if isinstance(p, SystemPromptPart)
    ]
    assert len(system_parts) == 1
    assert "Respond in English." in system_parts[0].content

    user_texts = [
        p.content for m in seen if isinstance(m, ModelRequest) for p in m.parts if isinstance(p, UserPromptPart)
    ]
    assert user_texts == ["Hi", "Post sheet rows to Slack"]


@pytest.mark.asyncio
async def test_explicit_model_passed_through():
    def respond(messages, info):
        return ModelResponse(parts=[TextPart(content="ok")])

    with patch("agents.planner.create_model", return_value=FunctionModel(respond)) as mock_create:
        await chat_with_planner([], "hello", model="anthropic/claude-sonnet-4-20250514")

    assert mock_create.call_args.args[0] == "anthropic/claude-sonnet-4-20250514"


@pytest.mark.asyncio
async def test_empty_reply_falls_back():
    with patch("agents.planner.create_model"), patch(
        "agents.planner.rate_limited_llm_call",
        new_callable=AsyncMock,
        return_value=SimpleNamespace(output="   "),
    ):
        assert await chat_with_planner([], "hello") == FALLBACK_REPLY
