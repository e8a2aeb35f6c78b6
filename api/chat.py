"""Planning chat endpoint — clarifies requirements before generation."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from agents.planner import chat_with_planner
from api.common import domain_http_exception
from errors import WorkflowAssistantError
from models.request import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])


@router.post("/chat", response_model=ChatResponse)
async def chat(req: ChatRequest):
    """Reply with a step-by-step plan and clarifying questions."""
    try:
        reply = await chat_with_planner(
            history=req.history,
            message=req.message,
            language=req.language,
            api_key=req.openai_api_key,
        )
    except WorkflowAssistantError as e:
        raise domain_http_exception(e, "Chat") from e
    except Exception as e:
        logger.exception("Failed to chat")
        raise HTTPException(status_code=502, detail=f"Chat failed: {e}") from e

    return ChatResponse(reply=reply)
