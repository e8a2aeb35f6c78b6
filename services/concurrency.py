"""Concurrency controls for outbound model calls and heavy endpoints.

Caps the number of concurrent embedding / LLM requests per worker process
with an ``asyncio.Semaphore`` so bursts stay under provider rate limits.

The middleware is pure ASGI (no BaseHTTPMiddleware).
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Coroutine

from starlette.types import ASGIApp, Receive, Scope, Send

from config.settings import get_settings

logger = logging.getLogger(__name__)

# ── Model-call semaphore ─────────────────────────────────────

_llm_semaphore: asyncio.Semaphore | None = None


def _get_semaphore() -> asyncio.Semaphore:
    """Lazy-init so the semaphore binds to the running event loop."""
    global _llm_semaphore
    if _llm_semaphore is None:
        limit = get_settings().max_concurrent_llm
        _llm_semaphore = asyncio.Semaphore(limit)
        logger.info("Model-call semaphore initialized (max=%d)", limit)
    return _llm_semaphore


async def rate_limited_llm_call(
    func: Callable[..., Coroutine[Any, Any, Any]],
    *args: Any,
    **kwargs: Any,
) -> Any:
    """Await *func* while holding the model-call semaphore.

    Usage::

        vector = await rate_limited_llm_call(provider._post_embedding, text)
    """
    async with _get_semaphore():
        return await func(*args, **kwargs)


# ── Heavy endpoint middleware ────────────────────────────────
# Requests over the limit get 503 instead of queueing behind slow LLM calls.

_heavy_semaphore: asyncio.Semaphore | None = None

HEAVY_PATHS = frozenset({
    "/api/chat",
    "/api/workflows/generate",
    "/api/templates/search",
})


def _get_heavy_semaphore() -> asyncio.Semaphore:
    global _heavy_semaphore
    if _heavy_semaphore is None:
        limit = get_settings().max_concurrent_heavy
        _heavy_semaphore = asyncio.Semaphore(limit)
        logger.info("Heavy endpoint semaphore initialized (max=%d)", limit)
    return _heavy_semaphore


class ConcurrencyLimitMiddleware:
    """Reject requests to :data:`HEAVY_PATHS` with 503 when the worker is full.

    Other paths (health, deploy, reload) pass through unaffected.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("path", "") not in HEAVY_PATHS:
            await self.app(scope, receive, send)
            return

        sem = _get_heavy_semaphore()
        if sem.locked():
            logger.warning("Concurrency limit reached for %s — returning 503", scope["path"])
            body = json.dumps(
                {"detail": "Server busy — too many concurrent requests. Please retry."}
            ).encode()
            await send({
                "type": "http.response.start",
                "status": 503,
                "headers": [
                    (b"content-type", b"application/json"),
                    (b"retry-after", b"5"),
                ],
            })
            await send({"type": "http.response.body", "body": body})
            return

        async with sem:
            await self.app(scope, receive, send)
