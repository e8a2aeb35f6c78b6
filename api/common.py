"""Shared helpers for API routes."""

from __future__ import annotations

import logging

from fastapi import HTTPException

from errors import WorkflowAssistantError

logger = logging.getLogger(__name__)


def domain_http_exception(exc: WorkflowAssistantError, action: str) -> HTTPException:
    """Map a domain error to an ``HTTPException`` and log it.

    Client-side errors (4xx) are logged as warnings; everything else with a
    traceback.
    """
    if exc.status_code < 500:
        logger.warning("%s rejected: %s", action, exc)
    else:
        logger.error("%s failed: %s", action, exc, exc_info=exc)
    return HTTPException(status_code=exc.status_code, detail=str(exc))
