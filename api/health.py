"""Health check endpoint."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends

from errors import StoreLoadError
from services.retrieval_service import TemplateRetrievalService, get_retrieval_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health(service: TemplateRetrievalService = Depends(get_retrieval_service)):
    """Report liveness plus catalog sizes; a broken catalog degrades, not fails."""
    try:
        snapshot = await asyncio.to_thread(service.store.snapshot)
    except StoreLoadError as exc:
        logger.warning("Health check: template catalog unavailable — %s", exc)
        return {"status": "degraded", "templates": 0, "embeddings": 0, "error": str(exc)}

    return {
        "status": "healthy",
        "templates": len(snapshot.templates),
        "embeddings": len(snapshot.embedded_vectors()),
        "embeddingConfigured": service.embedder.is_configured,
    }
