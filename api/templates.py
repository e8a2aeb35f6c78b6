"""Template catalog API — similarity search and cache reload."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends

from api.common import domain_http_exception
from errors import WorkflowAssistantError
from models.request import TemplateReloadResponse, TemplateSearchRequest, TemplateSearchResponse
from models.template import ScoredTemplateSummary
from services.retrieval_service import TemplateRetrievalService, get_retrieval_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/templates", tags=["templates"])


@router.post("/search", response_model=TemplateSearchResponse, response_model_by_alias=True)
async def search_templates(
    req: TemplateSearchRequest,
    service: TemplateRetrievalService = Depends(get_retrieval_service),
):
    """Return the most similar templates with their cosine scores."""
    try:
        scored = await service.find_similar_templates_scored(req.query, top_k=req.top_k)
    except WorkflowAssistantError as e:
        raise domain_http_exception(e, "Template search") from e

    return TemplateSearchResponse(templates=[
        ScoredTemplateSummary(**t.summary().model_dump(), score=score)
        for t, score in scored
    ])


@router.post("/reload", response_model=TemplateReloadResponse)
async def reload_templates(service: TemplateRetrievalService = Depends(get_retrieval_service)):
    """Re-read both catalogs and swap the cached snapshot."""
    try:
        snapshot = await asyncio.to_thread(service.store.reload)
    except WorkflowAssistantError as e:
        raise domain_http_exception(e, "Template reload") from e

    logger.info(
        "Template catalog reloaded — %d templates, %d embeddings",
        len(snapshot.templates), len(snapshot.embeddings),
    )
    return TemplateReloadResponse(
        templates=len(snapshot.templates),
        embeddings=len(snapshot.embeddings),
        policy=service.store.policy.value,
    )
