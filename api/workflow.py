"""Workflow API — generate an n8n workflow and deploy it to an n8n server."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from agents.workflow_generator import generate_workflow
from api.common import domain_http_exception
from errors import WorkflowAssistantError
from models.request import (
    WorkflowDeployRequest,
    WorkflowDeployResponse,
    WorkflowGenerateRequest,
    WorkflowGenerateResponse,
)
from services.external_context import build_external_context
from services.n8n_client import deploy_workflow, extract_workflow_id
from services.retrieval_service import TemplateRetrievalService, get_retrieval_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/workflows", tags=["workflows"])


@router.post("/generate", response_model=WorkflowGenerateResponse, response_model_by_alias=True)
async def workflow_generate(
    req: WorkflowGenerateRequest,
    service: TemplateRetrievalService = Depends(get_retrieval_service),
):
    """Retrieve similar templates, then generate a workflow from them.

    Pipeline: similar-template search → external context → LLM generation.
    """
    try:
        templates = await service.find_similar_templates(req.description, top_k=req.top_k)
        external_context = build_external_context(
            req.description,
            target_urls=req.target_urls,
            enable_web_search=req.enable_web_search,
        )
        workflow_json = await generate_workflow(
            description=req.description,
            templates=templates,
            external_context=external_context,
            api_key=req.openai_api_key,
        )
    except WorkflowAssistantError as e:
        raise domain_http_exception(e, "Workflow generation") from e

    return WorkflowGenerateResponse(
        workflow_json=workflow_json,
        similar_templates=[t.summary() for t in templates],
    )


@router.post("/deploy", response_model=WorkflowDeployResponse, response_model_by_alias=True)
async def workflow_deploy(req: WorkflowDeployRequest):
    """Create (or update, with ``workflowId``) the workflow on n8n."""
    try:
        response = await deploy_workflow(
            req.workflow_json,
            mode=req.mode,
            workflow_id=req.workflow_id,
            base_url=req.n8n_api_url,
            api_key=req.n8n_api_key,
        )
    except WorkflowAssistantError as e:
        raise domain_http_exception(e, "Workflow deploy") from e

    return WorkflowDeployResponse(
        success=True,
        n8n_workflow_id=extract_workflow_id(response),
        raw=response,
    )
