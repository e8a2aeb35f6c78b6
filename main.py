"""FastAPI entry point for the n8n Workflow Assistant service."""

import asyncio
import logging
from contextlib import asynccontextmanager

import litellm
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import get_settings
from errors import StoreLoadError
from services.concurrency import ConcurrencyLimitMiddleware
from services.middleware import RequestIdMiddleware, configure_logging
from services.retrieval_service import get_retrieval_service
from services.template_store import ReloadPolicy

logger = logging.getLogger(__name__)

# ── Global LiteLLM settings ──────────────────────────────────
litellm.request_timeout = 60  # 60s timeout for all LiteLLM calls

settings = get_settings()
configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Warm the template catalog when it is cached; never block startup on it."""
    service = get_retrieval_service()
    if service.store.policy is ReloadPolicy.CACHED:
        try:
            snapshot = await asyncio.to_thread(service.store.reload)
            logger.info(
                "Template catalog warmed — %d templates, %d embeddings",
                len(snapshot.templates), len(snapshot.embeddings),
            )
        except StoreLoadError as exc:
            logger.warning("Template catalog not loaded at startup: %s", exc)
    if not service.embedder.is_configured:
        logger.warning("OPENAI_API_KEY is not set — template retrieval will fail until configured")

    yield


app = FastAPI(
    title="n8n Workflow Assistant",
    description="Generate n8n workflows from natural language using similar templates",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Middleware stack ───────────────────────────────────────────
# The last middleware added is the outermost, so the request path is
# CORS → RequestId → ConcurrencyLimit → route handler.
app.add_middleware(ConcurrencyLimitMiddleware)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Register routers ────────────────────────────────────────
from api.chat import router as chat_router  # noqa: E402
from api.health import router as health_router  # noqa: E402
from api.templates import router as templates_router  # noqa: E402
from api.workflow import router as workflow_router  # noqa: E402

app.include_router(health_router)
app.include_router(chat_router)
app.include_router(workflow_router)
app.include_router(templates_router)


if __name__ == "__main__":
    if settings.debug:
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=settings.service_port,
            reload=True,
        )
    else:
        # Production: prefer gunicorn main:app -c deploy/gunicorn.conf.py
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=settings.service_port,
            workers=4,
        )
