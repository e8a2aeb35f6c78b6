"""Template retrieval — embed a description and return the closest templates.

The single retrieval entry point used by the generation endpoint and the
template search API.  Collaborators (store, embedding provider) are passed
in explicitly; :func:`get_retrieval_service` builds the process-wide
instance from settings.
"""

from __future__ import annotations

import asyncio
import logging

from config.settings import get_settings
from errors import ConfigurationError, InvalidInputError
from models.template import Template
from services.embedding_provider import EmbeddingProvider, OpenAIEmbeddingProvider
from services.similarity import DEFAULT_TOP_K, rank_top_k
from services.template_store import JsonTemplateStore, TemplateStore

logger = logging.getLogger(__name__)

_service: TemplateRetrievalService | None = None


class TemplateRetrievalService:
    """Ranks stored templates by cosine similarity to a query embedding."""

    def __init__(
        self,
        store: TemplateStore,
        embedder: EmbeddingProvider,
        default_top_k: int = DEFAULT_TOP_K,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.default_top_k = default_top_k

    async def find_similar_templates(
        self,
        query: str,
        top_k: int | None = None,
    ) -> list[Template]:
        """Return up to *top_k* templates most similar to *query*, best first.

        Raises:
            ConfigurationError: the embedding provider has no credentials.
            InvalidInputError: *query* is empty or whitespace.
            StoreLoadError: a catalog file is missing or malformed.
            EmbeddingError: the query could not be embedded.
        """
        scored = await self.find_similar_templates_scored(query, top_k)
        return [template for template, _ in scored]

    async def find_similar_templates_scored(
        self,
        query: str,
        top_k: int | None = None,
    ) -> list[tuple[Template, float]]:
        """Same as :meth:`find_similar_templates`, with each similarity score."""
        if not self.embedder.is_configured:
            raise ConfigurationError(
                "OPENAI_API_KEY",
                "Embedding provider is not configured (OPENAI_API_KEY is not set).",
            )
        if not query or not query.strip():
            raise InvalidInputError("query must be a non-empty string")

        k = self.default_top_k if top_k is None else top_k

        snapshot = await asyncio.to_thread(self.store.snapshot)
        vectors = snapshot.embedded_vectors()

        query_vector = await self.embedder.embed(query)

        ranked = rank_top_k(query_vector, vectors, k)
        by_id = {t.id: t for t in snapshot.templates}
        result = [(by_id[item.id], item.score) for item in ranked]

        logger.info(
            "Retrieved %d/%d templates (embedded=%d, top_k=%d) for query: %s",
            len(result), len(snapshot.templates), len(vectors), k, query[:80],
        )
        return result


def get_retrieval_service() -> TemplateRetrievalService:
    """Return the module-level retrieval service (create if needed).

    Also the FastAPI dependency for routes; tests override it through
    ``app.dependency_overrides``.
    """
    global _service
    if _service is None:
        settings = get_settings()
        store = JsonTemplateStore(
            settings.template_index_path,
            settings.embeddings_path,
            policy=settings.template_reload_policy,
        )
        _service = TemplateRetrievalService(
            store=store,
            embedder=OpenAIEmbeddingProvider.from_settings(settings),
            default_top_k=settings.default_top_k,
        )
        logger.info(
            "Retrieval service created — index=%s, embeddings=%s, policy=%s",
            settings.template_index_path, settings.embeddings_path, store.policy.value,
        )
    return _service
