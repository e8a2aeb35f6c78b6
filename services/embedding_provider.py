"""Text → vector embedding via an OpenAI-compatible ``/embeddings`` endpoint.

The provider is an explicitly constructed collaborator: the retrieval
service and the embedding batch job receive one, and tests substitute a
fake by subclassing :class:`EmbeddingProvider`.

A failed call surfaces immediately as :class:`EmbeddingError`; callers that
want retries add their own policy.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod

import httpx

from config.settings import Settings, get_settings
from errors import ConfigurationError, EmbeddingError, InvalidInputError
from services.concurrency import rate_limited_llm_call

logger = logging.getLogger(__name__)


class EmbeddingProvider(ABC):
    """Converts text into a fixed-dimensionality vector."""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when credentials/endpoint are present."""

    @abstractmethod
    async def _create_embedding(self, text: str) -> list[float]:
        """Perform the external call for already-validated *text*."""

    async def embed(self, text: str) -> list[float]:
        """Embed *text*.

        Raises:
            InvalidInputError: *text* is empty after trimming (no call is made).
            EmbeddingError: the external call failed or returned no vector.
        """
        if not text or not text.strip():
            raise InvalidInputError("Embedding input must be a non-empty string")
        return await self._create_embedding(text)


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Embedding provider for the OpenAI embeddings API (or a compatible one)."""

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = (api_key or "").strip()
        self.model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> OpenAIEmbeddingProvider:
        settings = settings or get_settings()
        return cls(
            api_key=settings.openai_api_key,
            model=settings.embedding_model,
            base_url=settings.openai_base_url,
            timeout=settings.embedding_timeout,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def _create_embedding(self, text: str) -> list[float]:
        if not self.is_configured:
            raise ConfigurationError("OPENAI_API_KEY")
        return await rate_limited_llm_call(self._post_embedding, text)

    async def _post_embedding(self, text: str) -> list[float]:
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    "/embeddings",
                    headers={"Authorization": f"Bearer {self._api_key}"},
                    json={"model": self.model, "input": text},
                )
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Embedding API error %d: %s",
                exc.response.status_code, exc.response.text[:200],
            )
            raise EmbeddingError(
                f"Embedding API returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Embedding request failed: %s", exc)
            raise EmbeddingError(f"Embedding request failed: {exc}") from exc

        try:
            vector = [float(v) for v in resp.json()["data"][0]["embedding"]]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise EmbeddingError("Embedding response did not include a vector") from exc

        if not vector:
            raise EmbeddingError("Embedding response did not include a vector")
        if not all(math.isfinite(v) for v in vector):
            raise EmbeddingError("Embedding response contained non-finite values")

        logger.debug("Embedded %d chars → dim %d", len(text), len(vector))
        return vector
