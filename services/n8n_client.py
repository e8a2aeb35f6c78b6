"""HTTP client for the n8n REST API (workflow deploy).

Wraps ``httpx.AsyncClient`` with:
- base URL normalisation + ``X-N8N-API-KEY`` auth header
- retry with exponential backoff on connection errors only (the request
  never reached the server; creating a workflow is not idempotent, so
  timeouts and 5xx are not retried)
- request timing logs
- async context-manager lifecycle (one client per deploy, since URL and key
  may be overridden per request)
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Literal

import httpx

from config.settings import get_settings
from errors import ConfigurationError, DeployError, InvalidInputError

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_BASE_DELAY = 0.5  # seconds, doubles each attempt


class N8nClient:
    """Async client for ``/rest/workflows`` on an n8n server."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        base_url = (base_url or "").strip()
        api_key = (api_key or "").strip()
        if not base_url:
            raise ConfigurationError("N8N_API_URL")
        if not api_key:
            raise ConfigurationError("N8N_API_KEY")

        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    # -- lifecycle -----------------------------------------------------------

    async def start(self) -> None:
        if self._http is not None:
            return
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            headers={
                "X-N8N-API-KEY": self._api_key,
                "Content-Type": "application/json",
            },
            transport=self._transport,
        )
        logger.debug("N8nClient started — base_url=%s", self._base_url)

    async def close(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> N8nClient:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # -- public API ----------------------------------------------------------

    async def create_workflow(self, workflow: dict[str, Any]) -> Any:
        """Create a new workflow; returns the n8n response body."""
        return await self._request("POST", "/rest/workflows", workflow)

    async def update_workflow(self, workflow_id: str, workflow: dict[str, Any]) -> Any:
        """Patch an existing workflow by id."""
        if not workflow_id or not workflow_id.strip():
            raise InvalidInputError("workflowId is required for update.")
        return await self._request("PATCH", f"/rest/workflows/{workflow_id.strip()}", workflow)

    # -- internals -----------------------------------------------------------

    async def _request(self, method: str, path: str, json_body: dict[str, Any]) -> Any:
        client = self._ensure_started()
        last_exc: Exception | None = None

        for attempt in range(1, MAX_RETRIES + 1):
            t0 = time.monotonic()
            try:
                response = await client.request(method, path, json=json_body)
            except httpx.ConnectError as exc:
                last_exc = exc
                logger.warning(
                    "%s %s → connect error: %s [attempt %d/%d]",
                    method, path, exc, attempt, MAX_RETRIES,
                )
                if attempt < MAX_RETRIES:
                    await asyncio.sleep(RETRY_BASE_DELAY * (2 ** (attempt - 1)))
                    continue
                break
            except httpx.HTTPError as exc:
                raise DeployError(str(exc) or type(exc).__name__, url=f"{self._base_url}{path}") from exc

            elapsed_ms = (time.monotonic() - t0) * 1000
            logger.info("%s %s → %d (%.0fms)", method, path, response.status_code, elapsed_ms)

            if not response.is_success:
                detail = response.text[:500] if response.text else f"HTTP {response.status_code}"
                raise DeployError(detail, upstream_status=response.status_code, url=str(response.url))

            if not response.text:
                return {}
            try:
                return response.json()
            except ValueError:
                return response.text

        raise DeployError(str(last_exc), url=f"{self._base_url}{path}") from last_exc

    def _ensure_started(self) -> httpx.AsyncClient:
        if self._http is None:
            raise RuntimeError("N8nClient not started — use 'async with' or await client.start()")
        return self._http


async def deploy_workflow(
    workflow: dict[str, Any],
    mode: Literal["create", "update"] = "create",
    workflow_id: str | None = None,
    base_url: str | None = None,
    api_key: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    """Create or update *workflow* on n8n, resolving overrides against settings."""
    if mode == "update" and not (workflow_id or "").strip():
        raise InvalidInputError("workflowId is required for update mode")

    settings = get_settings()
    client = N8nClient(
        base_url=base_url or settings.n8n_api_url,
        api_key=api_key or settings.n8n_api_key,
        timeout=settings.n8n_timeout,
        transport=transport,
    )
    async with client:
        if mode == "update":
            return await client.update_workflow(workflow_id or "", workflow)
        return await client.create_workflow(workflow)


def extract_workflow_id(response: Any) -> str | None:
    """Return the ``id`` of an n8n response body, unwrapping ``{"data": ...}``."""
    if not isinstance(response, dict):
        return None
    body = response.get("data") if isinstance(response.get("data"), dict) else response
    wid = body.get("id")
    return str(wid) if wid is not None else None
