"""Completion service powered by LiteLLM for the offline batch jobs.

Supports any provider LiteLLM supports via model name prefix:
    - openai/gpt-4.1
    - anthropic/claude-sonnet-4-20250514
    - dashscope/qwen-max
"""

from __future__ import annotations

import json
import logging
from typing import Any

import litellm

from config.llm_config import LLMConfig
from config.settings import get_settings
from errors import ConfigurationError, GenerationError

logger = logging.getLogger(__name__)


class LLMService:
    """Thin synchronous wrapper around ``litellm.completion()``.

    Accepts an optional :class:`LLMConfig` merged on top of the global
    defaults from Settings.  Individual calls can still override any
    parameter via ``**overrides``.

    Priority chain (low → high):
        .env global defaults  →  job-level LLMConfig  →  per-call overrides
    """

    def __init__(self, config: LLMConfig | None = None, api_key: str | None = None):
        settings = get_settings()
        self._config = settings.get_default_llm_config()
        if config:
            self._config = self._config.merge(config)
        self._api_key = api_key or settings.openai_api_key

    @property
    def model(self) -> str | None:
        return self._config.model

    def ensure_configured(self) -> None:
        """Raise :class:`ConfigurationError` for OpenAI models without a key."""
        model = self._config.model or ""
        if (model.startswith("openai/") or "/" not in model) and not self._api_key:
            raise ConfigurationError("OPENAI_API_KEY")

    def complete(self, messages: list[dict], system: str = "", **overrides: Any) -> str:
        """Send one completion request and return the text content.

        Raises:
            GenerationError: the model returned no content.
        """
        all_messages: list[dict] = []
        if system:
            all_messages.append({"role": "system", "content": system})
        all_messages.extend(messages)

        kwargs: dict = {
            "model": self._config.model,
            "messages": all_messages,
            **self._config.to_litellm_kwargs(),
        }
        if self._api_key:
            kwargs["api_key"] = self._api_key
        kwargs.update(overrides)

        response = litellm.completion(**kwargs)
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise GenerationError(f"{self._config.model} returned no content")
        return content

    def complete_json(self, messages: list[dict], system: str = "", **overrides: Any) -> dict:
        """Like :meth:`complete` but parses the reply as a JSON object."""
        text = self.complete(messages, system=system, **overrides)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.error("Model returned non-JSON content: %s", text[:300])
            raise GenerationError(f"Failed to parse JSON from model: {exc.msg}") from exc
        if not isinstance(data, dict):
            raise GenerationError("Model returned JSON that is not an object")
        return data
