"""Agent provider — builds PydanticAI model instances from settings.

Model names use the ``"provider/model"`` convention shared with LiteLLM
(``openai/gpt-4o``, ``anthropic/claude-sonnet-4-20250514``).  Callers may pass
a per-request API key, which wins over the key from settings.
"""

from __future__ import annotations

import logging

from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from config.settings import get_settings
from errors import ConfigurationError

logger = logging.getLogger(__name__)


def create_model(model_name: str | None = None, api_key: str | None = None):
    """Build a PydanticAI model instance.

    - ``anthropic/*`` → native :class:`AnthropicModel`
    - ``openai/*`` or bare name → :class:`OpenAIChatModel` against
      ``settings.openai_base_url``

    Args:
        model_name: Model identifier in ``"provider/model"`` format.
                    Defaults to ``settings.default_model``.
        api_key: Optional per-request key override.

    Raises:
        ConfigurationError: no API key is available for the provider.
    """
    settings = get_settings()
    name = model_name or settings.default_model
    override = (api_key or "").strip()

    prefix, model_id = name.split("/", 1) if "/" in name else ("openai", name)

    if prefix == "anthropic":
        from pydantic_ai.models.anthropic import AnthropicModel
        from pydantic_ai.providers.anthropic import AnthropicProvider

        key = override or settings.anthropic_api_key
        if not key:
            raise ConfigurationError("ANTHROPIC_API_KEY")
        return AnthropicModel(model_id, provider=AnthropicProvider(api_key=key))

    if prefix != "openai":
        logger.warning("Unknown provider prefix %r — treating %s as OpenAI-compatible", prefix, name)

    key = override or settings.openai_api_key
    if not key:
        raise ConfigurationError("OPENAI_API_KEY")
    provider = OpenAIProvider(api_key=key, base_url=settings.openai_base_url)
    return OpenAIChatModel(model_id, provider=provider)
