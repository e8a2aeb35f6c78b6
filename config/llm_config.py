"""Reusable LLM generation parameters.

LLMConfig is a standalone Pydantic model that can be:
- embedded in Settings as the global default,
- declared per-agent for task-specific tuning (generation, chat, annotation),
- passed per-call for one-off overrides.

Priority chain (low → high):
    .env global defaults  →  Agent-level LLMConfig  →  per-call overrides
"""

from __future__ import annotations

from pydantic import BaseModel, Field

_SAMPLING_FIELDS = ("max_tokens", "temperature", "top_p", "seed")


class LLMConfig(BaseModel):
    """LLM generation parameters shared by the agents and the annotation job.

    All fields are optional.  ``None`` means "use the model's default".
    """

    model: str | None = Field(default=None, description="provider/model identifier")
    max_tokens: int | None = Field(default=None, description="Max tokens to generate")
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    seed: int | None = Field(default=None, description="Random seed for reproducibility")
    response_format: str | None = Field(
        default=None, description="'json_object' for structured output"
    )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def merge(self, overrides: LLMConfig) -> LLMConfig:
        """Return a new LLMConfig: *self* as base, *overrides* wins on non-None fields."""
        base = self.model_dump(exclude_none=True)
        base.update(overrides.model_dump(exclude_none=True))
        return LLMConfig(**base)

    def to_litellm_kwargs(self) -> dict:
        """Convert to ``litellm.completion()``-compatible keyword arguments."""
        kw: dict = {
            name: getattr(self, name)
            for name in _SAMPLING_FIELDS
            if getattr(self, name) is not None
        }
        if self.response_format:
            kw["response_format"] = {"type": self.response_format}
        return kw

    def to_model_settings(self) -> dict:
        """Convert to a PydanticAI ``model_settings`` dict (sampling fields only)."""
        return {
            name: getattr(self, name)
            for name in _SAMPLING_FIELDS
            if getattr(self, name) is not None
        }
