"""Pydantic Settings — typed configuration with .env auto-loading."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from config.llm_config import LLMConfig

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Service ──────────────────────────────────────────────
    service_port: int = 3001
    cors_origins: list[str] = ["*"]
    debug: bool = False
    log_level: str = "INFO"
    max_concurrent_llm: int = 10  # Outbound embedding/LLM calls per worker
    max_concurrent_heavy: int = 15  # In-flight generate/chat/search requests per worker

    # ── LLM ──────────────────────────────────────────────────
    default_model: str = "openai/gpt-4o"  # Workflow JSON generation
    chat_model: str = "openai/gpt-4o"  # Planning chat
    annotation_model: str = "openai/gpt-4.1"  # Offline description/tag annotation
    max_tokens: int = 8192

    # ── LLM Generation Defaults (all optional, None = model default) ──
    temperature: float | None = None
    top_p: float | None = None
    seed: int | None = None

    # Provider credentials (LiteLLM also reads OPENAI_API_KEY from env)
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    anthropic_api_key: str = ""

    # ── Embeddings ───────────────────────────────────────────
    embedding_model: str = "text-embedding-3-small"
    embedding_timeout: float = 30.0  # seconds

    # ── Template catalog ─────────────────────────────────────
    templates_root: Path = PROJECT_ROOT / "workflows"  # Folder holding <category>/*.json
    template_index_path: Path = PROJECT_ROOT / "templates" / "index.json"
    embeddings_path: Path = PROJECT_ROOT / "templates" / "embeddings.json"
    # "always" re-reads both catalogs per request; "cached" keeps a snapshot
    # until POST /api/templates/reload.
    template_reload_policy: Literal["always", "cached"] = "always"
    default_top_k: int = 5

    # ── n8n ──────────────────────────────────────────────────
    n8n_api_url: str = ""
    n8n_api_key: str = ""
    n8n_timeout: float = 30.0  # seconds

    # ── Batch jobs ───────────────────────────────────────────
    embedding_batch_delay: float = 1.0  # seconds between embedding calls
    annotation_batch_delay: float = 1.2  # seconds between annotation calls

    # ── Helpers ───────────────────────────────────────────────

    def get_default_llm_config(self) -> LLMConfig:
        """Build an :class:`LLMConfig` from global .env defaults."""
        return LLMConfig(
            model=self.default_model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            top_p=self.top_p,
            seed=self.seed,
        )


@lru_cache
def get_settings() -> Settings:
    """Singleton accessor for application settings."""
    return Settings()
