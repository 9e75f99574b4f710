"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # LLM
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o"
    openai_temperature: float = 0.7
    llm_timeout_seconds: float = 60.0

    # Extraction limits
    extract_max_chars: int = 15000

    # Soft delete (milliseconds)
    undo_window_ms: int = 10000

    # Storage
    storage_path: str | None = None
    storage_key: str = "signal_decisions"

    # UI
    ui_origin: str = "http://localhost:8501"
    backend_url: str = "http://localhost:8000"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
