"""Application configuration: loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from ``SAUDAI_*`` env vars (or ``.env`` file)."""

    model_config = SettingsConfigDict(
        env_prefix="SAUDAI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: Literal["ollama", "openai"] = "ollama"
    model: str = "deepseek-r1:8b"
    ollama_url: str = "http://localhost:11434"
    openai_api_key: SecretStr | None = None
    openai_base_url: str | None = None
    timeout_ms: int = 60_000
    sync_timeout_ms: int = 120_000
    temperature: float = 0.2
    max_tokens: int = 300
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    @model_validator(mode="after")
    def _openai_needs_key(self) -> Settings:
        if self.backend == "openai" and self.openai_api_key is None:
            msg = "SAUDAI_OPENAI_API_KEY must be set when SAUDAI_BACKEND=openai."
            raise ValueError(msg)
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton application settings (cached after first call)."""
    return Settings()
