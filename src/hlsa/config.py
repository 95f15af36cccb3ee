"""HLSA Configuration Module.

All settings are read from the environment (or a local ``.env`` file).
The qualitative judges talk to an OpenAI-compatible chat completion
endpoint; by default that is the x.ai Grok API.
"""
from functools import lru_cache
from typing import Optional
from urllib.parse import urlparse

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM Server ===
    llm_base_url: str = "https://api.x.ai/v1"
    llm_api_key: str = ""  # Judges fall back to neutral scores without a key
    llm_model: str = "grok-3-latest"
    llm_timeout: float = Field(default=30.0, gt=0)

    # === Judges ===
    judge_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    judge_max_tokens: int = Field(default=250, ge=1)

    # === Follow-up questions ===
    follow_up_temperature: float = Field(default=0.8, ge=0.0, le=2.0)
    follow_up_max_tokens: int = Field(default=100, ge=1)

    # === Storage ===
    storage_enabled: bool = True
    data_path: str = "./data/store"
    fallback_cache_ttl_seconds: float = Field(default=3600.0, gt=0)
    fallback_cache_max_entries: int = Field(default=1024, ge=1)

    # === Paths ===
    log_path: str = "./logs"
    lexicon_path: Optional[str] = None  # JSON override for the word tables

    def validate_llm(self) -> None:
        """Validate LLM endpoint settings at startup."""
        parsed = urlparse(self.llm_base_url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(
                f"LLM_BASE_URL must be an http(s) URL with a host, "
                f"got '{self.llm_base_url}'"
            )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    settings.validate_llm()
    return settings
