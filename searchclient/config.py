"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Backend
    api_base: str = ""
    api_token: str | None = None

    # Retry policy
    max_retries: int = 3
    retry_base_delay_ms: int = 1000

    # Timeouts (seconds)
    request_timeout_s: float = 30.0

    # Local session gate
    auth_password: str | None = None

    # Local persisted state (auth token, analytics events)
    storage_path: str = ".searchclient/storage.json"

    # Search analytics ring buffer size
    analytics_max_events: int = 100


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
