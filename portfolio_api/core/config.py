"""Application configuration via pydantic settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "portfolio-api"
    app_version: str = "1.0.0"
    app_env: str = "development"

    gemini_api_key: Optional[str] = None
    gemini_public_api_key: Optional[str] = None
    admin_chat_model: str = "gemini-2.5-flash"
    public_chat_model: str = "gemini-2.0-flash-exp"
    chat_history_limit: int = 10

    chat_rate_limit_max_requests: int = 10
    chat_rate_limit_window_seconds: int = 24 * 60 * 60
    rate_limit_cleanup_interval_seconds: float = 60 * 60

    profile_cache_ttl_seconds: float = 10.0
    site_settings_cache_ttl_seconds: float = 30.0
    cache_max_items: int = 256

    content_seed_path: Optional[str] = None

    api_key: Optional[str] = None
    log_level: str = "INFO"
    log_json: bool = True

    @property
    def public_gemini_key(self) -> Optional[str]:
        return self.gemini_public_api_key or self.gemini_api_key


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
