"""
Application configuration management.

Uses pydantic-settings for type-safe environment variable parsing.
All configuration is centralized here so the store, cache and logging
layers receive their parameters by injection instead of reading
os.getenv() on their own.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with validation and type coercion.

    Values are loaded from environment variables or .env file.
    All fields have sensible defaults for local development.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage Backend Selection
    # Options: "json" (one file per collection), "memory" (in-process)
    storage_backend: Literal["json", "memory"] = "json"

    # JSON file backend
    data_dir: Path = Path("data")
    json_indent: int = 2

    # Read cache freshness window
    cache_ttl_ms: int = 5000

    # Forum stats
    latest_posts_limit: int = 5

    # Logging
    log_level: str = "INFO"

    # Environment
    environment: Literal["development", "staging", "production"] = "development"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings singleton.

    Use this function to get settings instance throughout the application.
    The @lru_cache ensures we only parse environment once.
    """
    return Settings()


# Convenience export for direct import
settings = get_settings()
