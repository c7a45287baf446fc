"""
Settings - Application configuration using Pydantic Settings.

Loads from environment variables (prefix ``BUILDERSEARCH_``) and .env files.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Paths
    data_dir: Path = Path("data")
    db_path: Path = Path("data/buildersearch.db")
    records_file: Path = Path("data/search_index.json")

    # Record store: "sqlite" (document table) or "file" (JSON array)
    record_store: Literal["sqlite", "file"] = "sqlite"
    store_retry_attempts: int = 3
    store_retry_delay_seconds: float = 2.0

    # Search
    search_default_limit: int = 10
    advanced_search_default_limit: int = 20
    # None keeps every cached query for the process lifetime
    cache_max_entries: int | None = None

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    rate_limit_rpm: int = 60

    # Logging
    log_level: str = "info"

    model_config = SettingsConfigDict(
        env_prefix="BUILDERSEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
