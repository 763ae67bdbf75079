# Idemark v1.0.0 - Configuration Management
"""
Centralized configuration management using Pydantic Settings.
Loads configuration from environment variables with sensible defaults.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Idestrim platform
    idestrim_base_url: str = Field(
        default="https://www.idestrim.site",
        description="Root page used to discover the platform backend"
    )
    idestrim_domains: List[str] = Field(
        default=["idestrim.site", "idestrim.com"],
        description="Domain markers accepted as Idestrim links"
    )
    idestrim_records_table: str = Field(
        default="media_uploads",
        description="Record-listing endpoint queried on the platform data API"
    )
    idestrim_media_bucket: str = Field(
        default="media",
        description="Storage bucket holding post media"
    )

    # Import strategy
    import_strategy: Literal["api", "scrape", "auto"] = Field(
        default="auto",
        description="api: direct data API, scrape: HTML metadata, auto: api with scrape fallback"
    )
    upstream_retry_attempts: int = Field(
        default=1, ge=0, le=3,
        description="Extra data API attempts (with fresh discovery) after an upstream rejection"
    )

    # Outbound HTTP
    fetch_timeout: float = Field(default=10.0, gt=0, le=60.0, description="Per-request timeout in seconds")
    fetch_user_agent: str = Field(
        default="Mozilla/5.0 (compatible; Idemark/1.0)",
        description="User-Agent sent on outbound requests"
    )
    max_html_chars: int = Field(default=500_000, ge=1000, description="Max HTML characters parsed per page")

    # CORS
    cors_allow_headers: List[str] = Field(
        default=[
            "authorization",
            "x-client-info",
            "apikey",
            "content-type",
            "x-supabase-client-platform",
            "x-supabase-client-platform-version",
            "x-supabase-client-runtime",
            "x-supabase-client-runtime-version",
        ],
        description="Client-identifying headers allowed on cross-origin requests"
    )

    # Server Configuration
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API server port")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to avoid re-reading environment variables on every call.
    """
    return Settings()
