"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

CACHE_BACKENDS = {"supabase", "memory"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    tmdb_api_key: str
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    tmdb_image_base_url: str = "https://image.tmdb.org/t/p/w500"
    tmdb_language: str = "en-US"
    tmdb_timeout_seconds: float = 8.0
    tmdb_pages: int = 5
    catalog_cache_ttl_days: int = 30
    catalog_cache_backend: str = "supabase"
    breaker_failure_threshold: int = 5
    breaker_reset_timeout_seconds: float = 60.0
    distinct_voters: bool = False
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_cache_backend(raw: str | None) -> str:
    """Normalize the configured catalog cache backend name."""
    if raw is None:
        return "supabase"
    cleaned = raw.strip().lower()
    if cleaned in CACHE_BACKENDS:
        return cleaned
    return "supabase"
