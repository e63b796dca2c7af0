from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="APP_",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_prefix: str = "/api/v1"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:8000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:8000",
    ]

    cors_origin_regex: str | None = None
    trusted_hosts: list[str] = ["*"]
    root_path: str = ""

    # Supabase
    supabase_url: str
    supabase_anon_key: str
    supabase_service_role_key: str | None = None

    # OpenAI
    openai_api_key: str
    completion_model: str = "gpt-3.5-turbo"
    embedding_model: str = "text-embedding-ada-002"
    embedding_dimensions: int = 1536

    # AI call retry (linear backoff: delay * attempt)
    ai_retry_attempts: int = 3
    ai_retry_delay_seconds: float = 1.0

    # Semantic search; strict threshold first, fallback only on empty results
    search_match_threshold: float = 0.75
    search_fallback_threshold: float = 0.5
    search_match_count: int = 5
    related_match_threshold: float = 0.7
    related_match_count: int = 3

    # Analytics
    analytics_timezone: str = "UTC"
    analytics_cache_path: str = ".analytics_cache.json"


settings = Settings()
