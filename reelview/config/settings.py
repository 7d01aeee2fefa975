"""
Centralized configuration using Pydantic BaseSettings.
All environment variables are loaded here - no hardcoded values.
"""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Reelview"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Backend-as-a-service
    BACKEND: str = "memory"  # "memory" or "supabase"
    SUPABASE_URL: Optional[str] = None
    SUPABASE_KEY: Optional[str] = None

    # Feed paging
    FEED_PAGE_SIZE: int = 20
    MAX_FEED_PAGE_SIZE: int = 50

    # Engagement
    LIKE_ROLLBACK_ON_FAILURE: bool = True

    # Sessions
    SESSION_TTL_SEC: int = 1800  # 30 minutes idle
    SESSION_PRUNE_INTERVAL_SEC: float = 60

    # Share-by-link
    SHARE_BASE_URL: str = "https://reelview.app"

    # Circuit Breaker (feed reads)
    CIRCUIT_BREAKER_FAILURE_THRESHOLD: int = 5
    CIRCUIT_BREAKER_RECOVERY_TIMEOUT_SEC: int = 30

    # Telemetry
    ENABLE_OTEL: bool = False  # Default to False to prevent gRPC errors in dev
    ENABLE_PROMETHEUS: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance - singleton pattern."""
    return Settings()
