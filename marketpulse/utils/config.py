"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.
"""

from datetime import timedelta
from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # DataForSEO (optional - without credentials every refresh falls back to cache)
    DATAFORSEO_LOGIN: Optional[str] = None
    DATAFORSEO_PASSWORD: Optional[str] = None

    # Storage
    DATABASE_URL: Optional[str] = None

    # Application Settings
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Market (DataForSEO location/language)
    LOCATION_CODE: int = 2528  # Netherlands
    LOCATION_NAME: str = "Netherlands"
    LANGUAGE_CODE: str = "nl"

    # Scoring
    MIN_VOLUME_THRESHOLD: int = 1000

    # Refresh cadence
    DASHBOARD_TTL_HOURS: int = 168  # Weekly
    ALERTS_TTL_MINUTES: int = 60
    HISTORY_LIMIT: int = 12  # Snapshots used for anomaly baselines

    # Provider limits
    PROVIDER_TIMEOUT: float = 30.0
    TRENDS_CALL_DELAY: float = 0.2

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        case_sensitive = False

    @property
    def dashboard_ttl(self) -> timedelta:
        return timedelta(hours=self.DASHBOARD_TTL_HOURS)

    @property
    def alerts_ttl(self) -> timedelta:
        return timedelta(minutes=self.ALERTS_TTL_MINUTES)

    @property
    def has_provider_credentials(self) -> bool:
        return bool(self.DATAFORSEO_LOGIN and self.DATAFORSEO_PASSWORD)


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
