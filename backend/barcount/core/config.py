"""Application configuration using pydantic-settings.

All environment variables should be accessed through the settings object
rather than using os.getenv() directly. Reorder and reporting policy live here
too, so the calculation services never hard-code them.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Database - defaults to relative path, override via env
    database_url: str = "sqlite:///./data/barcount.db"

    # CORS - comma-separated origins or "*" for development only
    cors_origins: str = "http://localhost:3000,http://localhost:8000"

    # Server
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"

    # ==========================================================================
    # Reorder planning
    # ==========================================================================
    pre_holiday_days: int = 5  # Start boosting orders this many days before a holiday
    holiday_multiplier: float = 2.0
    holiday_lookup_days: int = 3  # Default window for ad-hoc holiday lookups

    # ==========================================================================
    # Variance reporting
    # ==========================================================================
    top_losses_count: int = 3
    variance_warning_percent: float = 10.0
    variance_critical_percent: float = 20.0
    variance_warning_volume_ml: float = 50.0
    variance_critical_volume_ml: float = 200.0

    # Product cache owned by the repository
    product_cache_ttl_seconds: int = 300

    @field_validator("holiday_multiplier")
    @classmethod
    def validate_holiday_multiplier(cls, v: float) -> float:
        if v < 1:
            raise ValueError("holiday_multiplier must be >= 1")
        return v

    @field_validator("pre_holiday_days", "holiday_lookup_days", "top_losses_count")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
