"""
Configuration settings for the Weather Diary service.
Uses Pydantic Settings for type-safe configuration with validation.
"""

from typing import Literal

import pytz
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic validates types and provides clear error messages for misconfigurations.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra env vars
    )

    # OpenWeatherMap API
    OPENWEATHER_API_KEY: str = Field(
        ...,
        description="OpenWeatherMap API key used for current weather lookups",
        min_length=1,
    )
    WEATHER_API_URL: str = Field(
        default="https://api.openweathermap.org/data/2.5/weather",
        description="Current weather endpoint",
    )
    WEATHER_CITY: str = Field(
        default="seoul",
        description="City whose weather is attached to diary entries",
        min_length=1,
    )
    WEATHER_UNITS: Literal["standard", "metric", "imperial"] = Field(
        default="standard",
        description="Unit system for temperatures. 'standard' is the provider default (Kelvin).",
    )
    WEATHER_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        description="Upper bound on a single weather request",
        gt=0,
        le=60,
    )
    WEATHER_MAX_ATTEMPTS: int = Field(
        default=3,
        description="Attempts for a weather request that fails on the network. "
                    "HTTP status and parse failures are never retried.",
        ge=1,
        le=10,
    )
    WEATHER_RETRY_BACKOFF_SECONDS: float = Field(
        default=1.0,
        description="Exponential backoff multiplier between network retries",
        ge=0,
    )

    # Database
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./weather_diary.db",
        description="SQLite or PostgreSQL database connection URL",
    )

    # Application
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    TIMEZONE: str = Field(
        default="Asia/Seoul",
        description="Timezone that defines 'today' and the daily fetch clock",
    )

    # ==================== Daily Weather Job ====================

    DAILY_FETCH_ENABLED: bool = Field(
        default=True,
        description="Start the daily weather fetch alongside the API server",
    )
    DAILY_FETCH_HOUR: int = Field(
        default=1,
        description="Local hour at which the daily weather is fetched",
        ge=0,
        le=23,
    )
    DAILY_FETCH_MINUTE: int = Field(
        default=0,
        description="Local minute at which the daily weather is fetched",
        ge=0,
        le=59,
    )

    # ==================== Diary Policy ====================

    FETCH_WEATHER_FOR_OTHER_DATES: bool = Field(
        default=True,
        description="When a diary is written for a day other than today and no weather "
                    "is cached for it, stamp the current weather with that day. "
                    "When False the diary is refused until weather for the day exists.",
    )

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )

    PORT: int = Field(
        default=8000,
        description="Port for the API server",
        ge=1,
        le=65535,
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Ensure database URL uses a supported backend."""
        if not v.startswith(("sqlite", "postgresql")):
            raise ValueError("DATABASE_URL must be a sqlite:// or postgresql:// URL")
        return v

    @field_validator("TIMEZONE")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pytz.timezone(v)
        except pytz.exceptions.UnknownTimeZoneError:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT == "development"


# Create singleton instance with validation
# This will automatically load from .env and validate all fields
settings = Settings()
