"""Application configuration.

Configuration is loaded from environment variables using pydantic-settings.
Nothing here is secret: the Open-Meteo API needs no key.

The conditions engine never reads settings itself. The API and CLI read them
and pass explicit arguments down.

## Optional Environment Variables

- LOG_LEVEL: Root log level (default: INFO)
- OPEN_METEO_BASE_URL: Forecast endpoint (default: public Open-Meteo API)
- FORECAST_DAYS: Days of forecast to request, 1-16 (default: 14)
- CONDITIONS_CACHE_TTL_SECONDS: API response cache lifetime (default: 3600)
- CONDITIONS_CACHE_MAX_ENTRIES: Most cached API responses (default: 1024)
- DEFAULT_MIN_RATING: Lowest rating inside a window (default: good)
- DEBUG: Enable debug mode and API docs (default: false)

## Example .env file

```
LOG_LEVEL=DEBUG
FORECAST_DAYS=7
DEFAULT_MIN_RATING=great
```
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from crag_conditions.models.conditions import RatingCategory


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Crag Conditions"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="CORS allowed origins",
    )

    # Weather provider
    open_meteo_base_url: str = "https://api.open-meteo.com/v1/forecast"
    weather_user_agent: str = Field(
        default="crag-conditions/0.1.0",
        description="User-Agent sent to the weather API",
    )
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    forecast_days: int = Field(default=14, ge=1, le=16)

    # Conditions
    conditions_cache_ttl_seconds: int = Field(default=3600, ge=0)
    conditions_cache_max_entries: int = Field(default=1024, ge=1)
    default_min_rating: RatingCategory = RatingCategory.GOOD
    default_max_windows: int = Field(default=5, ge=1, le=50)
    include_night_hours: bool = True

    @field_validator("default_min_rating", mode="before")
    @classmethod
    def normalize_min_rating(cls, v: str | RatingCategory) -> RatingCategory:
        """Accept rating names in any case."""
        return RatingCategory.parse(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure the log level is one logging understands."""
        level = str(v).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are loaded once and cached. To reload, clear the cache:
    ```python
    get_settings.cache_clear()
    ```
    """
    return Settings()


def get_settings_uncached() -> Settings:
    """Get fresh settings without caching.

    Useful for testing when environment variables change.
    """
    return Settings()
