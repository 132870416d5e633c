"""FastAPI dependencies for the conditions routes.

The weather provider and the response cache live on `app.state` so that they
are shared across requests and can be swapped in tests:

```python
app = create_app()
app.dependency_overrides[get_weather_provider] = lambda: FakeProvider()
```
"""

from __future__ import annotations

import logging
import time
from typing import Any, Hashable

from fastapi import Request

from crag_conditions.config import Settings, get_settings
from crag_conditions.providers.base import WeatherProvider
from crag_conditions.providers.openmeteo import OpenMeteoProvider

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 1024


class ResponseCache:
    """In-process cache of computed responses with a fixed time-to-live.

    Holds at most `max_entries` responses; expired entries are dropped on every
    write and the oldest live entries are evicted first.
    """

    def __init__(self, ttl_seconds: float, max_entries: int = DEFAULT_MAX_ENTRIES):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max(1, max_entries)
        self._entries: dict[Hashable, tuple[float, Any]] = {}

    def get(self, key: Hashable) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= time.monotonic():
            del self._entries[key]
            return None
        return value

    def put(self, key: Hashable, value: Any) -> None:
        if self.ttl_seconds <= 0:
            return
        now = time.monotonic()
        self.purge_expired(now)
        self._entries.pop(key, None)
        while len(self._entries) >= self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
        self._entries[key] = (now + self.ttl_seconds, value)

    def purge_expired(self, now: float | None = None) -> int:
        """Drop expired entries and return how many were dropped."""
        now = time.monotonic() if now is None else now
        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Dropped {len(expired)} expired cached responses")
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def build_weather_provider(settings: Settings) -> WeatherProvider:
    """Create the configured weather provider."""
    return OpenMeteoProvider(
        user_agent=settings.weather_user_agent,
        timeout=settings.request_timeout_seconds,
        base_url=settings.open_meteo_base_url,
        default_days=settings.forecast_days,
    )


def get_weather_provider(request: Request) -> WeatherProvider:
    """Get the application's weather provider."""
    return request.app.state.weather_provider


def get_conditions_cache(request: Request) -> ResponseCache:
    """Get the application's conditions response cache."""
    return request.app.state.conditions_cache


def get_app_settings() -> Settings:
    """Settings as a dependency (overridable in tests)."""
    return get_settings()
