"""Base weather provider abstraction.

A provider fetches a forecast for a location and translates the provider's
response into the engine's input model, `WeatherSnapshot`
(`crag_conditions.models.weather`).

### Canonical Units
- Temperature: Celsius (°C)
- Humidity: percentage (0-100)
- Wind speed: kilometers per hour (km/h)
- Precipitation: millimeters accumulated over the hour (mm)

### Translation Requirements
Each provider implements `_translate_response()`. Missing values in a series
become NaN rather than failing the request; the evaluator skips those hours.

Responses are cached in memory per provider instance for `cache_ttl_seconds`,
keyed by the request URL and parameters. Expired entries are dropped on
every write and the oldest entries are evicted beyond `cache_max_entries`.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from crag_conditions.models.location import Coordinates
from crag_conditions.models.weather import WeatherSnapshot

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 600
DEFAULT_CACHE_MAX_ENTRIES = 256


class ProviderError(Exception):
    """Base exception for weather provider errors."""

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.response_body = response_body


class RateLimitError(ProviderError):
    """Raised when provider rate limit is exceeded."""

    def __init__(
        self,
        provider: str,
        retry_after: int | None = None,
        status_code: int | None = None,
    ):
        super().__init__(
            f"Rate limit exceeded for {provider}",
            provider=provider,
            status_code=status_code,
        )
        self.retry_after = retry_after


class WeatherProvider(ABC):
    """Abstract base class for weather data providers.

    Attributes:
        name: Human-readable provider name
        base_url: Base URL for the API

    Example:
        ```python
        class MyProvider(WeatherProvider):
            name = "my_provider"
            base_url = "https://api.example.com"

            async def get_snapshot(self, coordinates, days=None):
                response = await self._fetch(self.base_url, params={...})
                return self._translate_response(response.json(), coordinates)
        ```
    """

    name: str
    base_url: str

    def __init__(
        self,
        user_agent: str | None = None,
        timeout: float = 30.0,
        cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        client: httpx.AsyncClient | None = None,
        cache_max_entries: int = DEFAULT_CACHE_MAX_ENTRIES,
    ):
        """Initialize the provider.

        Args:
            user_agent: User-Agent string for requests
            timeout: Request timeout in seconds
            cache_ttl_seconds: Lifetime of cached snapshots (0 disables caching)
            client: HTTP client to use instead of creating one
            cache_max_entries: Most snapshots kept at once
        """
        self.user_agent = user_agent or "crag-conditions/0.1.0"
        self.timeout = timeout
        self.cache_ttl_seconds = cache_ttl_seconds
        self.cache_max_entries = max(1, cache_max_entries)
        self._client = client
        self._owns_client = client is None

        # cache key -> (expiry on the monotonic clock, snapshot)
        self._response_cache: dict[str, tuple[float, WeatherSnapshot]] = {}

    async def __aenter__(self) -> WeatherProvider:
        """Enter async context manager."""
        self._get_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    def _get_default_headers(self) -> dict[str, str]:
        """Get default headers for requests."""
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }

    def _cache_key(self, url: str, params: dict[str, Any] | None) -> str:
        return f"{url}:{sorted((params or {}).items())}"

    def _cache_get(self, key: str) -> WeatherSnapshot | None:
        entry = self._response_cache.get(key)
        if entry is None:
            return None
        expires_at, snapshot = entry
        if expires_at <= time.monotonic():
            del self._response_cache[key]
            return None
        return snapshot

    def _cache_put(self, key: str, snapshot: WeatherSnapshot) -> None:
        if self.cache_ttl_seconds <= 0:
            return
        now = time.monotonic()
        cache = self._response_cache
        for stale in [k for k, (expires_at, _) in cache.items() if expires_at <= now]:
            del cache[stale]
        cache.pop(key, None)
        while len(cache) >= self.cache_max_entries:
            # Insertion order is expiry order, so the first entry is the oldest
            del cache[next(iter(cache))]
        cache[key] = (now + self.cache_ttl_seconds, snapshot)

    def clear_cache(self) -> None:
        """Drop all cached snapshots."""
        self._response_cache.clear()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    async def _fetch(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Fetch data from the API with retry logic.

        Args:
            url: Full URL to fetch
            params: Query parameters
            headers: Additional headers

        Returns:
            HTTP response

        Raises:
            ProviderError: If the API answers with an error status
            RateLimitError: If rate limit is exceeded
            httpx.TransportError: If the request still fails after retries
        """
        client = self._get_client()
        request_headers = self._get_default_headers()
        if headers:
            request_headers.update(headers)

        response = await client.get(url, params=params, headers=request_headers)

        # Handle rate limiting
        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                self.name,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                status_code=429,
            )

        # Handle other errors
        if response.status_code >= 400:
            logger.error(f"{self.name} request failed with {response.status_code}")
            raise ProviderError(
                f"API request failed: {response.status_code}",
                provider=self.name,
                status_code=response.status_code,
                response_body=response.text,
            )

        return response

    @abstractmethod
    async def get_snapshot(
        self,
        coordinates: Coordinates,
        days: int | None = None,
    ) -> WeatherSnapshot:
        """Get current weather and forecast for a location.

        Args:
            coordinates: Location coordinates
            days: Number of forecast days (provider default when None)

        Returns:
            WeatherSnapshot in canonical units

        Raises:
            ProviderError: If the forecast cannot be retrieved
        """
        pass

    @abstractmethod
    def _translate_response(
        self,
        response_data: dict[str, Any],
        coordinates: Coordinates,
    ) -> WeatherSnapshot:
        """Translate provider-specific response to a WeatherSnapshot.

        Args:
            response_data: Raw JSON response from provider
            coordinates: Location coordinates

        Returns:
            WeatherSnapshot in canonical units
        """
        pass

    def get_max_forecast_days(self) -> int:
        """Get maximum forecast days supported."""
        return 7
