"""Open-Meteo weather provider.

## API Documentation Summary
Source: https://open-meteo.com/en/docs

## Endpoint
- Base URL: https://api.open-meteo.com/v1/forecast
- Full URL example: https://api.open-meteo.com/v1/forecast?latitude=45.83&longitude=6.87&hourly=temperature_2m

## Authentication
- No API key required for non-commercial use
- A descriptive User-Agent is sent anyway

## Rate Limiting
- 10,000 requests/day (non-commercial)
- Responses are cached per instance (10 minutes by default)

## Response Format (columnar)
```json
{
  "latitude": 45.84,
  "longitude": 6.86,
  "utc_offset_seconds": 7200,
  "timezone": "Europe/Paris",
  "current": {"time": "2024-06-01T12:00", "temperature_2m": 14.2, ...},
  "hourly": {"time": ["2024-06-01T00:00", ...], "temperature_2m": [9.1, ...]},
  "daily": {"time": ["2024-06-01", ...], "sunrise": ["2024-06-01T05:52", ...]}
}
```

With `timezone=auto` all times are local wall-clock times without an offset;
the offset is given once as `utc_offset_seconds` and attached to every
timestamp during translation.

## Variable Translation (Open-Meteo -> Canonical)
| Open-Meteo Field | Canonical Field | Unit | Notes |
|------------------|-----------------|------|-------|
| temperature_2m | temp_c | °C | Direct mapping |
| relative_humidity_2m | humidity_pct | % | Direct mapping |
| wind_speed_10m | wind_kph | km/h | Default unit is km/h |
| precipitation | precip_mm | mm | Sum over the preceding hour |
| is_day | is_day | 0/1 | Converted to bool |
| temperature_2m_max/min | temp_max_c/temp_min_c | °C | Daily |
| precipitation_sum | precip_mm | mm | Daily |
| wind_speed_10m_max | wind_max_kph | km/h | Daily |
| sunrise/sunset | sunrise/sunset | local time | Daily |
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, timedelta, timezone
from typing import Any

import httpx

from crag_conditions.models.location import Coordinates
from crag_conditions.models.weather import (
    CurrentReading,
    DailySummary,
    HourlyReading,
    WeatherSnapshot,
)
from crag_conditions.providers.base import ProviderError, WeatherProvider

logger = logging.getLogger(__name__)

CURRENT_VARIABLES = (
    "temperature_2m",
    "relative_humidity_2m",
    "wind_speed_10m",
    "precipitation",
    "is_day",
)
HOURLY_VARIABLES = CURRENT_VARIABLES
DAILY_VARIABLES = (
    "temperature_2m_max",
    "temperature_2m_min",
    "precipitation_sum",
    "wind_speed_10m_max",
    "sunrise",
    "sunset",
)

MAX_FORECAST_DAYS = 16


def _number(value: Any) -> float:
    """Convert an API value to float; missing values become NaN."""
    if value is None:
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _optional_number(value: Any) -> float | None:
    number = _number(value)
    return None if math.isnan(number) else number


def _flag(value: Any) -> bool | None:
    if value is None:
        return None
    return bool(value)


def _column(block: dict[str, Any], key: str, idx: int) -> Any:
    values = block.get(key) or []
    return values[idx] if idx < len(values) else None


def _parse_time(value: Any, tz: timezone) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


class OpenMeteoProvider(WeatherProvider):
    """Open-Meteo forecast provider.

    Example:
        ```python
        async with OpenMeteoProvider() as provider:
            snapshot = await provider.get_snapshot(
                Coordinates(latitude=45.8326, longitude=6.8652), days=7
            )
        ```
    """

    name = "open-meteo"
    base_url = "https://api.open-meteo.com/v1/forecast"

    def __init__(
        self,
        user_agent: str | None = None,
        timeout: float = 30.0,
        base_url: str | None = None,
        default_days: int = 7,
        **kwargs: Any,
    ):
        """Initialize Open-Meteo provider.

        Args:
            user_agent: User-Agent string
            timeout: Request timeout in seconds
            base_url: Override the forecast endpoint
            default_days: Forecast days when a request does not specify them
            **kwargs: Passed to WeatherProvider (cache TTL, HTTP client)
        """
        super().__init__(user_agent=user_agent, timeout=timeout, **kwargs)
        if base_url:
            self.base_url = base_url
        self.default_days = default_days

    def build_params(self, coordinates: Coordinates, days: int) -> dict[str, Any]:
        """Query parameters for a forecast request."""
        # Rounding keeps nearby requests for one crag on the same cache entry
        latitude, longitude = coordinates.rounded(3)
        return {
            "latitude": latitude,
            "longitude": longitude,
            "current": ",".join(CURRENT_VARIABLES),
            "hourly": ",".join(HOURLY_VARIABLES),
            "daily": ",".join(DAILY_VARIABLES),
            "timezone": "auto",
            "forecast_days": days,
        }

    async def get_snapshot(
        self,
        coordinates: Coordinates,
        days: int | None = None,
    ) -> WeatherSnapshot:
        """Get current weather and forecast from Open-Meteo.

        Args:
            coordinates: Location (lat/lon), rounded to 3 decimals
            days: Forecast days (1-16)

        Returns:
            WeatherSnapshot with timezone-aware timestamps

        Raises:
            ProviderError: If the request fails or the body is not JSON
        """
        days = min(MAX_FORECAST_DAYS, max(1, days or self.default_days))
        params = self.build_params(coordinates, days)

        cache_key = self._cache_key(self.base_url, params)
        cached = self._cache_get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for {coordinates} ({days} days)")
            return cached

        logger.info(f"Fetching {days}-day forecast for {coordinates}")
        try:
            response = await self._fetch(self.base_url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"{self.name} request failed: {e}")
            raise ProviderError(f"Request failed: {e}", provider=self.name) from e

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                f"Failed to parse response: {e}",
                provider=self.name,
                status_code=response.status_code,
                response_body=response.text,
            ) from e

        if not isinstance(data, dict):
            raise ProviderError(
                "Unexpected response shape",
                provider=self.name,
                status_code=response.status_code,
                response_body=response.text,
            )

        snapshot = self._translate_response(data, coordinates)
        self._cache_put(cache_key, snapshot)
        return snapshot

    def _translate_response(
        self,
        response_data: dict[str, Any],
        coordinates: Coordinates,
    ) -> WeatherSnapshot:
        """Translate an Open-Meteo response to a WeatherSnapshot.

        See module docstring for the field mapping.
        """
        offset = int(response_data.get("utc_offset_seconds") or 0)
        tz = timezone(timedelta(seconds=offset))

        current_block = response_data.get("current") or {}
        current = CurrentReading(
            time=_parse_time(current_block.get("time"), tz),
            temp_c=_number(current_block.get("temperature_2m")),
            humidity_pct=_number(current_block.get("relative_humidity_2m")),
            wind_kph=_number(current_block.get("wind_speed_10m")),
            precip_mm=_number(current_block.get("precipitation")),
            is_day=_flag(current_block.get("is_day")),
        )

        hourly_block = response_data.get("hourly") or {}
        hourly: list[HourlyReading] = []
        for idx, raw_time in enumerate(hourly_block.get("time") or []):
            time = _parse_time(raw_time, tz)
            if time is None:
                continue
            hourly.append(
                HourlyReading(
                    time=time,
                    temp_c=_number(_column(hourly_block, "temperature_2m", idx)),
                    humidity_pct=_number(_column(hourly_block, "relative_humidity_2m", idx)),
                    wind_kph=_number(_column(hourly_block, "wind_speed_10m", idx)),
                    precip_mm=_number(_column(hourly_block, "precipitation", idx)),
                    is_day=_flag(_column(hourly_block, "is_day", idx)),
                )
            )

        daily_block = response_data.get("daily") or {}
        daily: list[DailySummary] = []
        for idx, raw_date in enumerate(daily_block.get("time") or []):
            try:
                day = date.fromisoformat(str(raw_date))
            except ValueError:
                continue
            daily.append(
                DailySummary(
                    date=day,
                    temp_max_c=_optional_number(_column(daily_block, "temperature_2m_max", idx)),
                    temp_min_c=_optional_number(_column(daily_block, "temperature_2m_min", idx)),
                    precip_mm=_optional_number(_column(daily_block, "precipitation_sum", idx)),
                    wind_max_kph=_optional_number(_column(daily_block, "wind_speed_10m_max", idx)),
                    sunrise=_parse_time(_column(daily_block, "sunrise", idx), tz),
                    sunset=_parse_time(_column(daily_block, "sunset", idx), tz),
                )
            )

        logger.debug(
            f"Translated {len(hourly)} hourly and {len(daily)} daily entries "
            f"for {coordinates}"
        )

        return WeatherSnapshot(
            current=current,
            hourly=hourly,
            daily=daily,
            latitude=_optional_number(response_data.get("latitude")) or coordinates.latitude,
            longitude=_optional_number(response_data.get("longitude")) or coordinates.longitude,
            timezone=response_data.get("timezone"),
            provider=self.name,
            generated_at=datetime.now(timezone.utc),
        )

    def get_max_forecast_days(self) -> int:
        """Open-Meteo provides up to 16 days of forecast."""
        return MAX_FORECAST_DAYS
