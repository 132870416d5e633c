"""Pytest fixtures for crag conditions tests.

This module provides test fixtures that ensure:
1. No external API calls are made (the weather provider is mocked)
2. Isolated test environment with controlled configuration
3. Reusable readings, series and forecast snapshots
"""

import os
from datetime import date, datetime, timedelta, timezone

import pytest

# Set test environment BEFORE importing application modules
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from crag_conditions.models.conditions import AnnotatedHour
from crag_conditions.models.location import Coordinates
from crag_conditions.models.weather import (
    CurrentReading,
    DailySummary,
    HourlyReading,
    WeatherSnapshot,
)
from crag_conditions.rules.rating import rating_for_score

BASE_TIME = datetime(2024, 6, 15, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Test Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache before each test to ensure clean state."""
    from crag_conditions.config import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Readings
# =============================================================================


@pytest.fixture
def base_time() -> datetime:
    """Midnight UTC on the day all sample series start."""
    return BASE_TIME


@pytest.fixture
def make_reading():
    """Factory for hourly readings at `hour` hours after BASE_TIME."""

    def _make(
        hour: float = 12,
        temp_c: float = 15.0,
        humidity_pct: float = 40.0,
        wind_kph: float = 5.0,
        precip_mm: float = 0.0,
        is_day: bool | None = None,
    ) -> HourlyReading:
        return HourlyReading(
            time=BASE_TIME + timedelta(hours=hour),
            temp_c=temp_c,
            humidity_pct=humidity_pct,
            wind_kph=wind_kph,
            precip_mm=precip_mm,
            is_day=is_day,
        )

    return _make


@pytest.fixture
def make_annotated():
    """Factory for annotated hours with a given friction score."""

    def _make(hour: float, score: float) -> AnnotatedHour:
        return AnnotatedHour(
            time=BASE_TIME + timedelta(hours=hour),
            temp_c=15.0,
            humidity_pct=40.0,
            friction_score=score,
            rating=rating_for_score(score),
        )

    return _make


@pytest.fixture
def granite_reading(make_reading) -> HourlyReading:
    """Dry, mild afternoon on granite (18°C, 40%, 10 km/h)."""
    return make_reading(hour=14, temp_c=18.0, humidity_pct=40.0, wind_kph=10.0)


@pytest.fixture
def scenario_series(make_reading) -> list[HourlyReading]:
    """48 hours: hot and humid except a perfect 4-hour run at 10:00-13:59."""
    hours = []
    for i in range(48):
        if 10 <= i <= 13:
            hours.append(make_reading(hour=i, temp_c=15.0, humidity_pct=40.0, wind_kph=5.0))
        else:
            hours.append(make_reading(hour=i, temp_c=35.0, humidity_pct=90.0, wind_kph=5.0))
    return hours


# =============================================================================
# Locations and snapshots
# =============================================================================


@pytest.fixture
def sample_coordinates() -> Coordinates:
    """Sample coordinates for Chamonix."""
    return Coordinates(latitude=45.8326, longitude=6.8652)


@pytest.fixture
def sample_daily() -> list[DailySummary]:
    """Two days of daily summaries with sunrise/sunset."""
    return [
        DailySummary(
            date=date(2024, 6, 15) + timedelta(days=d),
            temp_max_c=22.0,
            temp_min_c=9.0,
            precip_mm=0.0,
            wind_max_kph=15.0,
            sunrise=BASE_TIME + timedelta(days=d, hours=4),
            sunset=BASE_TIME + timedelta(days=d, hours=19),
        )
        for d in range(2)
    ]


@pytest.fixture
def sample_snapshot(
    sample_coordinates: Coordinates,
    sample_daily: list[DailySummary],
) -> WeatherSnapshot:
    """Two-day forecast: cool nights, mild dry days, one shower at 08:00."""
    hourly = []
    for i in range(48):
        local_hour = i % 24
        daytime = 6 <= local_hour <= 18
        hourly.append(
            HourlyReading(
                time=BASE_TIME + timedelta(hours=i),
                temp_c=16.0 if daytime else 8.0,
                humidity_pct=40.0 if daytime else 70.0,
                wind_kph=8.0,
                precip_mm=1.0 if i == 8 else 0.0,
                is_day=4 <= local_hour <= 19,
            )
        )

    return WeatherSnapshot(
        current=CurrentReading(
            time=BASE_TIME + timedelta(hours=12),
            temp_c=16.0,
            humidity_pct=40.0,
            wind_kph=8.0,
            precip_mm=0.0,
            is_day=True,
        ),
        hourly=hourly,
        daily=sample_daily,
        latitude=sample_coordinates.latitude,
        longitude=sample_coordinates.longitude,
        timezone="UTC",
        provider="test",
    )


@pytest.fixture
def open_meteo_payload() -> dict:
    """Minimal Open-Meteo forecast response (UTC+2, two hours, one day)."""
    return {
        "latitude": 45.84,
        "longitude": 6.86,
        "utc_offset_seconds": 7200,
        "timezone": "Europe/Paris",
        "current": {
            "time": "2024-06-15T12:00",
            "temperature_2m": 16.4,
            "relative_humidity_2m": 45,
            "wind_speed_10m": 7.2,
            "precipitation": 0.0,
            "is_day": 1,
        },
        "hourly": {
            "time": ["2024-06-15T12:00", "2024-06-15T13:00"],
            "temperature_2m": [16.4, None],
            "relative_humidity_2m": [45, 48],
            "wind_speed_10m": [7.2, 8.0],
            "precipitation": [0.0, 0.2],
            "is_day": [1, 1],
        },
        "daily": {
            "time": ["2024-06-15"],
            "temperature_2m_max": [21.0],
            "temperature_2m_min": [8.5],
            "precipitation_sum": [0.2],
            "wind_speed_10m_max": [14.0],
            "sunrise": ["2024-06-15T05:52"],
            "sunset": ["2024-06-15T21:27"],
        },
    }
