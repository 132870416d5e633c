"""Weather readings and forecast snapshots.

These are the inputs of the conditions engine. Units are fixed:

- Temperature: Celsius
- Humidity: percentage (0-100)
- Wind speed: kilometers per hour
- Precipitation: millimeters accumulated over the hour

Numeric fields deliberately accept NaN and out-of-range values: a provider
sometimes returns holes in a series, and those hours are skipped by the
evaluator instead of failing the whole request. Use `is_valid()` to check
whether a reading can be scored. A value of the wrong type (e.g. a string
that is not a number) is still rejected by pydantic.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Plausible physical bounds for a surface reading
MIN_TEMP_C = -90.0
MAX_TEMP_C = 65.0
MAX_WIND_KPH = 500.0

# Default climbing hours used when no daylight information is available
DEFAULT_DAY_START_HOUR = 6
DEFAULT_DAY_END_HOUR = 20


class TimeOfDay(str, Enum):
    """Time of day classification relative to sunrise and sunset.

    Dawn/dusk are the transitional periods around sunrise/sunset; there is
    enough light to climb, so only NIGHT counts as a night hour.
    """

    NIGHT = "night"  # Sun well below horizon
    DAWN = "dawn"  # Approaching sunrise
    DAY = "day"  # Sun above horizon
    DUSK = "dusk"  # After sunset, last usable light


class HourlyReading(BaseModel):
    """Weather for a single forecast hour."""

    model_config = ConfigDict(frozen=True)

    time: datetime = Field(..., description="Forecast time (start of hour)")
    temp_c: float = Field(..., description="Air temperature in Celsius")
    humidity_pct: float = Field(..., description="Relative humidity percentage")
    wind_kph: float = Field(default=0.0, description="Wind speed in km/h")
    precip_mm: float = Field(default=0.0, description="Precipitation in mm")
    is_day: bool | None = Field(
        default=None, description="Provider daylight flag, if known"
    )

    def is_valid(self) -> bool:
        """Check whether every numeric field is finite and physically plausible."""
        values = (self.temp_c, self.humidity_pct, self.wind_kph, self.precip_mm)
        if not all(math.isfinite(v) for v in values):
            return False
        return (
            MIN_TEMP_C <= self.temp_c <= MAX_TEMP_C
            and 0 <= self.humidity_pct <= 100
            and 0 <= self.wind_kph <= MAX_WIND_KPH
            and self.precip_mm >= 0
        )

    @property
    def is_raining(self) -> bool:
        """Precipitation is falling during this hour."""
        return self.precip_mm > 0

    def get_time_of_day(
        self,
        sunrise: datetime | None,
        sunset: datetime | None,
        dawn_minutes: int = 30,
        dusk_minutes: int = 30,
    ) -> TimeOfDay | None:
        """Classify this hour against the given sunrise and sunset.

        Args:
            sunrise: Sunrise on the reading's date
            sunset: Sunset on the reading's date
            dawn_minutes: Minutes before sunrise to consider as dawn
            dusk_minutes: Minutes after sunset to consider as dusk

        Returns:
            TimeOfDay classification, or None when the times cannot be
            compared (missing, or mixing naive and aware datetimes)
        """
        if sunrise is None or sunset is None:
            return None
        if not _same_awareness(self.time, sunrise, sunset):
            return None

        dawn_start = sunrise - timedelta(minutes=dawn_minutes)
        dusk_end = sunset + timedelta(minutes=dusk_minutes)

        if self.time < dawn_start:
            return TimeOfDay.NIGHT
        elif self.time < sunrise:
            return TimeOfDay.DAWN
        elif self.time < sunset:
            return TimeOfDay.DAY
        elif self.time < dusk_end:
            return TimeOfDay.DUSK
        else:
            return TimeOfDay.NIGHT

    def is_default_climbing_hour(self) -> bool:
        """Fallback daylight check on the local hour of the reading."""
        return DEFAULT_DAY_START_HOUR <= self.time.hour <= DEFAULT_DAY_END_HOUR


class CurrentReading(HourlyReading):
    """Point-in-time observation; the timestamp is optional."""

    time: datetime | None = Field(default=None, description="Observation time")


class DailySummary(BaseModel):
    """Daily aggregates as delivered by the weather provider."""

    model_config = ConfigDict(frozen=True)

    date: date
    temp_max_c: float | None = None
    temp_min_c: float | None = None
    precip_mm: float | None = None
    wind_max_kph: float | None = None
    sunrise: datetime | None = None
    sunset: datetime | None = None


class WeatherSnapshot(BaseModel):
    """A forecast for one location: current reading plus hourly/daily series.

    `hourly` is expected to be chronologically ordered. Gaps, duplicates and
    out-of-order entries are tolerated by the engine but break window
    contiguity.
    """

    model_config = ConfigDict(frozen=True)

    current: CurrentReading
    hourly: list[HourlyReading] = Field(default_factory=list)
    daily: list[DailySummary] = Field(default_factory=list)

    # Metadata
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    timezone: str | None = Field(default=None, description="IANA timezone name")
    provider: str | None = Field(default=None, description="Weather data provider")
    generated_at: datetime | None = None

    def daily_for(self, day: date) -> DailySummary | None:
        """Get the daily summary for a calendar date, if present."""
        for summary in self.daily:
            if summary.date == day:
                return summary
        return None


def _same_awareness(*values: datetime) -> bool:
    aware = [v.tzinfo is not None and v.utcoffset() is not None for v in values]
    return all(aware) or not any(aware)
