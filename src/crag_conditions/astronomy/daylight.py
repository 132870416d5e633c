"""Daylight and practical climbing hours, using astropy.

This module provides:
- Sunrise/sunset (sun at 0°) and civil dawn/dusk (sun at -6°) for a date
- Practical climbing hours derived from civil twilight
- A climbing "time context" (alpine start, winter, evening session, ...)
  that narrows or shifts the hours worth showing

The sun's altitude is sampled every few minutes over the local day in a
single vectorized astropy call; crossings are interpolated between samples.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from enum import Enum

import numpy as np
from astropy import units as u
from astropy.coordinates import AltAz, EarthLocation, get_sun
from astropy.time import Time

from crag_conditions.models.location import Coordinates

SUNRISE_ALTITUDE_DEG = 0.0
CIVIL_TWILIGHT_ALTITUDE_DEG = -6.0
SAMPLE_MINUTES = 5

# Practical climbing never starts before 05:00 or ends after 21:00
EARLIEST_CLIMBING_HOUR = 5
LATEST_CLIMBING_HOUR = 21


class ClimbingTimeContext(str, Enum):
    """Which part of the day is worth climbing in."""

    NORMAL = "normal"  # Daylight hours, adjusted by temperature
    ALPINE_START = "alpine"  # Very early start to beat the heat
    DAWN_PATROL = "dawn"  # Morning emphasis
    EVENING_SESSION = "evening"  # Summer evenings
    WINTER_SHORT = "winter"  # Short midday window


CONTEXT_NOTES: dict[ClimbingTimeContext, str | None] = {
    ClimbingTimeContext.ALPINE_START: "earlyStartRecommended",
    ClimbingTimeContext.WINTER_SHORT: "limitedDaylight",
    ClimbingTimeContext.DAWN_PATROL: "morningConditionsBest",
    ClimbingTimeContext.EVENING_SESSION: "eveningSession",
    ClimbingTimeContext.NORMAL: None,
}

EARLY_QUERY = re.compile(r"early|dawn|sunrise|alpine start", re.IGNORECASE)
EVENING_QUERY = re.compile(r"evening|sunset|after work", re.IGNORECASE)
MORNING_QUERY = re.compile(r"morning|first light", re.IGNORECASE)


@dataclass
class DaylightHours:
    """Sun events and practical climbing hours for one local date."""

    date: date
    sunrise: datetime
    sunset: datetime
    civil_dawn: datetime  # Enough light to climb without a headlamp
    civil_dusk: datetime  # Last usable light
    climbing_start: int  # Local hour (0-23)
    climbing_end: int  # Local hour (0-23)
    total_daylight_hours: float
    polar_day: bool = False
    polar_night: bool = False


@dataclass
class ClimbingHours:
    """Inclusive range of local hours worth climbing."""

    start: int
    end: int


@dataclass
class TimeContextData:
    """Climbing hours and sun times for a time context, ready to serialize."""

    sunrise: datetime
    sunset: datetime
    climbing_start_hour: int
    climbing_end_hour: int
    total_daylight_hours: float
    context: ClimbingTimeContext
    context_note: str | None = None


def _coords_to_earth_location(coords: Coordinates) -> EarthLocation:
    """Convert our Coordinates to astropy EarthLocation."""
    return EarthLocation(lat=coords.latitude * u.deg, lon=coords.longitude * u.deg)


def _sun_altitudes(coords: Coordinates, start: datetime, samples: int) -> np.ndarray:
    """Sun altitude in degrees every SAMPLE_MINUTES from `start`."""
    location = _coords_to_earth_location(coords)
    offsets = np.arange(samples) * SAMPLE_MINUTES * u.min
    obs_times = Time(start) + offsets
    altaz_frame = AltAz(obstime=obs_times, location=location)
    return np.asarray(get_sun(obs_times).transform_to(altaz_frame).alt.deg)


def solar_timezone(longitude: float) -> timezone:
    """Fixed offset of the nearest whole hour of mean solar time."""
    return timezone(timedelta(hours=round(longitude / 15)))


def _find_crossing(
    altitudes: np.ndarray,
    target_altitude: float,
    rising: bool,
    after_minutes: float | None = None,
) -> float | None:
    """Minutes from the first sample to the first rising (or last setting) crossing.

    Setting crossings before `after_minutes` are ignored, so a sunset that
    belongs to the previous evening is never paired with this morning's sunrise.
    """
    before = altitudes[:-1]
    after = altitudes[1:]
    if rising:
        hits = np.nonzero((before < target_altitude) & (after >= target_altitude))[0]
        if hits.size == 0:
            return None
        idx = int(hits[0])
    else:
        hits = np.nonzero((before > target_altitude) & (after <= target_altitude))[0]
        if after_minutes is not None:
            hits = hits[hits * SAMPLE_MINUTES >= after_minutes]
        if hits.size == 0:
            return None
        idx = int(hits[-1])

    span = altitudes[idx + 1] - altitudes[idx]
    fraction = (target_altitude - altitudes[idx]) / span if span else 0.0
    return (idx + float(fraction)) * SAMPLE_MINUTES


def calculate_daylight_hours(
    coordinates: Coordinates,
    day: date,
    tz: tzinfo | None = None,
) -> DaylightHours:
    """Calculate sun events and climbing hours for a local date.

    Args:
        coordinates: Geographic coordinates
        day: Local calendar date
        tz: Timezone the date and the returned hours are expressed in.
            Defaults to the solar offset of the longitude.

    Returns:
        DaylightHours. During polar day the sun events span the whole day;
        during polar night they all collapse to local noon.
    """
    if tz is None:
        tz = solar_timezone(coordinates.longitude)
    start = datetime.combine(day, time(0, 0), tzinfo=tz)
    end = start + timedelta(hours=23, minutes=59, seconds=59)
    noon = start + timedelta(hours=12)

    samples = 24 * 60 // SAMPLE_MINUTES + 1
    altitudes = _sun_altitudes(coordinates, start, samples)

    def at(minutes: float | None, default: datetime) -> datetime:
        if minutes is None:
            return default
        return start + timedelta(minutes=minutes)

    polar_day = bool(np.all(altitudes >= SUNRISE_ALTITUDE_DEG))
    polar_night = bool(np.all(altitudes < SUNRISE_ALTITUDE_DEG))

    if polar_day:
        sunrise, sunset = start, end
        civil_dawn, civil_dusk = start, end
    elif polar_night:
        sunrise = sunset = civil_dawn = civil_dusk = noon
    else:
        # A missing crossing means the sun was already up (or still up)
        rise = _find_crossing(altitudes, SUNRISE_ALTITUDE_DEG, True)
        dawn = _find_crossing(altitudes, CIVIL_TWILIGHT_ALTITUDE_DEG, True)
        sunrise = at(rise, start)
        sunset = at(_find_crossing(altitudes, SUNRISE_ALTITUDE_DEG, False, rise), end)
        civil_dawn = at(dawn, start)
        civil_dusk = at(
            _find_crossing(altitudes, CIVIL_TWILIGHT_ALTITUDE_DEG, False, dawn), end
        )

    total = (sunset - sunrise).total_seconds() / 3600

    return DaylightHours(
        date=day,
        sunrise=sunrise,
        sunset=sunset,
        civil_dawn=civil_dawn,
        civil_dusk=civil_dusk,
        climbing_start=max(EARLIEST_CLIMBING_HOUR, civil_dawn.hour + 1),
        climbing_end=min(LATEST_CLIMBING_HOUR, civil_dusk.hour),
        total_daylight_hours=round(total, 1),
        polar_day=polar_day,
        polar_night=polar_night,
    )


def detect_time_context(
    max_temp_c: float,
    latitude: float,
    month: int,
    query: str | None = None,
) -> ClimbingTimeContext:
    """Pick a time context from the day's heat, the season and a free-text hint.

    Args:
        max_temp_c: Forecast maximum temperature
        latitude: Latitude of the crag
        month: Month number (1-12)
        query: Optional user phrasing, e.g. "after work" or "first light"
    """
    query = query or ""

    # Heat avoidance
    if max_temp_c > 30 or EARLY_QUERY.search(query):
        return ClimbingTimeContext.ALPINE_START

    # Winter at high latitudes
    if (month >= 11 or month <= 1) and abs(latitude) > 40:
        return ClimbingTimeContext.WINTER_SHORT

    if EVENING_QUERY.search(query) and 5 <= month <= 8:
        return ClimbingTimeContext.EVENING_SESSION

    if MORNING_QUERY.search(query):
        return ClimbingTimeContext.DAWN_PATROL

    return ClimbingTimeContext.NORMAL


def get_climbing_hours(
    daylight: DaylightHours,
    context: ClimbingTimeContext,
    max_temp_c: float | None = None,
) -> ClimbingHours:
    """Climbing hours for a context, derived from the day's daylight."""
    start = daylight.climbing_start
    end = daylight.climbing_end

    if context == ClimbingTimeContext.ALPINE_START:
        return ClimbingHours(start=max(4, start - 2), end=min(18, end - 2))
    if context == ClimbingTimeContext.WINTER_SHORT:
        return ClimbingHours(start=max(9, start), end=min(16, end))
    if context == ClimbingTimeContext.DAWN_PATROL:
        return ClimbingHours(start=max(5, start - 1), end=min(14, end))
    if context == ClimbingTimeContext.EVENING_SESSION:
        return ClimbingHours(start=max(14, start), end=min(21, end + 1))

    if max_temp_c is not None:
        if max_temp_c > 25:
            start = max(6, start - 1)
            end = min(20, end)
        elif max_temp_c < 10:
            start = max(9, start)
            end = min(17, end)
    return ClimbingHours(start=start, end=end)


def is_climbing_hour(hour: int, climbing_hours: ClimbingHours) -> bool:
    """Check if a local hour falls inside the climbing hours (inclusive)."""
    return climbing_hours.start <= hour <= climbing_hours.end


def get_time_context_data(
    daylight: DaylightHours,
    context: ClimbingTimeContext,
) -> TimeContextData:
    """Bundle sun times and context-adjusted climbing hours."""
    hours = get_climbing_hours(daylight, context)
    return TimeContextData(
        sunrise=daylight.sunrise,
        sunset=daylight.sunset,
        climbing_start_hour=hours.start,
        climbing_end_hour=hours.end,
        total_daylight_hours=daylight.total_daylight_hours,
        context=context,
        context_note=CONTEXT_NOTES[context],
    )
