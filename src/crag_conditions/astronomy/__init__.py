"""Daylight and climbing-hours calculations."""

from crag_conditions.astronomy.daylight import (
    ClimbingHours,
    ClimbingTimeContext,
    DaylightHours,
    TimeContextData,
    calculate_daylight_hours,
    detect_time_context,
    get_climbing_hours,
    get_time_context_data,
    is_climbing_hour,
    solar_timezone,
)

__all__ = [
    "ClimbingHours",
    "ClimbingTimeContext",
    "DaylightHours",
    "TimeContextData",
    "calculate_daylight_hours",
    "detect_time_context",
    "get_climbing_hours",
    "get_time_context_data",
    "is_climbing_hour",
    "solar_timezone",
]
