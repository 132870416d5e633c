"""Domain models for climbing conditions."""

from crag_conditions.models.location import Coordinates
from crag_conditions.models.weather import (
    CurrentReading,
    DailySummary,
    HourlyReading,
    TimeOfDay,
    WeatherSnapshot,
)
from crag_conditions.models.rock import RockProfile, RockType, TemperatureBand
from crag_conditions.models.codes import (
    Acceptable,
    ColdGoodFriction,
    ColdSuboptimal,
    CurrentlyWet,
    CurrentlyWetDangerous,
    HighHumidity,
    HighWind,
    IdealHumidity,
    LowHumidityFriction,
    PerfectTemp,
    ReadyInHours,
    ReasonCode,
    Severity,
    TooWarm,
    VeryHighWind,
    WarningCode,
    WetDangerous,
    WetSlippery,
)
from crag_conditions.models.conditions import (
    AnnotatedHour,
    ConditionsResult,
    DailyConditions,
    RatingCategory,
    WetnessInfo,
    Window,
)

__all__ = [
    # Location
    "Coordinates",
    # Weather
    "CurrentReading",
    "DailySummary",
    "HourlyReading",
    "TimeOfDay",
    "WeatherSnapshot",
    # Rock
    "RockProfile",
    "RockType",
    "TemperatureBand",
    # Reasons
    "Acceptable",
    "ColdGoodFriction",
    "IdealHumidity",
    "LowHumidityFriction",
    "PerfectTemp",
    "ReadyInHours",
    "ReasonCode",
    # Warnings
    "ColdSuboptimal",
    "CurrentlyWet",
    "CurrentlyWetDangerous",
    "HighHumidity",
    "HighWind",
    "Severity",
    "TooWarm",
    "VeryHighWind",
    "WarningCode",
    "WetDangerous",
    "WetSlippery",
    # Results
    "AnnotatedHour",
    "ConditionsResult",
    "DailyConditions",
    "RatingCategory",
    "WetnessInfo",
    "Window",
]
