"""Engine output models: ratings, annotated hours, windows and results."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from crag_conditions.models.codes import ReasonCode, WarningCode
from crag_conditions.models.rock import RockType
from crag_conditions.models.weather import HourlyReading


class RatingCategory(str, Enum):
    """Climbing rating, ordered from worst to best.

    Members compare by rank, not alphabetically:
    `RatingCategory.OK < RatingCategory.GOOD` is True.
    """

    POOR = "poor"
    OK = "ok"
    GOOD = "good"
    GREAT = "great"
    EXCELLENT = "excellent"

    @property
    def rank(self) -> int:
        """Position in the ordering (0 = poor)."""
        return list(type(self)).index(self)

    @classmethod
    def parse(cls, value: str | RatingCategory) -> RatingCategory:
        """Parse a rating name (case-insensitive)."""
        if isinstance(value, RatingCategory):
            return value
        return cls(value.strip().lower())

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RatingCategory):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, RatingCategory):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, RatingCategory):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, RatingCategory):
            return NotImplemented
        return self.rank >= other.rank


class WetnessInfo(BaseModel):
    """Estimated residual wetness of the rock."""

    model_config = ConfigDict(frozen=True)

    fraction: float = Field(..., ge=0, le=1, description="0 = dry, 1 = saturated")
    hours_to_dry: float | None = Field(
        default=None, ge=0, description="Estimated hours until dry, while wet"
    )
    fully_dry_hours: float = Field(
        default=0.0, ge=0, description="Total drying time for the current wet spell"
    )
    currently_raining: bool = Field(default=False)

    @property
    def is_wet(self) -> bool:
        return self.fraction > 0

    @classmethod
    def dry(cls) -> WetnessInfo:
        return cls(fraction=0.0)


class AnnotatedHour(HourlyReading):
    """An hourly reading with its friction score, rating and explanations."""

    friction_score: float = Field(..., ge=0, le=5)
    rating: RatingCategory
    reason_codes: list[ReasonCode] = Field(default_factory=list)
    warning_codes: list[WarningCode] = Field(default_factory=list)
    wetness: WetnessInfo = Field(default_factory=WetnessInfo.dry)
    is_daylight: bool = Field(default=True)


class Window(BaseModel):
    """A contiguous run of hours that all meet a minimum rating."""

    model_config = ConfigDict(frozen=True)

    start_time: datetime = Field(..., description="Start of the first hour")
    end_time: datetime = Field(..., description="End of the last hour")
    duration_hours: int = Field(..., ge=1)
    average_score: float = Field(..., ge=0, le=5)
    rating: RatingCategory

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time


class DailyConditions(BaseModel):
    """Per-day aggregate of the annotated series."""

    model_config = ConfigDict(frozen=True)

    date: date
    average_score: float = Field(..., ge=0, le=5)
    best_score: float = Field(..., ge=0, le=5)
    rating: RatingCategory = Field(..., description="Rating of the average score")
    climbable_hours: int = Field(
        default=0, ge=0, description="Hours rated good or better"
    )


class ConditionsResult(BaseModel):
    """Current climbing conditions plus the annotated forecast."""

    model_config = ConfigDict(frozen=True)

    rock_type: RockType

    # Point-in-time rating
    friction_score: float = Field(..., ge=0, le=5)
    friction_rating: int = Field(..., ge=0, le=5, description="Rounded friction score")
    rating: RatingCategory
    reasons: list[ReasonCode] = Field(default_factory=list)
    warnings: list[WarningCode] = Field(default_factory=list)
    is_dry: bool = True
    drying_time_hours: int | None = Field(default=None, ge=0)

    # Forecast
    hourly: list[AnnotatedHour] = Field(default_factory=list)
    daily: list[DailyConditions] = Field(default_factory=list)
    optimal_windows: list[Window] | None = Field(
        default=None, description="Best climbing windows, when requested"
    )
