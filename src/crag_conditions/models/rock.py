"""Rock types and their friction/drying profiles."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RockType(str, Enum):
    """Rock types with distinct friction and drying behavior."""

    GRANITE = "granite"
    SANDSTONE = "sandstone"
    LIMESTONE = "limestone"
    BASALT = "basalt"
    GNEISS = "gneiss"
    QUARTZITE = "quartzite"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | RockType | None) -> RockType:
        """Parse a rock type, falling back to UNKNOWN for anything unrecognized."""
        if isinstance(value, RockType):
            return value
        if not value:
            return cls.UNKNOWN
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.UNKNOWN


class TemperatureBand(BaseModel):
    """Optimal temperature band for friction."""

    model_config = ConfigDict(frozen=True)

    min_c: float = Field(..., description="Lower edge of the optimal band in Celsius")
    max_c: float = Field(..., description="Upper edge of the optimal band in Celsius")

    @property
    def midpoint(self) -> float:
        return (self.min_c + self.max_c) / 2

    @property
    def half_width(self) -> float:
        return (self.max_c - self.min_c) / 2

    def contains(self, temp_c: float) -> bool:
        """Check if temperature is inside the band (edges included)."""
        return self.min_c <= temp_c <= self.max_c


class RockProfile(BaseModel):
    """Per-rock-type scoring constants.

    Profiles are pure data: scoring code never branches on the rock type
    itself, only on the flags and thresholds stored here.
    """

    model_config = ConfigDict(frozen=True)

    rock_type: RockType
    optimal_temp: TemperatureBand
    ideal_humidity_max: float = Field(
        ..., ge=0, le=100, description="Humidity at or below which grip is ideal"
    )
    high_humidity_pct: float = Field(
        ..., ge=0, le=100, description="Humidity above which rock gets slippery"
    )
    wind_high_kph: float = Field(default=25.0, gt=0, description="Uncomfortable wind")
    wind_danger_kph: float = Field(default=40.0, gt=0, description="Blow-off danger")
    wet_is_dangerous: bool = Field(
        default=False,
        description="Moisture weakens the rock (holds can break when wet)",
    )
    drying_rate_hours_per_mm: float = Field(
        ..., gt=0, description="Hours to dry per mm of precipitation"
    )
    cold_friction: bool = Field(
        default=False, description="Cold below the band still gives good friction"
    )
    dry_air_friction: bool = Field(
        default=False, description="Very dry air noticeably improves friction"
    )
