"""Structured reason and warning codes.

Every explanation the engine attaches to a score is a tagged value with typed
parameters. The `kind` field is the discriminator, so a presentation layer can
localize a code with a plain lookup on `kind` and format the parameters,
without parsing any English text.

Example:
    ```python
    for reason in result.reasons:
        if reason.kind == "perfect_temp":
            print(f"Perfect temperature ({reason.temp_c:.0f}°C)")
    ```
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from crag_conditions.models.rock import RockType


class Severity(str, Enum):
    """Severity level for warnings."""

    INFO = "info"
    CAUTION = "caution"
    WARNING = "warning"
    CRITICAL = "critical"


class _Code(BaseModel):
    model_config = ConfigDict(frozen=True)


# =============================================================================
# Reasons (positive or neutral explanations)
# =============================================================================


class PerfectTemp(_Code):
    """Temperature is close to the middle of the rock's optimal band."""

    kind: Literal["perfect_temp"] = "perfect_temp"
    temp_c: float


class IdealHumidity(_Code):
    """Humidity is at or below the rock's ideal maximum."""

    kind: Literal["ideal_humidity"] = "ideal_humidity"
    humidity_pct: float


class LowHumidityFriction(_Code):
    """Very dry air improves friction on this rock."""

    kind: Literal["low_humidity_friction"] = "low_humidity_friction"
    rock_type: RockType
    humidity_pct: float


class ReadyInHours(_Code):
    """Rock is still wet and should be dry in about `hours` hours."""

    kind: Literal["ready_in_hours"] = "ready_in_hours"
    hours: int = Field(..., ge=0)


class ColdGoodFriction(_Code):
    """Below the optimal band, but the cold still gives good friction."""

    kind: Literal["cold_good_friction"] = "cold_good_friction"
    rock_type: RockType
    temp_c: float


class Acceptable(_Code):
    """Nothing stands out, conditions are acceptable."""

    kind: Literal["acceptable"] = "acceptable"


ReasonCode = Annotated[
    Union[
        PerfectTemp,
        IdealHumidity,
        LowHumidityFriction,
        ReadyInHours,
        ColdGoodFriction,
        Acceptable,
    ],
    Field(discriminator="kind"),
]


# =============================================================================
# Warnings (danger or discomfort)
# =============================================================================


class TooWarm(_Code):
    """Temperature above the rock's optimal band; grip degrades quickly."""

    kind: Literal["too_warm"] = "too_warm"
    severity: Severity = Severity.CAUTION
    rock_type: RockType
    temp_c: float


class ColdSuboptimal(_Code):
    """Temperature well below the optimal band."""

    kind: Literal["cold_suboptimal"] = "cold_suboptimal"
    severity: Severity = Severity.CAUTION
    rock_type: RockType
    temp_c: float


class HighHumidity(_Code):
    """Humidity high enough to make the rock slippery."""

    kind: Literal["high_humidity"] = "high_humidity"
    severity: Severity = Severity.CAUTION
    humidity_pct: float


class HighWind(_Code):
    """Uncomfortably strong wind."""

    kind: Literal["high_wind"] = "high_wind"
    severity: Severity = Severity.CAUTION
    wind_kph: float


class VeryHighWind(_Code):
    """Wind strong enough to blow a climber off the wall."""

    kind: Literal["very_high_wind"] = "very_high_wind"
    severity: Severity = Severity.CRITICAL
    wind_kph: float


class WetDangerous(_Code):
    """Rock is still wet and this rock type is weakened by moisture."""

    kind: Literal["wet_dangerous"] = "wet_dangerous"
    severity: Severity = Severity.CRITICAL
    rock_type: RockType


class WetSlippery(_Code):
    """Rock is still wet and slippery."""

    kind: Literal["wet_slippery"] = "wet_slippery"
    severity: Severity = Severity.WARNING


class CurrentlyWetDangerous(_Code):
    """It is raining on moisture-sensitive rock right now."""

    kind: Literal["currently_wet_dangerous"] = "currently_wet_dangerous"
    severity: Severity = Severity.CRITICAL
    rock_type: RockType


class CurrentlyWet(_Code):
    """It is raining right now."""

    kind: Literal["currently_wet"] = "currently_wet"
    severity: Severity = Severity.WARNING


WarningCode = Annotated[
    Union[
        TooWarm,
        ColdSuboptimal,
        HighHumidity,
        HighWind,
        VeryHighWind,
        WetDangerous,
        WetSlippery,
        CurrentlyWetDangerous,
        CurrentlyWet,
    ],
    Field(discriminator="kind"),
]
