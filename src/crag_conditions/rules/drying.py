"""Rock drying model.

Estimates how wet the rock still is after precipitation. Total drying time
scales with the amount of rain and the rock's drying rate, and is stretched
by humid air or shortened by warm, dry air:

    fully_dry_hours = precip_mm * drying_rate_hours_per_mm * weather_factor

Wetness then decays linearly from 1 (saturated) when the rain stops to exactly
0 at `fully_dry_hours`.
"""

from __future__ import annotations

from crag_conditions.models.conditions import WetnessInfo
from crag_conditions.models.rock import RockProfile

# Weather factors applied to the base drying time
VERY_HUMID_PCT = 75
VERY_HUMID_FACTOR = 1.5
HUMID_PCT = 60
HUMID_FACTOR = 1.2
WARM_TEMP_C = 15
DRY_AIR_PCT = 50
WARM_DRY_FACTOR = 0.8


def drying_factor(temp_c: float, humidity_pct: float) -> float:
    """Multiplier on drying time for the current air (>1 = slower)."""
    if humidity_pct >= VERY_HUMID_PCT:
        return VERY_HUMID_FACTOR
    if humidity_pct >= HUMID_PCT:
        return HUMID_FACTOR
    if temp_c >= WARM_TEMP_C and humidity_pct < DRY_AIR_PCT:
        return WARM_DRY_FACTOR
    return 1.0


def fully_dry_hours(
    recent_precip_mm: float,
    profile: RockProfile,
    temp_c: float,
    humidity_pct: float,
) -> float:
    """Hours after the rain stops until the rock is completely dry."""
    if recent_precip_mm <= 0:
        return 0.0
    return (
        recent_precip_mm
        * profile.drying_rate_hours_per_mm
        * drying_factor(temp_c, humidity_pct)
    )


def wetness(
    recent_precip_mm: float,
    hours_since_precip: float,
    profile: RockProfile,
    current_temp_c: float,
    current_humidity_pct: float,
    currently_raining: bool = False,
) -> WetnessInfo:
    """Estimate residual wetness of the rock.

    Args:
        recent_precip_mm: Precipitation of the last wet spell in mm
        hours_since_precip: Hours since that precipitation stopped
        profile: Rock profile providing the drying rate
        current_temp_c: Current temperature (affects drying speed)
        current_humidity_pct: Current humidity (affects drying speed)
        currently_raining: Rain is falling right now

    Returns:
        WetnessInfo with the wet fraction (0-1) and, while wet, the hours left
    """
    total = fully_dry_hours(recent_precip_mm, profile, current_temp_c, current_humidity_pct)

    if currently_raining:
        # Rain now dominates whatever the decay curve says
        return WetnessInfo(
            fraction=1.0,
            hours_to_dry=total,
            fully_dry_hours=total,
            currently_raining=True,
        )

    elapsed = max(0.0, hours_since_precip)
    if total <= 0 or elapsed >= total:
        return WetnessInfo(fraction=0.0, fully_dry_hours=total)

    fraction = 1.0 - elapsed / total
    return WetnessInfo(
        fraction=fraction,
        hours_to_dry=max(0.0, total - elapsed),
        fully_dry_hours=total,
    )
