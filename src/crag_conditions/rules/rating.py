"""Rating classification with structured reasons and warnings.

The rating depends on the score alone (fixed thresholds, monotonic). Reasons
and warnings are derived independently from the raw reading, so a good
temperature reason can sit next to a dangerous-wetness warning for the same
hour.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

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
from crag_conditions.models.conditions import RatingCategory, WetnessInfo
from crag_conditions.models.rock import RockProfile
from crag_conditions.models.weather import HourlyReading
from crag_conditions.rules.friction import (
    DRY_AIR_BONUS,
    DRY_AIR_BONUS_PCT,
    FrictionTerms,
    score_terms,
)

# Lower score bound of each rating, best first
RATING_THRESHOLDS: list[tuple[float, RatingCategory]] = [
    (4.5, RatingCategory.EXCELLENT),
    (3.75, RatingCategory.GREAT),
    (3.0, RatingCategory.GOOD),
    (2.0, RatingCategory.OK),
]

PERFECT_TEMP_MARGIN_C = 4.0
COLD_FRICTION_MARGIN_C = 10.0

# Tie-break order for reasons of equal strength
REASON_ORDER = (
    "perfect_temp",
    "cold_good_friction",
    "ideal_humidity",
    "low_humidity_friction",
    "ready_in_hours",
    "acceptable",
)

SEVERITY_RANK = {
    Severity.CRITICAL: 0,
    Severity.WARNING: 1,
    Severity.CAUTION: 2,
    Severity.INFO: 3,
}


@dataclass(frozen=True)
class Classification:
    """Rating plus the structured explanations for one reading."""

    rating: RatingCategory
    reason_codes: list[ReasonCode] = field(default_factory=list)
    warning_codes: list[WarningCode] = field(default_factory=list)

    @property
    def has_critical_warning(self) -> bool:
        return any(w.severity == Severity.CRITICAL for w in self.warning_codes)


def rating_for_score(score: float) -> RatingCategory:
    """Map a friction score to its rating bucket."""
    for threshold, rating in RATING_THRESHOLDS:
        if score >= threshold:
            return rating
    return RatingCategory.POOR


def min_score_for(rating: RatingCategory) -> float:
    """Lowest score that still earns the given rating."""
    for threshold, bucket in RATING_THRESHOLDS:
        if bucket == rating:
            return threshold
    return 0.0


def _reasons(
    score: float,
    reading: HourlyReading,
    profile: RockProfile,
    wetness: WetnessInfo,
    terms: FrictionTerms,
) -> list[ReasonCode]:
    band = profile.optimal_temp
    temp = reading.temp_c
    humidity = reading.humidity_pct

    found: list[tuple[float, ReasonCode]] = []

    if abs(temp - band.midpoint) <= PERFECT_TEMP_MARGIN_C:
        found.append((terms.contribution("temperature"), PerfectTemp(temp_c=temp)))
    elif _is_good_cold(temp, profile):
        found.append(
            (
                terms.contribution("temperature"),
                ColdGoodFriction(rock_type=profile.rock_type, temp_c=temp),
            )
        )

    if humidity <= profile.ideal_humidity_max:
        found.append(
            (terms.contribution("humidity"), IdealHumidity(humidity_pct=humidity))
        )
    if profile.dry_air_friction and humidity < DRY_AIR_BONUS_PCT:
        found.append(
            (
                DRY_AIR_BONUS,
                LowHumidityFriction(rock_type=profile.rock_type, humidity_pct=humidity),
            )
        )

    if (wetness.is_wet or reading.is_raining) and wetness.hours_to_dry is not None:
        found.append(
            (
                terms.contribution("wetness"),
                ReadyInHours(hours=math.ceil(wetness.hours_to_dry)),
            )
        )

    if not found and score >= min_score_for(RatingCategory.OK):
        found.append((0.0, Acceptable()))

    found.sort(key=lambda item: (-item[0], REASON_ORDER.index(item[1].kind)))
    return [reason for _, reason in found]


def _warnings(
    reading: HourlyReading,
    profile: RockProfile,
    wetness: WetnessInfo,
) -> list[WarningCode]:
    band = profile.optimal_temp
    temp = reading.temp_c
    warnings: list[WarningCode] = []

    # Temperature
    if temp > band.max_c:
        warnings.append(TooWarm(rock_type=profile.rock_type, temp_c=temp))
    elif temp < band.min_c and not _is_good_cold(temp, profile):
        warnings.append(ColdSuboptimal(rock_type=profile.rock_type, temp_c=temp))

    # Humidity
    if reading.humidity_pct > profile.high_humidity_pct:
        warnings.append(HighHumidity(humidity_pct=reading.humidity_pct))

    # Wind
    if reading.wind_kph > profile.wind_danger_kph:
        warnings.append(VeryHighWind(wind_kph=reading.wind_kph))
    elif reading.wind_kph > profile.wind_high_kph:
        warnings.append(HighWind(wind_kph=reading.wind_kph))

    # Wetness
    if wetness.currently_raining or reading.is_raining:
        if profile.wet_is_dangerous:
            warnings.append(CurrentlyWetDangerous(rock_type=profile.rock_type))
        else:
            warnings.append(CurrentlyWet())
    elif wetness.is_wet:
        if profile.wet_is_dangerous:
            warnings.append(WetDangerous(rock_type=profile.rock_type))
        else:
            warnings.append(WetSlippery())

    # Most severe first; sort is stable within a severity
    warnings.sort(key=lambda w: SEVERITY_RANK[w.severity])
    return warnings


def _is_good_cold(temp_c: float, profile: RockProfile) -> bool:
    band = profile.optimal_temp
    return (
        profile.cold_friction
        and band.min_c - COLD_FRICTION_MARGIN_C <= temp_c < band.min_c
    )


def classify(
    score: float,
    reading: HourlyReading,
    profile: RockProfile,
    wetness: WetnessInfo,
    terms: FrictionTerms | None = None,
) -> Classification:
    """Classify a scored reading.

    Args:
        score: Friction score (0-5)
        reading: The reading that was scored
        profile: Rock profile used for scoring
        wetness: Wetness estimate used for scoring
        terms: Per-factor breakdown; recomputed when not given

    Returns:
        Classification with rating, reasons (strongest first) and warnings
        (most severe first)
    """
    if terms is None:
        terms = score_terms(reading, profile, wetness.fraction)

    return Classification(
        rating=rating_for_score(score),
        reason_codes=_reasons(score, reading, profile, wetness, terms),
        warning_codes=_warnings(reading, profile, wetness),
    )
