"""Friction scoring.

Combines temperature, humidity, wind and wetness into a composite friction
score from 0 to 5. Each factor is first normalized to [0, 1]:

- Temperature: 1 at the middle of the rock's optimal band, 0 at the hot edge.
  The cold side falls off half as steeply, since cool rock still grips.
- Humidity: 1 up to the ideal maximum, then linearly down to 0 at 100%.
- Wind: 1 up to the high-wind threshold, down to 0.4 at the danger threshold,
  0 beyond it.
- Wetness: 1 minus the wet fraction.

The weighted sum is scaled to 0-5 and multiplied by the wetness term, so
fully wet rock scores 0. Three conditions then cap the score at
`SAFETY_CAP` (always rated poor), whatever the other factors say: rain right
now, any wetness on rock that is weakened by moisture, and wind above the
danger threshold.
"""

from __future__ import annotations

from dataclasses import dataclass

from crag_conditions.models.rock import RockProfile
from crag_conditions.models.weather import HourlyReading

MAX_SCORE = 5.0

# Factor weights (sum to 1)
TEMPERATURE_WEIGHT = 0.35
HUMIDITY_WEIGHT = 0.25
WIND_WEIGHT = 0.15
WETNESS_WEIGHT = 0.25

COLD_FALLOFF = 2.0  # Cold side decays over twice the half-width
WIND_TERM_AT_DANGER = 0.4

DRY_AIR_BONUS_PCT = 30
DRY_AIR_BONUS = 0.25

# Must stay below the "ok" rating threshold
SAFETY_CAP = 1.5


@dataclass(frozen=True)
class FrictionTerms:
    """Normalized factor values and the resulting score."""

    temperature: float
    humidity: float
    wind: float
    wetness: float
    dry_air_bonus: float
    capped: bool
    score: float

    def contribution(self, factor: str) -> float:
        """Weighted contribution of a factor to the score, in score points."""
        weights = {
            "temperature": TEMPERATURE_WEIGHT,
            "humidity": HUMIDITY_WEIGHT,
            "wind": WIND_WEIGHT,
            "wetness": WETNESS_WEIGHT,
        }
        return getattr(self, factor) * weights[factor] * MAX_SCORE


def temperature_term(temp_c: float, profile: RockProfile) -> float:
    band = profile.optimal_temp
    mid = band.midpoint
    half = band.half_width
    if half <= 0:
        return 1.0 if temp_c == mid else 0.0
    if temp_c >= mid:
        return max(0.0, 1.0 - (temp_c - mid) / half)
    return max(0.0, 1.0 - (mid - temp_c) / (half * COLD_FALLOFF))


def humidity_term(humidity_pct: float, profile: RockProfile) -> float:
    ideal = profile.ideal_humidity_max
    if humidity_pct <= ideal:
        return 1.0
    if ideal >= 100:
        return 1.0
    return max(0.0, 1.0 - (humidity_pct - ideal) / (100 - ideal))


def wind_term(wind_kph: float, profile: RockProfile) -> float:
    high = profile.wind_high_kph
    danger = profile.wind_danger_kph
    if wind_kph <= high:
        return 1.0
    if wind_kph > danger:
        return 0.0
    span = max(danger - high, 1e-9)
    return 1.0 - (1.0 - WIND_TERM_AT_DANGER) * (wind_kph - high) / span


def score_terms(
    reading: HourlyReading,
    profile: RockProfile,
    wetness_fraction: float,
) -> FrictionTerms:
    """Score a reading and return the per-factor breakdown."""
    fraction = min(1.0, max(0.0, wetness_fraction))

    temperature = temperature_term(reading.temp_c, profile)
    humidity = humidity_term(reading.humidity_pct, profile)
    wind = wind_term(reading.wind_kph, profile)
    dryness = 1.0 - fraction

    composite = (
        TEMPERATURE_WEIGHT * temperature
        + HUMIDITY_WEIGHT * humidity
        + WIND_WEIGHT * wind
        + WETNESS_WEIGHT * dryness
    )
    bonus = 0.0
    if profile.dry_air_friction and reading.humidity_pct < DRY_AIR_BONUS_PCT:
        bonus = DRY_AIR_BONUS

    # Wet rock has no friction to offer, whatever the weather
    score = min(MAX_SCORE, max(0.0, (composite * MAX_SCORE + bonus) * dryness))

    capped = (
        reading.is_raining
        or (profile.wet_is_dangerous and fraction > 0)
        or reading.wind_kph > profile.wind_danger_kph
    )
    if capped:
        score = min(score, SAFETY_CAP)

    return FrictionTerms(
        temperature=temperature,
        humidity=humidity,
        wind=wind,
        wetness=dryness,
        dry_air_bonus=bonus,
        capped=capped,
        score=score,
    )


def score(reading: HourlyReading, profile: RockProfile, wetness_fraction: float) -> float:
    """Composite friction score in [0, 5]."""
    return score_terms(reading, profile, wetness_fraction).score
