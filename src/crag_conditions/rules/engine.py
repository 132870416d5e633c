"""Conditions engine: the entry points of the rule engine.

Ties the pieces together for one request:

    forecast -> HourlySeriesEvaluator -> OptimalWindowFinder / daily aggregates

The engine is pure and synchronous. It holds no mutable state, so one
instance can serve concurrent requests, and the same inputs always produce
the same result.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from crag_conditions.models.conditions import (
    AnnotatedHour,
    ConditionsResult,
    RatingCategory,
    WetnessInfo,
    Window,
)
from crag_conditions.models.rock import RockProfile, RockType
from crag_conditions.models.weather import (
    CurrentReading,
    DailySummary,
    HourlyReading,
    WeatherSnapshot,
)
from crag_conditions.recommendations.series import (
    EvaluationOptions,
    HourlySeriesEvaluator,
    summarize_days,
)
from crag_conditions.recommendations.windows import (
    DEFAULT_MAX_WINDOWS,
    OptimalWindowFinder,
)
from crag_conditions.rules import drying
from crag_conditions.rules.friction import score_terms
from crag_conditions.rules.profiles import profile_for
from crag_conditions.rules.rating import classify

logger = logging.getLogger(__name__)

# How far back an evaluated hour may lie and still describe the current wetness
CURRENT_HOUR_TOLERANCE = timedelta(hours=1)


@dataclass(frozen=True)
class ConditionsOptions(EvaluationOptions):
    """Options for a full conditions computation."""

    include_windows: bool = False


class ConditionsEngine:
    """Computes climbing conditions and windows for a rock type.

    Example:
        ```python
        engine = ConditionsEngine(min_rating=RatingCategory.GREAT)

        # Current conditions plus the annotated forecast
        result = engine.compute(snapshot, RockType.GRANITE, recent_precip_mm=2.0)

        # Best windows only
        windows = engine.find_windows(snapshot.hourly, "sandstone")
        ```
    """

    def __init__(
        self,
        min_rating: RatingCategory | str = RatingCategory.GOOD,
        max_windows: int = DEFAULT_MAX_WINDOWS,
    ):
        """Initialize the engine.

        Args:
            min_rating: Lowest rating an hour may have inside a window
            max_windows: Maximum number of windows to return
        """
        self.min_rating = RatingCategory.parse(min_rating)
        self.max_windows = max_windows
        self.window_finder = OptimalWindowFinder(min_rating=self.min_rating)

    def evaluate(
        self,
        hourly: list[HourlyReading],
        rock_type: RockType | str | None,
        recent_precip_mm: float = 0.0,
        options: EvaluationOptions | None = None,
        daily: list[DailySummary] | None = None,
    ) -> list[AnnotatedHour]:
        """Score every hour of a series (see HourlySeriesEvaluator.evaluate)."""
        evaluator = HourlySeriesEvaluator(rock_type)
        return evaluator.evaluate(hourly, recent_precip_mm, options, daily)

    def find_windows(
        self,
        hourly: list[HourlyReading],
        rock_type: RockType | str | None,
        recent_precip_mm: float = 0.0,
        include_night_hours: bool = True,
        daily: list[DailySummary] | None = None,
    ) -> list[Window]:
        """Find the best climbing windows in a forecast.

        Args:
            hourly: Readings in chronological order
            rock_type: Rock type (unrecognized values use the generic profile)
            recent_precip_mm: Precipitation that fell before the series starts
            include_night_hours: Allow windows to include night hours
            daily: Daily summaries providing sunrise/sunset per date

        Returns:
            Windows ranked best first
        """
        options = EvaluationOptions(include_night_hours=include_night_hours)
        annotated = self.evaluate(hourly, rock_type, recent_precip_mm, options, daily)
        return self.window_finder.find_windows(annotated, max_windows=self.max_windows)

    def compute(
        self,
        weather: WeatherSnapshot,
        rock_type: RockType | str | None,
        recent_precip_mm: float = 0.0,
        options: ConditionsOptions | None = None,
    ) -> ConditionsResult:
        """Compute current conditions and the annotated forecast.

        Args:
            weather: Current reading plus hourly and daily series
            rock_type: Rock type (unrecognized values use the generic profile)
            recent_precip_mm: Precipitation that fell before the series starts
            options: Night filtering, seed age and whether to find windows

        Returns:
            ConditionsResult for the current reading, with the hourly series,
            daily aggregates and (optionally) the best windows
        """
        options = options or ConditionsOptions()
        evaluator = HourlySeriesEvaluator(rock_type)
        profile = evaluator.profile

        scored = evaluator.evaluate_all(
            weather.hourly, recent_precip_mm, options, weather.daily
        )
        if options.include_night_hours:
            visible = scored
        else:
            visible = [hour for hour in scored if hour.is_daylight]

        anchor = _anchor_hour(weather.current, scored)
        current = _scorable_current(weather.current, anchor)

        windows = None
        if options.include_windows:
            windows = self.window_finder.find_windows(
                visible, max_windows=self.max_windows
            )

        if current is None:
            logger.debug("No valid current reading, returning forecast only")
            return ConditionsResult(
                rock_type=profile.rock_type,
                friction_score=0.0,
                friction_rating=0,
                rating=RatingCategory.POOR,
                hourly=visible,
                daily=summarize_days(visible),
                optimal_windows=windows,
            )

        wetness = _current_wetness(
            current, anchor, profile, recent_precip_mm, options.hours_since_recent_precip
        )
        terms = score_terms(current, profile, wetness.fraction)
        classification = classify(terms.score, current, profile, wetness, terms)

        drying_time = None
        if wetness.is_wet and wetness.hours_to_dry is not None:
            drying_time = math.ceil(wetness.hours_to_dry)

        logger.debug(
            f"{profile.rock_type.value}: score {terms.score:.2f} "
            f"({classification.rating.value}), {len(visible)} hours evaluated"
        )

        return ConditionsResult(
            rock_type=profile.rock_type,
            friction_score=terms.score,
            friction_rating=min(5, max(0, math.floor(terms.score + 0.5))),
            rating=classification.rating,
            reasons=classification.reason_codes,
            warnings=classification.warning_codes,
            is_dry=not wetness.is_wet,
            drying_time_hours=drying_time,
            hourly=visible,
            daily=summarize_days(visible),
            optimal_windows=windows,
        )


def _anchor_hour(
    current: CurrentReading, scored: list[AnnotatedHour]
) -> AnnotatedHour | None:
    """Latest evaluated hour at or just before the current observation."""
    if not scored or current.time is None:
        return None

    best: AnnotatedHour | None = None
    for hour in scored:
        if not _comparable(hour.time, current.time):
            continue
        if hour.time <= current.time and current.time - hour.time <= CURRENT_HOUR_TOLERANCE:
            if best is None or hour.time >= best.time:
                best = hour
    return best


def _scorable_current(
    current: CurrentReading, anchor: AnnotatedHour | None
) -> CurrentReading | None:
    """The current reading, or the anchor hour's weather when it is unusable."""
    if current.is_valid():
        return current
    if anchor is None:
        return None
    return CurrentReading(
        time=current.time or anchor.time,
        temp_c=anchor.temp_c,
        humidity_pct=anchor.humidity_pct,
        wind_kph=anchor.wind_kph,
        precip_mm=anchor.precip_mm,
        is_day=anchor.is_day,
    )


def _current_wetness(
    current: CurrentReading,
    anchor: AnnotatedHour | None,
    profile: RockProfile,
    recent_precip_mm: float,
    hours_since_recent_precip: float,
) -> WetnessInfo:
    temp = current.temp_c
    humidity = current.humidity_pct

    if current.is_raining:
        if anchor is None:
            return drying.wetness(
                recent_precip_mm + current.precip_mm,
                0.0,
                profile,
                temp,
                humidity,
                currently_raining=True,
            )
        # The anchor's spell already holds the rain that fell before now
        fresh = drying.fully_dry_hours(current.precip_mm, profile, temp, humidity)
        spell = anchor.wetness
        if spell.currently_raining:
            total = max(spell.fully_dry_hours, fresh)
        else:
            total = (spell.hours_to_dry or 0.0) + fresh
        return WetnessInfo(
            fraction=1.0,
            hours_to_dry=total,
            fully_dry_hours=total,
            currently_raining=True,
        )

    if anchor is not None:
        return anchor.wetness

    return drying.wetness(
        recent_precip_mm, hours_since_recent_precip, profile, temp, humidity
    )


def _comparable(a: datetime, b: datetime) -> bool:
    return (a.tzinfo is None) == (b.tzinfo is None)


_default_engine = ConditionsEngine()


def compute_conditions(
    weather: WeatherSnapshot,
    rock_type: RockType | str | None,
    recent_precip_mm: float = 0.0,
    options: ConditionsOptions | None = None,
) -> ConditionsResult:
    """Convenience function to compute conditions with the default engine.

    Args:
        weather: Current reading plus hourly and daily series
        rock_type: Rock type (unrecognized values use the generic profile)
        recent_precip_mm: Precipitation that fell before the series starts
        options: Night filtering, seed age and whether to find windows

    Returns:
        ConditionsResult
    """
    return _default_engine.compute(weather, rock_type, recent_precip_mm, options)


def find_optimal_windows(
    hourly: list[HourlyReading],
    rock_type: RockType | str | None,
    recent_precip_mm: float = 0.0,
    min_rating: RatingCategory | str = RatingCategory.GOOD,
    max_windows: int = DEFAULT_MAX_WINDOWS,
    include_night_hours: bool = True,
) -> list[Window]:
    """Convenience function to find the best climbing windows.

    Args:
        hourly: Readings in chronological order
        rock_type: Rock type (unrecognized values use the generic profile)
        recent_precip_mm: Precipitation that fell before the series starts
        min_rating: Lowest rating an hour may have inside a window
        max_windows: Maximum windows to return
        include_night_hours: Allow windows to include night hours

    Returns:
        Windows ranked best first
    """
    engine = ConditionsEngine(min_rating=min_rating, max_windows=max_windows)
    return engine.find_windows(
        hourly,
        rock_type,
        recent_precip_mm=recent_precip_mm,
        include_night_hours=include_night_hours,
    )
