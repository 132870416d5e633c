"""Hourly series evaluation.

Scores every hour of a forecast for one rock type. The evaluator walks the
series once, carrying the current "wet spell" forward so that each hour knows
how long ago the rock last got wet and how much rain fell:

- A seed (`recent_precip_mm`) describes rain that fell before the series
  starts, ending `hours_since_recent_precip` hours before the first reading.
- Every rainy hour extends the spell; rain that restarts after a dry spell is
  added on top of whatever wetness is left from the earlier rain.
- Elapsed time is measured from timestamps, so gaps in the series are handled.
- Between rains the wet fraction never rises: more humid air only slows the
  drying down.

Night filtering is a view: night hours are scored like any other hour (so the
drying model stays continuous) and only dropped from the returned series.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from crag_conditions.models.conditions import (
    AnnotatedHour,
    DailyConditions,
    RatingCategory,
    WetnessInfo,
)
from crag_conditions.models.rock import RockProfile, RockType
from crag_conditions.models.weather import DailySummary, HourlyReading, TimeOfDay
from crag_conditions.rules import drying, friction
from crag_conditions.rules.profiles import profile_for
from crag_conditions.rules.rating import classify, rating_for_score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationOptions:
    """Options for evaluating an hourly series."""

    include_night_hours: bool = True
    hours_since_recent_precip: float = 0.0  # Age of the recent_precip_mm seed


@dataclass
class _WetSpell:
    """Running state of the latest precipitation event."""

    precip_mm: float = 0.0
    ended_at: datetime | None = None
    raining: bool = False
    fraction: float = 0.0  # Last reported wet fraction; only rain raises it


def _hours_between(earlier: datetime, later: datetime) -> float:
    return max(0.0, (later - earlier).total_seconds() / 3600)


class HourlySeriesEvaluator:
    """Annotates hourly readings with friction scores, ratings and codes.

    Example:
        ```python
        evaluator = HourlySeriesEvaluator(RockType.GRANITE)
        hours = evaluator.evaluate(snapshot.hourly, recent_precip_mm=3.0)
        best = max(hours, key=lambda h: h.friction_score)
        ```
    """

    def __init__(self, rock_type: RockType | str | None = RockType.UNKNOWN):
        self.profile: RockProfile = profile_for(rock_type)

    def evaluate(
        self,
        hourly: list[HourlyReading],
        recent_precip_mm: float = 0.0,
        options: EvaluationOptions | None = None,
        daily: list[DailySummary] | None = None,
    ) -> list[AnnotatedHour]:
        """Evaluate a series, dropping night hours unless asked to keep them.

        Args:
            hourly: Readings in chronological order
            recent_precip_mm: Precipitation that fell before the series starts
            options: Night filtering and seed age
            daily: Daily summaries providing sunrise/sunset per date

        Returns:
            One AnnotatedHour per retained valid reading, in input order
        """
        options = options or EvaluationOptions()
        annotated = self.evaluate_all(hourly, recent_precip_mm, options, daily)
        if options.include_night_hours:
            return annotated
        return [hour for hour in annotated if hour.is_daylight]

    def evaluate_all(
        self,
        hourly: list[HourlyReading],
        recent_precip_mm: float = 0.0,
        options: EvaluationOptions | None = None,
        daily: list[DailySummary] | None = None,
    ) -> list[AnnotatedHour]:
        """Evaluate every valid reading, night hours included."""
        options = options or EvaluationOptions()
        sun_times = {summary.date: summary for summary in daily or []}
        profile = self.profile

        spell = _WetSpell()
        if hourly and recent_precip_mm > 0:
            spell.precip_mm = recent_precip_mm
            spell.ended_at = hourly[0].time - timedelta(
                hours=max(0.0, options.hours_since_recent_precip)
            )
            spell.fraction = 1.0

        annotated: list[AnnotatedHour] = []
        skipped = 0

        for reading in hourly:
            if not reading.is_valid():
                skipped += 1
                continue

            wetness = self._advance(spell, reading)
            terms = friction.score_terms(reading, profile, wetness.fraction)
            classification = classify(terms.score, reading, profile, wetness, terms)

            annotated.append(
                AnnotatedHour(
                    **reading.model_dump(),
                    friction_score=terms.score,
                    rating=classification.rating,
                    reason_codes=classification.reason_codes,
                    warning_codes=classification.warning_codes,
                    wetness=wetness,
                    is_daylight=_is_daylight(reading, sun_times),
                )
            )

        if skipped:
            logger.debug(f"Skipped {skipped} invalid hourly readings")

        return annotated

    def _advance(self, spell: _WetSpell, reading: HourlyReading) -> WetnessInfo:
        """Update the wet spell with this hour and return the hour's wetness."""
        profile = self.profile
        temp = reading.temp_c
        humidity = reading.humidity_pct

        if reading.is_raining:
            if spell.raining:
                spell.precip_mm += reading.precip_mm
            else:
                residual = 0.0
                if spell.ended_at is not None:
                    left = drying.wetness(
                        spell.precip_mm,
                        _hours_between(spell.ended_at, reading.time),
                        profile,
                        temp,
                        humidity,
                    )
                    residual = spell.precip_mm * min(left.fraction, spell.fraction)
                spell.precip_mm = residual + reading.precip_mm
            spell.ended_at = reading.time
            spell.raining = True
            spell.fraction = 1.0
            return drying.wetness(
                spell.precip_mm, 0.0, profile, temp, humidity, currently_raining=True
            )

        spell.raining = False
        if spell.ended_at is None:
            return WetnessInfo.dry()

        wetness = drying.wetness(
            spell.precip_mm,
            _hours_between(spell.ended_at, reading.time),
            profile,
            temp,
            humidity,
        )
        if wetness.fraction > spell.fraction:
            # More humid air slows drying but cannot wet the rock again
            wetness = WetnessInfo(
                fraction=spell.fraction,
                hours_to_dry=spell.fraction * wetness.fully_dry_hours,
                fully_dry_hours=wetness.fully_dry_hours,
            )
        spell.fraction = wetness.fraction
        if not wetness.is_wet:
            spell.precip_mm = 0.0
            spell.ended_at = None
        return wetness


def _is_daylight(reading: HourlyReading, sun_times: dict[date, DailySummary]) -> bool:
    if reading.is_day is not None:
        return reading.is_day
    summary = sun_times.get(reading.time.date())
    if summary is not None:
        time_of_day = reading.get_time_of_day(summary.sunrise, summary.sunset)
        if time_of_day is not None:
            return time_of_day != TimeOfDay.NIGHT
    return reading.is_default_climbing_hour()


def evaluate(
    hourly: list[HourlyReading],
    rock_type: RockType | str | None,
    recent_precip_mm: float = 0.0,
    options: EvaluationOptions | None = None,
    daily: list[DailySummary] | None = None,
) -> list[AnnotatedHour]:
    """Convenience function to evaluate a series for a rock type."""
    evaluator = HourlySeriesEvaluator(rock_type)
    return evaluator.evaluate(hourly, recent_precip_mm, options, daily)


def summarize_days(hours: list[AnnotatedHour]) -> list[DailyConditions]:
    """Aggregate annotated hours per calendar date, in order of appearance."""
    by_date: dict[date, list[AnnotatedHour]] = {}
    for hour in hours:
        by_date.setdefault(hour.time.date(), []).append(hour)

    summaries: list[DailyConditions] = []
    for day, day_hours in by_date.items():
        scores = [h.friction_score for h in day_hours]
        average = sum(scores) / len(scores)
        summaries.append(
            DailyConditions(
                date=day,
                average_score=average,
                best_score=max(scores),
                rating=rating_for_score(average),
                climbable_hours=sum(
                    1 for h in day_hours if h.rating >= RatingCategory.GOOD
                ),
            )
        )
    return summaries
