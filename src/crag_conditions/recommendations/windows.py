"""Optimal climbing window finder.

Finds contiguous runs of hours that all meet a minimum rating and ranks them:
- Highest average friction score first
- Longer windows win ties on the average
- Earliest start wins any remaining tie

Hours are contiguous only when they are consecutive in the series and no more
than `max_gap` apart; a missing hour splits a window.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from crag_conditions.models.conditions import AnnotatedHour, RatingCategory, Window
from crag_conditions.rules.rating import rating_for_score

DEFAULT_MAX_WINDOWS = 5


@dataclass
class WindowCandidate:
    """A run of qualifying hours being evaluated."""

    hours: list[AnnotatedHour]

    @property
    def start_time(self) -> datetime:
        return self.hours[0].time

    @property
    def end_time(self) -> datetime:
        # End time is start of last hour + 1 hour
        return self.hours[-1].time + timedelta(hours=1)

    @property
    def duration_hours(self) -> int:
        return len(self.hours)

    @property
    def avg_score(self) -> float:
        if not self.hours:
            return 0
        return sum(h.friction_score for h in self.hours) / len(self.hours)

    def to_window(self) -> Window:
        average = min(5.0, max(0.0, self.avg_score))
        return Window(
            start_time=self.start_time,
            end_time=self.end_time,
            duration_hours=self.duration_hours,
            average_score=average,
            rating=rating_for_score(average),
        )


class OptimalWindowFinder:
    """Finds the best climbing windows in an annotated series.

    Example:
        ```python
        finder = OptimalWindowFinder(min_rating=RatingCategory.GREAT)
        windows = finder.find_windows(annotated_hours)
        if windows:
            print(f"Best window: {windows[0].start_time}")
        ```
    """

    def __init__(
        self,
        min_rating: RatingCategory | str = RatingCategory.GOOD,
        min_duration_hours: int = 1,
        max_gap: timedelta = timedelta(hours=1),
    ):
        """Initialize the finder.

        Args:
            min_rating: Lowest rating an hour may have to be part of a window
            min_duration_hours: Shorter runs are dropped
            max_gap: Largest step between consecutive hours in one window
        """
        self.min_rating = RatingCategory.parse(min_rating)
        self.min_duration_hours = max(1, min_duration_hours)
        self.max_gap = max_gap

    def find_windows(
        self,
        hours: list[AnnotatedHour],
        max_windows: int = DEFAULT_MAX_WINDOWS,
    ) -> list[Window]:
        """Find and rank windows.

        Args:
            hours: Annotated hours in chronological order
            max_windows: Maximum number of windows to return

        Returns:
            Up to `max_windows` windows, best first
        """
        if max_windows <= 0 or not hours:
            return []

        candidates = self._find_contiguous_runs(hours)
        candidates.sort(key=lambda c: (-c.avg_score, -c.duration_hours, c.start_time))
        return [c.to_window() for c in candidates[:max_windows]]

    def _qualifies(self, hour: AnnotatedHour) -> bool:
        return hour.rating >= self.min_rating

    def _continues(self, previous: AnnotatedHour, hour: AnnotatedHour) -> bool:
        step = hour.time - previous.time
        return timedelta(0) < step <= self.max_gap

    def _find_contiguous_runs(self, hours: list[AnnotatedHour]) -> list[WindowCandidate]:
        """Find maximal runs of qualifying, evenly spaced hours."""
        candidates: list[WindowCandidate] = []
        run: list[AnnotatedHour] = []

        for hour in hours:
            if not self._qualifies(hour):
                self._close(run, candidates)
                run = []
                continue
            if run and not self._continues(run[-1], hour):
                self._close(run, candidates)
                run = []
            run.append(hour)

        self._close(run, candidates)
        return candidates

    def _close(self, run: list[AnnotatedHour], candidates: list[WindowCandidate]) -> None:
        if len(run) >= self.min_duration_hours:
            candidates.append(WindowCandidate(hours=list(run)))


def find_windows(
    hours: list[AnnotatedHour],
    min_rating: RatingCategory | str = RatingCategory.GOOD,
    max_windows: int = DEFAULT_MAX_WINDOWS,
    min_duration_hours: int = 1,
) -> list[Window]:
    """Convenience function to find the best windows in an annotated series."""
    finder = OptimalWindowFinder(min_rating=min_rating, min_duration_hours=min_duration_hours)
    return finder.find_windows(hours, max_windows=max_windows)
