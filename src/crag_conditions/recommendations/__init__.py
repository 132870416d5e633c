"""Series evaluation and climbing window recommendations."""

from crag_conditions.recommendations.series import (
    EvaluationOptions,
    HourlySeriesEvaluator,
    evaluate,
    summarize_days,
)
from crag_conditions.recommendations.windows import (
    OptimalWindowFinder,
    find_windows,
)

__all__ = [
    "EvaluationOptions",
    "HourlySeriesEvaluator",
    "evaluate",
    "summarize_days",
    "OptimalWindowFinder",
    "find_windows",
]
