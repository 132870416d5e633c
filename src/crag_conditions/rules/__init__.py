"""Scoring rules: rock profiles, drying, friction and rating.

The engine entry points live in `crag_conditions.rules.engine`, which builds
on `crag_conditions.recommendations` and is therefore not imported here.
"""

from crag_conditions.rules.profiles import (
    GENERIC_PROFILE,
    ROCK_PROFILES,
    profile_for,
)
from crag_conditions.rules.drying import (
    drying_factor,
    fully_dry_hours,
    wetness,
)
from crag_conditions.rules.friction import (
    SAFETY_CAP,
    FrictionTerms,
    score,
    score_terms,
)
from crag_conditions.rules.rating import (
    Classification,
    classify,
    min_score_for,
    rating_for_score,
)

__all__ = [
    "GENERIC_PROFILE",
    "ROCK_PROFILES",
    "profile_for",
    "drying_factor",
    "fully_dry_hours",
    "wetness",
    "SAFETY_CAP",
    "FrictionTerms",
    "score",
    "score_terms",
    "Classification",
    "classify",
    "min_score_for",
    "rating_for_score",
]
