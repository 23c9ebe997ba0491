"""Glicko rating modules."""

from domain.ratings.glicko.calculator import (
    GlickoParameters,
    GlickoRatingEngine,
    MatchRatingDelta,
    RatingState,
    expected_score,
)

__all__ = [
    "GlickoParameters",
    "GlickoRatingEngine",
    "MatchRatingDelta",
    "RatingState",
    "expected_score",
]
