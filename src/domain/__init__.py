"""Roster ranking domain modules."""

from domain.common import Event, EventPrize, MapScore, Match, Player
from domain.pipeline import RankingResult, compute_rankings

__all__ = [
    "Event",
    "EventPrize",
    "MapScore",
    "Match",
    "Player",
    "RankingResult",
    "compute_rankings",
]
