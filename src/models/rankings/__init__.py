"""Ranking ORM models."""

from models.rankings.standing import RosterStanding
from models.rankings.system import RankingSystem

__all__ = ["RankingSystem", "RosterStanding"]
