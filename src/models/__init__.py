"""ORM models."""

from models.base import Base
from models.rankings import RankingSystem, RosterStanding

__all__ = [
    "Base",
    "RankingSystem",
    "RosterStanding",
]
