"""Ranking stages: ingestion, roster resolution, seeding, rating, standings."""

from domain.ratings.config import RankingParameters, SeedWeights
from domain.ratings.context import RankingContext
from domain.ratings.dataset import DatasetIngestor, parse_match_data
from domain.ratings.rosters import Roster, RosterResolver
from domain.ratings.seeding import SeedingModifierCalculator
from domain.ratings.standings import RankingAssigner

__all__ = [
    "DatasetIngestor",
    "RankingAssigner",
    "RankingContext",
    "RankingParameters",
    "Roster",
    "RosterResolver",
    "SeedWeights",
    "SeedingModifierCalculator",
    "parse_match_data",
]
