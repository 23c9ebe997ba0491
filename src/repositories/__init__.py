"""Repository layer for persisted standings."""

from repositories.standings import STANDINGS_REPOSITORY, StandingsRepository, StoredStanding

__all__ = ["STANDINGS_REPOSITORY", "StandingsRepository", "StoredStanding"]
