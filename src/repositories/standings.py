"""Persistence of final roster standings using SQLAlchemy."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from domain.ratings.regions import AMERICAS, EUROPE, REST_OF_WORLD
from domain.ratings.rosters import Roster
from models.rankings import RankingSystem, RosterStanding

REGION_RANK_COLUMNS: dict[str, str] = {
    "europe": "europe_rank",
    "americas": "americas_rank",
    "asia": "rest_of_world_rank",
}


@dataclass(frozen=True)
class StoredStanding:
    """Read model returned by ``fetch_top``."""

    rank: int | None
    roster_id: int
    name: str
    rating: float
    matches_played: int
    players: tuple[str, ...]


def roster_to_row(roster: Roster, system_id: int, as_of_time: int) -> dict[str, Any]:
    return {
        "ranking_system_id": system_id,
        "roster_id": roster.roster_id,
        "name": roster.name,
        "rating": roster.rating,
        "seed_rating": roster.seed_rating,
        "rating_deviation": roster.rating_deviation,
        "global_rank": roster.global_rank,
        "europe_rank": roster.regional_ranks[EUROPE],
        "americas_rank": roster.regional_ranks[AMERICAS],
        "rest_of_world_rank": roster.regional_ranks[REST_OF_WORLD],
        "matches_played": roster.matches_played,
        "last_played": roster.last_played,
        "distinct_teams_defeated": roster.distinct_teams_defeated,
        "bounty_offered": roster.bounty_offered,
        "own_network": roster.own_network,
        "lan_participation": roster.lan_participation,
        "opponent_bounties": roster.opponent_bounties,
        "opponent_network": roster.opponent_network,
        "players": [
            {
                "player_id": player.player_id,
                "nick": player.nick,
                "country_iso": player.country_iso,
            }
            for player in roster.players
        ],
        "as_of_time": as_of_time,
    }


class StandingsRepository:
    """Stores the latest standings snapshot per ranking system."""

    def ensure_schema(self, engine: Engine) -> None:
        """Create ranking_systems/roster_standings tables when missing."""
        with engine.begin() as connection:
            RankingSystem.__table__.create(bind=connection, checkfirst=True)
            RosterStanding.__table__.create(bind=connection, checkfirst=True)

    def upsert_system(
        self,
        session: Session,
        *,
        name: str,
        description: str | None,
        config_json: dict[str, Any],
    ) -> RankingSystem:
        """Create or update the ranking-system metadata row."""
        system = session.execute(
            select(RankingSystem).where(RankingSystem.name == name)
        ).scalar_one_or_none()
        if system is None:
            system = RankingSystem(
                name=name,
                description=description,
                config_json=config_json,
            )
            session.add(system)
        else:
            system.description = description
            system.config_json = config_json
            system.updated_at = datetime.now(UTC).replace(tzinfo=None)
        session.flush()
        return system

    def replace_standings(
        self,
        session: Session,
        rosters: Sequence[Roster],
        *,
        system_id: int,
        as_of_time: int,
    ) -> int:
        """Swap the stored snapshot of one system for ``rosters``."""
        session.execute(delete(RosterStanding).where(RosterStanding.ranking_system_id == system_id))
        if not rosters:
            return 0
        payload = [roster_to_row(roster, system_id, as_of_time) for roster in rosters]
        session.execute(insert(RosterStanding), payload)
        return len(payload)

    def count_standings(self, session: Session, *, system_id: int | None = None) -> int:
        statement = select(func.count(RosterStanding.id))
        if system_id is not None:
            statement = statement.where(RosterStanding.ranking_system_id == system_id)
        return int(session.scalar(statement) or 0)

    def fetch_top(
        self,
        session: Session,
        *,
        system_name: str,
        top_n: int,
        region: str | None = None,
    ) -> list[StoredStanding]:
        """Return the ``top_n`` ranked rosters, globally or for one region."""
        if region is None:
            rank_column = RosterStanding.global_rank
        else:
            column_name = REGION_RANK_COLUMNS.get(region.lower())
            if column_name is None:
                raise ValueError(
                    f"Unknown region '{region}'. Available: {', '.join(sorted(REGION_RANK_COLUMNS))}"
                )
            rank_column = getattr(RosterStanding, column_name)

        statement = (
            select(RosterStanding, rank_column.label("rank"))
            .join(RankingSystem, RankingSystem.id == RosterStanding.ranking_system_id)
            .where(RankingSystem.name == system_name, rank_column.is_not(None))
            .order_by(rank_column, RosterStanding.roster_id)
            .limit(top_n)
        )
        rows = session.execute(statement).all()
        return [
            StoredStanding(
                rank=rank,
                roster_id=standing.roster_id,
                name=standing.name,
                rating=standing.rating,
                matches_played=standing.matches_played,
                players=tuple(str(player.get("nick", "")) for player in standing.players),
            )
            for standing, rank in rows
        ]


STANDINGS_REPOSITORY = StandingsRepository()

__all__ = ["STANDINGS_REPOSITORY", "StandingsRepository", "StoredStanding", "roster_to_row"]
