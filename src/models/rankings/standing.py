"""roster_standings table model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class RosterStanding(Base):
    """Latest standings snapshot (one row per roster per ranking system)."""

    __tablename__ = "roster_standings"
    __table_args__ = (
        UniqueConstraint("ranking_system_id", "roster_id", name="uq_roster_standings_system_roster"),
        CheckConstraint("rating_deviation > 0.0", name="ck_roster_standings_rating_deviation"),
        CheckConstraint("matches_played >= 0", name="ck_roster_standings_matches_played"),
        CheckConstraint(
            "bounty_offered >= 0.0 AND bounty_offered <= 1.0",
            name="ck_roster_standings_bounty_offered",
        ),
        Index("idx_roster_standings_system", "ranking_system_id"),
        Index("idx_roster_standings_system_rating", "ranking_system_id", "rating"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    ranking_system_id: Mapped[int] = mapped_column(ForeignKey("ranking_systems.id"), nullable=False)
    roster_id: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False)
    seed_rating: Mapped[float] = mapped_column(Float, nullable=False)
    rating_deviation: Mapped[float] = mapped_column(Float, nullable=False)
    global_rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    europe_rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    americas_rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rest_of_world_rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    matches_played: Mapped[int] = mapped_column(Integer, nullable=False)
    last_played: Mapped[int] = mapped_column(BigInteger, nullable=False)
    distinct_teams_defeated: Mapped[float] = mapped_column(Float, nullable=False)
    bounty_offered: Mapped[float] = mapped_column(Float, nullable=False)
    own_network: Mapped[float] = mapped_column(Float, nullable=False)
    lan_participation: Mapped[float] = mapped_column(Float, nullable=False)
    opponent_bounties: Mapped[float] = mapped_column(Float, nullable=False)
    opponent_network: Mapped[float] = mapped_column(Float, nullable=False)
    players: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    as_of_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
