"""Shared record types for match and event data."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final

PLAYERS_PER_SIDE: Final[int] = 5

_PRIZE_POOL_DIGITS = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Player:
    player_id: int
    nick: str = ""
    country: str = ""
    country_iso: str = ""


@dataclass(frozen=True)
class MapScore:
    map_name: str
    team1_score: int
    team2_score: int


@dataclass(frozen=True)
class EventPrize:
    """Prize and placement awarded to one participant team id."""

    placement: int
    prize: float
    shared: bool = False


@dataclass(frozen=True)
class Event:
    """Tournament metadata plus the time of its latest kept match."""

    event_id: int
    name: str
    prize_pool: float
    lan: bool
    prize_distribution: dict[int, EventPrize] = field(default_factory=dict)
    last_match_time: int = -1

    def prize_for_team(self, team_id: int) -> float:
        entry = self.prize_distribution.get(team_id)
        return 0.0 if entry is None else entry.prize


@dataclass(frozen=True)
class Match:
    """One best-of-N series between two five-player lineups.

    The trailing optional fields are filled in by later pipeline stages
    through ``dataclasses.replace``; the raw record is never mutated.
    """

    match_start_time: int
    team1_id: int
    team2_id: int
    team1_name: str
    team2_name: str
    event_id: int | None
    team1_players: tuple[Player, ...]
    team2_players: tuple[Player, ...]
    winning_team: int
    maps: tuple[MapScore, ...] = ()
    valve_ranked: bool | None = None
    information_content: float | None = None
    unified_match_id: int | None = None
    team1_roster_id: int | None = None
    team2_roster_id: int | None = None
    winner_rating_delta: float | None = None
    loser_rating_delta: float | None = None

    def players(self, team_number: int) -> tuple[Player, ...]:
        return self.team1_players if team_number == 1 else self.team2_players

    def roster_id(self, team_number: int) -> int | None:
        return self.team1_roster_id if team_number == 1 else self.team2_roster_id

    def team_id(self, team_number: int) -> int:
        return self.team1_id if team_number == 1 else self.team2_id


def parse_prize_pool(prize_pool: str | None) -> float:
    """Parse strings like ``"$1,000,000"``; anything else is worth 0."""
    if prize_pool is None:
        return 0.0
    cleaned = str(prize_pool).replace(",", "").replace("$", "", 1)
    if _PRIZE_POOL_DIGITS.fullmatch(cleaned):
        return float(cleaned)
    return 0.0


__all__ = [
    "Event",
    "EventPrize",
    "MapScore",
    "Match",
    "PLAYERS_PER_SIDE",
    "Player",
    "parse_prize_pool",
]
