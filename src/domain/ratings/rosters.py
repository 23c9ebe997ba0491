"""Roster identity resolution.

Source team ids are not stable identities: organisations swap lineups and
lineups move between organisations. A roster is instead identified by its
players, and a lineup sharing enough players with a known roster is treated
as that roster. Matches are scanned most-recent first so the latest lineup
becomes the identity-defining one.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from domain.common import Event, Match, Player
from domain.ratings.regions import region_of as default_region_of

if TYPE_CHECKING:
    from domain.ratings.seeding import (
        AbsoluteStats,
        Modifiers,
        OpponentStats,
        RelativeStats,
        SeedingModifierCalculator,
    )

REGION_COUNT = 3


@dataclass(frozen=True)
class TeamMatch:
    """One roster's side of one match."""

    roster_id: int
    match_id: int
    team_number: int
    won: bool
    opponent_roster_id: int


@dataclass(frozen=True)
class TeamEvent:
    """A roster's participation in an event under one source team id."""

    event_id: int
    team_id: int
    winnings: float


@dataclass
class Roster:
    roster_id: int
    name: str
    players: tuple[Player, ...]
    region: tuple[bool, ...]
    team_matches: list[TeamMatch] = field(default_factory=list)
    won_matches: list[TeamMatch] = field(default_factory=list)
    events: dict[int, TeamEvent] = field(default_factory=dict)
    absolute: AbsoluteStats | None = None
    relative: RelativeStats | None = None
    opponents: OpponentStats | None = None
    modifiers: Modifiers | None = None
    seed_value: float = 0.0
    seed_rating: float = 0.0
    rating: float = 0.0
    rating_deviation: float = 0.0
    pre_match_ratings: dict[int, float] = field(default_factory=dict)
    global_rank: int | None = None
    regional_ranks: list[int | None] = field(default_factory=lambda: [None] * REGION_COUNT)

    @property
    def player_ids(self) -> frozenset[int]:
        return frozenset(player.player_id for player in self.players)

    @property
    def matches_played(self) -> int:
        return len(self.team_matches)

    @property
    def last_played(self) -> int:
        return -1 if self.absolute is None else self.absolute.last_played

    @property
    def distinct_teams_defeated(self) -> float:
        return 0.0 if self.absolute is None else self.absolute.distinct_teams_defeated

    @property
    def bounty_offered(self) -> float:
        return 0.0 if self.relative is None else self.relative.bounty_offered

    @property
    def own_network(self) -> float:
        return 0.0 if self.relative is None else self.relative.own_network

    @property
    def lan_participation(self) -> float:
        return 0.0 if self.relative is None else self.relative.lan_participation

    @property
    def opponent_bounties(self) -> float:
        return 0.0 if self.opponents is None else self.opponents.opponent_bounties

    @property
    def opponent_network(self) -> float:
        return 0.0 if self.opponents is None else self.opponents.opponent_network

    def shares_roster(self, players: Sequence[Player], threshold: int) -> bool:
        own_ids = self.player_ids
        overlap = sum(1 for player in players if player.player_id in own_ids)
        return overlap >= threshold

    def record_event_participation(self, event: Event, team_id: int) -> None:
        # The source team id only maps to this roster within one event, so
        # the first team id seen for the event is kept.
        if event.event_id in self.events:
            return
        self.events[event.event_id] = TeamEvent(
            event_id=event.event_id,
            team_id=team_id,
            winnings=event.prize_for_team(team_id),
        )

    def accumulate_match(self, team_match: TeamMatch) -> None:
        if team_match.roster_id != self.roster_id:
            raise ValueError(
                f"match_id={team_match.match_id} belongs to roster_id={team_match.roster_id}, "
                f"not roster_id={self.roster_id}"
            )
        self.team_matches.append(team_match)
        if team_match.won:
            self.won_matches.append(team_match)


def plurality_region(
    players: Sequence[Player],
    region_of: Callable[[str], int] = default_region_of,
) -> tuple[bool, ...]:
    """Regions tied for the most players; ties credit every tied region."""
    counts = [0] * REGION_COUNT
    for player in players:
        counts[region_of(player.country_iso)] += 1
    most = max(counts)
    return tuple(count == most for count in counts)


@dataclass(frozen=True)
class ResolvedDataset:
    """Rosters plus matches re-sorted into ascending time order."""

    matches: tuple[Match, ...]
    rosters: list[Roster]
    events: dict[int, Event]

    def matches_by_id(self) -> dict[int, Match]:
        return {
            match.unified_match_id: match
            for match in self.matches
            if match.unified_match_id is not None
        }


class RosterResolver:
    """Merges lineups into rosters and attaches match/event history."""

    def __init__(
        self,
        *,
        overlap_threshold: int = 3,
        region_of: Callable[[str], int] = default_region_of,
        seeding: SeedingModifierCalculator | None = None,
    ) -> None:
        self.overlap_threshold = overlap_threshold
        self.region_of = region_of
        self.seeding = seeding
        self._rosters: list[Roster] = []
        self._rosters_by_player: dict[int, set[int]] = {}

    def _find_roster(self, players: Sequence[Player]) -> Roster | None:
        overlap: Counter[int] = Counter()
        for player in players:
            for roster_id in self._rosters_by_player.get(player.player_id, ()):
                overlap[roster_id] += 1
        matching = [roster_id for roster_id, count in overlap.items() if count >= self.overlap_threshold]
        if not matching:
            return None
        return self._rosters[min(matching)]

    def _insert_roster(self, name: str, players: Sequence[Player]) -> Roster:
        existing = self._find_roster(players)
        if existing is not None:
            return existing

        roster = Roster(
            roster_id=len(self._rosters),
            name=name,
            players=tuple(players),
            region=plurality_region(players, self.region_of),
        )
        self._rosters.append(roster)
        for player_id in roster.player_ids:
            self._rosters_by_player.setdefault(player_id, set()).add(roster.roster_id)
        return roster

    def resolve(self, matches: Sequence[Match], events: Mapping[int, Event]) -> ResolvedDataset:
        self._rosters = []
        self._rosters_by_player = {}

        newest_first = sorted(matches, key=lambda match: match.match_start_time, reverse=True)
        resolved: list[Match] = []
        for unified_match_id, match in enumerate(newest_first):
            team1 = self._insert_roster(match.team1_name, match.team1_players)
            team2 = self._insert_roster(match.team2_name, match.team2_players)

            team1.accumulate_match(
                TeamMatch(
                    roster_id=team1.roster_id,
                    match_id=unified_match_id,
                    team_number=1,
                    won=match.winning_team == 1,
                    opponent_roster_id=team2.roster_id,
                )
            )
            team2.accumulate_match(
                TeamMatch(
                    roster_id=team2.roster_id,
                    match_id=unified_match_id,
                    team_number=2,
                    won=match.winning_team == 2,
                    opponent_roster_id=team1.roster_id,
                )
            )

            event = None if match.event_id is None else events.get(match.event_id)
            if event is not None:
                team1.record_event_participation(event, match.team1_id)
                team2.record_event_participation(event, match.team2_id)

            resolved.append(
                replace(
                    match,
                    unified_match_id=unified_match_id,
                    team1_roster_id=team1.roster_id,
                    team2_roster_id=team2.roster_id,
                )
            )

        oldest_first = tuple(sorted(resolved, key=lambda match: match.match_start_time))
        dataset = ResolvedDataset(matches=oldest_first, rosters=self._rosters, events=dict(events))
        if self.seeding is not None:
            self.seeding.apply(dataset.rosters, dataset.matches_by_id(), dataset.events)
        return dataset


__all__ = [
    "REGION_COUNT",
    "ResolvedDataset",
    "Roster",
    "RosterResolver",
    "TeamEvent",
    "TeamMatch",
    "plurality_region",
]
