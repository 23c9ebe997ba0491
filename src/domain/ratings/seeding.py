"""Pre-rating seed strength from historical prestige.

Seeding runs in phases over the full roster set:

1. absolute stats per roster (winnings, distinct opponents beaten, LAN wins),
2. relative stats, normalised against the Nth-best roster so a single
   outlier cannot dominate,
3. opponent stats, crediting wins over rosters that are themselves
   prestigious,

and finally folds the results into five modifiers. Each phase produces an
immutable snapshot stored on the roster.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from math import log10
from typing import Final

from domain.common import Event, Match
from domain.ratings.config import SeedWeights
from domain.ratings.context import RankingContext, remap_value_clamped
from domain.ratings.rosters import Roster

DEFAULT_BUCKET_SIZE: Final[int] = 10
DEFAULT_PRIZE_POOL_CEILING: Final[float] = 1_000_000.0


@dataclass(frozen=True)
class BucketEntry:
    """One scored result competing for a slot in a top-N bucket."""

    id: int
    context: float
    base: float
    val: float


@dataclass(frozen=True)
class AbsoluteStats:
    matches_played: int
    last_played: int
    distinct_teams_defeated: float
    scaled_lan_wins: float
    scaled_winnings: float
    lan_wins: tuple[BucketEntry, ...] = ()
    winnings: tuple[BucketEntry, ...] = ()


@dataclass(frozen=True)
class RelativeStats:
    bounty_offered: float
    own_network: float
    lan_participation: float


@dataclass(frozen=True)
class OpponentStats:
    opponent_bounties: float
    opponent_network: float
    bounties: tuple[BucketEntry, ...] = ()
    network: tuple[BucketEntry, ...] = ()


@dataclass(frozen=True)
class Modifiers:
    bounty_collected: float
    bounty_offered: float
    opponent_network: float
    own_network: float
    lan_factor: float


@dataclass(frozen=True)
class ReferenceValues:
    """Nth-highest values used as normalisation denominators."""

    winnings: float
    distinct_teams_defeated: float
    lan_wins: float


def nth_highest(values: Iterable[float], nth: int) -> float:
    """Return the ``nth`` (1-based) largest value, or the smallest if fewer exist."""
    if nth < 1:
        raise ValueError("nth must be >= 1")
    ordered = sorted(values, reverse=True)
    if not ordered:
        raise ValueError("cannot take the nth highest value of an empty sequence")
    return ordered[min(nth, len(ordered)) - 1]


def curve(x: float) -> float:
    """Compress towards 0 on both sides of 1: ``1 / (1 + |log10(x)|)``."""
    if x <= 0.0:
        return 0.0
    return 1.0 / (1.0 + abs(log10(x)))


def power(x: float) -> float:
    return x


def top_bucket(entries: Iterable[BucketEntry], size: int) -> tuple[BucketEntry, ...]:
    return tuple(sorted(entries, key=lambda entry: entry.val, reverse=True)[:size])


def _bucket_total(entries: Sequence[BucketEntry]) -> float:
    return sum(entry.val for entry in entries)


def _relative(value: float, reference: float) -> float:
    if reference <= 0.0:
        return 0.0
    return min(value / reference, 1.0)


class SeedingModifierCalculator:
    """Computes per-roster seeding snapshots for a complete roster set."""

    def __init__(
        self,
        context: RankingContext,
        *,
        bucket_size: int = DEFAULT_BUCKET_SIZE,
        prize_pool_ceiling: float = DEFAULT_PRIZE_POOL_CEILING,
    ) -> None:
        if bucket_size < 1:
            raise ValueError("bucket_size must be >= 1")
        self.context = context
        self.bucket_size = bucket_size
        self.prize_pool_ceiling = prize_pool_ceiling

    def _participation_event(
        self,
        roster: Roster,
        match: Match,
        events: Mapping[int, Event],
    ) -> Event | None:
        if match.event_id is None or match.event_id not in roster.events:
            return None
        return events.get(match.event_id)

    def absolute_stats(
        self,
        roster: Roster,
        matches: Mapping[int, Match],
        events: Mapping[int, Event],
    ) -> AbsoluteStats:
        decay = self.context.decay

        last_win_by_opponent: dict[int, int] = {}
        lan_wins: list[BucketEntry] = []
        for won in roster.won_matches:
            match = matches[won.match_id]
            match_time = match.match_start_time
            previous = last_win_by_opponent.get(won.opponent_roster_id)
            if previous is None or previous < match_time:
                last_win_by_opponent[won.opponent_roster_id] = match_time

            event = self._participation_event(roster, match, events)
            lan = 1.0 if event is not None and event.lan else 0.0
            timestamp_modifier = decay(match_time)
            lan_wins.append(
                BucketEntry(
                    id=won.match_id,
                    context=timestamp_modifier,
                    base=lan,
                    val=lan * timestamp_modifier,
                )
            )

        distinct_teams_defeated = sum(decay(win_time) for win_time in last_win_by_opponent.values())
        top_lan_wins = top_bucket(lan_wins, self.bucket_size)

        winnings: list[BucketEntry] = []
        for team_event in roster.events.values():
            event = events.get(team_event.event_id)
            if event is None or team_event.winnings <= 0.0:
                continue
            age = decay(event.last_match_time)
            winnings.append(
                BucketEntry(
                    id=event.event_id,
                    context=age,
                    base=team_event.winnings,
                    val=team_event.winnings * age,
                )
            )
        top_winnings = top_bucket(winnings, self.bucket_size)

        return AbsoluteStats(
            matches_played=len(roster.team_matches),
            last_played=max(
                (matches[team_match.match_id].match_start_time for team_match in roster.team_matches),
                default=-1,
            ),
            distinct_teams_defeated=distinct_teams_defeated,
            # A part-filled bucket still divides by its full size.
            scaled_lan_wins=_bucket_total(top_lan_wins) / self.bucket_size,
            scaled_winnings=_bucket_total(top_winnings),
            lan_wins=top_lan_wins,
            winnings=top_winnings,
        )

    def reference_values(self, absolutes: Sequence[AbsoluteStats]) -> ReferenceValues:
        nth = self.context.outlier_rank
        return ReferenceValues(
            winnings=nth_highest((stats.scaled_winnings for stats in absolutes), nth),
            distinct_teams_defeated=nth_highest(
                (stats.distinct_teams_defeated for stats in absolutes), nth
            ),
            lan_wins=nth_highest((stats.scaled_lan_wins for stats in absolutes), nth),
        )

    def relative_stats(self, absolute: AbsoluteStats, references: ReferenceValues) -> RelativeStats:
        return RelativeStats(
            bounty_offered=_relative(absolute.scaled_winnings, references.winnings),
            own_network=_relative(absolute.distinct_teams_defeated, references.distinct_teams_defeated),
            lan_participation=_relative(absolute.scaled_lan_wins, references.lan_wins),
        )

    def _stakes(self, roster: Roster, match: Match, events: Mapping[int, Event]) -> float | None:
        event = self._participation_event(roster, match, events)
        if event is None:
            return None
        prize_pool = max(1.0, event.prize_pool)
        return curve(min(prize_pool / self.prize_pool_ceiling, 1.0))

    def opponent_stats(
        self,
        roster: Roster,
        relatives: Mapping[int, RelativeStats],
        matches: Mapping[int, Match],
        events: Mapping[int, Event],
    ) -> OpponentStats:
        bounties: list[BucketEntry] = []
        network: list[BucketEntry] = []
        for won in roster.won_matches:
            match = matches[won.match_id]
            stakes = self._stakes(roster, match, events)
            if stakes is None:
                continue
            match_context = self.context.decay(match.match_start_time) * stakes
            opponent = relatives[won.opponent_roster_id]
            bounties.append(
                BucketEntry(
                    id=won.match_id,
                    context=stakes,
                    base=opponent.bounty_offered,
                    val=opponent.bounty_offered * match_context,
                )
            )
            network.append(
                BucketEntry(
                    id=won.match_id,
                    context=stakes,
                    base=opponent.own_network,
                    val=opponent.own_network * match_context,
                )
            )

        top_bounties = top_bucket(bounties, self.bucket_size)
        top_network = top_bucket(network, self.bucket_size)
        return OpponentStats(
            opponent_bounties=_bucket_total(top_bounties) / self.bucket_size,
            opponent_network=_bucket_total(top_network) / self.bucket_size,
            bounties=top_bounties,
            network=top_network,
        )

    @staticmethod
    def modifiers(relative: RelativeStats, opponents: OpponentStats) -> Modifiers:
        return Modifiers(
            bounty_collected=curve(opponents.opponent_bounties),
            bounty_offered=curve(relative.bounty_offered),
            opponent_network=power(opponents.opponent_network),
            own_network=power(relative.own_network),
            lan_factor=power(relative.lan_participation),
        )

    def apply(
        self,
        rosters: Sequence[Roster],
        matches: Mapping[int, Match],
        events: Mapping[int, Event],
    ) -> None:
        """Run every phase and store the snapshots on each roster."""
        if not rosters:
            return

        absolutes = [self.absolute_stats(roster, matches, events) for roster in rosters]
        references = self.reference_values(absolutes)
        relatives = {
            roster.roster_id: self.relative_stats(absolute, references)
            for roster, absolute in zip(rosters, absolutes)
        }
        for roster, absolute in zip(rosters, absolutes):
            relative = relatives[roster.roster_id]
            opponents = self.opponent_stats(roster, relatives, matches, events)
            roster.absolute = absolute
            roster.relative = relative
            roster.opponents = opponents
            roster.modifiers = self.modifiers(relative, opponents)


def seed_value(modifiers: Modifiers, weights: SeedWeights) -> float:
    """Weighted average of the seed modifiers."""
    total_weight = 0.0
    weighted = 0.0
    for factor, weight in weights.items():
        total_weight += weight
        weighted += weight * getattr(modifiers, factor)
    if total_weight == 0.0:
        total_weight = 1.0
    return weighted / total_weight


def seed_ratings(
    rosters: Sequence[Roster],
    weights: SeedWeights,
    *,
    min_rating: float = 400.0,
    max_rating: float = 2000.0,
) -> None:
    """Map every roster's seed value onto ``[min_rating, max_rating]``."""
    if not rosters:
        return

    for roster in rosters:
        if roster.modifiers is None:
            raise ValueError(f"roster_id={roster.roster_id} has no seeding modifiers")
        roster.seed_value = seed_value(roster.modifiers, weights)

    lowest = min(roster.seed_value for roster in rosters)
    highest = max(roster.seed_value for roster in rosters)
    for roster in rosters:
        roster.seed_rating = remap_value_clamped(
            roster.seed_value,
            lowest,
            highest,
            min_rating,
            max_rating,
        )
        roster.rating = roster.seed_rating


__all__ = [
    "AbsoluteStats",
    "BucketEntry",
    "Modifiers",
    "OpponentStats",
    "ReferenceValues",
    "RelativeStats",
    "SeedingModifierCalculator",
    "curve",
    "nth_highest",
    "power",
    "seed_ratings",
    "seed_value",
    "top_bucket",
]
