"""Roster-level Glicko logic with per-match information weighting."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from math import log, pi, sqrt
from typing import Final

from domain.common import Match

# A rating gap of 400 points is a 10:1 expected-score ratio.
Q: Final[float] = log(10.0) / 400.0
# RD growth per unit of inactivity; grows from 35 back to 350 in about 100 units.
RD_GROWTH: Final[float] = 34.6
_ONE_OVER_PI_SQUARED: Final[float] = 1.0 / (pi * pi)


@dataclass(frozen=True)
class GlickoParameters:
    starting_rating: float = 1500.0
    starting_rd: float = 350.0
    min_rd: float = 35.0
    max_rd: float = 350.0

    @classmethod
    def fixed_rd(cls, rd: float, starting_rating: float = 1500.0) -> GlickoParameters:
        """RD pinned to one value: only ratings move (Elo-like behaviour)."""
        return cls(starting_rating=starting_rating, starting_rd=rd, min_rd=rd, max_rd=rd)


@dataclass
class RatingState:
    """Mutable (rating, RD) pair plus the pending-adjustment accumulator."""

    rating: float
    rd: float
    pending_rating: float = 0.0
    pending_rd_sq: float = 0.0

    def reset_pending(self) -> None:
        self.pending_rating = 0.0
        self.pending_rd_sq = 0.0


@dataclass(frozen=True)
class MatchRatingDelta:
    """Per-match rating movement for the winning and losing roster."""

    match_id: int
    winner_roster_id: int
    loser_roster_id: int
    information_content: float
    winner_pre_rating: float
    loser_pre_rating: float
    winner_delta: float
    loser_delta: float


def g(rd: float) -> float:
    """Down-weights results against opponents with an uncertain rating."""
    return 1.0 / sqrt(1.0 + 3.0 * Q * Q * rd * rd * _ONE_OVER_PI_SQUARED)


def expected_score(rating: float, opponent_rating: float, opponent_rd: float) -> float:
    return 1.0 / (1.0 + 10.0 ** ((g(opponent_rd) * (rating - opponent_rating)) / -400.0))


class GlickoRatingEngine:
    """Sequential Glicko updates keyed by roster id.

    Ratings are order dependent: every match must be fed in ascending
    start time.
    """

    def __init__(self, params: GlickoParameters) -> None:
        if params.min_rd > params.max_rd:
            raise ValueError("min_rd must be <= max_rd")
        self.params = params
        self._states: dict[int, RatingState] = {}
        self.history: list[MatchRatingDelta] = []

    def clamp_rd(self, rd: float) -> float:
        return max(self.params.min_rd, min(self.params.max_rd, rd))

    def add_roster(self, roster_id: int, rating: float | None = None, rd: float | None = None) -> RatingState:
        state = RatingState(
            rating=self.params.starting_rating if rating is None else rating,
            rd=self.clamp_rd(self.params.starting_rd if rd is None else rd),
        )
        self._states[roster_id] = state
        return state

    def state(self, roster_id: int) -> RatingState:
        existing = self._states.get(roster_id)
        if existing is not None:
            return existing
        return self.add_roster(roster_id)

    def get_rating(self, roster_id: int) -> float:
        return self.state(roster_id).rating

    def get_rd(self, roster_id: int) -> float:
        return self.state(roster_id).rd

    def tracked_entity_count(self) -> int:
        return len(self._states)

    def ratings(self) -> dict[int, float]:
        return {roster_id: state.rating for roster_id, state in self._states.items()}

    def decay_rd(self, roster_id: int, periods: float) -> None:
        """Grow RD after ``periods`` units without an observation."""
        state = self.state(roster_id)
        state.rd = self.clamp_rd(sqrt(state.rd * state.rd + RD_GROWTH * RD_GROWTH * periods))

    def _add_pending(self, state: RatingState, opponent: RatingState, score: float, information: float) -> None:
        g_term = g(opponent.rd)
        expected = expected_score(state.rating, opponent.rating, opponent.rd)
        state.pending_rd_sq += g_term * g_term * expected * (1.0 - expected) * information * information
        state.pending_rating += g_term * (score - expected) * information

    def _apply_pending(self, state: RatingState) -> None:
        adjusted_rd_sq = 1.0 / (1.0 / (state.rd * state.rd) + Q * Q * state.pending_rd_sq)
        state.rating += Q * adjusted_rd_sq * state.pending_rating
        state.rd = self.clamp_rd(sqrt(adjusted_rd_sq))
        state.reset_pending()

    def incremental_match(self, winner_id: int, loser_id: int, information_content: float = 1.0) -> None:
        """Queue one result; call ``finalize_matches`` to commit a batch."""
        winner = self.state(winner_id)
        loser = self.state(loser_id)
        self._add_pending(winner, loser, 1.0, information_content)
        self._add_pending(loser, winner, 0.0, information_content)

    def finalize_matches(self, roster_ids: Iterable[int]) -> None:
        for roster_id in roster_ids:
            self._apply_pending(self.state(roster_id))

    def single_match(self, winner_id: int, loser_id: int, information_content: float = 1.0) -> tuple[float, float]:
        """Apply one result immediately and return (winner_delta, loser_delta)."""
        winner_pre = self.get_rating(winner_id)
        loser_pre = self.get_rating(loser_id)
        self.incremental_match(winner_id, loser_id, information_content)
        self.finalize_matches([winner_id, loser_id])
        return self.get_rating(winner_id) - winner_pre, self.get_rating(loser_id) - loser_pre

    def process_match(self, match: Match) -> MatchRatingDelta:
        if match.team1_roster_id is None or match.team2_roster_id is None:
            raise ValueError(
                f"match at matchStartTime={match.match_start_time} has no resolved rosters"
            )
        if match.winning_team not in (1, 2):
            raise ValueError(f"winning_team={match.winning_team} must be 1 or 2")

        if match.winning_team == 1:
            winner_id, loser_id = match.team1_roster_id, match.team2_roster_id
        else:
            winner_id, loser_id = match.team2_roster_id, match.team1_roster_id

        information = 1.0 if match.information_content is None else match.information_content
        winner_pre = self.get_rating(winner_id)
        loser_pre = self.get_rating(loser_id)
        winner_delta, loser_delta = self.single_match(winner_id, loser_id, information)
        delta = MatchRatingDelta(
            match_id=-1 if match.unified_match_id is None else match.unified_match_id,
            winner_roster_id=winner_id,
            loser_roster_id=loser_id,
            information_content=information,
            winner_pre_rating=winner_pre,
            loser_pre_rating=loser_pre,
            winner_delta=winner_delta,
            loser_delta=loser_delta,
        )
        self.history.append(delta)
        return delta

    def run(self, matches: Sequence[Match]) -> tuple[Match, ...]:
        """Process matches in order and return them annotated with deltas."""
        previous_time: int | None = None
        annotated: list[Match] = []
        for match in matches:
            if previous_time is not None and match.match_start_time < previous_time:
                raise ValueError(
                    f"matches must be in ascending time order; {match.match_start_time} "
                    f"follows {previous_time}"
                )
            previous_time = match.match_start_time
            delta = self.process_match(match)
            annotated.append(
                replace(
                    match,
                    winner_rating_delta=delta.winner_delta,
                    loser_rating_delta=delta.loser_delta,
                )
            )
        return tuple(annotated)

    def seed(self, ratings: Mapping[int, float]) -> None:
        for roster_id, rating in ratings.items():
            self.add_roster(roster_id, rating=rating)


__all__ = [
    "GlickoParameters",
    "GlickoRatingEngine",
    "MatchRatingDelta",
    "Q",
    "RD_GROWTH",
    "RatingState",
    "expected_score",
    "g",
]
