"""Final global and regional standings."""

from __future__ import annotations

from collections.abc import Iterable

from domain.ratings.rosters import REGION_COUNT, Roster


class RankingAssigner:
    """Orders rosters by rating and hands out dense ranks.

    Rosters that never beat anyone are dropped from the standings. Only
    rosters with at least ``min_matches`` matches receive a global or
    regional rank; the others stay listed but unranked.
    """

    def __init__(self, *, min_matches: int = 10) -> None:
        self.min_matches = min_matches

    def assign(self, rosters: Iterable[Roster]) -> list[Roster]:
        standings = [roster for roster in rosters if roster.distinct_teams_defeated > 0.0]
        # Equal ratings fall back to roster id so output never depends on input order.
        standings.sort(key=lambda roster: (-roster.rating, roster.roster_id))

        for roster in standings:
            roster.global_rank = None
            roster.regional_ranks = [None] * REGION_COUNT

        qualified = [roster for roster in standings if roster.matches_played >= self.min_matches]
        for rank, roster in enumerate(qualified, start=1):
            roster.global_rank = rank

        for region in range(REGION_COUNT):
            regional = [roster for roster in qualified if roster.region[region]]
            for rank, roster in enumerate(regional, start=1):
                roster.regional_ranks[region] = rank

        return standings


__all__ = ["RankingAssigner"]
