"""End-to-end ranking run: dataset in, ranked roster list out."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from domain.common import Event, Match
from domain.ratings.config import RankingParameters, validate_parameters
from domain.ratings.context import RankingContext
from domain.ratings.dataset import DatasetIngestor
from domain.ratings.glicko.calculator import GlickoParameters, GlickoRatingEngine
from domain.ratings.regions import region_of as default_region_of
from domain.ratings.rosters import Roster, RosterResolver
from domain.ratings.seeding import SeedingModifierCalculator, seed_ratings
from domain.ratings.standings import RankingAssigner


@dataclass(frozen=True)
class RankingResult:
    """Output of one ranking run.

    ``matches`` are in ascending time order with every derived field set;
    ``rosters`` holds the standings (rosters with at least one win) ordered
    by descending rating; ``all_rosters`` holds every resolved roster by id.
    """

    matches: tuple[Match, ...]
    rosters: list[Roster]
    all_rosters: list[Roster]
    events: dict[int, Event]
    window_start: int | None
    window_end: int | None


def compute_rankings(
    events: Iterable[Event],
    matches: Iterable[Match],
    parameters: RankingParameters | None = None,
    *,
    region_of: Callable[[str], int] = default_region_of,
    echo: Callable[[str], None] | None = None,
) -> RankingResult:
    """Run ingestion, roster resolution, seeding, rating and ranking."""
    params = RankingParameters() if parameters is None else parameters
    validate_parameters(params)

    context = RankingContext(
        outlier_rank=params.outlier_rank,
        decay_exponent=params.decay_exponent,
        high_value_event_modifier=params.high_value_event_modifier,
    )

    dataset = DatasetIngestor(context, params, echo=echo).ingest(events, matches)

    seeding = SeedingModifierCalculator(
        context,
        bucket_size=params.bucket_size,
        prize_pool_ceiling=params.prize_pool_ceiling,
    )
    resolver = RosterResolver(
        overlap_threshold=params.roster_overlap,
        region_of=region_of,
        seeding=seeding,
    )
    resolved = resolver.resolve(dataset.matches, dataset.events)
    rosters = resolved.rosters
    if echo is not None:
        echo(f"resolved rosters={len(rosters)} matches={len(resolved.matches)}")

    seed_ratings(
        rosters,
        params.seed_weights,
        min_rating=params.min_seed_rating,
        max_rating=params.max_seed_rating,
    )
    if echo is not None and rosters:
        echo(
            "seeded "
            f"rosters={len(rosters)} "
            f"min_seed={min(roster.seed_rating for roster in rosters):.2f} "
            f"max_seed={max(roster.seed_rating for roster in rosters):.2f}"
        )

    engine = GlickoRatingEngine(GlickoParameters.fixed_rd(params.starting_rating_deviation))
    engine.seed({roster.roster_id: roster.seed_rating for roster in rosters})
    rated_matches = engine.run(resolved.matches)
    for roster in rosters:
        roster.rating = engine.get_rating(roster.roster_id)
        roster.rating_deviation = engine.get_rd(roster.roster_id)
    for delta in engine.history:
        rosters[delta.winner_roster_id].pre_match_ratings[delta.match_id] = delta.winner_pre_rating
        rosters[delta.loser_roster_id].pre_match_ratings[delta.match_id] = delta.loser_pre_rating
    if echo is not None:
        echo(f"rated matches={len(rated_matches)} tracked_rosters={engine.tracked_entity_count()}")

    standings = RankingAssigner(min_matches=params.min_matches_for_rank).assign(rosters)
    if echo is not None:
        globally_ranked = sum(1 for roster in standings if roster.global_rank is not None)
        echo(f"ranked standings={len(standings)} globally_ranked={globally_ranked}")

    return RankingResult(
        matches=rated_matches,
        rosters=standings,
        all_rosters=rosters,
        events=resolved.events,
        window_start=dataset.window_start,
        window_end=dataset.window_end,
    )


__all__ = ["RankingResult", "compute_rankings"]
