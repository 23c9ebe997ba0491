"""Ranking parameters and TOML ranking-system definitions."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Final

from domain.config_base import BaseSystemConfig, load_system_configs, parse_system_section

SECONDS_PER_DAY: Final[int] = 86_400
DEFAULT_LOOKBACK_DAYS: Final[int] = 6 * 30
DEFAULT_GRACE_PERIOD_DAYS: Final[int] = 30
RANKED_ERA_CUTOFF: Final[int] = 1_735_689_600


@dataclass(frozen=True)
class SeedWeights:
    """Per-modifier weight in the seed average."""

    bounty_collected: float = 1.0
    bounty_offered: float = 1.0
    opponent_network: float = 1.0
    own_network: float = 0.0
    lan_factor: float = 1.0

    def items(self) -> list[tuple[str, float]]:
        return list(asdict(self).items())


@dataclass(frozen=True)
class RankingParameters:
    """Every tunable of one ranking run."""

    outlier_rank: int = 5
    decay_exponent: float = 1.0
    high_value_event_modifier: float = 1.0
    time_window_end: int = -1
    time_window_seconds: int = DEFAULT_LOOKBACK_DAYS * SECONDS_PER_DAY
    grace_period_seconds: int = DEFAULT_GRACE_PERIOD_DAYS * SECONDS_PER_DAY
    ranked_cutoff: int = RANKED_ERA_CUTOFF
    showmatch_token: str = "showmatch"
    roster_overlap: int = 3
    bucket_size: int = 10
    prize_pool_ceiling: float = 1_000_000.0
    min_seed_rating: float = 400.0
    max_seed_rating: float = 2000.0
    min_matches_for_rank: int = 10
    starting_rating_deviation: float = 75.0
    seed_weights: SeedWeights = field(default_factory=SeedWeights)


@dataclass(frozen=True)
class RankingSystemConfig(BaseSystemConfig):
    """One named ranking system loaded from ``configs/rankings``."""

    parameters: RankingParameters

    def as_config_json(self) -> dict[str, Any]:
        payload = asdict(self.parameters)
        payload["lookback_days"] = self.lookback_days
        return payload


def load_ranking_system_configs(config_dir: Path) -> list[RankingSystemConfig]:
    """Load and validate all ranking-system TOML files in a directory."""
    return load_system_configs(
        config_dir,
        _parse_ranking_system_config,
        duplicate_name_label="ranking",
    )


def _parse_ranking_system_config(raw: dict[str, Any], file_path: Path) -> RankingSystemConfig:
    system = parse_system_section(raw, file_path, default_lookback_days=DEFAULT_LOOKBACK_DAYS)
    ranking_raw = raw.get("ranking", {})
    weights_raw = raw.get("seed_weights", {})

    defaults = RankingParameters()
    default_weights = defaults.seed_weights
    weights = SeedWeights(
        bounty_collected=float(weights_raw.get("bounty_collected", default_weights.bounty_collected)),
        bounty_offered=float(weights_raw.get("bounty_offered", default_weights.bounty_offered)),
        opponent_network=float(weights_raw.get("opponent_network", default_weights.opponent_network)),
        own_network=float(weights_raw.get("own_network", default_weights.own_network)),
        lan_factor=float(weights_raw.get("lan_factor", default_weights.lan_factor)),
    )
    grace_period_days = float(ranking_raw.get("grace_period_days", DEFAULT_GRACE_PERIOD_DAYS))

    parameters = RankingParameters(
        outlier_rank=int(ranking_raw.get("outlier_rank", defaults.outlier_rank)),
        decay_exponent=float(ranking_raw.get("decay_exponent", defaults.decay_exponent)),
        high_value_event_modifier=float(
            ranking_raw.get("high_value_event_modifier", defaults.high_value_event_modifier)
        ),
        time_window_end=int(ranking_raw.get("time_window_end", defaults.time_window_end)),
        time_window_seconds=system.lookback_days * SECONDS_PER_DAY,
        grace_period_seconds=int(grace_period_days * SECONDS_PER_DAY),
        ranked_cutoff=int(ranking_raw.get("ranked_cutoff", defaults.ranked_cutoff)),
        showmatch_token=str(ranking_raw.get("showmatch_token", defaults.showmatch_token)),
        roster_overlap=int(ranking_raw.get("roster_overlap", defaults.roster_overlap)),
        bucket_size=int(ranking_raw.get("bucket_size", defaults.bucket_size)),
        prize_pool_ceiling=float(ranking_raw.get("prize_pool_ceiling", defaults.prize_pool_ceiling)),
        min_seed_rating=float(ranking_raw.get("min_seed_rating", defaults.min_seed_rating)),
        max_seed_rating=float(ranking_raw.get("max_seed_rating", defaults.max_seed_rating)),
        min_matches_for_rank=int(
            ranking_raw.get("min_matches_for_rank", defaults.min_matches_for_rank)
        ),
        starting_rating_deviation=float(
            ranking_raw.get("starting_rating_deviation", defaults.starting_rating_deviation)
        ),
        seed_weights=weights,
    )
    validate_parameters(parameters, source=str(file_path))

    return RankingSystemConfig(
        name=system.name,
        description=system.description,
        file_path=file_path,
        lookback_days=system.lookback_days,
        parameters=parameters,
    )


def validate_parameters(parameters: RankingParameters, *, source: str = "parameters") -> None:
    """Raise ``ValueError`` on the first out-of-range parameter."""
    if parameters.outlier_rank < 1:
        raise ValueError(f"{source}: [ranking].outlier_rank must be >= 1")
    if parameters.decay_exponent <= 0.0:
        raise ValueError(f"{source}: [ranking].decay_exponent must be > 0")
    if parameters.high_value_event_modifier <= 0.0:
        raise ValueError(f"{source}: [ranking].high_value_event_modifier must be > 0")
    if parameters.time_window_seconds <= 0:
        raise ValueError(f"{source}: [system].lookback_days must be > 0")
    if parameters.grace_period_seconds < 0:
        raise ValueError(f"{source}: [ranking].grace_period_days must be >= 0")
    if not parameters.showmatch_token:
        raise ValueError(f"{source}: [ranking].showmatch_token must not be empty")
    if not 1 <= parameters.roster_overlap <= 5:
        raise ValueError(f"{source}: [ranking].roster_overlap must be between 1 and 5")
    if parameters.bucket_size < 1:
        raise ValueError(f"{source}: [ranking].bucket_size must be >= 1")
    if parameters.prize_pool_ceiling <= 0.0:
        raise ValueError(f"{source}: [ranking].prize_pool_ceiling must be > 0")
    if parameters.min_seed_rating >= parameters.max_seed_rating:
        raise ValueError(f"{source}: [ranking].min_seed_rating must be < max_seed_rating")
    if parameters.min_matches_for_rank < 0:
        raise ValueError(f"{source}: [ranking].min_matches_for_rank must be >= 0")
    if parameters.starting_rating_deviation <= 0.0:
        raise ValueError(f"{source}: [ranking].starting_rating_deviation must be > 0")
    for factor, weight in parameters.seed_weights.items():
        if weight < 0.0:
            raise ValueError(f"{source}: [seed_weights].{factor} must be >= 0")


__all__ = [
    "RankingParameters",
    "RankingSystemConfig",
    "SeedWeights",
    "load_ranking_system_configs",
    "validate_parameters",
]
