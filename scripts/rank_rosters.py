#!/usr/bin/env python3
"""Compute roster standings from a match-data JSON file and optionally store them."""

from __future__ import annotations

import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import create_db_engine, create_session_factory
from domain.common import Event, Match
from domain.pipeline import RankingResult, compute_rankings
from domain.ratings.config import RankingSystemConfig, load_ranking_system_configs
from domain.ratings.dataset import parse_match_data
from domain.ratings.regions import REGION_NAMES
from repositories.standings import STANDINGS_REPOSITORY

DEFAULT_CONFIG_DIR = ROOT_DIR / "configs" / "rankings"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Roster standings jobs.",
)


def _load_match_data(data_path: Path) -> tuple[list[Event], list[Match]]:
    if not data_path.exists():
        raise typer.BadParameter(f"Match data file does not exist: {data_path}", param_hint="--data-path")
    with data_path.open("r", encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"{data_path}: invalid JSON ({exc})", param_hint="--data-path") from exc
    return parse_match_data(payload)


def _print_standings(result: RankingResult, *, system_name: str, top_n: int) -> None:
    ranked = [roster for roster in result.rosters if roster.global_rank is not None]
    typer.echo(
        f"system={system_name} standings={len(result.rosters)} "
        f"globally_ranked={len(ranked)} top_n={top_n}"
    )
    for roster in ranked[:top_n]:
        regions = "/".join(
            name for name, member in zip(REGION_NAMES, roster.region) if member
        )
        players = ", ".join(player.nick for player in roster.players)
        typer.echo(
            f"{roster.global_rank:3d}. {roster.name:<20} "
            f"rating={roster.rating:8.2f} seed={roster.seed_rating:8.2f} "
            f"matches={roster.matches_played:3d} region={regions:<16} players=[{players}]"
        )


def _run_single_system(
    *,
    session_factory,
    system_config: RankingSystemConfig,
    events: list[Event],
    matches: list[Match],
    time_window_end: int | None,
    top_n: int,
) -> None:
    parameters = system_config.parameters
    if time_window_end is not None:
        parameters = replace(parameters, time_window_end=time_window_end)

    result = compute_rankings(events, matches, parameters, echo=typer.echo)
    _print_standings(result, system_name=system_config.name, top_n=top_n)

    if session_factory is None:
        return

    as_of_time = -1 if result.window_end is None else result.window_end
    with session_factory() as session:
        try:
            ranking_system = STANDINGS_REPOSITORY.upsert_system(
                session,
                name=system_config.name,
                description=system_config.description,
                config_json=system_config.as_config_json(),
            )
            ranking_system_id = ranking_system.id
            inserted = STANDINGS_REPOSITORY.replace_standings(
                session,
                result.rosters,
                system_id=ranking_system_id,
                as_of_time=as_of_time,
            )
            session.commit()
        except Exception:
            session.rollback()
            raise

        stored = STANDINGS_REPOSITORY.count_standings(session, system_id=ranking_system_id)
    typer.echo(
        "completed "
        f"config={system_config.file_path.name} "
        f"ranking_system={system_config.name} "
        f"ranking_system_id={ranking_system_id} "
        f"inserted_standings={inserted} "
        f"stored_standings={stored}"
    )


@app.command()
def rank_rosters(
    data_path: Annotated[
        Path,
        typer.Option(
            "--data-path",
            help="JSON file with top-level 'events' and 'matches' arrays.",
        ),
    ],
    config_dir: Annotated[
        Path,
        typer.Option(
            "--config-dir",
            help="Directory containing ranking system TOML config files.",
        ),
    ] = DEFAULT_CONFIG_DIR,
    config_name: Annotated[
        str | None,
        typer.Option(
            "--config-name",
            help="Optional single config filename (for example: default.toml).",
        ),
    ] = None,
    time_window_end: Annotated[
        int | None,
        typer.Option(
            "--time-window-end",
            help="Override the end of the time window (epoch seconds). Defaults to the latest match.",
        ),
    ] = None,
    top_n: Annotated[
        int,
        typer.Option("--top-n", help="Number of ranked rosters to print per system."),
    ] = 20,
    db_url: Annotated[
        str | None,
        typer.Option(
            "--db-url",
            help="Database URL to store the standings in. Omit to only print them.",
        ),
    ] = None,
) -> None:
    """Rank rosters for every config in a directory."""
    if top_n <= 0:
        raise typer.BadParameter("--top-n must be greater than 0")

    configs = load_ranking_system_configs(config_dir)
    if config_name is not None:
        configs = [config for config in configs if config.file_path.name == config_name]
        if not configs:
            raise typer.BadParameter(
                f"No config named '{config_name}' found in {config_dir}",
                param_hint="--config-name",
            )

    events, matches = _load_match_data(data_path)
    typer.echo(
        f"loaded_configs={len(configs)} config_dir={config_dir} "
        f"events={len(events)} matches={len(matches)}"
    )

    session_factory = None
    if db_url is not None:
        engine = create_db_engine(db_url)
        STANDINGS_REPOSITORY.ensure_schema(engine)
        session_factory = create_session_factory(engine)

    for config in configs:
        _run_single_system(
            session_factory=session_factory,
            system_config=config,
            events=events,
            matches=matches,
            time_window_end=time_window_end,
            top_n=top_n,
        )


if __name__ == "__main__":
    app()
