#!/usr/bin/env python3
"""Show stored roster standings for one ranking system, globally or per region."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL, create_db_engine, create_session_factory
from repositories.standings import REGION_RANK_COLUMNS, STANDINGS_REPOSITORY

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Query stored roster standings by system.",
)


@app.command()
def show_roster_standings(
    system_name: Annotated[
        str,
        typer.Option(
            "--system-name",
            help="Ranking system name from ranking_systems.name.",
        ),
    ] = "roster_standings_default",
    top_n: Annotated[
        int,
        typer.Option("--top-n", help="Number of rosters to return."),
    ] = 20,
    region: Annotated[
        str | None,
        typer.Option(
            "--region",
            help=f"Regional standings instead of global: {', '.join(sorted(REGION_RANK_COLUMNS))}.",
        ),
    ] = None,
    db_url: Annotated[
        str,
        typer.Option("--db-url", help="Database URL holding the stored standings."),
    ] = DEFAULT_DB_URL,
) -> None:
    """Print the top stored rosters by rank."""
    if top_n <= 0:
        raise typer.BadParameter("--top-n must be greater than 0")
    if region is not None and region.lower() not in REGION_RANK_COLUMNS:
        raise typer.BadParameter(
            f"Unknown region '{region}'. Available: {', '.join(sorted(REGION_RANK_COLUMNS))}",
            param_hint="--region",
        )

    engine = create_db_engine(db_url)
    session_factory = create_session_factory(engine)
    with session_factory() as session:
        rows = STANDINGS_REPOSITORY.fetch_top(
            session,
            system_name=system_name,
            top_n=top_n,
            region=region,
        )

    scope = "global" if region is None else region.lower()
    if not rows:
        typer.echo(f"No ranked rosters found for system '{system_name}' scope={scope}.")
        return

    typer.echo(f"system={system_name} scope={scope} top_n={top_n}")
    for row in rows:
        typer.echo(
            f"{row.rank:3d}. {row.name:<20} "
            f"rating={row.rating:8.2f} matches={row.matches_played:3d} "
            f"players=[{', '.join(row.players)}]"
        )


if __name__ == "__main__":
    app()
