"""End-to-end tests for ``compute_rankings``."""

from __future__ import annotations

from typing import Any

import pytest

from domain.common import Event, Match
from domain.pipeline import compute_rankings
from domain.ratings.config import SECONDS_PER_DAY, RankingParameters
from domain.ratings.dataset import parse_match_data
from domain.ratings.seeding import curve

DAY = SECONDS_PER_DAY
END = 1_700_000_000

LINEUPS: dict[str, tuple[int, str, int]] = {
    # name: (team id, country, first player id)
    "Alpha": (100, "DK", 1),
    "Bravo": (200, "SE", 6),
    "Charlie": (300, "BR", 11),
    "Delta": (400, "CN", 16),
}


def _raw_players(name: str) -> list[dict[str, Any]]:
    _, country, first = LINEUPS[name]
    return [
        {"playerId": first + offset, "nick": f"{name.lower()}{offset}", "countryIso": country}
        for offset in range(5)
    ]


def _raw_match(start_time: int, winner: str, loser: str, event_id: int | None) -> dict[str, Any]:
    return {
        "matchStartTime": start_time,
        "team1Id": LINEUPS[winner][0],
        "team2Id": LINEUPS[loser][0],
        "team1Name": winner,
        "team2Name": loser,
        "eventId": event_id,
        "team1Players": _raw_players(winner),
        "team2Players": _raw_players(loser),
        "winningTeam": 1,
    }


def _dataset() -> tuple[list[Event], list[Match]]:
    payload = {
        "events": [
            {
                "eventId": 1,
                "eventName": "Major Finals",
                "prizePool": "$1,000,000",
                "lan": True,
                "prizeDistribution": [
                    {"teamId": 100, "placement": 1, "prize": 500000},
                    {"teamId": 200, "placement": 2, "prize": 200000},
                ],
            },
            {
                "eventId": 2,
                "eventName": "Online League",
                "prizePool": "$100,000",
                "lan": False,
                "prizeDistribution": [{"teamId": 300, "placement": 1, "prize": 50000}],
            },
            {"eventId": 3, "eventName": "Charity Showmatch", "prizePool": "$0", "lan": True},
        ],
        "matches": [
            _raw_match(END - 5 * DAY, "Alpha", "Bravo", 1),
            _raw_match(END - 4 * DAY, "Alpha", "Charlie", 1),
            _raw_match(END - 3 * DAY, "Bravo", "Delta", 1),
            _raw_match(END - 2 * DAY, "Charlie", "Delta", 2),
            _raw_match(END - 1 * DAY, "Alpha", "Delta", 2),
            _raw_match(END - 12 * 60 * 60, "Delta", "Alpha", 3),
            # Older than the six-month window.
            _raw_match(END - 400 * DAY, "Delta", "Alpha", 2),
        ],
    }
    return parse_match_data(payload)


# Four rosters only: normalise against the 2nd best instead of the 5th.
PARAMETERS = RankingParameters(outlier_rank=2, min_matches_for_rank=2)


def test_seed_ratings_follow_prestige() -> None:
    events, matches = _dataset()
    result = compute_rankings(events, matches, PARAMETERS)
    rosters = {roster.name: roster for roster in result.all_rosters}

    # Every kept match sits inside the 30-day grace plateau, so nothing decays.
    assert [match.information_content for match in result.matches] == [1.0] * 5

    alpha_seed_value = (curve(0.125) + 1.0 + 0.2 + 1.0) / 4.0
    assert rosters["Alpha"].seed_value == pytest.approx(alpha_seed_value)
    assert rosters["Bravo"].seed_value == pytest.approx(0.5)
    assert rosters["Charlie"].seed_value == pytest.approx(curve(0.25) / 4.0)
    assert rosters["Delta"].seed_value == 0.0

    assert rosters["Alpha"].seed_rating == pytest.approx(2000.0)
    assert rosters["Delta"].seed_rating == pytest.approx(400.0)
    assert rosters["Bravo"].seed_rating == pytest.approx(400.0 + 1600.0 * 0.5 / alpha_seed_value)
    assert rosters["Charlie"].seed_rating == pytest.approx(
        400.0 + 1600.0 * (curve(0.25) / 4.0) / alpha_seed_value
    )

    alpha = rosters["Alpha"]
    assert alpha.bounty_offered == pytest.approx(1.0)
    assert rosters["Charlie"].bounty_offered == pytest.approx(0.25)
    assert alpha.opponent_bounties == pytest.approx(0.125)
    assert alpha.opponent_network == pytest.approx(0.2)
    assert alpha.lan_participation == pytest.approx(1.0)
    assert alpha.distinct_teams_defeated == pytest.approx(3.0)


def test_rosters_ids_and_match_ids() -> None:
    events, matches = _dataset()
    result = compute_rankings(events, matches, PARAMETERS)

    assert [roster.name for roster in result.all_rosters] == ["Alpha", "Delta", "Charlie", "Bravo"]
    assert [match.unified_match_id for match in result.matches] == [4, 3, 2, 1, 0]
    assert [match.match_start_time for match in result.matches] == sorted(
        match.match_start_time for match in result.matches
    )
    assert result.window_end == END - 12 * 60 * 60
    assert result.window_start == END - 12 * 60 * 60 - 180 * DAY
    # The showmatch is filtered out but still moves its event's last match time.
    assert result.events[3].last_match_time == END - 12 * 60 * 60


def test_ratings_and_standings() -> None:
    events, matches = _dataset()
    result = compute_rankings(events, matches, PARAMETERS)
    rosters = {roster.name: roster for roster in result.all_rosters}

    # Delta never won, so it is not part of the standings.
    assert [roster.name for roster in result.rosters] == ["Alpha", "Bravo", "Charlie"]
    assert [roster.global_rank for roster in result.rosters] == [1, 2, 3]
    assert rosters["Delta"].global_rank is None

    assert rosters["Alpha"].regional_ranks == [1, None, None]
    assert rosters["Bravo"].regional_ranks == [2, None, None]
    assert rosters["Charlie"].regional_ranks == [None, 1, None]

    assert rosters["Alpha"].rating > rosters["Alpha"].seed_rating
    assert rosters["Delta"].rating < rosters["Delta"].seed_rating
    assert all(roster.rating_deviation == pytest.approx(75.0) for roster in result.all_rosters)

    # Equal fixed RD on both sides makes every update zero-sum.
    for match in result.matches:
        assert match.winner_rating_delta is not None
        assert match.winner_rating_delta == pytest.approx(-match.loser_rating_delta)
    assert sum(roster.rating for roster in result.all_rosters) == pytest.approx(
        sum(roster.seed_rating for roster in result.all_rosters)
    )

    # Alpha's first match (the oldest) starts from its seed.
    assert rosters["Alpha"].pre_match_ratings[4] == pytest.approx(2000.0)
    assert len(rosters["Alpha"].pre_match_ratings) == 3


def test_default_match_threshold_leaves_small_rosters_unranked() -> None:
    events, matches = _dataset()
    result = compute_rankings(events, matches, RankingParameters(outlier_rank=2))
    assert [roster.name for roster in result.rosters] == ["Alpha", "Bravo", "Charlie"]
    assert all(roster.global_rank is None for roster in result.rosters)


def test_compute_rankings_is_idempotent() -> None:
    events, matches = _dataset()
    first = compute_rankings(events, matches, PARAMETERS)
    second = compute_rankings(events, matches, PARAMETERS)

    assert [roster.rating for roster in first.all_rosters] == [
        roster.rating for roster in second.all_rosters
    ]
    assert first.matches == second.matches
    # Inputs are never mutated.
    assert all(match.information_content is None for match in matches)
    assert all(event.last_match_time == -1 for event in events)


def test_time_window_end_excludes_later_matches() -> None:
    events, matches = _dataset()
    params = RankingParameters(outlier_rank=2, min_matches_for_rank=2, time_window_end=END - 3 * DAY)
    result = compute_rankings(events, matches, params)
    assert len(result.matches) == 3
    assert result.window_end == END - 3 * DAY


def test_empty_input_produces_empty_result() -> None:
    lines: list[str] = []
    result = compute_rankings([], [], echo=lines.append)
    assert result.matches == ()
    assert result.rosters == []
    assert result.window_start is None
    assert [line.split()[0] for line in lines] == ["ingested", "resolved", "rated", "ranked"]


def test_progress_lines_cover_every_stage() -> None:
    events, matches = _dataset()
    lines: list[str] = []
    compute_rankings(events, matches, PARAMETERS, echo=lines.append)
    assert [line.split()[0] for line in lines] == ["ingested", "resolved", "seeded", "rated", "ranked"]
    assert "matches=5/7" in lines[0]


def test_invalid_parameters_are_rejected() -> None:
    with pytest.raises(ValueError, match="outlier_rank"):
        compute_rankings([], [], RankingParameters(outlier_rank=0))


def _decay_ramp_dataset() -> tuple[list[Event], list[Match]]:
    """No events, so every roster seeds at the top of the band."""
    return parse_match_data(
        {
            "events": [],
            "matches": [
                _raw_match(END - 100 * DAY, "Bravo", "Alpha", None),
                _raw_match(END - 50 * DAY, "Alpha", "Bravo", None),
                _raw_match(END, "Charlie", "Delta", None),
            ],
        }
    )


def test_information_content_weights_rating_updates() -> None:
    events, matches = _decay_ramp_dataset()
    params = RankingParameters(
        time_window_seconds=100 * DAY,
        grace_period_seconds=0,
        min_matches_for_rank=1,
    )
    result = compute_rankings(events, matches, params)
    rosters = {roster.name: roster for roster in result.all_rosters}

    assert [match.information_content for match in result.matches] == pytest.approx([0.0, 0.5, 1.0])
    assert all(roster.seed_rating == pytest.approx(2000.0) for roster in result.all_rosters)

    # The window-start win carries no weight at all.
    assert result.matches[0].winner_rating_delta == 0.0
    assert result.matches[0].loser_rating_delta == 0.0

    assert rosters["Alpha"].rating == pytest.approx(2007.79, abs=0.01)
    assert rosters["Bravo"].rating == pytest.approx(1992.21, abs=0.01)
    assert rosters["Charlie"].rating == pytest.approx(2015.08, abs=0.01)
    assert rosters["Delta"].rating == pytest.approx(1984.92, abs=0.01)

    # Bravo's only win sits at decay 0, so it never defeated anyone.
    assert rosters["Bravo"].distinct_teams_defeated == 0.0
    assert rosters["Alpha"].distinct_teams_defeated == pytest.approx(0.5)
    assert [roster.name for roster in result.rosters] == ["Charlie", "Alpha"]
    assert [roster.global_rank for roster in result.rosters] == [1, 2]
    assert rosters["Charlie"].regional_ranks == [None, 1, None]
    assert rosters["Alpha"].regional_ranks == [1, None, None]
