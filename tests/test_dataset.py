"""Tests for payload parsing and the ingestion filters."""

from __future__ import annotations

import pytest

from domain.common import Event, Match, Player
from domain.ratings.config import RANKED_ERA_CUTOFF, SECONDS_PER_DAY, RankingParameters
from domain.ratings.context import RankingContext
from domain.ratings.dataset import (
    DatasetIngestor,
    filter_incomplete_matches,
    filter_matches_by_time,
    filter_showmatches,
    filter_unranked_matches,
    find_time_window,
    parse_event,
    parse_match,
    parse_match_data,
)

DAY = SECONDS_PER_DAY
BASE_TIME = 1_700_000_000


def _players(*player_ids: int) -> tuple[Player, ...]:
    return tuple(Player(player_id=player_id, nick=f"p{player_id}", country_iso="DK") for player_id in player_ids)


def _match(
    start_time: int,
    *,
    event_id: int | None = 1,
    team1: tuple[int, ...] = (1, 2, 3, 4, 5),
    team2: tuple[int, ...] = (6, 7, 8, 9, 10),
    valve_ranked: bool | None = None,
) -> Match:
    return Match(
        match_start_time=start_time,
        team1_id=100,
        team2_id=200,
        team1_name="Alpha",
        team2_name="Bravo",
        event_id=event_id,
        team1_players=_players(*team1),
        team2_players=_players(*team2),
        winning_team=1,
        valve_ranked=valve_ranked,
    )


def _raw_player(player_id: int) -> dict[str, object]:
    return {"playerId": player_id, "nick": f"p{player_id}", "countryIso": "SE"}


def _raw_match(**overrides: object) -> dict[str, object]:
    raw: dict[str, object] = {
        "matchStartTime": BASE_TIME,
        "team1Id": 100,
        "team2Id": 200,
        "team1Name": "Alpha",
        "team2Name": "Bravo",
        "eventId": 7,
        "team1Players": [_raw_player(player_id) for player_id in range(1, 6)],
        "team2Players": [_raw_player(player_id) for player_id in range(6, 11)],
        "winningTeam": 2,
        "maps": [{"mapName": "de_mirage", "team1Score": 10, "team2Score": 13}],
        "valveRanked": True,
    }
    raw.update(overrides)
    return raw


def test_parse_match_reads_camel_case_fields() -> None:
    match = parse_match(_raw_match())
    assert match.match_start_time == BASE_TIME
    assert match.event_id == 7
    assert match.winning_team == 2
    assert match.valve_ranked is True
    assert [player.player_id for player in match.team2_players] == [6, 7, 8, 9, 10]
    assert match.team1_players[0].country_iso == "SE"
    assert match.maps[0].map_name == "de_mirage"
    assert match.maps[0].team2_score == 13
    assert match.information_content is None
    assert match.unified_match_id is None


def test_parse_match_rejects_missing_keys() -> None:
    raw = _raw_match()
    del raw["team1Players"]
    with pytest.raises(ValueError, match="malformed match record") as exc_info:
        parse_match(raw)
    assert isinstance(exc_info.value.__cause__, KeyError)


def test_parse_match_rejects_non_numeric_time() -> None:
    with pytest.raises(ValueError, match="malformed match record"):
        parse_match(_raw_match(matchStartTime="yesterday"))


def test_parse_match_rejects_unknown_winner() -> None:
    with pytest.raises(ValueError, match="winningTeam=0"):
        parse_match(_raw_match(winningTeam=0))


def test_parse_event_with_prize_distribution() -> None:
    event = parse_event(
        {
            "eventId": 7,
            "eventName": "IEM Katowice",
            "prizePool": "$1,000,000",
            "lan": True,
            "prizeDistribution": [
                {"teamId": 100, "placement": 1, "prize": 400000},
                {"teamId": 200, "placement": 2, "prize": 180000, "shared": False},
            ],
        }
    )
    assert event.name == "IEM Katowice"
    assert event.prize_pool == pytest.approx(1_000_000.0)
    assert event.lan is True
    assert event.prize_for_team(100) == pytest.approx(400_000.0)
    assert event.prize_distribution[200].placement == 2
    assert event.last_match_time == -1


def test_parse_event_unparseable_prize_pool_is_zero() -> None:
    event = parse_event({"eventId": 8, "eventName": "Cup", "prizePool": "Other", "lan": False})
    assert event.prize_pool == 0.0
    assert event.prize_distribution == {}


def test_parse_match_data_requires_both_lists() -> None:
    with pytest.raises(ValueError, match="'events' and 'matches'"):
        parse_match_data({"matches": []})

    events, matches = parse_match_data(
        {"events": [{"eventId": 7, "eventName": "Cup"}], "matches": [_raw_match()]}
    )
    assert [event.event_id for event in events] == [7]
    assert len(matches) == 1


def test_filter_incomplete_matches_requires_five_per_side() -> None:
    complete = _match(BASE_TIME)
    short = _match(BASE_TIME, team2=(6, 7, 8, 9))
    assert filter_incomplete_matches([complete, short]) == [complete]


def test_filter_unranked_matches_respects_cutoff() -> None:
    before = _match(RANKED_ERA_CUTOFF - 1)
    after_unflagged = _match(RANKED_ERA_CUTOFF)
    after_ranked = _match(RANKED_ERA_CUTOFF + 10, valve_ranked=True)
    after_unranked = _match(RANKED_ERA_CUTOFF + 20, valve_ranked=False)

    kept = filter_unranked_matches(
        [before, after_unflagged, after_ranked, after_unranked],
        RANKED_ERA_CUTOFF,
    )
    assert kept == [before, after_ranked]


def test_filter_matches_by_time_negative_bounds_are_open() -> None:
    matches = [_match(BASE_TIME + offset) for offset in (0, 10, 20)]
    assert filter_matches_by_time(matches, BASE_TIME + 5, BASE_TIME + 15) == [matches[1]]
    assert filter_matches_by_time(matches, -1, BASE_TIME + 10) == matches[:2]
    assert filter_matches_by_time(matches, BASE_TIME + 10, -1) == matches[1:]


def test_filter_showmatches_is_case_insensitive() -> None:
    events = {
        1: Event(event_id=1, name="Major", prize_pool=0.0, lan=True),
        2: Event(event_id=2, name="All-Star SHOWMATCH", prize_pool=0.0, lan=True),
    }
    regular = _match(BASE_TIME, event_id=1)
    show = _match(BASE_TIME, event_id=2)
    orphan = _match(BASE_TIME, event_id=99)
    assert filter_showmatches([regular, show, orphan], events) == [regular, orphan]


def test_find_time_window_defaults_to_latest_match() -> None:
    matches = [_match(BASE_TIME), _match(BASE_TIME + 50)]
    assert find_time_window(matches, -1, 30) == (BASE_TIME + 20, BASE_TIME + 50)
    assert find_time_window(matches, BASE_TIME + 10, 30) == (BASE_TIME - 20, BASE_TIME + 10)


def test_ingest_applies_window_grace_and_information_content() -> None:
    params = RankingParameters(time_window_seconds=100 * DAY, grace_period_seconds=20 * DAY)
    context = RankingContext()
    end = BASE_TIME + 100 * DAY
    events = [
        Event(event_id=1, name="League", prize_pool=10_000.0, lan=False),
        Event(event_id=2, name="Charity showmatch", prize_pool=0.0, lan=True),
        Event(event_id=3, name="Qualifier", prize_pool=0.0, lan=False),
    ]
    matches = [
        _match(BASE_TIME - DAY, event_id=3),
        _match(BASE_TIME),
        _match(BASE_TIME + 40 * DAY),
        _match(end - 10 * DAY),
        _match(end, event_id=2),
        _match(end - DAY, team1=(1, 2, 3, 4)),
    ]

    lines: list[str] = []
    dataset = DatasetIngestor(context, params, echo=lines.append).ingest(events, matches)

    assert dataset.window_start == BASE_TIME
    assert dataset.window_end == end
    assert context.window_start == BASE_TIME
    assert context.window_end == end - 20 * DAY
    assert [match.match_start_time for match in dataset.matches] == [
        BASE_TIME,
        BASE_TIME + 40 * DAY,
        end - 10 * DAY,
    ]
    assert [match.information_content for match in dataset.matches] == pytest.approx([0.0, 0.5, 1.0])
    # The showmatch still counts towards its event's last match time.
    assert dataset.events[2].last_match_time == end
    assert dataset.events[1].last_match_time == end - 10 * DAY
    # Matches outside the window never reach their event.
    assert dataset.events[3].last_match_time == -1
    assert lines and lines[0].startswith("ingested matches=3/6")


def test_ingest_empty_result_has_no_window() -> None:
    context = RankingContext()
    dataset = DatasetIngestor(context, RankingParameters()).ingest(
        [], [_match(RANKED_ERA_CUTOFF + 1, valve_ranked=False)]
    )
    assert dataset.matches == ()
    assert dataset.window_start is None
    assert not context.has_time_window
