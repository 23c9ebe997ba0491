"""Match-data payload parsing and the filtering/ingestion stage."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any

from domain.common import (
    PLAYERS_PER_SIDE,
    Event,
    EventPrize,
    MapScore,
    Match,
    Player,
    parse_prize_pool,
)
from domain.ratings.config import RankingParameters
from domain.ratings.context import RankingContext


@dataclass(frozen=True)
class IngestedDataset:
    """Filtered matches (input order kept) and the event map."""

    matches: tuple[Match, ...]
    events: dict[int, Event]
    window_start: int | None
    window_end: int | None


def _parse_player(raw: Mapping[str, Any]) -> Player:
    return Player(
        player_id=int(raw["playerId"]),
        nick=str(raw.get("nick", "")),
        country=str(raw.get("country", "")),
        country_iso=str(raw.get("countryIso", "")),
    )


def parse_event(raw: Mapping[str, Any]) -> Event:
    """Build an ``Event`` from one ``events[]`` entry."""
    try:
        prize_distribution = {
            int(entry["teamId"]): EventPrize(
                placement=int(entry.get("placement", 0)),
                prize=float(entry.get("prize", 0) or 0),
                shared=bool(entry.get("shared", False)),
            )
            for entry in raw.get("prizeDistribution", []) or []
        }
        return Event(
            event_id=int(raw["eventId"]),
            name=str(raw.get("eventName", "")),
            prize_pool=parse_prize_pool(raw.get("prizePool")),
            lan=bool(raw.get("lan", False)),
            prize_distribution=prize_distribution,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"malformed event record eventId={raw.get('eventId')!r}: {exc}") from exc


def parse_match(raw: Mapping[str, Any]) -> Match:
    """Build a ``Match`` from one ``matches[]`` entry."""
    try:
        winning_team = int(raw["winningTeam"])
        event_id = raw.get("eventId")
        valve_ranked = raw.get("valveRanked")
        match = Match(
            match_start_time=int(raw["matchStartTime"]),
            team1_id=int(raw["team1Id"]),
            team2_id=int(raw["team2Id"]),
            team1_name=str(raw.get("team1Name", "")),
            team2_name=str(raw.get("team2Name", "")),
            event_id=None if event_id is None else int(event_id),
            team1_players=tuple(_parse_player(player) for player in raw["team1Players"]),
            team2_players=tuple(_parse_player(player) for player in raw["team2Players"]),
            winning_team=winning_team,
            maps=tuple(
                MapScore(
                    map_name=str(entry.get("mapName", "")),
                    team1_score=int(entry.get("team1Score", 0)),
                    team2_score=int(entry.get("team2Score", 0)),
                )
                for entry in raw.get("maps", []) or []
            ),
            valve_ranked=None if valve_ranked is None else bool(valve_ranked),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(
            f"malformed match record matchStartTime={raw.get('matchStartTime')!r}: {exc}"
        ) from exc

    if winning_team not in (1, 2):
        raise ValueError(
            f"match at matchStartTime={match.match_start_time} has winningTeam={winning_team}; "
            "expected 1 or 2"
        )
    return match


def parse_match_data(payload: Mapping[str, Any]) -> tuple[list[Event], list[Match]]:
    """Parse the ``{"events": [...], "matches": [...]}`` document."""
    if not isinstance(payload, Mapping):
        raise ValueError("match data must be an object with 'events' and 'matches'")
    raw_events = payload.get("events")
    raw_matches = payload.get("matches")
    if not isinstance(raw_events, list) or not isinstance(raw_matches, list):
        raise ValueError("match data must contain 'events' and 'matches' lists")

    events = [parse_event(raw) for raw in raw_events]
    matches = [parse_match(raw) for raw in raw_matches]
    return events, matches


def filter_incomplete_matches(matches: Iterable[Match]) -> list[Match]:
    return [
        match
        for match in matches
        if len(match.team1_players) == PLAYERS_PER_SIDE
        and len(match.team2_players) == PLAYERS_PER_SIDE
    ]


def filter_unranked_matches(matches: Iterable[Match], ranked_cutoff: int) -> list[Match]:
    """Everything before the cutoff counts as ranked; later matches need the flag."""
    return [
        match
        for match in matches
        if match.match_start_time < ranked_cutoff or match.valve_ranked is True
    ]


def filter_matches_by_time(matches: Iterable[Match], start_time: int, end_time: int) -> list[Match]:
    """Keep matches inside ``[start_time, end_time]``; a negative bound is open."""
    return [
        match
        for match in matches
        if (end_time < 0 or match.match_start_time <= end_time)
        and (start_time < 0 or match.match_start_time >= start_time)
    ]


def filter_showmatches(
    matches: Iterable[Match],
    events: Mapping[int, Event],
    token: str = "showmatch",
) -> list[Match]:
    needle = token.lower()
    kept: list[Match] = []
    for match in matches:
        event = None if match.event_id is None else events.get(match.event_id)
        if event is not None and needle in event.name.lower():
            continue
        kept.append(match)
    return kept


def find_time_window(matches: Sequence[Match], filter_end: int, data_window: int) -> tuple[int, int]:
    end_time = filter_end
    if end_time < 0:
        end_time = max(match.match_start_time for match in matches)
    return end_time - data_window, end_time


class DatasetIngestor:
    """Turns raw events/matches into the filtered, weighted match set."""

    def __init__(
        self,
        context: RankingContext,
        parameters: RankingParameters,
        *,
        echo: Callable[[str], None] | None = None,
    ) -> None:
        self.context = context
        self.parameters = parameters
        self.echo = echo

    def ingest(self, events: Iterable[Event], matches: Iterable[Match]) -> IngestedDataset:
        params = self.parameters
        kept = list(matches)
        total = len(kept)

        kept = filter_incomplete_matches(kept)
        kept = filter_unranked_matches(kept, params.ranked_cutoff)

        event_map: dict[int, Event] = {event.event_id: event for event in events}
        if not kept:
            self._report(total=total, kept=0, events=event_map, window=(None, None))
            return IngestedDataset(matches=(), events=event_map, window_start=None, window_end=None)

        start_time, end_time = find_time_window(
            kept,
            params.time_window_end,
            params.time_window_seconds,
        )
        self.context.set_time_window(start_time, end_time - params.grace_period_seconds)
        kept = filter_matches_by_time(kept, start_time, end_time)

        last_match_times: dict[int, int] = {}
        for match in kept:
            if match.event_id is None or match.event_id not in event_map:
                continue
            previous = last_match_times.get(match.event_id, -1)
            last_match_times[match.event_id] = max(previous, match.match_start_time)
        for event_id, last_match_time in last_match_times.items():
            event_map[event_id] = replace(event_map[event_id], last_match_time=last_match_time)

        kept = filter_showmatches(kept, event_map, params.showmatch_token)
        weighted = tuple(
            replace(match, information_content=self.context.decay(match.match_start_time))
            for match in kept
        )

        self._report(total=total, kept=len(weighted), events=event_map, window=(start_time, end_time))
        return IngestedDataset(
            matches=weighted,
            events=event_map,
            window_start=start_time,
            window_end=end_time,
        )

    def _report(
        self,
        *,
        total: int,
        kept: int,
        events: Mapping[int, Event],
        window: tuple[int | None, int | None],
    ) -> None:
        if self.echo is None:
            return
        self.echo(
            "ingested "
            f"matches={kept}/{total} "
            f"events={len(events)} "
            f"window_start={window[0]} "
            f"window_end={window[1]}"
        )


__all__ = [
    "DatasetIngestor",
    "IngestedDataset",
    "filter_incomplete_matches",
    "filter_matches_by_time",
    "filter_showmatches",
    "filter_unranked_matches",
    "find_time_window",
    "parse_event",
    "parse_match",
    "parse_match_data",
]
