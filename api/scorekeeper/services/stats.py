"""
Read-side statistics rebuilt from the event log.

Nothing here is cached or stored: every call rescans the game's events, so
results are never stale, only as slow as the store. An unknown game or a
player without events yields zeros rather than an error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from .event_store import EventFilter, EventStore
from .event_types import EventType, GameEvent, GoalEvent, PenaltyEvent, ShotEvent

_LINE_TYPES = (EventType.goal, EventType.penalty)


@dataclass(frozen=True)
class PlayerGameLine:
    goals: int = 0
    assists: int = 0
    penalty_minutes: int = 0

    @property
    def points(self) -> int:
        return self.goals + self.assists


def _player_line(events: Iterable[GameEvent], player_name: str) -> PlayerGameLine:
    goals = assists = penalty_minutes = 0
    for event in events:
        if isinstance(event, GoalEvent):
            if event.player == player_name:
                goals += 1
            if player_name in event.assists:
                assists += 1
        elif isinstance(event, PenaltyEvent) and event.player == player_name:
            penalty_minutes += event.duration_minutes
    return PlayerGameLine(goals=goals, assists=assists, penalty_minutes=penalty_minutes)


async def compute_player_game_line(
    store: EventStore, game_id: str, player_name: str
) -> PlayerGameLine:
    """Goals, assists and penalty minutes for one player in one game."""
    events = await store.query_events(game_id, EventFilter(event_types=_LINE_TYPES))
    return _player_line(events, player_name)


@dataclass(frozen=True)
class TeamLine:
    team: str
    goals: int = 0
    shots: int = 0
    penalty_minutes: int = 0


@dataclass(frozen=True)
class Scoreboard:
    game_id: str
    home: TeamLine
    away: TeamLine

    @property
    def score(self) -> tuple[int, int]:
        return (self.home.goals, self.away.goals)


def _team_line(events: list[GameEvent], team: str) -> TeamLine:
    goals = shots = penalty_minutes = 0
    for event in events:
        if event.team != team:
            continue
        if isinstance(event, GoalEvent):
            goals += 1
        elif isinstance(event, ShotEvent):
            shots += event.shots
        elif isinstance(event, PenaltyEvent):
            penalty_minutes += event.duration_minutes
    return TeamLine(team=team, goals=goals, shots=shots, penalty_minutes=penalty_minutes)


async def compute_scoreboard(store: EventStore, game: Any) -> Scoreboard:
    """Home and away goals, shots and penalty minutes for ``game``."""
    events = await store.query_events(game.id)
    return Scoreboard(
        game_id=game.id,
        home=_team_line(events, game.home_team),
        away=_team_line(events, game.away_team),
    )


@dataclass(frozen=True)
class PlayerTotals:
    player: str
    games_played: int = 0
    games_with_point: int = 0
    goals: int = 0
    assists: int = 0
    penalty_minutes: int = 0
    game_ids: tuple[str, ...] = field(default_factory=tuple)

    @property
    def points(self) -> int:
        return self.goals + self.assists


async def compute_player_totals(
    store: EventStore,
    games: Iterable[Any],
    player_name: str,
    attendance: Iterable[Any] = (),
) -> PlayerTotals:
    """Sum a player's game lines over ``games`` (typically one season).

    A game counts as played when the player is listed present in its
    attendance record or has a goal, assist or penalty in it.
    """
    present_in = {record.game_id for record in attendance if _is_present(record, player_name)}
    goals = assists = penalty_minutes = 0
    scored_in: list[str] = []
    played = 0
    for game in games:
        line = await compute_player_game_line(store, game.id, player_name)
        goals += line.goals
        assists += line.assists
        penalty_minutes += line.penalty_minutes
        if line.points:
            scored_in.append(game.id)
        if game.id in present_in or line.points or line.penalty_minutes:
            played += 1
    return PlayerTotals(
        player=player_name,
        games_played=played,
        games_with_point=len(scored_in),
        goals=goals,
        assists=assists,
        penalty_minutes=penalty_minutes,
        game_ids=tuple(scored_in),
    )


# =============================================================================
# ATTENDANCE
# =============================================================================


def _team_entry(record: Any, team: str) -> Mapping[str, Any] | None:
    return next((entry for entry in record.teams if entry.get("teamName") == team), None)


def _is_present(record: Any, player_name: str) -> bool:
    return any(player_name in entry.get("playersPresent", ()) for entry in record.teams)


@dataclass(frozen=True)
class PlayerAttendance:
    """How often a player showed up for games their team took attendance at."""

    player: str
    team: str
    games_attended: int = 0
    games_with_attendance: int = 0
    scheduled_games: int = 0

    @property
    def attendance_percentage(self) -> int:
        if not self.games_with_attendance:
            return 0
        # Rounds halves up: 1 of 8 games is 13%.
        return (200 * self.games_attended + self.games_with_attendance) // (
            2 * self.games_with_attendance
        )


def compute_player_attendance(
    attendance: Iterable[Any], games: Iterable[Any], team: str, player_name: str
) -> PlayerAttendance:
    """Attendance rate for one player over the team's games with a record."""
    attended = with_attendance = 0
    for record in attendance:
        entry = _team_entry(record, team)
        if entry is None:
            continue
        with_attendance += 1
        if player_name in entry.get("playersPresent", ()):
            attended += 1
    scheduled = sum(1 for game in games if team in game.teams)
    return PlayerAttendance(
        player=player_name,
        team=team,
        games_attended=attended,
        games_with_attendance=with_attendance,
        scheduled_games=scheduled,
    )


def compute_team_attendance(
    attendance: Iterable[Any],
    games: Iterable[Any],
    team: str,
    roster: Iterable[str] = (),
) -> list[PlayerAttendance]:
    """Attendance for every rostered or recorded player, best attendance first.

    Players listed present but missing from ``roster`` (subs) are included.
    """
    attendance = list(attendance)
    games = list(games)
    players = list(dict.fromkeys(roster))
    for record in attendance:
        entry = _team_entry(record, team)
        for name in entry.get("playersPresent", ()) if entry else ():
            if name not in players:
                players.append(name)
    lines = [compute_player_attendance(attendance, games, team, name) for name in players]
    return sorted(lines, key=lambda line: (-line.attendance_percentage, line.player))
