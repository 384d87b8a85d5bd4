"""Per-game attendance: who showed up for each team."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.games import Game, GameAttendance
from ..utils.datetime_utils import now_utc
from .errors import NotFoundError, ValidationError
from .rosters import TeamRoster

logger = logging.getLogger(__name__)


class RosterEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    team_name: str = Field(..., alias="teamName", min_length=1)
    team_id: str | None = Field(None, alias="teamId")
    total_players: list[str] = Field(default_factory=list, alias="totalPlayers")


class AttendanceSubmission(BaseModel):
    """``attendance`` maps team name to the players present."""

    model_config = ConfigDict(populate_by_name=True)

    attendance: dict[str, list[str]]
    total_roster: list[RosterEntry] = Field(default_factory=list, alias="totalRoster")


def attendance_id(game_id: str) -> str:
    return f"{game_id}-attendance"


def _team_entries(
    game: Game, payload: AttendanceSubmission, saved: Sequence[TeamRoster]
) -> list[dict[str, Any]]:
    unknown = sorted(set(payload.attendance) - set(game.teams))
    unknown += sorted(
        entry.team_name for entry in payload.total_roster if entry.team_name not in game.teams
    )
    if unknown:
        raise ValidationError(
            [f"attendance: '{team}' is not playing in game {game.id}" for team in dict.fromkeys(unknown)]
        )

    rosters = {entry.team_name: entry for entry in payload.total_roster}
    saved_rosters = {roster.team_name: roster for roster in saved if roster.players}
    entries = []
    for team in game.teams:
        present = [name.strip() for name in payload.attendance.get(team, []) if name.strip()]
        roster = rosters.get(team)
        saved_roster = saved_rosters.get(team)
        if roster is not None:
            team_id, roster_size = roster.team_id, len(roster.total_players)
        elif saved_roster is not None:
            team_id, roster_size = saved_roster.team_id, len(saved_roster.players)
        else:
            team_id, roster_size = None, len(present)
        entries.append(
            {
                "teamName": team,
                "teamId": team_id,
                "rosterSize": roster_size,
                "playersPresent": present,
                "presentCount": len(present),
            }
        )
    return entries


async def record_attendance(
    session: AsyncSession,
    game: Game,
    payload: AttendanceSubmission,
    rosters: Sequence[TeamRoster] = (),
) -> GameAttendance:
    """Create or replace the single attendance record for ``game``.

    Roster size comes from ``totalRoster`` when the client sends it, else
    from the team's saved roster, else from the number of players present.
    """
    teams = _team_entries(game, payload, rosters)
    total_roster = sum(team["rosterSize"] for team in teams)
    total_present = sum(team["presentCount"] for team in teams)

    record = await session.get(GameAttendance, attendance_id(game.id))
    if record is None:
        record = GameAttendance(id=attendance_id(game.id), game_id=game.id)
        session.add(record)
    record.teams = teams
    record.total_roster_size = total_roster
    record.total_present = total_present
    record.recorded_at = now_utc()
    await session.flush()

    logger.info(
        "attendance_recorded",
        extra={
            "game_id": game.id,
            "total_roster_size": total_roster,
            "total_present": total_present,
        },
    )
    return record


async def get_attendance(session: AsyncSession, game_id: str) -> GameAttendance:
    result = await session.execute(
        select(GameAttendance).where(GameAttendance.game_id == game_id)
    )
    record = result.scalar_one_or_none()
    if record is None:
        raise NotFoundError("attendance", game_id)
    return record


async def list_attendance(session: AsyncSession, game_ids: Iterable[str]) -> list[GameAttendance]:
    game_ids = list(game_ids)
    if not game_ids:
        return []
    result = await session.execute(
        select(GameAttendance).where(GameAttendance.game_id.in_(game_ids))
    )
    return list(result.scalars().all())
