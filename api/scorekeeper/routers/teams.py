"""Team, roster and attendance-rate endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from ..db import AsyncSession, get_db
from ..services import attendance as attendance_service
from ..services import rosters as roster_service
from ..services import schedule
from ..services.stats import compute_team_attendance
from .schemas import (
    GameRosterResponse,
    PlayerAttendanceResponse,
    RosterPlayerResponse,
    TeamResponse,
)

router = APIRouter(prefix="/api", tags=["teams"])


@router.get("/teams", response_model=list[TeamResponse])
async def list_teams(
    division: str | None = Query(None),
    session: AsyncSession = Depends(get_db),
) -> list[TeamResponse]:
    teams = await roster_service.list_teams(session, division=division)
    return [TeamResponse.from_team(team) for team in teams]


@router.post("/teams", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
async def create_team(
    payload: roster_service.TeamCreate,
    session: AsyncSession = Depends(get_db),
) -> TeamResponse:
    team = await roster_service.create_team(session, payload)
    return TeamResponse.from_team(team)


@router.get("/teams/{team_id}/roster", response_model=list[RosterPlayerResponse])
async def get_roster(
    team_id: str, session: AsyncSession = Depends(get_db)
) -> list[RosterPlayerResponse]:
    team = await roster_service.get_team(session, team_id)
    players = await roster_service.list_players(session, [team.id])
    return [RosterPlayerResponse.from_player(player) for player in players]


@router.put("/teams/{team_id}/roster", response_model=list[RosterPlayerResponse])
async def put_roster(
    team_id: str,
    payload: roster_service.RosterSubmission,
    session: AsyncSession = Depends(get_db),
) -> list[RosterPlayerResponse]:
    """Replace the team's roster with the submitted players."""
    team = await roster_service.get_team(session, team_id)
    players = await roster_service.replace_roster(session, team, payload)
    return [RosterPlayerResponse.from_player(player) for player in players]


@router.get("/rosters", response_model=list[GameRosterResponse])
async def game_rosters(
    game_id: str = Query(..., alias="gameId", min_length=1),
    session: AsyncSession = Depends(get_db),
) -> list[GameRosterResponse]:
    """Away and home rosters for one game."""
    game = await schedule.get_game(session, game_id)
    rosters = await roster_service.get_game_rosters(session, game)
    return [GameRosterResponse.from_roster(roster) for roster in rosters]


@router.get("/teams/{team_id}/attendance", response_model=list[PlayerAttendanceResponse])
async def team_attendance(
    team_id: str,
    season: str | None = Query(None),
    year: int | None = Query(None),
    session: AsyncSession = Depends(get_db),
) -> list[PlayerAttendanceResponse]:
    """Per-player attendance rates over the team's games, best first."""
    team = await roster_service.get_team(session, team_id)
    games = await schedule.list_games(session, season=season, year=year, team=team.name)
    records = await attendance_service.list_attendance(session, [game.id for game in games])
    roster = await roster_service.list_players(session, [team.id])
    lines = compute_team_attendance(records, games, team.name, [player.name for player in roster])
    return [PlayerAttendanceResponse.from_line(line) for line in lines]
