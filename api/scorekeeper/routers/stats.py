"""Statistics endpoints. Every response is rebuilt from the event log."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..db import AsyncSession, get_db
from ..services import attendance as attendance_service
from ..services import schedule
from ..services.event_store import SqlEventStore
from ..services.ingestion_helpers import require_game
from ..services.stats import compute_player_game_line, compute_player_totals, compute_scoreboard
from .dependencies import get_event_store
from .schemas import PlayerGameLineResponse, PlayerTotalsResponse, ScoreboardResponse

router = APIRouter(prefix="/api", tags=["stats"])


@router.get(
    "/games/{game_id}/players/{player_name}/stats",
    response_model=PlayerGameLineResponse,
)
async def player_game_line(
    game_id: str,
    player_name: str,
    store: SqlEventStore = Depends(get_event_store),
) -> PlayerGameLineResponse:
    """Goals, assists and penalty minutes. Unknown games report zeros."""
    line = await compute_player_game_line(store, game_id, player_name)
    return PlayerGameLineResponse.from_line(game_id, player_name, line)


@router.get("/games/{game_id}/scoreboard", response_model=ScoreboardResponse)
async def scoreboard(
    game_id: str, store: SqlEventStore = Depends(get_event_store)
) -> ScoreboardResponse:
    game = await require_game(store, game_id)
    return ScoreboardResponse.from_scoreboard(game, await compute_scoreboard(store, game))


@router.get("/players/{player_name}/stats", response_model=PlayerTotalsResponse)
async def player_totals(
    player_name: str,
    season: str | None = Query(None),
    year: int | None = Query(None),
    division: str | None = Query(None),
    team: str | None = Query(None),
    session: AsyncSession = Depends(get_db),
    store: SqlEventStore = Depends(get_event_store),
) -> PlayerTotalsResponse:
    """Season totals across every game matching the filters.

    ``gamesPlayed`` counts games the player attended or recorded an event in.
    """
    games = await schedule.list_games(
        session, season=season, year=year, division=division, team=team
    )
    records = await attendance_service.list_attendance(session, [game.id for game in games])
    totals = await compute_player_totals(store, games, player_name, records)
    return PlayerTotalsResponse.from_totals(totals)
