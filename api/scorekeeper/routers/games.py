"""Schedule endpoints: list, fetch, create and update games."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from ..db import AsyncSession, get_db
from ..db.games import DIVISIONS, GameStatus
from ..services import schedule
from .schemas import DivisionResponse, GameResponse

router = APIRouter(prefix="/api", tags=["games"])


@router.get("/divisions", response_model=list[DivisionResponse])
async def list_divisions() -> list[DivisionResponse]:
    return [DivisionResponse(id=name.lower(), name=name) for name in DIVISIONS]


@router.get("/games", response_model=list[GameResponse])
async def list_games(
    division: str | None = Query(None),
    status_filter: GameStatus | None = Query(None, alias="status"),
    season: str | None = Query(None),
    year: int | None = Query(None),
    start: date | None = Query(None, description="First scheduled day (inclusive)"),
    end: date | None = Query(None, description="Last scheduled day (inclusive)"),
    team: str | None = Query(None),
    session: AsyncSession = Depends(get_db),
) -> list[GameResponse]:
    games = await schedule.list_games(
        session,
        division=division,
        status=status_filter,
        season=season,
        year=year,
        start=start,
        end=end,
        team=team,
    )
    return [GameResponse.from_game(game) for game in games]


@router.get("/games/{game_id}", response_model=GameResponse)
async def get_game(game_id: str, session: AsyncSession = Depends(get_db)) -> GameResponse:
    return GameResponse.from_game(await schedule.get_game(session, game_id))


@router.post("/games", response_model=GameResponse, status_code=status.HTTP_201_CREATED)
async def create_game(
    payload: schedule.GameCreate, session: AsyncSession = Depends(get_db)
) -> GameResponse:
    return GameResponse.from_game(await schedule.create_game(session, payload))


@router.patch("/games/{game_id}", response_model=GameResponse)
async def update_game(
    game_id: str,
    payload: schedule.GameUpdate,
    session: AsyncSession = Depends(get_db),
) -> GameResponse:
    """Update a game's status and/or final score. Games are never deleted."""
    return GameResponse.from_game(await schedule.update_game(session, game_id, payload))
