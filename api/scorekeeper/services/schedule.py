"""Schedule maintenance: creating, listing and updating games."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Sequence

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.games import Game, GameStatus
from ..utils.datetime_utils import date_to_utc_range
from .errors import NotFoundError, ValidationError
from .submissions import format_pydantic_errors

logger = logging.getLogger(__name__)

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def normalize_division(value: str) -> str:
    """Division labels are stored capitalized ("gold" -> "Gold")."""
    value = value.strip()
    return value[:1].upper() + value[1:].lower() if value else value


def slugify(text: str) -> str:
    return _SLUG_PATTERN.sub("-", text.lower()).strip("-")


def generate_game_id(
    season: str, year: int, home_team: str, away_team: str, scheduled_at: datetime
) -> str:
    return "-".join(
        [
            slugify(season),
            str(year),
            scheduled_at.strftime("%Y%m%d"),
            slugify(home_team),
            "vs",
            slugify(away_team),
        ]
    )


class GameCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    id: str | None = None
    home_team: str = Field(..., alias="homeTeam", min_length=1)
    away_team: str = Field(..., alias="awayTeam", min_length=1)
    division: str = Field(..., min_length=1)
    season: str = Field(..., min_length=1)
    year: int = Field(..., ge=2000, le=2100)
    scheduled_at: datetime = Field(..., alias="scheduledAt")
    venue: str | None = None

    @field_validator("division")
    @classmethod
    def _division(cls, value: str) -> str:
        return normalize_division(value)

    @model_validator(mode="after")
    def _distinct_teams(self) -> "GameCreate":
        if self.home_team == self.away_team:
            raise ValueError("homeTeam and awayTeam must differ")
        return self


class GameUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: GameStatus | None = None
    home_score: int | None = Field(None, alias="homeScore", ge=0)
    away_score: int | None = Field(None, alias="awayScore", ge=0)


def build_game(payload: GameCreate) -> Game:
    game_id = payload.id or generate_game_id(
        payload.season, payload.year, payload.home_team, payload.away_team, payload.scheduled_at
    )
    return Game(
        id=game_id,
        home_team=payload.home_team,
        away_team=payload.away_team,
        division=payload.division,
        season=payload.season,
        year=payload.year,
        scheduled_at=payload.scheduled_at,
        venue=payload.venue,
        status=GameStatus.scheduled.value,
    )


async def get_game(session: AsyncSession, game_id: str) -> Game:
    game = await session.get(Game, game_id)
    if game is None:
        raise NotFoundError("game", game_id)
    return game


async def create_game(session: AsyncSession, payload: GameCreate) -> Game:
    game = build_game(payload)
    if await session.get(Game, game.id) is not None:
        raise ValidationError(f"id: game {game.id} already exists")
    session.add(game)
    try:
        await session.flush()
    except IntegrityError as exc:
        # Lost a race with a concurrent create of the same id.
        await session.rollback()
        logger.warning("game_create_conflict", extra={"game_id": game.id})
        raise ValidationError(f"id: game {game.id} already exists") from exc
    logger.info(
        "game_created",
        extra={"game_id": game.id, "division": game.division, "scheduled_at": game.scheduled_at},
    )
    return game


async def update_game(session: AsyncSession, game_id: str, payload: GameUpdate) -> Game:
    """Apply a status and/or score change. Fields left unset are untouched."""
    game = await get_game(session, game_id)
    changes: dict[str, Any] = payload.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("at least one of status, homeScore, awayScore is required")
    if "status" in changes and changes["status"] is not None:
        game.status = GameStatus(changes["status"]).value
    if "home_score" in changes:
        game.home_score = changes["home_score"]
    if "away_score" in changes:
        game.away_score = changes["away_score"]
    await session.flush()
    logger.info("game_updated", extra={"game_id": game.id, "changes": sorted(changes)})
    return game


async def list_games(
    session: AsyncSession,
    *,
    division: str | None = None,
    status: GameStatus | None = None,
    season: str | None = None,
    year: int | None = None,
    start: date | None = None,
    end: date | None = None,
    team: str | None = None,
) -> Sequence[Game]:
    """Games ordered by scheduled time; ``start``/``end`` are inclusive days."""
    stmt = select(Game)
    if division:
        stmt = stmt.where(Game.division == normalize_division(division))
    if status is not None:
        stmt = stmt.where(Game.status == status.value)
    if season:
        stmt = stmt.where(Game.season == season)
    if year is not None:
        stmt = stmt.where(Game.year == year)
    if start is not None:
        stmt = stmt.where(Game.scheduled_at >= date_to_utc_range(start)[0])
    if end is not None:
        stmt = stmt.where(Game.scheduled_at < date_to_utc_range(end)[1])
    if team:
        stmt = stmt.where((Game.home_team == team) | (Game.away_team == team))
    result = await session.execute(stmt.order_by(Game.scheduled_at, Game.id))
    return result.scalars().all()


@dataclass
class ImportSummary:
    created: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    invalid: list[str] = field(default_factory=list)


async def import_schedule(
    session: AsyncSession, records: Iterable[Mapping[str, Any]]
) -> ImportSummary:
    """Insert games from schedule records; ids already present are skipped.

    Re-running the same file is a no-op. Malformed records are reported in
    ``invalid`` (as ``"<index>: <error>"``) and do not stop the import.
    """
    summary = ImportSummary()
    for index, record in enumerate(records):
        try:
            payload = GameCreate.model_validate(record)
        except pydantic.ValidationError as exc:
            summary.invalid.append(f"{index}: {'; '.join(format_pydantic_errors(exc.errors()))}")
            continue
        game = build_game(payload)
        if game.id in summary.created or await session.get(Game, game.id) is not None:
            summary.skipped.append(game.id)
            continue
        session.add(game)
        summary.created.append(game.id)
    await session.flush()
    logger.info(
        "schedule_imported",
        extra={
            "created": len(summary.created),
            "skipped": len(summary.skipped),
            "invalid": len(summary.invalid),
        },
    )
    return summary
