"""Teams and rosters.

A team's roster is saved as a whole: ``replace_roster`` drops the previous
players and inserts the new list. Game rosters are looked up by the team
names stored on the game; a team with no ``Team`` row yields an empty roster
rather than an error so scorekeeping still works for unregistered teams.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.games import Game
from ..db.teams import RosterPlayer, Team
from .errors import NotFoundError, ValidationError
from .schedule import normalize_division, slugify

logger = logging.getLogger(__name__)


class TeamCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    id: str | None = None
    name: str = Field(..., min_length=1, max_length=100)
    division: str = Field(..., min_length=1)

    @field_validator("division")
    @classmethod
    def _division(cls, value: str) -> str:
        return normalize_division(value)


class RosterPlayerIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    number: str | None = Field(None, max_length=10)
    position: str | None = Field(None, max_length=30)

    @field_validator("number", mode="before")
    @classmethod
    def _number(cls, value):
        # Jersey numbers arrive as ints from spreadsheets.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class RosterSubmission(BaseModel):
    players: list[RosterPlayerIn]

    @field_validator("players")
    @classmethod
    def _unique_names(cls, value: list[RosterPlayerIn]) -> list[RosterPlayerIn]:
        names = [player.name for player in value]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate players: {', '.join(duplicates)}")
        return value


@dataclass
class TeamRoster:
    team_name: str
    team_type: str
    team_id: str | None = None
    players: list[RosterPlayer] = field(default_factory=list)


async def list_teams(session: AsyncSession, division: str | None = None) -> Sequence[Team]:
    stmt = select(Team)
    if division:
        stmt = stmt.where(Team.division == normalize_division(division))
    result = await session.execute(stmt.order_by(Team.division, Team.name))
    return result.scalars().all()


async def get_team(session: AsyncSession, team_id: str) -> Team:
    team = await session.get(Team, team_id)
    if team is None:
        raise NotFoundError("team", team_id)
    return team


async def create_team(session: AsyncSession, payload: TeamCreate) -> Team:
    team = Team(id=payload.id or slugify(payload.name), name=payload.name, division=payload.division)
    if await session.get(Team, team.id) is not None:
        raise ValidationError(f"id: team {team.id} already exists")
    session.add(team)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        raise ValidationError(f"name: team '{team.name}' already exists") from exc
    logger.info("team_created", extra={"team_id": team.id, "division": team.division})
    return team


async def list_players(session: AsyncSession, team_ids: Iterable[str]) -> list[RosterPlayer]:
    team_ids = list(team_ids)
    if not team_ids:
        return []
    result = await session.execute(
        select(RosterPlayer)
        .where(RosterPlayer.team_id.in_(team_ids))
        .order_by(RosterPlayer.team_id, RosterPlayer.name)
    )
    return list(result.scalars().all())


async def replace_roster(
    session: AsyncSession, team: Team, payload: RosterSubmission
) -> list[RosterPlayer]:
    await session.execute(delete(RosterPlayer).where(RosterPlayer.team_id == team.id))
    players = [
        RosterPlayer(team_id=team.id, name=player.name, number=player.number, position=player.position)
        for player in payload.players
    ]
    session.add_all(players)
    await session.flush()
    logger.info("roster_replaced", extra={"team_id": team.id, "players": len(players)})
    return players


async def get_game_rosters(session: AsyncSession, game: Game) -> list[TeamRoster]:
    """Away roster first, then home."""
    result = await session.execute(select(Team).where(Team.name.in_(game.teams)))
    teams = {team.name: team for team in result.scalars().all()}
    players = await list_players(session, [team.id for team in teams.values()])

    rosters = []
    for team_type, name in (("away", game.away_team), ("home", game.home_team)):
        team = teams.get(name)
        rosters.append(
            TeamRoster(
                team_name=name,
                team_type=team_type,
                team_id=team.id if team else None,
                players=[player for player in players if team and player.team_id == team.id],
            )
        )
    return rosters
