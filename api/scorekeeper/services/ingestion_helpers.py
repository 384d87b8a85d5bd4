"""Checks and identifiers shared by goal, penalty and shot ingestion."""

from __future__ import annotations

import uuid

from ..db.games import Game
from .errors import NotFoundError, ValidationError
from .event_store import EventStore
from .event_types import EventType


async def require_game(store: EventStore, game_id: str) -> Game:
    game = await store.get_game(game_id)
    if game is None:
        raise NotFoundError("game", game_id)
    return game


def require_team(game: Game, team: str) -> str:
    """Return the opposing team's name, or raise if ``team`` is not in the game."""
    if team not in game.teams:
        raise ValidationError(
            f"team: '{team}' is not playing in game {game.id} "
            f"({game.home_team} vs {game.away_team})"
        )
    return game.opponent_of(team)


def new_event_id(event_type: EventType) -> str:
    return f"{event_type.value}_{uuid.uuid4().hex}"
