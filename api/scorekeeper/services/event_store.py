"""Event store interface consumed by the ingestion and statistics services.

The core only needs three capabilities from storage: look up a game, list a
game's events matching a predicate, and append a new event. ``SqlEventStore``
provides them over an async SQLAlchemy session; tests substitute an
in-memory implementation of the same protocol.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Protocol, TypeVar, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..db.events import GameEventRow, GoalEventRow, PenaltyEventRow, ShotEventRow
from ..db.games import Game
from .errors import StoreUnavailableError
from .event_types import EventType, GameEvent, GoalEvent, PenaltyEvent, ShotEvent

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class EventFilter:
    """Predicate over a game's events. Unset fields match everything."""

    event_types: tuple[EventType, ...] | None = None
    team: str | None = None
    player: str | None = None

    def __call__(self, event: GameEvent) -> bool:
        if self.event_types is not None and event.event_type not in self.event_types:
            return False
        if self.team is not None and event.team != self.team:
            return False
        if self.player is not None and event.player != self.player:
            return False
        return True


EventPredicate = Union[EventFilter, Callable[[GameEvent], bool]]


class EventStore(Protocol):
    async def get_game(self, game_id: str) -> Game | None: ...

    async def query_events(
        self, game_id: str, predicate: EventPredicate | None = None
    ) -> list[GameEvent]: ...

    async def insert_event(self, event: GameEvent) -> GameEvent: ...


# =============================================================================
# ROW <-> EVENT MAPPING
# =============================================================================


def event_to_row(event: GameEvent) -> GameEventRow:
    if isinstance(event, GoalEvent):
        return GoalEventRow(
            id=event.id,
            game_id=event.game_id,
            team=event.team,
            player=event.player,
            period=event.period,
            clock=event.time,
            recorded_at=event.recorded_at,
            assists=list(event.assists),
            shot_type=event.shot_type,
            goal_type=event.goal_type,
            breakaway=event.breakaway,
            description=event.description,
            scoring_team_goals_for=event.scoring_team_goals_for,
            scoring_team_goals_against=event.scoring_team_goals_against,
            scorer_goals_in_game=event.scorer_goals_in_game,
        )
    if isinstance(event, PenaltyEvent):
        return PenaltyEventRow(
            id=event.id,
            game_id=event.game_id,
            team=event.team,
            player=event.player,
            period=event.period,
            clock=event.time,
            recorded_at=event.recorded_at,
            penalty_type=event.penalty_type,
            infraction=event.infraction,
            duration_minutes=event.duration_minutes,
            penalty_sequence_number=event.penalty_sequence_number,
        )
    if isinstance(event, ShotEvent):
        return ShotEventRow(
            id=event.id,
            game_id=event.game_id,
            team=event.team,
            period=event.period,
            recorded_at=event.recorded_at,
            shots=event.shots,
            team_shots_in_game=event.team_shots_in_game,
        )
    raise TypeError(f"Unsupported event type: {type(event).__name__}")


def row_to_event(row: GameEventRow) -> GameEvent:
    if isinstance(row, GoalEventRow):
        return GoalEvent(
            id=row.id,
            game_id=row.game_id,
            team=row.team,
            player=row.player or "",
            period=row.period,
            time=row.clock or "",
            scoring_team_goals_for=row.scoring_team_goals_for or 0,
            scoring_team_goals_against=row.scoring_team_goals_against or 0,
            scorer_goals_in_game=row.scorer_goals_in_game or 0,
            recorded_at=row.recorded_at,
            assists=tuple(row.assists or ()),
            shot_type=row.shot_type or "",
            goal_type=row.goal_type or "",
            breakaway=bool(row.breakaway),
            description=row.description or "",
        )
    if isinstance(row, PenaltyEventRow):
        return PenaltyEvent(
            id=row.id,
            game_id=row.game_id,
            team=row.team,
            player=row.player or "",
            period=row.period,
            time=row.clock or "",
            penalty_type=row.penalty_type or "",
            duration_minutes=row.duration_minutes or 0,
            penalty_sequence_number=row.penalty_sequence_number or 0,
            recorded_at=row.recorded_at,
            infraction=row.infraction,
        )
    if isinstance(row, ShotEventRow):
        return ShotEvent(
            id=row.id,
            game_id=row.game_id,
            team=row.team,
            period=row.period,
            shots=row.shots or 0,
            team_shots_in_game=row.team_shots_in_game or 0,
            recorded_at=row.recorded_at,
        )
    raise TypeError(f"Unsupported event row: {type(row).__name__}")


# =============================================================================
# SQLALCHEMY STORE
# =============================================================================


class SqlEventStore:
    """Event store backed by the ``games`` / ``game_events`` tables.

    Every call is bounded by ``store_timeout_seconds``. Inserts commit in their
    own transaction so a failed or timed-out write leaves nothing behind.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        timeout_seconds: float | None = None,
        retry_after_seconds: int | None = None,
    ) -> None:
        self._session = session
        self._timeout = timeout_seconds if timeout_seconds is not None else settings.store_timeout_seconds
        self._retry_after = (
            retry_after_seconds if retry_after_seconds is not None else settings.store_retry_after_seconds
        )

    async def _run(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            logger.warning(
                "event_store_timeout",
                extra={"operation": operation, "timeout_seconds": self._timeout},
            )
            raise StoreUnavailableError(operation, self._retry_after) from exc
        except (SQLAlchemyError, OSError) as exc:
            logger.warning(
                "event_store_error",
                extra={"operation": operation, "error": str(exc)},
            )
            raise StoreUnavailableError(operation, self._retry_after) from exc

    async def get_game(self, game_id: str) -> Game | None:
        return await self._run("get_game", self._session.get(Game, game_id))

    async def get_event(self, event_id: str) -> GameEvent | None:
        row = await self._run("get_event", self._session.get(GameEventRow, event_id))
        return row_to_event(row) if row is not None else None

    async def query_events(
        self, game_id: str, predicate: EventPredicate | None = None
    ) -> list[GameEvent]:
        stmt = select(GameEventRow).where(GameEventRow.game_id == game_id)
        if isinstance(predicate, EventFilter):
            stmt = _apply_filter(stmt, predicate)
        stmt = stmt.order_by(GameEventRow.recorded_at, GameEventRow.id)

        result = await self._run("query_events", self._session.execute(stmt))
        events = [row_to_event(row) for row in result.scalars().all()]
        if predicate is not None and not isinstance(predicate, EventFilter):
            events = [event for event in events if predicate(event)]
        return events

    async def insert_event(self, event: GameEvent) -> GameEvent:
        row = event_to_row(event)
        self._session.add(row)
        try:
            await self._run("insert_event", self._session.commit())
        except StoreUnavailableError:
            await self._rollback_quietly()
            raise
        return row_to_event(row)

    async def _rollback_quietly(self) -> None:
        try:
            await self._session.rollback()
        except SQLAlchemyError as exc:
            logger.warning("event_store_rollback_failed", extra={"error": str(exc)})


def _apply_filter(stmt: Any, predicate: EventFilter) -> Any:
    if predicate.event_types is not None:
        stmt = stmt.where(GameEventRow.event_type.in_(_type_values(predicate.event_types)))
    if predicate.team is not None:
        stmt = stmt.where(GameEventRow.team == predicate.team)
    if predicate.player is not None:
        stmt = stmt.where(GameEventRow.player == predicate.player)
    return stmt


def _type_values(event_types: Iterable[EventType]) -> list[str]:
    return [event_type.value for event_type in event_types]
