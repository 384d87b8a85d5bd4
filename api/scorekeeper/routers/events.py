"""Live event endpoints: record goals, penalties and shots; read the feed."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from ..services.event_store import EventFilter, SqlEventStore
from ..services.event_types import EventType
from ..services.game_locks import GameWriteLocks, get_write_locks
from ..services.goals import record_goal
from ..services.ingestion_helpers import require_game
from ..services.penalties import record_penalty
from ..services.shots import record_shots
from ..services.submissions import GoalSubmission, PenaltySubmission, ShotSubmission
from .dependencies import get_event_store
from .schemas import (
    EventResponse,
    GoalEventResponse,
    PenaltyEventResponse,
    ShotEventResponse,
    event_response,
    goal_response,
    penalty_response,
    shot_response,
)

router = APIRouter(prefix="/api", tags=["events"])


@router.post("/goals", response_model=GoalEventResponse, status_code=status.HTTP_201_CREATED)
async def post_goal(
    payload: GoalSubmission,
    store: SqlEventStore = Depends(get_event_store),
    locks: GameWriteLocks = Depends(get_write_locks),
) -> GoalEventResponse:
    return goal_response(await record_goal(store, payload, locks=locks))


@router.post(
    "/penalties", response_model=PenaltyEventResponse, status_code=status.HTTP_201_CREATED
)
async def post_penalty(
    payload: PenaltySubmission,
    store: SqlEventStore = Depends(get_event_store),
    locks: GameWriteLocks = Depends(get_write_locks),
) -> PenaltyEventResponse:
    return penalty_response(await record_penalty(store, payload, locks=locks))


@router.post("/shots", response_model=ShotEventResponse, status_code=status.HTTP_201_CREATED)
async def post_shots(
    payload: ShotSubmission,
    store: SqlEventStore = Depends(get_event_store),
    locks: GameWriteLocks = Depends(get_write_locks),
) -> ShotEventResponse:
    return shot_response(await record_shots(store, payload, locks=locks))


@router.get("/games/{game_id}/events", response_model=list[EventResponse])
async def list_events(
    game_id: str,
    event_type: EventType | None = Query(None, alias="type"),
    store: SqlEventStore = Depends(get_event_store),
) -> list:
    """Chronological event feed for a game, optionally limited to one type."""
    await require_game(store, game_id)
    predicate = EventFilter(event_types=(event_type,)) if event_type else None
    return [event_response(event) for event in await store.query_events(game_id, predicate)]


async def _last_event(store: SqlEventStore, game_id: str, event_type: EventType):
    await require_game(store, game_id)
    events = await store.query_events(game_id, EventFilter(event_types=(event_type,)))
    return events[-1] if events else None


@router.get("/games/{game_id}/events/last-goal", response_model=GoalEventResponse | None)
async def last_goal(
    game_id: str, store: SqlEventStore = Depends(get_event_store)
) -> GoalEventResponse | None:
    event = await _last_event(store, game_id, EventType.goal)
    return goal_response(event) if event else None


@router.get("/games/{game_id}/events/last-penalty", response_model=PenaltyEventResponse | None)
async def last_penalty(
    game_id: str, store: SqlEventStore = Depends(get_event_store)
) -> PenaltyEventResponse | None:
    event = await _last_event(store, game_id, EventType.penalty)
    return penalty_response(event) if event else None
