"""Penalty ingestion."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .event_store import EventFilter, EventStore
from .event_types import EventType, PenaltyEvent
from .game_locks import GameWriteLocks, write_locks
from .ingestion_helpers import new_event_id, require_game, require_team
from .submissions import PenaltySubmission, coerce_submission
from ..utils.datetime_utils import MonotonicClock, recording_clock

logger = logging.getLogger(__name__)


async def record_penalty(
    store: EventStore,
    submission: PenaltySubmission | Mapping[str, Any],
    *,
    locks: GameWriteLocks | None = None,
    clock: MonotonicClock | None = None,
) -> PenaltyEvent:
    """Record one penalty; its sequence number is the game's penalty count + 1."""
    penalty = coerce_submission(PenaltySubmission, submission)
    locks = write_locks if locks is None else locks
    clock = recording_clock if clock is None else clock

    game = await require_game(store, penalty.game_id)
    require_team(game, penalty.team)

    async with locks.hold(penalty.game_id):
        prior = await store.query_events(
            penalty.game_id, EventFilter(event_types=(EventType.penalty,))
        )
        event = PenaltyEvent(
            id=new_event_id(EventType.penalty),
            game_id=penalty.game_id,
            team=penalty.team,
            player=penalty.player,
            period=penalty.period,
            time=penalty.time,
            penalty_type=penalty.penalty_type,
            duration_minutes=penalty.duration,
            penalty_sequence_number=len(prior) + 1,
            recorded_at=clock.now(),
            infraction=penalty.infraction or None,
        )
        persisted = await store.insert_event(event)

    logger.info(
        "penalty_recorded",
        extra={
            "event_id": persisted.id,
            "game_id": persisted.game_id,
            "team": persisted.team,
            "player": persisted.player,
            "duration_minutes": persisted.duration_minutes,
            "sequence": persisted.penalty_sequence_number,
        },
    )
    return persisted
