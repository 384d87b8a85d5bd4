"""Shots-on-goal entries.

Shots are tallied in batches from the bench, so one entry may carry several
shots. Each entry stores the team's running total after it is applied.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .event_store import EventFilter, EventStore
from .event_types import EventType, ShotEvent
from .game_locks import GameWriteLocks, write_locks
from .ingestion_helpers import new_event_id, require_game, require_team
from .submissions import ShotSubmission, coerce_submission
from ..utils.datetime_utils import MonotonicClock, recording_clock

logger = logging.getLogger(__name__)


async def record_shots(
    store: EventStore,
    submission: ShotSubmission | Mapping[str, Any],
    *,
    locks: GameWriteLocks | None = None,
    clock: MonotonicClock | None = None,
) -> ShotEvent:
    entry = coerce_submission(ShotSubmission, submission)
    locks = write_locks if locks is None else locks
    clock = recording_clock if clock is None else clock

    game = await require_game(store, entry.game_id)
    require_team(game, entry.team)

    async with locks.hold(entry.game_id):
        prior = await store.query_events(
            entry.game_id, EventFilter(event_types=(EventType.shot,), team=entry.team)
        )
        total_before = sum(event.shots for event in prior)
        event = ShotEvent(
            id=new_event_id(EventType.shot),
            game_id=entry.game_id,
            team=entry.team,
            period=entry.period,
            shots=entry.shots,
            team_shots_in_game=total_before + entry.shots,
            recorded_at=clock.now(),
        )
        persisted = await store.insert_event(event)

    logger.info(
        "shots_recorded",
        extra={
            "event_id": persisted.id,
            "game_id": persisted.game_id,
            "team": persisted.team,
            "shots": persisted.shots,
            "team_shots_in_game": persisted.team_shots_in_game,
        },
    )
    return persisted
