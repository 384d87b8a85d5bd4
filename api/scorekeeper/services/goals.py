"""
Goal ingestion.

Validates a goal submission, derives the running counters from the events
already stored for the game, and appends one immutable GoalEvent.

Counters are derived by counting existing rows, not from a maintained
sequence:

- scoring_team_goals_for     = prior goals by the scoring team + 1
- scoring_team_goals_against = prior goals by the other team
- scorer_goals_in_game       = prior goals by the scorer + 1

Concurrent submissions for one game can read the same counts unless the
game's write lock is held (see ``game_locks``). Counters already written are
never corrected if an earlier goal is later edited or removed.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .event_store import EventFilter, EventStore
from .event_types import EventType, GoalEvent
from .game_locks import GameWriteLocks, write_locks
from .ingestion_helpers import new_event_id, require_game, require_team
from .submissions import GoalSubmission, coerce_submission
from ..utils.datetime_utils import MonotonicClock, recording_clock

logger = logging.getLogger(__name__)

FIRST_GOAL_DESCRIPTION = "First goal"
GOAL_DESCRIPTION = "Goal"


async def record_goal(
    store: EventStore,
    submission: GoalSubmission | Mapping[str, Any],
    *,
    locks: GameWriteLocks | None = None,
    clock: MonotonicClock | None = None,
) -> GoalEvent:
    """Record one goal and return the persisted event.

    Raises:
        ValidationError: missing/malformed field, or team not in the game
        NotFoundError: unknown game id
        StoreUnavailableError: the store failed or timed out (retryable)
    """
    goal = coerce_submission(GoalSubmission, submission)
    locks = write_locks if locks is None else locks
    clock = recording_clock if clock is None else clock

    game = await require_game(store, goal.game_id)
    opponent = require_team(game, goal.team)
    goal_types = (EventType.goal,)

    async with locks.hold(goal.game_id):
        team_goals = await store.query_events(
            goal.game_id, EventFilter(event_types=goal_types, team=goal.team)
        )
        opposing_goals = await store.query_events(
            goal.game_id, EventFilter(event_types=goal_types, team=opponent)
        )
        scorer_goals = await store.query_events(
            goal.game_id, EventFilter(event_types=goal_types, player=goal.player)
        )

        event = GoalEvent(
            id=new_event_id(EventType.goal),
            game_id=goal.game_id,
            team=goal.team,
            player=goal.player,
            period=goal.period,
            time=goal.time,
            scoring_team_goals_for=len(team_goals) + 1,
            scoring_team_goals_against=len(opposing_goals),
            scorer_goals_in_game=len(scorer_goals) + 1,
            recorded_at=clock.now(),
            assists=tuple(goal.assists),
            shot_type=goal.shot_type,
            goal_type=goal.goal_type,
            breakaway=goal.breakaway,
            description=FIRST_GOAL_DESCRIPTION if not team_goals else GOAL_DESCRIPTION,
        )
        persisted = await store.insert_event(event)

    logger.info(
        "goal_recorded",
        extra={
            "event_id": persisted.id,
            "game_id": persisted.game_id,
            "team": persisted.team,
            "player": persisted.player,
            "goals_for": persisted.scoring_team_goals_for,
            "goals_against": persisted.scoring_team_goals_against,
        },
    )
    return persisted
