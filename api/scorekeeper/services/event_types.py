"""Event variants, constants and shared input parsing for game events."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Union


# =============================================================================
# CONSTANTS
# =============================================================================

REGULATION_PERIODS = (1, 2, 3)
OVERTIME_PERIOD = 4
OVERTIME_SENTINEL = "OT"

DEFAULT_SHOT_TYPE = "Wrist Shot"
DEFAULT_GOAL_TYPE = "Regular"
DEFAULT_PENALTY_MINUTES = 2
MIN_PENALTY_MINUTES = 1
MAX_PENALTY_MINUTES = 10
MAX_ASSISTS = 2
MAX_SHOTS_PER_ENTRY = 50

CLOCK_PATTERN = re.compile(r"^(\d{1,2}):([0-5]\d)$")


class EventType(str, Enum):
    goal = "goal"
    penalty = "penalty"
    shot = "shot"


# =============================================================================
# PERIOD / CLOCK PARSING
# =============================================================================


def parse_period(value: object) -> int:
    """Normalize a period to 1-3, or OVERTIME_PERIOD for the "OT" sentinel.

    Raises ValueError with a human-readable message for anything else.
    """
    if isinstance(value, bool):
        raise ValueError("period must be 1, 2, 3 or OT")
    if isinstance(value, str):
        text = value.strip().upper()
        if text == OVERTIME_SENTINEL:
            return OVERTIME_PERIOD
        if not text.isdigit():
            raise ValueError("period must be 1, 2, 3 or OT")
        value = int(text)
    if isinstance(value, int) and value in REGULATION_PERIODS:
        return value
    raise ValueError("period must be 1, 2, 3 or OT")


def period_label(period: int) -> str:
    return OVERTIME_SENTINEL if period == OVERTIME_PERIOD else str(period)


def parse_clock(value: str, period_length_seconds: int) -> str:
    """Validate an MM:SS clock within the period and return it zero-padded."""
    match = CLOCK_PATTERN.match(value.strip())
    if not match:
        raise ValueError("time must be in MM:SS format")
    minutes, seconds = int(match.group(1)), int(match.group(2))
    if minutes * 60 + seconds > period_length_seconds:
        limit_minutes = period_length_seconds // 60
        raise ValueError(f"time must not exceed {limit_minutes:02d}:00")
    return f"{minutes:02d}:{seconds:02d}"


# =============================================================================
# EVENT VARIANTS
# =============================================================================


@dataclass(frozen=True)
class GoalEvent:
    """Immutable record of one scored goal.

    The derived counters reflect event ordering at insertion time and are not
    corrected if earlier events are later edited or removed.
    """

    id: str
    game_id: str
    team: str
    player: str
    period: int
    time: str
    scoring_team_goals_for: int
    scoring_team_goals_against: int
    scorer_goals_in_game: int
    recorded_at: datetime
    assists: tuple[str, ...] = ()
    shot_type: str = DEFAULT_SHOT_TYPE
    goal_type: str = DEFAULT_GOAL_TYPE
    breakaway: bool = False
    description: str = "Goal"
    event_type: EventType = field(default=EventType.goal, init=False)


@dataclass(frozen=True)
class PenaltyEvent:
    """Immutable record of one penalty."""

    id: str
    game_id: str
    team: str
    player: str
    period: int
    time: str
    penalty_type: str
    duration_minutes: int
    penalty_sequence_number: int
    recorded_at: datetime
    infraction: str | None = None
    event_type: EventType = field(default=EventType.penalty, init=False)


@dataclass(frozen=True)
class ShotEvent:
    """Shots on goal credited to a team during a period."""

    id: str
    game_id: str
    team: str
    period: int
    shots: int
    team_shots_in_game: int
    recorded_at: datetime
    event_type: EventType = field(default=EventType.shot, init=False)

    @property
    def player(self) -> None:
        return None


GameEvent = Union[GoalEvent, PenaltyEvent, ShotEvent]
