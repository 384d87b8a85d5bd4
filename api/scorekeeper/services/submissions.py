"""Input models for event submissions.

These models are both the FastAPI request bodies and the service-level
contract: services accept either a model instance or a raw mapping and
convert schema failures into ``ValidationError``.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import get_settings
from .errors import ValidationError
from .event_types import (
    DEFAULT_GOAL_TYPE,
    DEFAULT_PENALTY_MINUTES,
    DEFAULT_SHOT_TYPE,
    MAX_ASSISTS,
    MAX_PENALTY_MINUTES,
    MAX_SHOTS_PER_ENTRY,
    MIN_PENALTY_MINUTES,
    parse_clock,
    parse_period,
)

SubmissionT = TypeVar("SubmissionT", bound=BaseModel)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class _EventSubmission(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    game_id: str = Field(..., alias="gameId", min_length=1)
    team: str = Field(..., min_length=1)
    period: int

    @field_validator("game_id", mode="before")
    @classmethod
    def _numeric_game_id(cls, value: Any) -> Any:
        # Older clients post numeric game ids.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("period", mode="before")
    @classmethod
    def _period(cls, value: Any) -> int:
        return parse_period(value)


class _TimedSubmission(_EventSubmission):
    player: str = Field(..., min_length=1)
    time: str

    @field_validator("time")
    @classmethod
    def _clock(cls, value: str) -> str:
        return parse_clock(value, get_settings().period_length_seconds)


class GoalSubmission(_TimedSubmission):
    assists: list[str] = Field(default_factory=list, alias="assist")
    shot_type: str = Field(DEFAULT_SHOT_TYPE, alias="shotType")
    goal_type: str = Field(DEFAULT_GOAL_TYPE, alias="goalType")
    breakaway: bool = False

    @field_validator("assists", mode="before")
    @classmethod
    def _assists(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple)):
            cleaned = [item.strip() if isinstance(item, str) else item for item in value]
            cleaned = [item for item in cleaned if item != ""]
            if len(cleaned) > MAX_ASSISTS:
                raise ValueError(f"at most {MAX_ASSISTS} assists per goal")
            return cleaned
        return value

    @field_validator("shot_type", mode="before")
    @classmethod
    def _shot_type(cls, value: Any) -> Any:
        return DEFAULT_SHOT_TYPE if _is_blank(value) else value

    @field_validator("goal_type", mode="before")
    @classmethod
    def _goal_type(cls, value: Any) -> Any:
        return DEFAULT_GOAL_TYPE if _is_blank(value) else value


class PenaltySubmission(_TimedSubmission):
    penalty_type: str = Field(..., alias="penaltyType", min_length=1)
    duration: int = Field(
        DEFAULT_PENALTY_MINUTES, ge=MIN_PENALTY_MINUTES, le=MAX_PENALTY_MINUTES
    )
    infraction: str | None = None


class ShotSubmission(_EventSubmission):
    shots: int = Field(1, ge=1, le=MAX_SHOTS_PER_ENTRY)


def format_pydantic_errors(errors: Iterable[Mapping[str, Any]]) -> list[str]:
    """Flatten pydantic error dicts into ``"field: message"`` strings."""
    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        messages.append(f"{location}: {message}" if location else message)
    return messages


def coerce_submission(
    model: type[SubmissionT], submission: SubmissionT | Mapping[str, Any]
) -> SubmissionT:
    """Return ``submission`` as ``model``, raising ValidationError on bad input."""
    if isinstance(submission, model):
        return submission
    if not isinstance(submission, Mapping):
        raise ValidationError("submission must be an object")
    try:
        return model.model_validate(dict(submission))
    except pydantic.ValidationError as exc:
        raise ValidationError(format_pydantic_errors(exc.errors())) from exc
