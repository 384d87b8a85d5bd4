"""
Arena announcer: spoken call lines and TTS audio for recorded events.

The scorekeeping core only hands this module a finished event plus the
current scoreboard. Everything here is presentation: an OpenAI chat call
turns an ``AnnouncementContext`` into one or two spoken sentences, and the
OpenAI speech endpoint renders text to MP3.

Unlike ingestion, a failed announcer call never loses data. Callers that
must always say something use ``fallback_announcement``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from openai import AsyncOpenAI

from ..config import get_settings
from .event_types import GoalEvent, PenaltyEvent, period_label
from .stats import Scoreboard

logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================


class AnnouncerError(Exception):
    """Raised when the announcer provider call fails."""
    pass


class AnnouncerConfigurationError(AnnouncerError):
    """Raised when OpenAI is not configured."""
    pass


# =============================================================================
# CONTEXT
# =============================================================================


@dataclass(frozen=True)
class AnnouncementContext:
    """Everything the announcer needs to call one event."""

    kind: str
    player: str
    team: str
    period: str
    time: str
    home_team: str
    away_team: str
    home_score: int
    away_score: int
    assists: tuple[str, ...] = ()
    scorer_goals_in_game: int | None = None
    goal_type: str | None = None
    penalty_type: str | None = None
    duration_minutes: int | None = None

    def to_payload(self) -> dict[str, Any]:
        payload = {
            "kind": self.kind,
            "player": self.player,
            "team": self.team,
            "period": self.period,
            "time": self.time,
            "homeTeam": self.home_team,
            "awayTeam": self.away_team,
            "homeScore": self.home_score,
            "awayScore": self.away_score,
            "assists": list(self.assists),
        }
        if self.scorer_goals_in_game is not None:
            payload["scorerGoalsInGame"] = self.scorer_goals_in_game
        if self.goal_type is not None:
            payload["goalType"] = self.goal_type
        if self.penalty_type is not None:
            payload["penaltyType"] = self.penalty_type
        if self.duration_minutes is not None:
            payload["durationMinutes"] = self.duration_minutes
        return payload


def build_goal_context(game: Any, event: GoalEvent, scoreboard: Scoreboard) -> AnnouncementContext:
    return AnnouncementContext(
        kind="goal",
        player=event.player,
        team=event.team,
        period=period_label(event.period),
        time=event.time,
        home_team=game.home_team,
        away_team=game.away_team,
        home_score=scoreboard.home.goals,
        away_score=scoreboard.away.goals,
        assists=tuple(event.assists),
        scorer_goals_in_game=event.scorer_goals_in_game,
        goal_type=event.goal_type,
    )


def build_penalty_context(
    game: Any, event: PenaltyEvent, scoreboard: Scoreboard
) -> AnnouncementContext:
    return AnnouncementContext(
        kind="penalty",
        player=event.player,
        team=event.team,
        period=period_label(event.period),
        time=event.time,
        home_team=game.home_team,
        away_team=game.away_team,
        home_score=scoreboard.home.goals,
        away_score=scoreboard.away.goals,
        penalty_type=event.penalty_type,
        duration_minutes=event.duration_minutes,
    )


# =============================================================================
# PROMPTS
# =============================================================================

SYSTEM_PROMPT = (
    "You are a professional roller hockey arena announcer. "
    "Call the play in one or two short spoken sentences. "
    "No stage directions, no formatting."
)


def _period_phrase(period: str) -> str:
    return "overtime" if period == "OT" else f"period {period}"


def _score_line(context: AnnouncementContext) -> str:
    return (
        f"{context.home_team} {context.home_score}, "
        f"{context.away_team} {context.away_score}"
    )


def build_prompt(context: AnnouncementContext) -> str:
    lines = [
        f"Event: {context.kind}",
        f"Player: {context.player} ({context.team})",
        f"When: {context.time} in {_period_phrase(context.period)}",
        f"Score now: {_score_line(context)}",
    ]
    if context.kind == "goal":
        lines.append(f"Assists: {', '.join(context.assists) or 'unassisted'}")
        if context.goal_type:
            lines.append(f"Goal type: {context.goal_type}")
        if context.scorer_goals_in_game and context.scorer_goals_in_game > 1:
            lines.append(f"Scorer's goal number tonight: {context.scorer_goals_in_game}")
    else:
        lines.append(f"Penalty: {context.penalty_type}, {context.duration_minutes} minutes")
    return "\n".join(lines)


def fallback_announcement(context: AnnouncementContext) -> str:
    """Plain template used when the AI call is unavailable."""
    if context.kind == "penalty":
        return f"{context.player}, {context.duration_minutes} minutes for {context.penalty_type}"
    assists = ""
    if context.assists:
        assists = f", assisted by {' and '.join(context.assists)}"
    return (
        f"{context.team} goal scored by {context.player}{assists} "
        f"at {context.time} of {_period_phrase(context.period)}. "
        f"{_score_line(context)}."
    )


# =============================================================================
# OPENAI CLIENT
# =============================================================================

_client: AsyncOpenAI | None = None


def _get_client() -> AsyncOpenAI:
    """Get or create the OpenAI client. Raises if not configured."""
    global _client
    if _client is None:
        settings = get_settings()
        if not settings.openai_api_key:
            raise AnnouncerConfigurationError("OPENAI_API_KEY is not configured.")
        _client = AsyncOpenAI(api_key=settings.openai_api_key)
    return _client


def is_announcer_available() -> bool:
    return bool(get_settings().openai_api_key)


async def generate_announcement(context: AnnouncementContext) -> str:
    client = _get_client()
    settings = get_settings()

    try:
        response = await client.chat.completions.create(
            model=settings.openai_model_announcer,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(context)},
            ],
            temperature=0.8,
            max_tokens=200,
        )
    except Exception as e:
        logger.error(
            "announcer_api_call_failed",
            extra={"kind": context.kind, "player": context.player, "error": str(e)},
        )
        raise AnnouncerError(f"OpenAI API call failed: {e}") from e

    content = response.choices[0].message.content if response.choices else None
    if not content or not content.strip():
        raise AnnouncerError("OpenAI returned empty response")

    logger.info(
        "announcement_generated",
        extra={"kind": context.kind, "player": context.player, "model": settings.openai_model_announcer},
    )
    return content.strip()


async def synthesize_speech(text: str) -> bytes:
    """Render ``text`` to MP3 bytes with the configured voice."""
    if not text.strip():
        raise AnnouncerError("Cannot synthesize empty text")
    client = _get_client()
    settings = get_settings()

    try:
        response = await client.audio.speech.create(
            model=settings.openai_tts_model,
            voice=settings.openai_tts_voice,
            input=text,
            response_format="mp3",
        )
    except Exception as e:
        logger.error("tts_api_call_failed", extra={"error": str(e), "chars": len(text)})
        raise AnnouncerError(f"OpenAI speech call failed: {e}") from e

    audio = response.content
    logger.info("tts_generated", extra={"chars": len(text), "bytes": len(audio)})
    return audio
