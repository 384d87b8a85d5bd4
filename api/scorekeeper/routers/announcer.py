"""Announcer endpoints: spoken call text and TTS audio for recorded events."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response

from ..services import announcer
from ..services.errors import NotFoundError
from ..services.event_store import SqlEventStore
from ..services.event_types import GoalEvent, PenaltyEvent
from ..services.ingestion_helpers import require_game
from ..services.stats import compute_scoreboard
from .dependencies import get_event_store
from .schemas import AnnouncementResponse, SpeechRequest

router = APIRouter(prefix="/api/announcer", tags=["announcer"])
logger = logging.getLogger(__name__)


async def _announce(context: announcer.AnnouncementContext) -> AnnouncementResponse:
    try:
        text = await announcer.generate_announcement(context)
        source = "ai"
    except announcer.AnnouncerError as exc:
        logger.warning(
            "announcer_fallback_used",
            extra={"kind": context.kind, "player": context.player, "error": str(exc)},
        )
        text = announcer.fallback_announcement(context)
        source = "fallback"
    return AnnouncementResponse(text=text, source=source, context=context.to_payload())


@router.post("/goals/{event_id}", response_model=AnnouncementResponse)
async def announce_goal(
    event_id: str, store: SqlEventStore = Depends(get_event_store)
) -> AnnouncementResponse:
    event = await store.get_event(event_id)
    if not isinstance(event, GoalEvent):
        raise NotFoundError("goal", event_id)
    game = await require_game(store, event.game_id)
    scoreboard = await compute_scoreboard(store, game)
    return await _announce(announcer.build_goal_context(game, event, scoreboard))


@router.post("/penalties/{event_id}", response_model=AnnouncementResponse)
async def announce_penalty(
    event_id: str, store: SqlEventStore = Depends(get_event_store)
) -> AnnouncementResponse:
    event = await store.get_event(event_id)
    if not isinstance(event, PenaltyEvent):
        raise NotFoundError("penalty", event_id)
    game = await require_game(store, event.game_id)
    scoreboard = await compute_scoreboard(store, game)
    return await _announce(announcer.build_penalty_context(game, event, scoreboard))


@router.post("/tts", response_class=Response)
async def text_to_speech(payload: SpeechRequest) -> Response:
    audio = await announcer.synthesize_speech(payload.text)
    return Response(content=audio, media_type="audio/mpeg")
