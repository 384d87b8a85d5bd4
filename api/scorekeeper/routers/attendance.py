"""Attendance endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..db import AsyncSession, get_db
from ..services import attendance as attendance_service
from ..services import rosters as roster_service
from ..services import schedule
from .schemas import AttendanceResponse

router = APIRouter(prefix="/api", tags=["attendance"])


@router.put(
    "/games/{game_id}/attendance",
    response_model=AttendanceResponse,
    status_code=status.HTTP_200_OK,
)
async def put_attendance(
    game_id: str,
    payload: attendance_service.AttendanceSubmission,
    session: AsyncSession = Depends(get_db),
) -> AttendanceResponse:
    """Create or replace the attendance record for a game."""
    game = await schedule.get_game(session, game_id)
    rosters = await roster_service.get_game_rosters(session, game)
    record = await attendance_service.record_attendance(session, game, payload, rosters)
    return AttendanceResponse.from_record(record)


@router.get("/games/{game_id}/attendance", response_model=AttendanceResponse)
async def get_attendance(
    game_id: str, session: AsyncSession = Depends(get_db)
) -> AttendanceResponse:
    record = await attendance_service.get_attendance(session, game_id)
    return AttendanceResponse.from_record(record)
