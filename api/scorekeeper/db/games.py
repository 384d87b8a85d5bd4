"""Scheduled games and per-game attendance."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .events import GameEventRow


class GameStatus(str, Enum):
    """Game lifecycle: scheduled -> in-progress -> final."""

    scheduled = "scheduled"
    in_progress = "in-progress"
    final = "final"


DIVISIONS = ("Gold", "Silver", "Bronze")


class Game(Base):
    """A scheduled contest between two teams.

    Created at schedule-import time and only mutated to update score/status.
    Games are never deleted during a season.
    """

    __tablename__ = "games"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    home_team: Mapped[str] = mapped_column(String(100), nullable=False)
    away_team: Mapped[str] = mapped_column(String(100), nullable=False)
    division: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    season: Mapped[str] = mapped_column(String(20), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    venue: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=GameStatus.scheduled.value, nullable=False, index=True
    )
    home_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    away_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    events: Mapped[list["GameEventRow"]] = relationship(
        "GameEventRow", back_populates="game", order_by="GameEventRow.recorded_at"
    )
    attendance: Mapped["GameAttendance | None"] = relationship(
        "GameAttendance", back_populates="game", uselist=False
    )

    @property
    def teams(self) -> tuple[str, str]:
        return (self.home_team, self.away_team)

    def opponent_of(self, team: str) -> str:
        """Return the other team's name. Caller guarantees ``team`` plays in this game."""
        return self.away_team if team == self.home_team else self.home_team


class GameAttendance(Base):
    """Players present for each team at one game (one record per game)."""

    __tablename__ = "game_attendance"

    id: Mapped[str] = mapped_column(String(120), primary_key=True)
    game_id: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("games.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    teams: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, nullable=False)
    total_roster_size: Mapped[int] = mapped_column(Integer, nullable=False)
    total_present: Mapped[int] = mapped_column(Integer, nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    game: Mapped[Game] = relationship("Game", back_populates="attendance")
