"""Game event rows: goals, penalties and shots on goal.

All variants share the ``game_events`` table and are discriminated by
``event_type`` (single-table inheritance). Variant-specific columns are
nullable at the table level; the ORM subclasses expose only their own fields.
Rows are append-only: derived counters captured at insert time are never
rewritten when earlier events change.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .games import Game


class GameEventRow(Base):
    """Columns common to every recorded in-game event."""

    __tablename__ = "game_events"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    game_id: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("games.id", ondelete="CASCADE"),
        nullable=False,
    )
    event_type: Mapped[str] = mapped_column(String(20), nullable=False)
    team: Mapped[str] = mapped_column(String(100), nullable=False)
    # Shots on goal are team-level entries without a player or clock.
    player: Mapped[str | None] = mapped_column(String(100), nullable=True)
    period: Mapped[int] = mapped_column(Integer, nullable=False)
    clock: Mapped[str | None] = mapped_column(String(5), nullable=True)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    game: Mapped["Game"] = relationship("Game", back_populates="events")

    __mapper_args__ = {
        "polymorphic_on": "event_type",
        "polymorphic_identity": "event",
    }

    __table_args__ = (
        Index("idx_game_events_game_type", "game_id", "event_type"),
        Index("idx_game_events_game_recorded", "game_id", "recorded_at"),
        Index("idx_game_events_game_player", "game_id", "player"),
    )


class GoalEventRow(GameEventRow):
    assists: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)
    shot_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    goal_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    breakaway: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    scoring_team_goals_for: Mapped[int | None] = mapped_column(Integer, nullable=True)
    scoring_team_goals_against: Mapped[int | None] = mapped_column(Integer, nullable=True)
    scorer_goals_in_game: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __mapper_args__ = {"polymorphic_identity": "goal"}


class PenaltyEventRow(GameEventRow):
    penalty_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    infraction: Mapped[str | None] = mapped_column(String(100), nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    penalty_sequence_number: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __mapper_args__ = {"polymorphic_identity": "penalty"}


class ShotEventRow(GameEventRow):
    shots: Mapped[int | None] = mapped_column(Integer, nullable=True)
    team_shots_in_game: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __mapper_args__ = {"polymorphic_identity": "shot"}
