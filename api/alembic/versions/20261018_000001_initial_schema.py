"""Create games, game_events and game_attendance tables.

Revision ID: 20261018_000001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_000001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "games",
        sa.Column("id", sa.String(length=100), primary_key=True),
        sa.Column("home_team", sa.String(length=100), nullable=False),
        sa.Column("away_team", sa.String(length=100), nullable=False),
        sa.Column("division", sa.String(length=50), nullable=False),
        sa.Column("season", sa.String(length=20), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("venue", sa.String(length=100), nullable=True),
        sa.Column("status", sa.String(length=20), server_default="scheduled", nullable=False),
        sa.Column("home_score", sa.Integer(), nullable=True),
        sa.Column("away_score", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_games_division", "games", ["division"], unique=False)
    op.create_index("ix_games_scheduled_at", "games", ["scheduled_at"], unique=False)
    op.create_index("ix_games_status", "games", ["status"], unique=False)

    op.create_table(
        "game_events",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("game_id", sa.String(length=100), sa.ForeignKey("games.id", ondelete="CASCADE"), nullable=False),
        sa.Column("event_type", sa.String(length=20), nullable=False),
        sa.Column("team", sa.String(length=100), nullable=False),
        sa.Column("player", sa.String(length=100), nullable=True),
        sa.Column("period", sa.Integer(), nullable=False),
        sa.Column("clock", sa.String(length=5), nullable=True),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        # goal
        sa.Column("assists", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("shot_type", sa.String(length=50), nullable=True),
        sa.Column("goal_type", sa.String(length=50), nullable=True),
        sa.Column("breakaway", sa.Boolean(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("scoring_team_goals_for", sa.Integer(), nullable=True),
        sa.Column("scoring_team_goals_against", sa.Integer(), nullable=True),
        sa.Column("scorer_goals_in_game", sa.Integer(), nullable=True),
        # penalty
        sa.Column("penalty_type", sa.String(length=50), nullable=True),
        sa.Column("infraction", sa.String(length=100), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("penalty_sequence_number", sa.Integer(), nullable=True),
        # shot
        sa.Column("shots", sa.Integer(), nullable=True),
        sa.Column("team_shots_in_game", sa.Integer(), nullable=True),
    )
    op.create_index("idx_game_events_game_type", "game_events", ["game_id", "event_type"], unique=False)
    op.create_index("idx_game_events_game_recorded", "game_events", ["game_id", "recorded_at"], unique=False)
    op.create_index("idx_game_events_game_player", "game_events", ["game_id", "player"], unique=False)

    op.create_table(
        "game_attendance",
        sa.Column("id", sa.String(length=120), primary_key=True),
        sa.Column("game_id", sa.String(length=100), sa.ForeignKey("games.id", ondelete="CASCADE"), nullable=False),
        sa.Column("teams", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("total_roster_size", sa.Integer(), nullable=False),
        sa.Column("total_present", sa.Integer(), nullable=False),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("game_id", name="uq_game_attendance_game_id"),
    )


def downgrade() -> None:
    op.drop_table("game_attendance")
    op.drop_index("idx_game_events_game_player", table_name="game_events")
    op.drop_index("idx_game_events_game_recorded", table_name="game_events")
    op.drop_index("idx_game_events_game_type", table_name="game_events")
    op.drop_table("game_events")
    op.drop_index("ix_games_status", table_name="games")
    op.drop_index("ix_games_scheduled_at", table_name="games")
    op.drop_index("ix_games_division", table_name="games")
    op.drop_table("games")
