"""Add teams and roster_players tables.

Revision ID: 20261018_000002
Revises: 20261018_000001
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "20261018_000002"
down_revision = "20261018_000001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "teams",
        sa.Column("id", sa.String(length=100), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("division", sa.String(length=50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("name", name="uq_teams_name"),
    )
    op.create_index("ix_teams_division", "teams", ["division"], unique=False)

    op.create_table(
        "roster_players",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("team_id", sa.String(length=100), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("number", sa.String(length=10), nullable=True),
        sa.Column("position", sa.String(length=30), nullable=True),
        sa.UniqueConstraint("team_id", "name", name="uq_roster_players_team_name"),
    )
    op.create_index("ix_roster_players_team_id", "roster_players", ["team_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_roster_players_team_id", table_name="roster_players")
    op.drop_table("roster_players")
    op.drop_index("ix_teams_division", table_name="teams")
    op.drop_table("teams")
