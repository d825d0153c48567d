"""session tracking columns (game mode, coop result, character tracking) + template mode flags

Revision ID: 0002_session_tracking_columns
Revises: 0001_initial_schema
Create Date: 2024-12-14
"""
from __future__ import annotations

from alembic import op

from tracker.schema.steps import add_session_tracking_columns

# revision identifiers, used by Alembic.
revision = "0002_session_tracking_columns"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    add_session_tracking_columns(op.get_bind())


def downgrade() -> None:
    raise NotImplementedError("schema steps are forward-only")
