"""initial schema (players, templates with embedded extensions, sessions, current_game)

Revision ID: 0001_initial_schema
Revises:
Create Date: 2024-11-02
"""
from __future__ import annotations

from alembic import op

from tracker.schema.steps import create_initial_schema

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    create_initial_schema(op.get_bind())


def downgrade() -> None:
    raise NotImplementedError("schema steps are forward-only")
