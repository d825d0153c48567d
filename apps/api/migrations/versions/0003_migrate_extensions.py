"""move template extensions into game_extensions; drop allow_resurrection

Revision ID: 0003_migrate_extensions
Revises: 0002_session_tracking_columns
Create Date: 2025-01-20
"""
from __future__ import annotations

from alembic import op

from tracker.schema.steps import migrate_extensions

# revision identifiers, used by Alembic.
revision = "0003_migrate_extensions"
down_revision = "0002_session_tracking_columns"
branch_labels = None
depends_on = None


def upgrade() -> None:
    migrate_extensions(op.get_bind())


def downgrade() -> None:
    raise NotImplementedError("schema steps are forward-only")
