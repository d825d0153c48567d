"""game_extensions min/max players + rules; lookup indexes

Revision ID: 0004_enrich_game_extensions
Revises: 0003_migrate_extensions
Create Date: 2025-02-08
"""
from __future__ import annotations

from alembic import op

from tracker.schema.steps import enrich_game_extensions

# revision identifiers, used by Alembic.
revision = "0004_enrich_game_extensions"
down_revision = "0003_migrate_extensions"
branch_labels = None
depends_on = None


def upgrade() -> None:
    enrich_game_extensions(op.get_bind())


def downgrade() -> None:
    raise NotImplementedError("schema steps are forward-only")
