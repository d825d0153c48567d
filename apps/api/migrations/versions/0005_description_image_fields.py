"""description/image fields on templates, sessions, extensions

Revision ID: 0005_description_image_fields
Revises: 0004_enrich_game_extensions
Create Date: 2025-03-01
"""
from __future__ import annotations

from alembic import op

from tracker.schema.steps import add_description_image_fields

# revision identifiers, used by Alembic.
revision = "0005_description_image_fields"
down_revision = "0004_enrich_game_extensions"
branch_labels = None
depends_on = None


def upgrade() -> None:
    add_description_image_fields(op.get_bind())


def downgrade() -> None:
    raise NotImplementedError("schema steps are forward-only")
