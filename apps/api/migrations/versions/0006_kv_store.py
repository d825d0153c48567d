"""key/value store table

Revision ID: 0006_kv_store
Revises: 0005_description_image_fields
Create Date: 2025-04-12
"""
from __future__ import annotations

from alembic import op

from tracker.schema.steps import create_kv_store

# revision identifiers, used by Alembic.
revision = "0006_kv_store"
down_revision = "0005_description_image_fields"
branch_labels = None
depends_on = None


def upgrade() -> None:
    create_kv_store(op.get_bind())


def downgrade() -> None:
    raise NotImplementedError("schema steps are forward-only")
