from __future__ import annotations

import sys
from pathlib import Path
from logging.config import fileConfig

from alembic import context
from sqlmodel import SQLModel

THIS = Path(__file__).resolve()
API_DIR = THIS.parents[1]  # apps/api
sys.path.insert(0, str(API_DIR))

import tracker.modules.game_extensions.models
import tracker.modules.game_sessions.models
import tracker.modules.game_templates.models
import tracker.modules.players.models
from tracker.core.db import create_migration_engine, get_database_url

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = SQLModel.metadata


def get_url() -> str:
    # programmatic runs set sqlalchemy.url; the alembic CLI falls back to DATABASE_URL
    return config.get_main_option("sqlalchemy.url") or get_database_url()


def run_migrations_online() -> None:
    connectable = create_migration_engine(get_url())

    try:
        with connectable.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                transactional_ddl=True,
                transaction_per_migration=True,
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        connectable.dispose()


if context.is_offline_mode():
    # steps probe the live catalog
    raise SystemExit("offline (--sql) migrations are not supported")

run_migrations_online()
