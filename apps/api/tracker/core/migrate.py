"""
Programmatic access to the Alembic chain in apps/api/migrations.

The ledger is Alembic's `alembic_version` table; it holds the applied head.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory

from tracker.core.db import create_migration_engine, get_database_url, resolve_sqlite_path

_log = logging.getLogger("tracker.migrations")

# apps/api/tracker/core/migrate.py -> apps/api = parents[2]
API_DIR = Path(__file__).resolve().parents[2]
MIGRATIONS_DIR = API_DIR / "migrations"


def _resolved_url(database_url: Optional[str]) -> str:
    url = database_url or get_database_url()
    sp = resolve_sqlite_path(url)
    if sp is not None:
        return "sqlite:///" + sp.as_posix()
    return url


def alembic_config(database_url: Optional[str] = None) -> Config:
    # no ini file: logging stays as the caller configured it
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    cfg.set_main_option("sqlalchemy.url", _resolved_url(database_url).replace("%", "%%"))
    return cfg


def current_revision(database_url: Optional[str] = None) -> Optional[str]:
    engine = create_migration_engine(_resolved_url(database_url))
    try:
        with engine.connect() as conn:
            return MigrationContext.configure(conn).get_current_revision()
    finally:
        engine.dispose()


def _applied(script: ScriptDirectory, current: Optional[str]) -> Set[str]:
    if current is None:
        return set()
    return {rev.revision for rev in script.iterate_revisions(current, "base")}


def revision_history(database_url: Optional[str] = None) -> List[Dict[str, Any]]:
    """All revisions, oldest first, each flagged with whether it is applied."""
    cfg = alembic_config(database_url)
    script = ScriptDirectory.from_config(cfg)
    applied = _applied(script, current_revision(database_url))

    out: List[Dict[str, Any]] = []
    for rev in reversed(list(script.walk_revisions())):
        out.append(
            {
                "revision": rev.revision,
                "down_revision": rev.down_revision,
                "doc": rev.doc,
                "applied": rev.revision in applied,
            }
        )
    return out


def upgrade(database_url: Optional[str] = None, revision: str = "head") -> List[str]:
    """
    Apply pending revisions up to `revision`; returns the ids applied by this call.

    Each revision runs in its own transaction; a failing step rolls back that
    revision and the exception propagates.
    """
    cfg = alembic_config(database_url)
    script = ScriptDirectory.from_config(cfg)
    before = _applied(script, current_revision(database_url))

    _log.info("Upgrading %s to %s", _resolved_url(database_url), revision)
    command.upgrade(cfg, revision)

    after = _applied(script, current_revision(database_url))
    ordered = [rev.revision for rev in reversed(list(script.walk_revisions()))]
    return [r for r in ordered if r in after and r not in before]
