"""
DB utilities (sqlite only).

Defaults:
- DATABASE_URL: sqlite:///./data/board-game-tracker.db (relative to repo root)
"""
from __future__ import annotations

import os
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy import create_engine, event, pool
from sqlalchemy.engine import Engine

DEFAULT_DATABASE_URL = "sqlite:///./data/board-game-tracker.db"


def get_database_url() -> str:
    return os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)


def _repo_root() -> Path:
    # apps/api/tracker/core/db.py -> repo root = parents[4]
    return Path(__file__).resolve().parents[4]


def repo_root() -> Path:
    return _repo_root()


def resolve_sqlite_path(database_url: str) -> Optional[Path]:
    if not database_url.startswith("sqlite:///"):
        return None
    p = database_url[len("sqlite:///") :]

    # absolute unix
    if p.startswith("/"):
        return Path(p)

    # absolute windows drive, both C:/ and C:\ forms
    if len(p) >= 3 and p[1] == ":" and (p[2] == "/" or p[2] == "\\"):
        return Path(p)

    # relative -> repo root
    return (_repo_root() / p).resolve()


def get_db_path(database_url: Optional[str] = None) -> Path:
    url = database_url or get_database_url()
    sp = resolve_sqlite_path(url)
    if sp is None:
        raise ValueError(f"Only sqlite file databases are supported, got DATABASE_URL={url!r}")
    return sp


def connect(database_url: Optional[str] = None) -> sqlite3.Connection:
    """Short-lived connection for the service layer (foreign keys enforced)."""
    path = get_db_path(database_url)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON;")
    return conn


def connect_readonly(database_url: Optional[str] = None) -> sqlite3.Connection:
    """Read-only connection; raises sqlite3.OperationalError if the file cannot be opened."""
    path = get_db_path(database_url)
    conn = sqlite3.connect(f"file:{path.as_posix()}?mode=ro", uri=True)
    conn.row_factory = sqlite3.Row
    return conn


def table_exists(conn: sqlite3.Connection, table: str) -> bool:
    row = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
        (table,),
    ).fetchone()
    return row is not None


def sqlite_url(path: Path) -> str:
    return "sqlite:///" + Path(path).resolve().as_posix()


def create_migration_engine(database_url: Optional[str] = None) -> Engine:
    """
    Engine used by schema migrations.

    - pysqlite's implicit transaction handling is disabled and BEGIN is emitted
      by SQLAlchemy, so DDL and SAVEPOINTs are transactional.
    - foreign key enforcement is OFF on every migration connection; it has to be
      set before BEGIN, hence the connect hook. Service connections turn it on.
    """
    url = database_url or get_database_url()
    sp = resolve_sqlite_path(url)
    if sp is not None:
        sp.parent.mkdir(parents=True, exist_ok=True)
        url = "sqlite:///" + sp.as_posix()

    engine = create_engine(url, future=True, poolclass=pool.NullPool)

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        dbapi_connection.execute("PRAGMA foreign_keys=OFF;")

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def db_health() -> Dict[str, Any]:
    url = get_database_url()
    kind = "sqlite" if url.startswith("sqlite") else "unknown"
    sp = resolve_sqlite_path(url)
    path = str(sp.as_posix()) if sp is not None else url

    try:
        conn = connect(url)
        try:
            conn.execute("SELECT 1")
        finally:
            conn.close()
        return {"status": "ok", "kind": kind, "path": path}
    except Exception as e:
        return {"status": "error", "kind": kind, "path": path, "error": str(e)}
