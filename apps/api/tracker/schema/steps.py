"""
Schema steps, one plain function per Alembic revision.

Every step probes the catalog before acting, so it can be re-run on a
database that already has (part of) its target structure, or on a
hand-edited file whose tables are missing.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Tuple

import sqlalchemy as sa
from sqlalchemy.engine import Connection

from tracker.core.ids import new_ulid
from tracker.core.jsonfields import safe_json_loads
from tracker.schema.ddl import (
    add_columns_if_missing,
    column_exists,
    create_index_if_table,
    rebuild_table,
    table_exists,
)

_log = logging.getLogger("tracker.migrations")


# ---- 0001 ----

def create_initial_schema(conn: Connection) -> None:
    conn.exec_driver_sql("""
    CREATE TABLE IF NOT EXISTS players (
      id TEXT NOT NULL PRIMARY KEY,
      name TEXT NOT NULL,
      created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """)
    conn.exec_driver_sql("""
    CREATE TABLE IF NOT EXISTS game_templates (
      name TEXT NOT NULL PRIMARY KEY,
      has_characters INTEGER NOT NULL DEFAULT 0,
      characters TEXT,
      extensions TEXT,
      is_cooperative_by_default INTEGER NOT NULL DEFAULT 0,
      created_at TEXT DEFAULT CURRENT_TIMESTAMP
    )
    """)
    conn.exec_driver_sql("""
    CREATE TABLE IF NOT EXISTS game_sessions (
      id TEXT NOT NULL PRIMARY KEY,
      game_type TEXT NOT NULL,
      is_cooperative INTEGER NOT NULL DEFAULT 0,
      players TEXT NOT NULL,
      scores TEXT NOT NULL,
      characters TEXT,
      winner TEXT,
      win_condition TEXT,
      date TEXT,
      start_time TEXT,
      end_time TEXT,
      duration INTEGER,
      completed INTEGER NOT NULL DEFAULT 0,
      allow_resurrection INTEGER,
      created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """)
    conn.exec_driver_sql("""
    CREATE TABLE IF NOT EXISTS current_game (
      id INTEGER PRIMARY KEY CHECK (id = 1),
      game_data TEXT
    )
    """)
    conn.exec_driver_sql("INSERT OR IGNORE INTO current_game (id, game_data) VALUES (1, NULL)")
    _log.info("Migration complete: initial schema")


# ---- 0002 ----

SESSION_TRACKING_COLUMNS = [
    ("game_mode", "TEXT"),
    ("extensions", "TEXT"),
    ("coop_result", "TEXT"),
    ("dead_characters", "TEXT"),
    ("new_character_names", "TEXT"),
    ("character_history", "TEXT"),
]

TEMPLATE_MODE_COLUMNS = [
    ("supports_cooperative", "INTEGER"),
    ("supports_competitive", "INTEGER"),
    ("supports_campaign", "INTEGER"),
    ("default_mode", "TEXT"),
]


def add_session_tracking_columns(conn: Connection) -> None:
    add_columns_if_missing(conn, "game_sessions", SESSION_TRACKING_COLUMNS)
    add_columns_if_missing(conn, "game_templates", TEMPLATE_MODE_COLUMNS)
    _log.info("Migration complete: session tracking columns")


# ---- 0003 ----

EXTENSION_FK = (
    "FOREIGN KEY (base_game_name) REFERENCES game_templates(name) "
    "ON UPDATE CASCADE ON DELETE CASCADE"
)

TEMPLATE_COLUMNS = [
    ("name", "TEXT NOT NULL PRIMARY KEY"),
    ("has_characters", "INTEGER NOT NULL DEFAULT 0"),
    ("characters", "TEXT"),
    ("is_cooperative_by_default", "INTEGER NOT NULL DEFAULT 0"),
    ("supports_cooperative", "INTEGER"),
    ("supports_competitive", "INTEGER"),
    ("supports_campaign", "INTEGER"),
    ("default_mode", "TEXT"),
    ("base_game_name", "TEXT"),
]

SESSION_COLUMNS = [
    ("id", "TEXT NOT NULL PRIMARY KEY"),
    ("game_type", "TEXT NOT NULL"),
    ("is_cooperative", "INTEGER NOT NULL DEFAULT 0"),
    ("players", "TEXT NOT NULL"),
    ("scores", "TEXT NOT NULL"),
    ("characters", "TEXT"),
    ("winner", "TEXT"),
    ("win_condition", "TEXT"),
    ("date", "TEXT"),
    ("start_time", "TEXT"),
    ("end_time", "TEXT"),
    ("duration", "INTEGER"),
    ("completed", "INTEGER NOT NULL DEFAULT 0"),
    ("created_at", "TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP"),
    ("game_mode", "TEXT"),
    ("extensions", "TEXT"),
    ("coop_result", "TEXT"),
    ("dead_characters", "TEXT"),
    ("new_character_names", "TEXT"),
    ("character_history", "TEXT"),
]


def create_extensions_table(conn: Connection) -> None:
    conn.exec_driver_sql(f"""
    CREATE TABLE IF NOT EXISTS game_extensions (
      id TEXT NOT NULL PRIMARY KEY,
      name TEXT NOT NULL,
      base_game_name TEXT NOT NULL,
      description TEXT,
      created_at TEXT DEFAULT CURRENT_TIMESTAMP,
      UNIQUE (name, base_game_name),
      {EXTENSION_FK}
    )
    """)


def lift_template_extensions(conn: Connection) -> int:
    """
    Copy every template's embedded `extensions` JSON list into game_extensions.

    Unparseable cells, non-list values and blank names are skipped. Returns the
    number of rows actually inserted (0 on a re-run).
    """
    if not table_exists(conn, "game_templates"):
        _log.warning("Table game_templates does not exist, nothing to lift")
        return 0
    if not column_exists(conn, "game_templates", "extensions"):
        _log.info("game_templates.extensions already gone, nothing to lift")
        return 0

    rows = conn.execute(
        sa.text("SELECT name, extensions FROM game_templates WHERE extensions IS NOT NULL")
    ).fetchall()

    inserted = 0
    for template_name, raw in rows:
        parsed = safe_json_loads(raw)
        if not isinstance(parsed, list):
            if raw not in (None, ""):
                _log.warning("Unreadable extensions for template %s, skipped", template_name)
            continue
        for item in parsed:
            if not isinstance(item, str) or not item.strip():
                continue
            res = conn.execute(
                sa.text(
                    "INSERT OR IGNORE INTO game_extensions (id, name, base_game_name) "
                    "VALUES (:id, :name, :base)"
                ),
                {"id": new_ulid(), "name": item.strip(), "base": template_name},
            )
            inserted += max(res.rowcount or 0, 0)

    _log.info("Lifted %d extension(s) from game_templates", inserted)
    return inserted


def migrate_extensions(conn: Connection) -> None:
    create_extensions_table(conn)
    lift_template_extensions(conn)
    rebuild_table(
        conn,
        "game_templates",
        TEMPLATE_COLUMNS,
        drop={"extensions", "created_at"},
    )
    rebuild_table(
        conn,
        "game_sessions",
        SESSION_COLUMNS,
        drop={"allow_resurrection"},
        renames={"game_type": "game_template_id"},
    )
    _log.info("Migration complete: extensions moved to game_extensions")


# ---- 0004 ----

EXTENSION_COLUMNS = [
    ("id", "TEXT NOT NULL PRIMARY KEY"),
    ("name", "TEXT NOT NULL"),
    ("base_game_name", "TEXT NOT NULL"),
    ("description", "TEXT"),
    ("min_players", "INTEGER"),
    ("max_players", "INTEGER"),
    ("rules", "TEXT"),
]

INDEXES = [
    ("game_extensions", "idx_game_extensions_name", ["name"]),
    ("game_extensions", "idx_game_extensions_base_game_name", ["base_game_name"]),
    ("game_templates", "idx_game_templates_name", ["name"]),
    ("game_sessions", "idx_game_sessions_game_type", ["game_type"]),
]


def enrich_game_extensions(conn: Connection) -> None:
    rebuild_table(
        conn,
        "game_extensions",
        EXTENSION_COLUMNS,
        constraints=["UNIQUE (name, base_game_name)", EXTENSION_FK],
        drop={"created_at"},
    )
    for table, index, cols in INDEXES:
        create_index_if_table(conn, table, index, cols)
    _log.info("Migration complete: game_extensions enriched and indexed")


# ---- 0005 ----

def add_description_image_fields(conn: Connection) -> None:
    add_columns_if_missing(
        conn,
        "game_templates",
        [
            ("min_players", "INTEGER"),
            ("max_players", "INTEGER"),
            ("description", "TEXT"),
            ("image", "TEXT"),
        ],
    )
    add_columns_if_missing(conn, "game_sessions", [("image", "TEXT")])
    add_columns_if_missing(conn, "game_extensions", [("image", "TEXT")])
    _log.info("Migration complete: description and image fields")


# ---- 0006 ----

def create_kv_store(conn: Connection) -> None:
    conn.exec_driver_sql("""
    CREATE TABLE IF NOT EXISTS kv_entries (
      key TEXT NOT NULL PRIMARY KEY,
      value_json TEXT NOT NULL,
      updated_at TEXT NOT NULL
    )
    """)
    _log.info("Migration complete: kv store")


STEPS: List[Tuple[str, Callable[[Connection], None]]] = [
    ("0001_initial_schema", create_initial_schema),
    ("0002_session_tracking_columns", add_session_tracking_columns),
    ("0003_migrate_extensions", migrate_extensions),
    ("0004_enrich_game_extensions", enrich_game_extensions),
    ("0005_description_image_fields", add_description_image_fields),
    ("0006_kv_store", create_kv_store),
]
