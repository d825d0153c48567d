"""
Catalog probes and tolerant DDL helpers for the migration steps.

All helpers take a SQLAlchemy connection (Alembic's `op.get_bind()` or a
connection from `create_migration_engine`). A missing table is never an
error here: the helper logs a warning and reports that it did nothing.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import sqlalchemy as sa
from sqlalchemy.engine import Connection

_log = logging.getLogger("tracker.migrations")

ColumnDef = Tuple[str, str]  # (name, "TYPE [constraints]")


def table_exists(conn: Connection, name: str) -> bool:
    rows = conn.execute(
        sa.text("SELECT name FROM sqlite_master WHERE type='table' AND name=:n"), {"n": name}
    ).fetchall()
    return len(rows) > 0


def index_exists(conn: Connection, name: str) -> bool:
    rows = conn.execute(
        sa.text("SELECT name FROM sqlite_master WHERE type='index' AND name=:n"), {"n": name}
    ).fetchall()
    return len(rows) > 0


def table_info(conn: Connection, table: str) -> List[Dict[str, object]]:
    rows = conn.exec_driver_sql(f"PRAGMA table_info('{table}')").fetchall()
    # (cid, name, type, notnull, dflt_value, pk)
    return [
        {"name": r[1], "type": r[2] or "", "notnull": int(r[3]), "dflt_value": r[4], "pk": int(r[5])}
        for r in rows
    ]


def column_names(conn: Connection, table: str) -> List[str]:
    return [str(c["name"]) for c in table_info(conn, table)]


def column_exists(conn: Connection, table: str, col: str) -> bool:
    return col in column_names(conn, table)


def add_column_if_missing(conn: Connection, table: str, column: str, ddl: str) -> bool:
    if not table_exists(conn, table):
        _log.warning("Table %s does not exist, skipping column %s", table, column)
        return False
    if column_exists(conn, table, column):
        _log.debug("Column %s.%s already present", table, column)
        return False
    conn.exec_driver_sql(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}")
    _log.info("Added column %s.%s", table, column)
    return True


def add_columns_if_missing(conn: Connection, table: str, columns: Iterable[ColumnDef]) -> List[str]:
    if not table_exists(conn, table):
        _log.warning("Table %s does not exist, skipping %s", table, ", ".join(c for c, _ in columns))
        return []
    return [c for c, ddl in columns if add_column_if_missing(conn, table, c, ddl)]


def create_index_if_table(
    conn: Connection, table: str, index: str, columns: Sequence[str], unique: bool = False
) -> bool:
    if not table_exists(conn, table):
        _log.warning("Table %s does not exist, skipping index %s", table, index)
        return False
    kind = "UNIQUE INDEX" if unique else "INDEX"
    conn.exec_driver_sql(f"CREATE {kind} IF NOT EXISTS {index} ON {table} ({', '.join(columns)})")
    return True


def _extra_column_ddl(info: Dict[str, object]) -> str:
    parts = [str(info["name"])]
    if info["type"]:
        parts.append(str(info["type"]))
    if info["dflt_value"] is not None:
        parts.append(f"DEFAULT {info['dflt_value']}")
    return " ".join(parts)


def rebuild_table(
    conn: Connection,
    table: str,
    columns: Sequence[ColumnDef],
    *,
    constraints: Sequence[str] = (),
    drop: Iterable[str] = (),
    renames: Optional[Dict[str, str]] = None,
) -> bool:
    """
    Reshape `table` through a shadow table: create, copy, drop old, rename.

    - columns: the target columns; new ones must be nullable or defaulted
    - drop: legacy columns to leave behind
    - renames: target column -> legacy source column
    Columns of the old table that are neither targets, dropped nor rename
    sources are carried over unchanged. Returns False (and does nothing) when
    the table is absent or already has the target shape.

    Runs inside one SAVEPOINT; the caller's connection must have foreign key
    enforcement off (see create_migration_engine).
    """
    if not table_exists(conn, table):
        _log.warning("Table %s does not exist, skipping rebuild", table)
        return False

    renames = dict(renames or {})
    drop_set = set(drop)
    old = table_info(conn, table)
    old_names = [str(c["name"]) for c in old]
    target_names = [name for name, _ in columns]

    sources: Dict[str, str] = {}
    for name in target_names:
        if name in old_names:
            sources[name] = name
        elif renames.get(name) in old_names:
            sources[name] = renames[name]

    legacy_present = [c for c in old_names if c in drop_set]
    missing = [n for n in target_names if n not in sources]
    renamed = [n for n, src in sources.items() if n != src]
    if not legacy_present and not missing and not renamed:
        _log.info("Table %s already has the target shape, skipping rebuild", table)
        return False

    consumed = set(target_names) | drop_set | set(sources.values())
    extras = [c for c in old if str(c["name"]) not in consumed]

    col_defs = [f"{name} {ddl}" for name, ddl in columns]
    col_defs += [_extra_column_ddl(c) for c in extras]
    col_defs += list(constraints)

    copy_targets = [n for n in target_names if n in sources] + [str(c["name"]) for c in extras]
    copy_sources = [sources[n] for n in target_names if n in sources] + [str(c["name"]) for c in extras]

    shadow = f"{table}_new"
    with conn.begin_nested():
        conn.exec_driver_sql(f"DROP TABLE IF EXISTS {shadow}")
        conn.exec_driver_sql(f"CREATE TABLE {shadow} (\n  " + ",\n  ".join(col_defs) + "\n)")
        if copy_targets:
            conn.exec_driver_sql(
                f"INSERT INTO {shadow} ({', '.join(copy_targets)}) "
                f"SELECT {', '.join(copy_sources)} FROM {table}"
            )
        conn.exec_driver_sql(f"DROP TABLE {table}")
        conn.exec_driver_sql(f"ALTER TABLE {shadow} RENAME TO {table}")

    _log.info(
        "Rebuilt table %s (dropped: %s, added: %s, renamed: %s)",
        table,
        ", ".join(legacy_present) or "-",
        ", ".join(missing) or "-",
        ", ".join(f"{sources[n]}->{n}" for n in renamed) or "-",
    )
    _warn_dangling_foreign_keys(conn, table)
    return True


def _warn_dangling_foreign_keys(conn: Connection, table: str) -> None:
    try:
        rows = conn.exec_driver_sql(f"PRAGMA foreign_key_check('{table}')").fetchall()
    except sa.exc.DBAPIError as e:
        _log.warning("Foreign key check failed for %s: %s", table, e)
        return
    # (table, rowid, parent, fkid)
    by_parent: Dict[str, int] = {}
    for r in rows:
        by_parent[str(r[2])] = by_parent.get(str(r[2]), 0) + 1
    for parent, n in sorted(by_parent.items()):
        _log.warning("%d row(s) of %s reference missing %s rows", n, table, parent)
