"""
Schema/type drift audit.

Everything here is read-only: the database is opened with `mode=ro` and
problems end up as strings in the report, never as exceptions. The only
error a caller sees is the database file failing to open.

Declared row types come from one of two places:
- a text file scanned for `export interface Name { ... }` blocks
  (AUDIT_TYPES_PATH or an explicit path), or
- the SQLModel row models of this package (the default).
"""
from __future__ import annotations

import json
import logging
import os
import re
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional

from tracker.core.db import connect_readonly, get_database_url, repo_root, resolve_sqlite_path
from tracker.modules.game_extensions.models import GameExtension
from tracker.modules.game_sessions.models import GameSession
from tracker.modules.game_templates.models import GameTemplate
from tracker.modules.players.models import Player

_log = logging.getLogger("tracker.audit")

TABLE_TYPE_MAP: Dict[str, str] = {
    "players": "Player",
    "game_templates": "GameTemplate",
    "game_sessions": "GameSession",
}

DOC_FILES = ("docs/database-structure.md", "README.md", "ROADMAP.md")

_INTERFACE_RE = re.compile(r"export interface ([A-Za-z0-9_]+) \{([^}]+)\}")
_COMMENT_PREFIXES = ("//", "/*", "*")


# -------------------------
# live schema
# -------------------------
def get_table_schemas(conn: sqlite3.Connection) -> List[Dict[str, Any]]:
    rows = conn.execute(
        "SELECT name, sql FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name;"
    ).fetchall()
    return [{"name": r["name"], "schema": r["sql"]} for r in rows]


def get_table_columns(conn: sqlite3.Connection, table: str) -> List[str]:
    rows = conn.execute(f"PRAGMA table_info('{table}');").fetchall()
    return [r["name"] for r in rows]


def get_indexes_and_fks(conn: sqlite3.Connection, table: str) -> Dict[str, Any]:
    indexes = [
        {"name": r["name"], "unique": bool(r["unique"]), "origin": r["origin"]}
        for r in conn.execute(f"PRAGMA index_list('{table}');").fetchall()
    ]
    fks = [
        {
            "table": r["table"],
            "from": r["from"],
            "to": r["to"],
            "on_update": r["on_update"],
            "on_delete": r["on_delete"],
        }
        for r in conn.execute(f"PRAGMA foreign_key_list('{table}');").fetchall()
    ]
    return {"table": table, "indexes": indexes, "fks": fks}


def get_table_counts(conn: sqlite3.Connection, tables: List[str]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for t in tables:
        try:
            n: Optional[int] = int(conn.execute(f"SELECT COUNT(*) AS n FROM {t};").fetchone()["n"])
        except sqlite3.DatabaseError as e:
            _log.warning("Row count failed for %s: %s", t, e)
            n = None
        out.append({"name": t, "count": n})
    return out


# -------------------------
# declared types
# -------------------------
def extract_declared_types(text: str) -> Dict[str, List[str]]:
    types: Dict[str, List[str]] = {}
    for m in _INTERFACE_RE.finditer(text):
        fields: List[str] = []
        for line in m.group(2).split("\n"):
            line = line.strip()
            if not line or line.startswith(_COMMENT_PREFIXES):
                continue
            name = line.split(":", 1)[0].strip().rstrip("?").strip()
            if name:
                fields.append(name)
        types[m.group(1)] = fields
    return types


def load_declared_types(path: Path) -> Dict[str, List[str]]:
    p = Path(path)
    if not p.is_file():
        _log.warning("Declared-types file not found: %s", p)
        return {}
    return extract_declared_types(p.read_text(encoding="utf-8"))


def declared_types_from_models() -> Dict[str, List[str]]:
    return {
        model.__name__: list(model.model_fields.keys())
        for model in (Player, GameTemplate, GameSession, GameExtension)
    }


# -------------------------
# checks
# -------------------------
def check_correspondence(
    table_columns: Dict[str, List[str]],
    declared: Dict[str, List[str]],
    mapping: Optional[Dict[str, str]] = None,
) -> List[str]:
    issues: List[str] = []
    for table, type_name in (mapping or TABLE_TYPE_MAP).items():
        if table not in table_columns or type_name not in declared:
            continue
        cols = table_columns[table]
        fields = declared[type_name]
        not_declared = [c for c in cols if c not in fields]
        not_in_sql = [f for f in fields if f not in cols]
        if not_declared:
            issues.append(f"[{table}] columns in SQL but not declared: {', '.join(not_declared)}")
        if not_in_sql:
            issues.append(f"[{table}] fields declared but not in SQL: {', '.join(not_in_sql)}")
    return issues


def check_relations(indexes_and_fks: List[Dict[str, Any]], table_names: List[str]) -> List[str]:
    known = set(table_names)
    issues: List[str] = []
    for entry in indexes_and_fks:
        for fk in entry["fks"]:
            if fk["table"] not in known:
                issues.append(f"[{entry['table']}] foreign key to missing table: {fk['table']}")
    return issues


def check_docs(root: Optional[Path] = None) -> List[Dict[str, Any]]:
    base = Path(root) if root is not None else repo_root()
    return [{"file": f, "exists": (base / f).is_file()} for f in DOC_FILES]


# -------------------------
# report
# -------------------------
def _types_path(types_path: Optional[str]) -> Optional[Path]:
    raw = types_path or os.getenv("AUDIT_TYPES_PATH")
    if not raw:
        return None
    p = Path(raw)
    return p if p.is_absolute() else (repo_root() / p)


def audit_report(
    database_url: Optional[str] = None,
    types_path: Optional[str] = None,
    from_models: bool = False,
    root: Optional[Path] = None,
) -> Dict[str, Any]:
    """
    Build the full report. Raises sqlite3.OperationalError only when the
    database cannot be opened.
    """
    url = database_url or get_database_url()
    conn = connect_readonly(url)
    try:
        tables = get_table_schemas(conn)
        names = [t["name"] for t in tables]
        index_fk = [get_indexes_and_fks(conn, n) for n in names]
        volumetry = get_table_counts(conn, names)
        columns = {n: get_table_columns(conn, n) for n in names}
    finally:
        conn.close()

    tp = None if from_models else _types_path(types_path)
    if tp is not None:
        declared = load_declared_types(tp)
        source = str(tp)
    else:
        declared = declared_types_from_models()
        source = "models"

    report = {
        "database": str(resolve_sqlite_path(url) or url),
        "declared_types_source": source,
        "tables": tables,
        "indexes_and_fks": index_fk,
        "volumetry": volumetry,
        "correspondence_issues": check_correspondence(columns, declared),
        "relation_issues": check_relations(index_fk, names),
        "doc_status": check_docs(root),
    }
    _log.info(
        "Audit done: %d table(s), %d correspondence issue(s), %d relation issue(s)",
        len(tables),
        len(report["correspondence_issues"]),
        len(report["relation_issues"]),
    )
    return report


def _lines(items: List[str]) -> List[str]:
    return [f"  - {i}" for i in items] or ["  (none)"]


def format_report(report: Dict[str, Any]) -> str:
    out: List[str] = ["--- DATABASE AUDIT ---", f"database: {report['database']}", ""]

    out.append("Tables and schemas:")
    for t in report["tables"]:
        out.append(f"  [{t['name']}]")
        out.extend(f"    {line}" for line in (t["schema"] or "").splitlines())

    out += ["", "Indexes and foreign keys:"]
    for e in report["indexes_and_fks"]:
        idx = ", ".join(i["name"] for i in e["indexes"]) or "-"
        fks = ", ".join(f"{fk['from']} -> {fk['table']}({fk['to']})" for fk in e["fks"]) or "-"
        out.append(f"  [{e['table']}] indexes: {idx}; fks: {fks}")

    out += ["", "Row counts:"]
    for v in report["volumetry"]:
        out.append(f"  {v['name']}: {'?' if v['count'] is None else v['count']}")

    out += ["", f"SQL <-> declared type mismatches (types: {report['declared_types_source']}):"]
    out += _lines(report["correspondence_issues"])
    out += ["", "Relation problems:"]
    out += _lines(report["relation_issues"])

    out += ["", "Documentation:"]
    for d in report["doc_status"]:
        out.append(f"  {d['file']}: {'present' if d['exists'] else 'MISSING'}")

    out += ["", "--- END AUDIT ---"]
    return "\n".join(out)


def report_json(report: Dict[str, Any]) -> str:
    return json.dumps(report, ensure_ascii=False, indent=2)
