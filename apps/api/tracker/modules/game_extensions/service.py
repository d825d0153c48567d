from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException

from tracker.core.db import connect
from tracker.core.ids import new_ulid
from tracker.modules.game_templates.service import get_template_row

_EDITABLE = ("name", "description", "min_players", "max_players", "rules", "image")


def _get_extension_row(conn: sqlite3.Connection, extension_id: str) -> sqlite3.Row:
    row = conn.execute("SELECT * FROM game_extensions WHERE id=?;", (extension_id,)).fetchone()
    if not row:
        raise HTTPException(status_code=404, detail={"error": "not_found", "message": f"extension not found: {extension_id}"})
    return row


def _check(conn: sqlite3.Connection, d: Dict[str, Any], extension_id: Optional[str] = None) -> None:
    lo, hi = d.get("min_players"), d.get("max_players")
    if lo is not None and hi is not None and int(lo) > int(hi):
        raise HTTPException(
            status_code=400,
            detail={"error": "invalid_player_range", "message": "min_players must be <= max_players"},
        )
    dup = conn.execute(
        "SELECT id FROM game_extensions WHERE name=? AND base_game_name=?;",
        (d["name"], d["base_game_name"]),
    ).fetchone()
    if dup and dup["id"] != extension_id:
        raise HTTPException(
            status_code=409,
            detail={
                "error": "conflict",
                "message": f"extension {d['name']!r} already exists for {d['base_game_name']!r}",
            },
        )


def list_extensions(limit: int, offset: int, base_game_name: Optional[str] = None) -> Tuple[List[Dict[str, Any]], int]:
    conn = connect()
    try:
        where = ""
        args: List[Any] = []
        if base_game_name:
            where = "WHERE base_game_name=?"
            args.append(base_game_name)

        total = conn.execute(f"SELECT COUNT(1) AS n FROM game_extensions {where};", args).fetchone()["n"]
        rows = conn.execute(
            f"SELECT * FROM game_extensions {where} "
            f"ORDER BY base_game_name COLLATE NOCASE ASC, name COLLATE NOCASE ASC LIMIT ? OFFSET ?;",
            args + [limit, offset],
        ).fetchall()
        return ([dict(r) for r in rows], int(total))
    finally:
        conn.close()


def get_extension(extension_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        return dict(_get_extension_row(conn, extension_id))
    finally:
        conn.close()


def extensions_for_game(conn: sqlite3.Connection, base_game_name: str) -> Dict[str, Dict[str, Any]]:
    rows = conn.execute("SELECT * FROM game_extensions WHERE base_game_name=?;", (base_game_name,)).fetchall()
    return {r["id"]: dict(r) for r in rows}


def create_extension(data: Dict[str, Any]) -> Dict[str, Any]:
    d = dict(data)
    d["name"] = (d.get("name") or "").strip()
    if not d["name"]:
        raise HTTPException(status_code=400, detail={"error": "invalid_name", "message": "name must not be blank"})

    conn = connect()
    try:
        get_template_row(conn, d["base_game_name"])
        _check(conn, d)
        eid = new_ulid()
        conn.execute(
            "INSERT INTO game_extensions (id, name, base_game_name, description, min_players, max_players, rules, image) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?);",
            (
                eid,
                d["name"],
                d["base_game_name"],
                d.get("description"),
                d.get("min_players"),
                d.get("max_players"),
                d.get("rules"),
                d.get("image"),
            ),
        )
        conn.commit()
        return dict(_get_extension_row(conn, eid))
    finally:
        conn.close()


def patch_extension(extension_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
    if not patch:
        raise HTTPException(status_code=400, detail={"error": "no_updates", "message": "no updates provided"})

    conn = connect()
    try:
        merged = dict(_get_extension_row(conn, extension_id))
        merged.update({k: v for k, v in patch.items() if k in _EDITABLE})
        merged["name"] = (merged.get("name") or "").strip()
        if not merged["name"]:
            raise HTTPException(status_code=400, detail={"error": "invalid_name", "message": "name must not be blank"})
        _check(conn, merged, extension_id)

        conn.execute(
            f"UPDATE game_extensions SET {', '.join(f'{k}=?' for k in _EDITABLE)} WHERE id=?;",
            [merged.get(k) for k in _EDITABLE] + [extension_id],
        )
        conn.commit()
        return dict(_get_extension_row(conn, extension_id))
    finally:
        conn.close()


def delete_extension(extension_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        _get_extension_row(conn, extension_id)
        conn.execute("DELETE FROM game_extensions WHERE id=?;", (extension_id,))
        conn.commit()
        return {"id": extension_id, "status": "deleted"}
    finally:
        conn.close()
