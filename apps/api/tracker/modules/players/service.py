from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException

from tracker.core.db import connect
from tracker.core.ids import new_ulid, now_iso
from tracker.core.jsonfields import loads_list


def _clean_name(name: Optional[str]) -> str:
    v = (name or "").strip()
    if not v:
        raise HTTPException(status_code=400, detail={"error": "invalid_name", "message": "name must not be blank"})
    return v


def _get_player_row(conn: sqlite3.Connection, player_id: str) -> sqlite3.Row:
    row = conn.execute("SELECT * FROM players WHERE id=?;", (player_id,)).fetchone()
    if not row:
        raise HTTPException(status_code=404, detail={"error": "not_found", "message": f"player not found: {player_id}"})
    return row


def list_players(limit: int, offset: int) -> Tuple[List[Dict[str, Any]], int]:
    conn = connect()
    try:
        total = conn.execute("SELECT COUNT(1) AS n FROM players;").fetchone()["n"]
        rows = conn.execute(
            "SELECT * FROM players ORDER BY name COLLATE NOCASE ASC, id ASC LIMIT ? OFFSET ?;",
            (limit, offset),
        ).fetchall()
        return ([dict(r) for r in rows], int(total))
    finally:
        conn.close()


def get_player(player_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        return dict(_get_player_row(conn, player_id))
    finally:
        conn.close()


def existing_player_ids(conn: sqlite3.Connection, ids: List[str]) -> List[str]:
    if not ids:
        return []
    marks = ",".join(["?"] * len(ids))
    rows = conn.execute(f"SELECT id FROM players WHERE id IN ({marks});", list(ids)).fetchall()
    return [r["id"] for r in rows]


def create_player(name: str, player_id: Optional[str] = None) -> Dict[str, Any]:
    conn = connect()
    try:
        pid = (player_id or "").strip() or new_ulid()
        if conn.execute("SELECT 1 FROM players WHERE id=?;", (pid,)).fetchone():
            raise HTTPException(status_code=409, detail={"error": "conflict", "message": f"player already exists: {pid}"})
        conn.execute(
            "INSERT INTO players (id, name, created_at) VALUES (?, ?, ?);",
            (pid, _clean_name(name), now_iso()),
        )
        conn.commit()
        return dict(_get_player_row(conn, pid))
    finally:
        conn.close()


def patch_player(player_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
    conn = connect()
    try:
        _get_player_row(conn, player_id)
        if "name" not in patch or patch["name"] is None:
            raise HTTPException(status_code=400, detail={"error": "no_updates", "message": "no updates provided"})
        conn.execute("UPDATE players SET name=? WHERE id=?;", (_clean_name(patch["name"]), player_id))
        conn.commit()
        return dict(_get_player_row(conn, player_id))
    finally:
        conn.close()


def _open_sessions_with(conn: sqlite3.Connection, player_id: str) -> List[str]:
    rows = conn.execute("SELECT id, players FROM game_sessions WHERE completed=0;").fetchall()
    return [r["id"] for r in rows if player_id in loads_list(r["players"])]


def delete_player(player_id: str) -> Dict[str, Any]:
    # completed sessions keep the id in their JSON player list; stats skip unknown ids
    conn = connect()
    try:
        _get_player_row(conn, player_id)
        open_ids = _open_sessions_with(conn, player_id)
        if open_ids:
            raise HTTPException(
                status_code=409,
                detail={
                    "error": "player_in_open_session",
                    "message": f"player {player_id} is in unfinished game session(s)",
                    "details": {"sessions": open_ids},
                },
            )
        conn.execute("DELETE FROM players WHERE id=?;", (player_id,))
        conn.commit()
        return {"id": player_id, "status": "deleted"}
    finally:
        conn.close()
