from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException

from tracker.core.db import connect
from tracker.core.ids import new_ulid, now_iso
from tracker.core.jsonfields import dumps, loads_list

MODES = ("competitive", "cooperative", "campaign")

_BOOL_COLS = (
    "has_characters",
    "is_cooperative_by_default",
    "supports_cooperative",
    "supports_competitive",
    "supports_campaign",
)

_VALUE_COLS = (
    "default_mode",
    "base_game_name",
    "min_players",
    "max_players",
    "description",
    "image",
)


def _not_found(name: str) -> HTTPException:
    return HTTPException(status_code=404, detail={"error": "not_found", "message": f"game template not found: {name}"})


def _bad_request(error: str, message: str) -> HTTPException:
    return HTTPException(status_code=400, detail={"error": error, "message": message})


def normalize_characters(raw: Any) -> List[Dict[str, Any]]:
    """Stored characters as GameCharacter dicts; legacy plain strings become {id: name, name: name}."""
    out: List[Dict[str, Any]] = []
    for c in loads_list(raw):
        if isinstance(c, str):
            if c.strip():
                out.append({"id": c.strip(), "name": c.strip(), "abilities": []})
            continue
        if not isinstance(c, dict) or not str(c.get("name") or "").strip():
            continue
        d = dict(c)
        d["id"] = str(d.get("id") or d["name"])
        if not isinstance(d.get("abilities"), list):
            d["abilities"] = []
        out.append(d)
    return out


def _prepare_characters(items: List[Dict[str, Any]], existing: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    created = {c["id"]: c.get("created_at") for c in existing}
    now = now_iso()
    out: List[Dict[str, Any]] = []
    for c in items:
        d = dict(c)
        d["name"] = str(d["name"]).strip()
        d["id"] = d.get("id") or new_ulid()
        d["created_at"] = created.get(d["id"]) or now
        d["source"] = d.get("source") or "manual"
        out.append(d)
    return out


def extension_names(conn: sqlite3.Connection, template_name: str) -> List[str]:
    rows = conn.execute(
        "SELECT name FROM game_extensions WHERE base_game_name=? ORDER BY name COLLATE NOCASE ASC;",
        (template_name,),
    ).fetchall()
    return [r["name"] for r in rows]


def _row_to_template(conn: sqlite3.Connection, row: sqlite3.Row) -> Dict[str, Any]:
    d = dict(row)
    for c in _BOOL_COLS:
        d[c] = bool(d.get(c))
    d["characters"] = normalize_characters(d.get("characters"))
    if d.get("default_mode") not in MODES:
        d["default_mode"] = None
    d["extensions"] = extension_names(conn, d["name"])
    return d


def get_template_row(conn: sqlite3.Connection, name: str) -> sqlite3.Row:
    row = conn.execute("SELECT * FROM game_templates WHERE name=?;", (name,)).fetchone()
    if not row:
        raise _not_found(name)
    return row


def supported_modes(t: Dict[str, Any]) -> List[str]:
    return [m for m in MODES if t.get(f"supports_{m}")]


def _resolve_modes(t: Dict[str, Any]) -> None:
    modes = supported_modes(t)
    if not modes:
        raise _bad_request("invalid_modes", "a template must support at least one game mode")
    if t.get("default_mode") is None:
        t["default_mode"] = "cooperative" if t.get("is_cooperative_by_default") and "cooperative" in modes else modes[0]
    elif t["default_mode"] not in modes:
        raise _bad_request("invalid_default_mode", f"default_mode {t['default_mode']!r} is not a supported mode")


def _check_player_range(t: Dict[str, Any]) -> None:
    lo, hi = t.get("min_players"), t.get("max_players")
    if lo is not None and hi is not None and int(lo) > int(hi):
        raise _bad_request("invalid_player_range", "min_players must be <= max_players")


def _check_base_game(conn: sqlite3.Connection, name: str, base: Optional[str]) -> None:
    if base is None:
        return
    if base == name:
        raise _bad_request("invalid_base_game", "a template cannot be its own base game")
    get_template_row(conn, base)


def list_templates(limit: int, offset: int) -> Tuple[List[Dict[str, Any]], int]:
    conn = connect()
    try:
        total = conn.execute("SELECT COUNT(1) AS n FROM game_templates;").fetchone()["n"]
        rows = conn.execute(
            "SELECT * FROM game_templates ORDER BY name COLLATE NOCASE ASC LIMIT ? OFFSET ?;",
            (limit, offset),
        ).fetchall()
        return ([_row_to_template(conn, r) for r in rows], int(total))
    finally:
        conn.close()


def get_template(name: str) -> Dict[str, Any]:
    conn = connect()
    try:
        return _row_to_template(conn, get_template_row(conn, name))
    finally:
        conn.close()


def list_template_extensions(name: str) -> List[str]:
    conn = connect()
    try:
        get_template_row(conn, name)
        return extension_names(conn, name)
    finally:
        conn.close()


def insert_extension_names(conn: sqlite3.Connection, template_name: str, names: List[str]) -> int:
    n = 0
    for raw in names:
        ext = (raw or "").strip()
        if not ext:
            continue
        cur = conn.execute(
            "INSERT OR IGNORE INTO game_extensions (id, name, base_game_name) VALUES (?, ?, ?);",
            (new_ulid(), ext, template_name),
        )
        n += max(cur.rowcount, 0)
    return n


def create_template(data: Dict[str, Any]) -> Dict[str, Any]:
    t = dict(data)
    t["name"] = (t.get("name") or "").strip()
    if not t["name"]:
        raise _bad_request("invalid_name", "name must not be blank")

    conn = connect()
    try:
        if conn.execute("SELECT 1 FROM game_templates WHERE name=?;", (t["name"],)).fetchone():
            raise HTTPException(
                status_code=409,
                detail={"error": "conflict", "message": f"game template already exists: {t['name']}"},
            )
        _check_base_game(conn, t["name"], t.get("base_game_name"))
        _check_player_range(t)
        _resolve_modes(t)

        characters = _prepare_characters(t.get("characters") or [], [])
        row: Dict[str, Any] = {"name": t["name"], "characters": dumps(characters)}
        for c in _BOOL_COLS:
            row[c] = 1 if t.get(c) else 0
        for c in _VALUE_COLS:
            row[c] = t.get(c)

        keys = sorted(row.keys())
        conn.execute(
            f"INSERT INTO game_templates ({','.join(keys)}) VALUES ({','.join(['?'] * len(keys))});",
            [row[k] for k in keys],
        )
        insert_extension_names(conn, t["name"], t.get("extensions") or [])
        conn.commit()
        return _row_to_template(conn, get_template_row(conn, t["name"]))
    finally:
        conn.close()


def patch_template(name: str, patch: Dict[str, Any]) -> Dict[str, Any]:
    if not patch:
        raise _bad_request("no_updates", "no updates provided")

    conn = connect()
    try:
        current = _row_to_template(conn, get_template_row(conn, name))
        merged = dict(current)
        merged.update({k: v for k, v in patch.items() if k != "characters"})

        new_name = (patch.get("name") or name).strip()
        if not new_name:
            raise _bad_request("invalid_name", "name must not be blank")
        if new_name != name and conn.execute("SELECT 1 FROM game_templates WHERE name=?;", (new_name,)).fetchone():
            raise HTTPException(
                status_code=409,
                detail={"error": "conflict", "message": f"game template already exists: {new_name}"},
            )
        if "base_game_name" in patch:
            _check_base_game(conn, new_name, patch["base_game_name"])
        _check_player_range(merged)
        if "default_mode" not in patch and current.get("default_mode") not in supported_modes(merged):
            merged["default_mode"] = None
        _resolve_modes(merged)

        sets: Dict[str, Any] = {}
        for c in _BOOL_COLS:
            sets[c] = 1 if merged.get(c) else 0
        for c in _VALUE_COLS:
            sets[c] = merged.get(c)
        if patch.get("characters") is not None:
            sets["characters"] = dumps(_prepare_characters(patch["characters"], current["characters"]))

        if new_name != name:
            # extensions follow through ON UPDATE CASCADE
            conn.execute("UPDATE game_templates SET name=? WHERE name=?;", (new_name, name))
            conn.execute("UPDATE game_sessions SET game_type=? WHERE game_type=?;", (new_name, name))
            conn.execute("UPDATE game_templates SET base_game_name=? WHERE base_game_name=?;", (new_name, name))
            if sets.get("base_game_name") == name:
                sets["base_game_name"] = new_name

        keys = sorted(sets.keys())
        conn.execute(
            f"UPDATE game_templates SET {', '.join(f'{k}=?' for k in keys)} WHERE name=?;",
            [sets[k] for k in keys] + [new_name],
        )
        conn.commit()
        return _row_to_template(conn, get_template_row(conn, new_name))
    finally:
        conn.close()


def delete_template(name: str) -> Dict[str, Any]:
    conn = connect()
    try:
        get_template_row(conn, name)
        open_ids = [
            r["id"]
            for r in conn.execute(
                "SELECT id FROM game_sessions WHERE game_type=? AND completed=0;", (name,)
            ).fetchall()
        ]
        if open_ids:
            raise HTTPException(
                status_code=409,
                detail={
                    "error": "template_in_open_session",
                    "message": f"game template {name} has unfinished game session(s)",
                    "details": {"sessions": open_ids},
                },
            )
        n_ext =conn.execute("SELECT COUNT(1) AS n FROM game_extensions WHERE base_game_name=?;", (name,)).fetchone()["n"]
        conn.execute("UPDATE game_templates SET base_game_name=NULL WHERE base_game_name=?;", (name,))
        conn.execute("DELETE FROM game_templates WHERE name=?;", (name,))
        conn.commit()
        return {"name": name, "extensions_deleted": int(n_ext), "status": "deleted"}
    finally:
        conn.close()
