from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException

from tracker.core.db import connect
from tracker.core.ids import new_ulid, now_iso, parse_iso, today_iso
from tracker.core.jsonfields import dumps, loads_dict, loads_list
from tracker.modules.game_extensions.service import extensions_for_game
from tracker.modules.game_templates.service import get_template_row, supported_modes
from tracker.modules.players.service import existing_player_ids

EVENT_TYPES = ("death", "revive", "rename")

_COLLECTION_FIELDS = ("players", "scores", "characters", "extensions")


def _bad_request(error: str, message: str, details: Any = None) -> HTTPException:
    detail: Dict[str, Any] = {"error": error, "message": message}
    if details is not None:
        detail["details"] = details
    return HTTPException(status_code=400, detail=detail)


def _conflict(message: str) -> HTTPException:
    return HTTPException(status_code=409, detail={"error": "conflict", "message": message})


# -------------------------
# row <-> dict
# -------------------------
def _int_or_none(v: Any) -> Optional[int]:
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def _clean_scores(raw: Any) -> Dict[str, int]:
    out: Dict[str, int] = {}
    for k, v in loads_dict(raw).items():
        n = _int_or_none(v)
        if n is not None:
            out[str(k)] = n
    return out


def _clean_history(raw: Any) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for e in loads_list(raw):
        if not isinstance(e, dict) or e.get("type") not in EVENT_TYPES:
            continue
        out.append(
            {
                "type": e["type"],
                "characterId": str(e.get("characterId") or ""),
                "timestamp": str(e.get("timestamp") or ""),
                "details": e.get("details") if isinstance(e.get("details"), dict) else {},
            }
        )
    return out


def _row_to_session(row: sqlite3.Row) -> Dict[str, Any]:
    d = dict(row)
    d["players"] = [str(p) for p in loads_list(d.get("players"))]
    d["scores"] = _clean_scores(d.get("scores"))
    d["characters"] = {str(k): str(v) for k, v in loads_dict(d.get("characters")).items() if v is not None}
    d["extensions"] = [str(e) for e in loads_list(d.get("extensions"))]
    d["dead_characters"] = {str(k): bool(v) for k, v in loads_dict(d.get("dead_characters")).items()}
    d["new_character_names"] = {str(k): str(v) for k, v in loads_dict(d.get("new_character_names")).items()}
    d["character_history"] = _clean_history(d.get("character_history"))
    d["completed"] = bool(d.get("completed"))
    d["is_cooperative"] = bool(d.get("is_cooperative"))
    if d.get("game_mode") is None:
        d["game_mode"] = "cooperative" if d["is_cooperative"] else "competitive"
    if d.get("win_condition") not in ("highest", "lowest"):
        d["win_condition"] = None
    if d.get("coop_result") not in ("won", "lost"):
        d["coop_result"] = None
    d["duration"] = _int_or_none(d.get("duration"))
    return d


def _get_session_row(conn: sqlite3.Connection, session_id: str) -> sqlite3.Row:
    row = conn.execute("SELECT * FROM game_sessions WHERE id=?;", (session_id,)).fetchone()
    if not row:
        raise HTTPException(status_code=404, detail={"error": "not_found", "message": f"game session not found: {session_id}"})
    return row


def _write(conn: sqlite3.Connection, session_id: str, s: Dict[str, Any]) -> None:
    sets = {
        "game_type": s["game_type"],
        "game_mode": s["game_mode"],
        "is_cooperative": 1 if s["game_mode"] == "cooperative" else 0,
        "players": dumps(s["players"]),
        "scores": dumps(s["scores"]),
        "characters": dumps(s["characters"]),
        "extensions": dumps(s["extensions"]),
        "winner": s.get("winner"),
        "win_condition": s.get("win_condition"),
        "coop_result": s.get("coop_result"),
        "date": s.get("date"),
        "start_time": s.get("start_time"),
        "end_time": s.get("end_time"),
        "duration": s.get("duration"),
        "completed": 1 if s.get("completed") else 0,
        "dead_characters": dumps(s.get("dead_characters") or {}),
        "new_character_names": dumps(s.get("new_character_names") or {}),
        "character_history": dumps(s.get("character_history") or []),
        "image": s.get("image"),
    }
    keys = sorted(sets.keys())
    conn.execute(
        f"UPDATE game_sessions SET {', '.join(f'{k}=?' for k in keys)} WHERE id=?;",
        [sets[k] for k in keys] + [session_id],
    )


# -------------------------
# validation
# -------------------------
def _validate(conn: sqlite3.Connection, s: Dict[str, Any]) -> None:
    """Check a full session dict against its template, players and extensions; fills game_mode."""
    template = dict(get_template_row(conn, s["game_type"]))

    players = s["players"]
    if len(set(players)) != len(players):
        raise _bad_request("duplicate_players", "a player can only appear once in a session")
    missing = [p for p in players if p not in set(existing_player_ids(conn, players))]
    if missing:
        raise HTTPException(
            status_code=404,
            detail={"error": "not_found", "message": "unknown player(s)", "details": {"players": missing}},
        )
    lo, hi = template.get("min_players"), template.get("max_players")
    if (lo is not None and len(players) < int(lo)) or (hi is not None and len(players) > int(hi)):
        raise _bad_request(
            "invalid_player_count",
            f"{s['game_type']} is played with {lo or 1}-{hi or 'any'} players",
            {"players": len(players)},
        )

    modes = supported_modes(template) or ["competitive"]
    if s.get("game_mode") is None:
        s["game_mode"] = template.get("default_mode") if template.get("default_mode") in modes else modes[0]
    if s["game_mode"] not in modes:
        raise _bad_request("invalid_game_mode", f"{s['game_type']} does not support {s['game_mode']} play", {"supported": modes})

    known_ext = extensions_for_game(conn, s["game_type"])
    bad_ext = [e for e in s["extensions"] if e not in known_ext]
    if bad_ext:
        raise _bad_request("invalid_extensions", "extensions must belong to the session's game", {"extensions": bad_ext})

    for field in ("scores", "characters"):
        strangers = [k for k in s[field] if k not in players]
        if strangers:
            raise _bad_request(f"invalid_{field}", f"{field} reference players outside the session", {"players": strangers})

    if s.get("winner") is not None and s["winner"] not in players:
        raise _bad_request("invalid_winner", "winner must be one of the session players")


def determine_winner(scores: Dict[str, int], players: List[str], win_condition: Optional[str]) -> Optional[str]:
    """Best score by win_condition (highest by default); a tie for first means no winner."""
    ranked = [(p, scores[p]) for p in players if p in scores]
    if not ranked:
        return None
    pick = min if win_condition == "lowest" else max
    best = pick(v for _, v in ranked)
    leaders = [p for p, v in ranked if v == best]
    return leaders[0] if len(leaders) == 1 else None


def duration_minutes(start_time: Optional[str], end_time: Optional[str]) -> Optional[int]:
    start, end = parse_iso(start_time), parse_iso(end_time)
    if start is None or end is None:
        return None
    return max(int((end - start).total_seconds() // 60), 0)


# -------------------------
# operations
# -------------------------
def list_sessions(
    limit: int,
    offset: int,
    completed: Optional[bool] = None,
    player_id: Optional[str] = None,
    game_type: Optional[str] = None,
) -> Tuple[List[Dict[str, Any]], int]:
    conn = connect()
    try:
        where: List[str] = []
        args: List[Any] = []
        if completed is not None:
            where.append("completed=?")
            args.append(1 if completed else 0)
        if game_type:
            where.append("game_type=?")
            args.append(game_type)
        sql = "SELECT * FROM game_sessions"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY date DESC, created_at DESC, id DESC;"

        items = [_row_to_session(r) for r in conn.execute(sql, args).fetchall()]
        # players live in a JSON column
        if player_id:
            items = [s for s in items if player_id in s["players"]]
        return (items[offset : offset + limit], len(items))
    finally:
        conn.close()


def all_sessions(completed_only: bool = False) -> List[Dict[str, Any]]:
    conn = connect()
    try:
        sql = "SELECT * FROM game_sessions"
        if completed_only:
            sql += " WHERE completed=1"
        rows = conn.execute(sql + " ORDER BY date ASC, created_at ASC;").fetchall()
        return [_row_to_session(r) for r in rows]
    finally:
        conn.close()


def get_session(session_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        return _row_to_session(_get_session_row(conn, session_id))
    finally:
        conn.close()


def create_session(data: Dict[str, Any]) -> Dict[str, Any]:
    s = dict(data)
    s["players"] = [p.strip() for p in s["players"]]
    s["scores"] = dict(s.get("scores") or {p: 0 for p in s["players"]})
    for p in s["players"]:
        s["scores"].setdefault(p, 0)
    s["characters"] = dict(s.get("characters") or {})
    s["extensions"] = list(s.get("extensions") or [])
    s["start_time"] = s.get("start_time") or now_iso()
    s["date"] = s.get("date") or today_iso()

    conn = connect()
    try:
        _validate(conn, s)
        sid = new_ulid()
        conn.execute(
            "INSERT INTO game_sessions (id, game_type, players, scores, created_at) VALUES (?, ?, ?, ?, ?);",
            (sid, s["game_type"], dumps(s["players"]), dumps(s["scores"]), now_iso()),
        )
        _write(conn, sid, s)
        conn.commit()
        return _row_to_session(_get_session_row(conn, sid))
    finally:
        conn.close()


def patch_session(session_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
    # null for a collection means "leave as is"
    patch = {k: v for k, v in patch.items() if not (k in _COLLECTION_FIELDS and v is None)}
    if not patch:
        raise _bad_request("no_updates", "no updates provided")

    conn = connect()
    try:
        s = _row_to_session(_get_session_row(conn, session_id))
        s.update(patch)
        if "players" in patch:
            s["scores"] = {p: s["scores"].get(p, 0) for p in s["players"]}
            s["characters"] = {p: c for p, c in s["characters"].items() if p in s["players"]}
        _validate(conn, s)
        if s["game_mode"] == "cooperative":
            s["winner"] = None
        else:
            s["coop_result"] = None
        if s.get("completed"):
            s["duration"] = duration_minutes(s.get("start_time"), s.get("end_time"))
        _write(conn, session_id, s)
        conn.commit()
        return _row_to_session(_get_session_row(conn, session_id))
    finally:
        conn.close()


def complete_session(
    session_id: str,
    scores: Optional[Dict[str, int]] = None,
    winner: Optional[str] = None,
    coop_result: Optional[str] = None,
    end_time: Optional[str] = None,
) -> Dict[str, Any]:
    conn = connect()
    try:
        s = _row_to_session(_get_session_row(conn, session_id))
        if s["completed"]:
            raise _conflict(f"game session already completed: {session_id}")
        if scores:
            s["scores"].update(scores)

        if s["game_mode"] == "cooperative":
            if coop_result not in ("won", "lost"):
                raise _bad_request("coop_result_required", "cooperative sessions need coop_result won|lost")
            s["coop_result"] = coop_result
            s["winner"] = None
        else:
            s["coop_result"] = None
            s["winner"] = winner if winner is not None else determine_winner(s["scores"], s["players"], s["win_condition"])
        _validate(conn, s)

        s["end_time"] = end_time or now_iso()
        s["duration"] = duration_minutes(s.get("start_time"), s["end_time"])
        s["completed"] = True
        _write(conn, session_id, s)
        conn.commit()
        return _row_to_session(_get_session_row(conn, session_id))
    finally:
        conn.close()


def record_character_event(session_id: str, event_type: str, character_id: str, details: Dict[str, Any]) -> Dict[str, Any]:
    conn = connect()
    try:
        s = _row_to_session(_get_session_row(conn, session_id))
        if s["completed"]:
            raise _conflict(f"game session already completed: {session_id}")
        if character_id not in s["players"]:
            raise _bad_request("invalid_character", "character events target a session player", {"character_id": character_id})

        details = dict(details or {})
        dead = s["dead_characters"]
        if event_type == "death":
            if dead.get(character_id):
                raise _bad_request("already_dead", f"character of {character_id} is already dead")
            dead[character_id] = True
        elif event_type == "revive":
            if not dead.get(character_id):
                raise _bad_request("not_dead", f"character of {character_id} is not dead")
            dead[character_id] = False
        elif event_type == "rename":
            new_name = str(details.get("new_name") or "").strip()
            if not new_name:
                raise _bad_request("new_name_required", "rename events need details.new_name")
            details["new_name"] = new_name
            details.setdefault("old_name", s["new_character_names"].get(character_id) or s["characters"].get(character_id))
            s["new_character_names"][character_id] = new_name
        else:
            raise _bad_request("invalid_event", f"unknown character event type: {event_type}")

        s["character_history"].append(
            {"type": event_type, "characterId": character_id, "timestamp": now_iso(), "details": details}
        )
        _write(conn, session_id, s)
        conn.commit()
        return _row_to_session(_get_session_row(conn, session_id))
    finally:
        conn.close()


def delete_session(session_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        _get_session_row(conn, session_id)
        conn.execute("DELETE FROM game_sessions WHERE id=?;", (session_id,))
        conn.commit()
        return {"id": session_id, "status": "deleted"}
    finally:
        conn.close()
