from __future__ import annotations

from typing import Any, Dict, List

from tracker.core.db import connect
from tracker.modules.game_sessions.service import all_sessions
from tracker.modules.players.service import get_player
from . import compute


def _players() -> List[Dict[str, Any]]:
    conn = connect()
    try:
        return [dict(r) for r in conn.execute("SELECT id, name FROM players ORDER BY name ASC;").fetchall()]
    finally:
        conn.close()


def _count(table: str) -> int:
    conn = connect()
    try:
        return int(conn.execute(f"SELECT COUNT(1) AS n FROM {table};").fetchone()["n"])
    finally:
        conn.close()


def get_player_stats(player_id: str) -> Dict[str, Any]:
    p = get_player(player_id)
    return compute.player_stats(p["id"], all_sessions(completed_only=True), p.get("name"))


def get_leaderboard() -> Dict[str, Any]:
    return compute.leaderboard(_players(), all_sessions(completed_only=True))


def get_overview() -> Dict[str, Any]:
    return compute.overview(
        _count("players"),
        _count("game_templates"),
        _count("game_extensions"),
        all_sessions(),
    )
