from __future__ import annotations

from typing import Any, Dict

from tracker.core.db import connect
from tracker.core.jsonfields import dumps, safe_json_loads


def _out(raw: Any) -> Dict[str, Any]:
    data = safe_json_loads(raw)
    return {"game_data": data, "in_progress": data is not None}


def get_current_game() -> Dict[str, Any]:
    conn = connect()
    try:
        row = conn.execute("SELECT game_data FROM current_game WHERE id=1;").fetchone()
        return _out(row["game_data"] if row else None)
    finally:
        conn.close()


def put_current_game(game_data: Any) -> Dict[str, Any]:
    # singleton row; null clears it
    conn = connect()
    try:
        conn.execute(
            "INSERT INTO current_game (id, game_data) VALUES (1, ?) "
            "ON CONFLICT(id) DO UPDATE SET game_data=excluded.game_data;",
            (dumps(game_data),),
        )
        conn.commit()
        return _out(dumps(game_data))
    finally:
        conn.close()
