"""
Pure statistics over session dicts (as returned by the game_sessions service).

Only completed sessions count; callers may pass the full list.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional


def _completed(sessions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [s for s in sessions if s.get("completed")]


def player_stats(player_id: str, sessions: List[Dict[str, Any]], name: Optional[str] = None) -> Dict[str, Any]:
    played = [s for s in _completed(sessions) if player_id in (s.get("players") or [])]

    competitive_wins = 0
    cooperative_wins = 0
    scores: List[int] = []
    deaths = 0
    by_type: Dict[str, int] = {}
    last_played: Optional[str] = None

    for s in played:
        if s.get("is_cooperative"):
            if s.get("coop_result") == "won":
                cooperative_wins += 1
        else:
            if s.get("winner") == player_id:
                competitive_wins += 1
            if player_id in (s.get("scores") or {}):
                scores.append(int(s["scores"][player_id]))
        if (s.get("dead_characters") or {}).get(player_id):
            deaths += 1
        gt = s.get("game_type") or "unknown"
        by_type[gt] = by_type.get(gt, 0) + 1
        if s.get("date") and (last_played is None or s["date"] > last_played):
            last_played = s["date"]

    total_wins = competitive_wins + cooperative_wins
    n = len(played)
    favorite = None
    if by_type:
        # most played, ties broken by name
        favorite = sorted(by_type.items(), key=lambda kv: (-kv[1], kv[0]))[0][0]

    return {
        "player_id": player_id,
        "name": name,
        "games_played": n,
        "competitive_wins": competitive_wins,
        "cooperative_wins": cooperative_wins,
        "total_wins": total_wins,
        "win_rate": round(total_wins * 100.0 / n, 1) if n else 0.0,
        "average_score": round(sum(scores) / len(scores), 2) if scores else None,
        "character_deaths": deaths,
        "games_by_type": by_type,
        "favorite_game": favorite,
        "last_played": last_played,
    }


def leaderboard(players: List[Dict[str, Any]], sessions: List[Dict[str, Any]]) -> Dict[str, Any]:
    entries = [player_stats(p["id"], sessions, p.get("name")) for p in players]
    entries.sort(key=lambda e: (-e["total_wins"], -e["win_rate"], (e["name"] or "").lower(), e["player_id"]))

    active = [e for e in entries if e["games_played"] > 0]
    top = active[0] if active else None
    most_active = None
    if active:
        most_active = sorted(active, key=lambda e: (-e["games_played"], (e["name"] or "").lower()))[0]
    return {"entries": entries, "top_performer": top, "most_active": most_active}


def overview(n_players: int, n_templates: int, n_extensions: int, sessions: List[Dict[str, Any]]) -> Dict[str, Any]:
    done = _completed(sessions)
    durations = [int(s["duration"]) for s in done if s.get("duration") is not None]
    return {
        "players": n_players,
        "game_templates": n_templates,
        "game_extensions": n_extensions,
        "sessions_total": len(sessions),
        "sessions_completed": len(done),
        "sessions_in_progress": len(sessions) - len(done),
        "average_duration": round(sum(durations) / len(durations), 1) if durations else None,
    }
