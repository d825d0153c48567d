from __future__ import annotations

from fastapi import APIRouter

from .schemas import LeaderboardOut, OverviewOut, PlayerStatsOut
from .service import get_leaderboard, get_overview, get_player_stats

router = APIRouter(tags=["stats"])


@router.get("/players/{player_id}/stats", response_model=PlayerStatsOut)
def api_player_stats(player_id: str) -> PlayerStatsOut:
    return get_player_stats(player_id)


@router.get("/stats/leaderboard", response_model=LeaderboardOut)
def api_leaderboard() -> LeaderboardOut:
    return get_leaderboard()


@router.get("/stats/overview", response_model=OverviewOut)
def api_overview() -> OverviewOut:
    return get_overview()
