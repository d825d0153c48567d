from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class PlayerStatsOut(BaseModel):
    player_id: str
    name: Optional[str] = None
    games_played: int = 0
    competitive_wins: int = 0
    cooperative_wins: int = 0
    total_wins: int = 0
    win_rate: float = 0.0  # percent
    average_score: Optional[float] = None
    character_deaths: int = 0
    games_by_type: Dict[str, int] = Field(default_factory=dict)
    favorite_game: Optional[str] = None
    last_played: Optional[str] = None


class LeaderboardOut(BaseModel):
    entries: List[PlayerStatsOut]
    top_performer: Optional[PlayerStatsOut] = None
    most_active: Optional[PlayerStatsOut] = None


class OverviewOut(BaseModel):
    players: int = 0
    game_templates: int = 0
    game_extensions: int = 0
    sessions_total: int = 0
    sessions_completed: int = 0
    sessions_in_progress: int = 0
    average_duration: Optional[float] = None  # minutes, completed sessions with a duration
