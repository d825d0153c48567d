from __future__ import annotations

from typing import Optional
from sqlmodel import SQLModel, Field


# JSON-valued columns are stored as TEXT
class GameSession(SQLModel, table=True):
    __tablename__ = "game_sessions"

    id: str = Field(primary_key=True)
    game_type: str  # game_templates.name
    is_cooperative: bool = Field(default=False)
    players: str  # JSON list of player ids
    scores: str  # JSON {player_id: int}
    characters: Optional[str] = Field(default=None)  # JSON {player_id: character}
    winner: Optional[str] = Field(default=None)
    win_condition: Optional[str] = Field(default=None)  # highest|lowest
    date: Optional[str] = Field(default=None)
    start_time: Optional[str] = Field(default=None)
    end_time: Optional[str] = Field(default=None)
    duration: Optional[int] = Field(default=None)  # minutes
    completed: bool = Field(default=False)
    created_at: Optional[str] = Field(default=None)
    game_mode: Optional[str] = Field(default=None)
    extensions: Optional[str] = Field(default=None)  # JSON list of extension ids
    coop_result: Optional[str] = Field(default=None)  # won|lost
    dead_characters: Optional[str] = Field(default=None)  # JSON {player_id: bool}
    new_character_names: Optional[str] = Field(default=None)  # JSON {player_id: name}
    character_history: Optional[str] = Field(default=None)  # JSON list of CharacterEvent
    image: Optional[str] = Field(default=None)
