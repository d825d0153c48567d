from __future__ import annotations

from typing import Optional
from sqlmodel import SQLModel, Field


# name is the logical key; game_extensions and game_sessions point at it
class GameTemplate(SQLModel, table=True):
    __tablename__ = "game_templates"

    name: str = Field(primary_key=True)
    has_characters: bool = Field(default=False)
    characters: Optional[str] = Field(default=None)  # JSON list of GameCharacter
    is_cooperative_by_default: bool = Field(default=False)
    supports_cooperative: Optional[bool] = Field(default=None)
    supports_competitive: Optional[bool] = Field(default=None)
    supports_campaign: Optional[bool] = Field(default=None)
    default_mode: Optional[str] = Field(default=None)  # cooperative|competitive|campaign
    base_game_name: Optional[str] = Field(default=None)
    min_players: Optional[int] = Field(default=None)
    max_players: Optional[int] = Field(default=None)
    description: Optional[str] = Field(default=None)
    image: Optional[str] = Field(default=None)
