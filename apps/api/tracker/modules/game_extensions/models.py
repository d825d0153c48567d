from __future__ import annotations

from typing import Optional
from sqlmodel import SQLModel, Field, UniqueConstraint


class GameExtension(SQLModel, table=True):
    __tablename__ = "game_extensions"
    __table_args__ = (UniqueConstraint("name", "base_game_name"),)

    id: str = Field(primary_key=True)
    name: str
    base_game_name: str = Field(foreign_key="game_templates.name")
    description: Optional[str] = Field(default=None)
    min_players: Optional[int] = Field(default=None)
    max_players: Optional[int] = Field(default=None)
    rules: Optional[str] = Field(default=None)
    image: Optional[str] = Field(default=None)
