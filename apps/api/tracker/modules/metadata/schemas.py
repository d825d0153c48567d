from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from tracker.modules.game_templates.schemas import GameMode


class SearchResultOut(BaseModel):
    identifier: str
    name: str
    year: Optional[int] = None


class SearchOut(BaseModel):
    query: str
    provider: str
    items: List[SearchResultOut]


class ExpansionRefOut(BaseModel):
    identifier: str
    name: str
    year: Optional[int] = None


class GameDetailsOut(BaseModel):
    identifier: str
    name: str
    description: str = ""
    image: Optional[str] = None
    thumbnail: Optional[str] = None
    min_players: Optional[int] = None
    max_players: Optional[int] = None
    min_play_time: Optional[int] = None
    max_play_time: Optional[int] = None
    year: Optional[int] = None
    categories: List[str] = Field(default_factory=list)
    mechanics: List[str] = Field(default_factory=list)
    expansions: List[ExpansionRefOut] = Field(default_factory=list)
    characters: List[str] = Field(default_factory=list)
    rating: Optional[float] = None
    complexity: Optional[float] = None


class ImportIn(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)  # defaults to the catalog name
    supports_cooperative: bool = False
    supports_competitive: bool = True
    supports_campaign: bool = False
    default_mode: Optional[GameMode] = None
    include_expansions: bool = True
    include_characters: bool = True
