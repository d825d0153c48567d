from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from tracker.core.paging import PageOut

GameMode = Literal["cooperative", "competitive", "campaign"]


class GameCharacterIn(BaseModel):
    id: Optional[str] = None
    name: str = Field(min_length=1)
    class_type: Optional[str] = None
    description: Optional[str] = None
    abilities: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    source: Optional[str] = None  # manual|catalog
    external_id: Optional[str] = None


class GameCharacter(BaseModel):
    id: str
    name: str
    class_type: Optional[str] = None
    description: Optional[str] = None
    abilities: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    source: Optional[str] = None
    external_id: Optional[str] = None
    created_at: Optional[str] = None


class TemplateCreateIn(BaseModel):
    name: str = Field(min_length=1)
    has_characters: bool = False
    characters: List[GameCharacterIn] = Field(default_factory=list)
    is_cooperative_by_default: bool = False
    supports_cooperative: bool = False
    supports_competitive: bool = True
    supports_campaign: bool = False
    default_mode: Optional[GameMode] = None
    base_game_name: Optional[str] = None
    min_players: Optional[int] = Field(default=None, ge=1)
    max_players: Optional[int] = Field(default=None, ge=1)
    description: Optional[str] = None
    image: Optional[str] = None
    # extension names created together with the template
    extensions: List[str] = Field(default_factory=list)


class TemplatePatchIn(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    has_characters: Optional[bool] = None
    characters: Optional[List[GameCharacterIn]] = None
    is_cooperative_by_default: Optional[bool] = None
    supports_cooperative: Optional[bool] = None
    supports_competitive: Optional[bool] = None
    supports_campaign: Optional[bool] = None
    default_mode: Optional[GameMode] = None
    base_game_name: Optional[str] = None
    min_players: Optional[int] = Field(default=None, ge=1)
    max_players: Optional[int] = Field(default=None, ge=1)
    description: Optional[str] = None
    image: Optional[str] = None


class TemplateOut(BaseModel):
    name: str
    has_characters: bool = False
    characters: List[GameCharacter] = Field(default_factory=list)
    is_cooperative_by_default: bool = False
    supports_cooperative: bool = False
    supports_competitive: bool = False
    supports_campaign: bool = False
    default_mode: Optional[GameMode] = None
    base_game_name: Optional[str] = None
    min_players: Optional[int] = None
    max_players: Optional[int] = None
    description: Optional[str] = None
    image: Optional[str] = None
    extensions: List[str] = Field(default_factory=list)


class TemplatesListOut(BaseModel):
    items: List[TemplateOut]
    page: PageOut


class TemplateDeletedOut(BaseModel):
    name: str
    extensions_deleted: int = 0
    status: str = "deleted"
