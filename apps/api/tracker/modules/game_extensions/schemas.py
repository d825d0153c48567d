from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from tracker.core.paging import PageOut


class ExtensionCreateIn(BaseModel):
    name: str = Field(min_length=1)
    base_game_name: str = Field(min_length=1)
    description: Optional[str] = None
    min_players: Optional[int] = Field(default=None, ge=1)
    max_players: Optional[int] = Field(default=None, ge=1)
    rules: Optional[str] = None
    image: Optional[str] = None


class ExtensionPatchIn(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    min_players: Optional[int] = Field(default=None, ge=1)
    max_players: Optional[int] = Field(default=None, ge=1)
    rules: Optional[str] = None
    image: Optional[str] = None


class ExtensionOut(BaseModel):
    id: str
    name: str
    base_game_name: str
    description: Optional[str] = None
    min_players: Optional[int] = None
    max_players: Optional[int] = None
    rules: Optional[str] = None
    image: Optional[str] = None


class ExtensionsListOut(BaseModel):
    items: List[ExtensionOut]
    page: PageOut


class ExtensionDeletedOut(BaseModel):
    id: str
    status: str = "deleted"
