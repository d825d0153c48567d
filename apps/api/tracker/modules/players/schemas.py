from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from tracker.core.paging import PageOut


class PlayerCreateIn(BaseModel):
    name: str = Field(min_length=1)
    id: Optional[str] = None


class PlayerPatchIn(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)


class PlayerOut(BaseModel):
    id: str
    name: str
    created_at: Optional[str] = None


class PlayersListOut(BaseModel):
    items: List[PlayerOut]
    page: PageOut


class DeletedOut(BaseModel):
    id: str
    status: str = "deleted"
