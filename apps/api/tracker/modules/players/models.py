from __future__ import annotations

from typing import Optional
from sqlmodel import SQLModel, Field


class Player(SQLModel, table=True):
    __tablename__ = "players"

    id: str = Field(primary_key=True)
    name: str
    created_at: Optional[str] = Field(default=None)
