from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class CurrentGameIn(BaseModel):
    game_data: Optional[Any] = None


class CurrentGameOut(BaseModel):
    game_data: Optional[Any] = None
    in_progress: bool = False
