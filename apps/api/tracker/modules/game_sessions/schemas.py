from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from tracker.core.paging import PageOut
from tracker.modules.game_templates.schemas import GameMode

WinCondition = Literal["highest", "lowest"]
CoopResult = Literal["won", "lost"]
CharacterEventType = Literal["death", "revive", "rename"]


class CharacterEvent(BaseModel):
    type: CharacterEventType
    characterId: str  # the session player holding the character
    timestamp: str
    details: Dict[str, Any] = Field(default_factory=dict)


class SessionCreateIn(BaseModel):
    game_type: str = Field(min_length=1)
    players: List[str] = Field(min_length=1)
    game_mode: Optional[GameMode] = None
    scores: Optional[Dict[str, int]] = None
    characters: Dict[str, str] = Field(default_factory=dict)
    extensions: List[str] = Field(default_factory=list)
    win_condition: WinCondition = "highest"
    date: Optional[str] = None
    start_time: Optional[str] = None
    image: Optional[str] = None


class SessionPatchIn(BaseModel):
    players: Optional[List[str]] = Field(default=None, min_length=1)
    game_mode: Optional[GameMode] = None
    scores: Optional[Dict[str, int]] = None
    characters: Optional[Dict[str, str]] = None
    extensions: Optional[List[str]] = None
    winner: Optional[str] = None
    win_condition: Optional[WinCondition] = None
    coop_result: Optional[CoopResult] = None
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    image: Optional[str] = None


class SessionCompleteIn(BaseModel):
    scores: Optional[Dict[str, int]] = None
    winner: Optional[str] = None
    coop_result: Optional[CoopResult] = None
    end_time: Optional[str] = None


class CharacterEventIn(BaseModel):
    type: CharacterEventType
    character_id: str = Field(min_length=1)
    details: Dict[str, Any] = Field(default_factory=dict)


class SessionOut(BaseModel):
    id: str
    game_type: str
    game_mode: Optional[GameMode] = None
    is_cooperative: bool = False
    players: List[str] = Field(default_factory=list)
    scores: Dict[str, int] = Field(default_factory=dict)
    characters: Dict[str, str] = Field(default_factory=dict)
    extensions: List[str] = Field(default_factory=list)
    winner: Optional[str] = None
    win_condition: Optional[WinCondition] = None
    coop_result: Optional[CoopResult] = None
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    duration: Optional[int] = None
    completed: bool = False
    dead_characters: Dict[str, bool] = Field(default_factory=dict)
    new_character_names: Dict[str, str] = Field(default_factory=dict)
    character_history: List[CharacterEvent] = Field(default_factory=list)
    image: Optional[str] = None
    created_at: Optional[str] = None


class SessionsListOut(BaseModel):
    items: List[SessionOut]
    page: PageOut


class SessionDeletedOut(BaseModel):
    id: str
    status: str = "deleted"
