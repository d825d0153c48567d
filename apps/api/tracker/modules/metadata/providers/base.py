from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol


@dataclass(frozen=True)
class SearchResult:
    identifier: str
    name: str
    year: Optional[int] = None


@dataclass(frozen=True)
class ExpansionRef:
    identifier: str
    name: str
    year: Optional[int] = None


@dataclass(frozen=True)
class GameDetails:
    """
    Catalog metadata for one game.

    NOTE:
    - players/play time are None when the catalog does not know them.
    - characters are plain names; importing turns them into GameCharacter entries.
    """
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
    categories: List[str] = field(default_factory=list)
    mechanics: List[str] = field(default_factory=list)
    expansions: List[ExpansionRef] = field(default_factory=list)
    characters: List[str] = field(default_factory=list)
    rating: Optional[float] = None
    complexity: Optional[float] = None


class MetadataProvider(Protocol):
    """
    Board-game metadata source used to prefill templates.
    Implementations must not write to the tracker database.
    """
    name: str

    def search(self, query: str, limit: int = 20) -> List[SearchResult]:
        ...

    def get_details(self, identifier: str) -> Optional[GameDetails]:
        ...
