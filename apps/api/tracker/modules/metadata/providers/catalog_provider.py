from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from tracker.core.db import repo_root
from .base import ExpansionRef, GameDetails, SearchResult

_log = logging.getLogger("tracker.metadata")

DEFAULT_CATALOG_PATH = "./data/metadata_catalog.json"
MIN_QUERY_LENGTH = 2


def _int(v: Any) -> Optional[int]:
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def _float(v: Any) -> Optional[float]:
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def _strs(v: Any) -> List[str]:
    if not isinstance(v, list):
        return []
    return [str(x) for x in v if isinstance(x, (str, int)) and str(x).strip()]


def match_rank(query: str, name: str) -> Optional[int]:
    """0 exact, 1 prefix, 2 word prefix, 3 substring; None when unrelated (case-insensitive)."""
    q = query.strip().lower()
    n = name.lower()
    if n == q:
        return 0
    if n.startswith(q):
        return 1
    if any(w.startswith(q) for w in n.replace(":", " ").replace("-", " ").split()):
        return 2
    if q in n:
        return 3
    return None


class CatalogProvider:
    """
    Reads game metadata from a local JSON file:
      {"games": [{"id": ..., "name": ..., "year": ..., "expansions": [{"id", "name", "year"}], ...}]}
    A bare top-level list of games is accepted too. The file is re-read on every call.
    """
    name = "catalog"

    def __init__(self, path: str | None = None) -> None:
        raw = path or os.environ.get("METADATA_CATALOG_PATH") or DEFAULT_CATALOG_PATH
        p = Path(raw)
        self.path = p if p.is_absolute() else (repo_root() / p)

    def _games(self) -> List[Dict[str, Any]]:
        if not self.path.is_file():
            _log.warning("Metadata catalog not found: %s", self.path)
            return []
        data = json.loads(self.path.read_text(encoding="utf-8"))
        games = data.get("games", []) if isinstance(data, dict) else data
        return [g for g in games if isinstance(g, dict) and g.get("id") is not None and g.get("name")]

    def search(self, query: str, limit: int = 20) -> List[SearchResult]:
        if len((query or "").strip()) < MIN_QUERY_LENGTH:
            return []
        ranked = []
        for g in self._games():
            r = match_rank(query, str(g["name"]))
            if r is not None:
                ranked.append((r, str(g["name"]).lower(), g))
        ranked.sort(key=lambda t: (t[0], t[1]))
        return [SearchResult(identifier=str(g["id"]), name=str(g["name"]), year=_int(g.get("year"))) for _, _, g in ranked[:limit]]

    def get_details(self, identifier: str) -> Optional[GameDetails]:
        for g in self._games():
            if str(g["id"]) == str(identifier):
                return self._details(g)
        return None

    def _details(self, g: Dict[str, Any]) -> GameDetails:
        expansions = [
            ExpansionRef(identifier=str(e["id"]), name=str(e["name"]), year=_int(e.get("year")))
            for e in (g.get("expansions") or [])
            if isinstance(e, dict) and e.get("id") is not None and e.get("name")
        ]
        return GameDetails(
            identifier=str(g["id"]),
            name=str(g["name"]),
            description=str(g.get("description") or ""),
            image=g.get("image"),
            thumbnail=g.get("thumbnail"),
            min_players=_int(g.get("min_players")),
            max_players=_int(g.get("max_players")),
            min_play_time=_int(g.get("min_play_time")),
            max_play_time=_int(g.get("max_play_time")),
            year=_int(g.get("year")),
            categories=_strs(g.get("categories")),
            mechanics=_strs(g.get("mechanics")),
            expansions=expansions,
            characters=_strs(g.get("characters")),
            rating=_float(g.get("rating")),
            complexity=_float(g.get("complexity")),
        )
