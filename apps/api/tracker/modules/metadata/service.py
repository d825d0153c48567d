from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict, List

from fastapi import HTTPException

from tracker.modules.game_templates.service import create_template
from .providers.base import GameDetails
from .providers.registry import get_provider, is_metadata_enabled

_log = logging.getLogger("tracker.metadata")


def _require_enabled() -> None:
    if not is_metadata_enabled(default=False):
        raise HTTPException(
            status_code=503,
            detail={"error": "metadata_disabled", "message": "metadata enrichment is disabled (METADATA_ENABLED=0)"},
        )


def _catalog_error(e: Exception) -> HTTPException:
    _log.warning("Metadata catalog unreadable: %s", e)
    return HTTPException(status_code=502, detail={"error": "catalog_unreadable", "message": str(e)})


def search_games(query: str, limit: int) -> Dict[str, Any]:
    _require_enabled()
    provider = get_provider()
    try:
        items = provider.search(query, limit=limit)
    except ValueError as e:
        raise _catalog_error(e)
    return {"query": query, "provider": provider.name, "items": [asdict(i) for i in items]}


def _details(identifier: str) -> GameDetails:
    _require_enabled()
    try:
        d = get_provider().get_details(identifier)
    except ValueError as e:
        raise _catalog_error(e)
    if d is None:
        raise HTTPException(status_code=404, detail={"error": "not_found", "message": f"catalog game not found: {identifier}"})
    return d


def get_game_details(identifier: str) -> Dict[str, Any]:
    return asdict(_details(identifier))


def import_game(identifier: str, options: Dict[str, Any]) -> Dict[str, Any]:
    """Create a template (plus its extensions) from a catalog entry."""
    d = _details(identifier)

    characters: List[Dict[str, Any]] = []
    if options.get("include_characters", True):
        characters = [{"name": c, "source": "catalog", "external_id": d.identifier} for c in d.characters]

    lo = d.min_players if d.min_players and d.min_players > 0 else None
    hi = d.max_players if d.max_players and d.max_players > 0 else None
    if lo is not None and hi is not None and lo > hi:
        lo, hi = hi, lo

    template = create_template(
        {
            "name": options.get("name") or d.name,
            "has_characters": bool(characters),
            "characters": characters,
            "is_cooperative_by_default": options.get("default_mode") == "cooperative",
            "supports_cooperative": options.get("supports_cooperative", False),
            "supports_competitive": options.get("supports_competitive", True),
            "supports_campaign": options.get("supports_campaign", False),
            "default_mode": options.get("default_mode"),
            "min_players": lo,
            "max_players": hi,
            "description": d.description or None,
            "image": d.image,
            "extensions": [e.name for e in d.expansions] if options.get("include_expansions", True) else [],
        }
    )
    _log.info("Imported catalog game %s as template %r", d.identifier, template["name"])
    return template
