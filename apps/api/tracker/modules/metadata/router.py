from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query

from tracker.modules.game_templates.schemas import TemplateOut
from .schemas import GameDetailsOut, ImportIn, SearchOut
from .service import get_game_details, import_game, search_games

router = APIRouter(tags=["metadata"])


@router.get("/metadata/search", response_model=SearchOut)
def api_search(
    q: str = Query(..., description="game name, 2 characters minimum"),
    limit: int = Query(20, ge=1, le=100),
) -> SearchOut:
    return search_games(q, limit)


@router.get("/metadata/games/{identifier}", response_model=GameDetailsOut)
def api_game_details(identifier: str) -> GameDetailsOut:
    return get_game_details(identifier)


@router.post("/metadata/games/{identifier}/import", response_model=TemplateOut, status_code=201)
def api_import_game(identifier: str, body: Optional[ImportIn] = None) -> TemplateOut:
    return import_game(identifier, (body or ImportIn()).model_dump())
