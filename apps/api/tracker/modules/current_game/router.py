from __future__ import annotations

from fastapi import APIRouter

from .schemas import CurrentGameIn, CurrentGameOut
from .service import get_current_game, put_current_game

router = APIRouter(tags=["current_game"])


@router.get("/current-game", response_model=CurrentGameOut)
def api_get_current_game() -> CurrentGameOut:
    return get_current_game()


@router.put("/current-game", response_model=CurrentGameOut)
def api_put_current_game(body: CurrentGameIn) -> CurrentGameOut:
    return put_current_game(body.game_data)
