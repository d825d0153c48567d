from __future__ import annotations

from fastapi import APIRouter, Path, Query

from tracker.core.paging import clamp_limit, clamp_offset, page_out
from .schemas import DeletedOut, PlayerCreateIn, PlayerOut, PlayerPatchIn, PlayersListOut
from .service import create_player, delete_player, get_player, list_players, patch_player

router = APIRouter(tags=["players"])


@router.get("/players", response_model=PlayersListOut)
def api_list_players(
    limit: int | None = Query(None),
    offset: int | None = Query(None),
) -> PlayersListOut:
    lim = clamp_limit(limit)
    off = clamp_offset(offset)
    items, total = list_players(limit=lim, offset=off)
    return PlayersListOut(items=items, page=page_out(lim, off, total))


@router.post("/players", response_model=PlayerOut, status_code=201)
def api_create_player(body: PlayerCreateIn) -> PlayerOut:
    return create_player(name=body.name, player_id=body.id)


@router.get("/players/{player_id}", response_model=PlayerOut)
def api_get_player(player_id: str = Path(...)) -> PlayerOut:
    return get_player(player_id)


@router.patch("/players/{player_id}", response_model=PlayerOut)
def api_patch_player(player_id: str, body: PlayerPatchIn) -> PlayerOut:
    return patch_player(player_id, body.model_dump(exclude_unset=True))


@router.delete("/players/{player_id}", response_model=DeletedOut)
def api_delete_player(player_id: str) -> DeletedOut:
    return delete_player(player_id)
