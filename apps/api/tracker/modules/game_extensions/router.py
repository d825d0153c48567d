from __future__ import annotations

from fastapi import APIRouter, Query

from tracker.core.paging import clamp_limit, clamp_offset, page_out
from .schemas import ExtensionCreateIn, ExtensionDeletedOut, ExtensionOut, ExtensionPatchIn, ExtensionsListOut
from .service import create_extension, delete_extension, get_extension, list_extensions, patch_extension

router = APIRouter(tags=["game_extensions"])


@router.get("/game-extensions", response_model=ExtensionsListOut)
def api_list_extensions(
    limit: int | None = Query(None),
    offset: int | None = Query(None),
    base_game_name: str | None = Query(None),
) -> ExtensionsListOut:
    lim = clamp_limit(limit)
    off = clamp_offset(offset)
    items, total = list_extensions(limit=lim, offset=off, base_game_name=base_game_name)
    return ExtensionsListOut(items=items, page=page_out(lim, off, total))


@router.post("/game-extensions", response_model=ExtensionOut, status_code=201)
def api_create_extension(body: ExtensionCreateIn) -> ExtensionOut:
    return create_extension(body.model_dump())


@router.get("/game-extensions/{extension_id}", response_model=ExtensionOut)
def api_get_extension(extension_id: str) -> ExtensionOut:
    return get_extension(extension_id)


@router.patch("/game-extensions/{extension_id}", response_model=ExtensionOut)
def api_patch_extension(extension_id: str, body: ExtensionPatchIn) -> ExtensionOut:
    return patch_extension(extension_id, body.model_dump(exclude_unset=True))


@router.delete("/game-extensions/{extension_id}", response_model=ExtensionDeletedOut)
def api_delete_extension(extension_id: str) -> ExtensionDeletedOut:
    return delete_extension(extension_id)
