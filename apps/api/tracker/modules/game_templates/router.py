from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query

from tracker.core.paging import clamp_limit, clamp_offset, page_out
from .schemas import TemplateCreateIn, TemplateDeletedOut, TemplateOut, TemplatePatchIn, TemplatesListOut
from .service import (
    create_template,
    delete_template,
    get_template,
    list_template_extensions,
    list_templates,
    patch_template,
)

router = APIRouter(tags=["game_templates"])


@router.get("/game-templates", response_model=TemplatesListOut)
def api_list_templates(
    limit: int | None = Query(None),
    offset: int | None = Query(None),
) -> TemplatesListOut:
    lim = clamp_limit(limit)
    off = clamp_offset(offset)
    items, total = list_templates(limit=lim, offset=off)
    return TemplatesListOut(items=items, page=page_out(lim, off, total))


@router.post("/game-templates", response_model=TemplateOut, status_code=201)
def api_create_template(body: TemplateCreateIn) -> TemplateOut:
    return create_template(body.model_dump())


@router.get("/game-templates/{name}", response_model=TemplateOut)
def api_get_template(name: str) -> TemplateOut:
    return get_template(name)


@router.get("/game-templates/{name}/extensions", response_model=List[str])
def api_list_template_extensions(name: str) -> List[str]:
    return list_template_extensions(name)


@router.patch("/game-templates/{name}", response_model=TemplateOut)
def api_patch_template(name: str, body: TemplatePatchIn) -> TemplateOut:
    return patch_template(name, body.model_dump(exclude_unset=True))


@router.delete("/game-templates/{name}", response_model=TemplateDeletedOut)
def api_delete_template(name: str) -> TemplateDeletedOut:
    return delete_template(name)
