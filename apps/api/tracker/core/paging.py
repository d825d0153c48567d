from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


class PageOut(BaseModel):
    limit: int = Field(..., ge=1)
    offset: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    has_more: bool


def clamp_limit(raw: int | None) -> int:
    if raw is None:
        return DEFAULT_LIMIT
    try:
        v = int(raw)
    except Exception:
        return DEFAULT_LIMIT
    if v < 1:
        v = 1
    if v > MAX_LIMIT:
        v = MAX_LIMIT
    return v


def clamp_offset(raw: int | None) -> int:
    if raw is None:
        return 0
    try:
        v = int(raw)
    except Exception:
        return 0
    return max(v, 0)


def page_out(limit: int, offset: int, total: int) -> PageOut:
    return PageOut(limit=limit, offset=offset, total=total, has_more=(offset + limit) < total)
