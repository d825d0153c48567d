from __future__ import annotations

from fastapi import APIRouter, Query

from tracker.core.paging import clamp_limit, clamp_offset, page_out
from .schemas import (
    CharacterEventIn,
    SessionCompleteIn,
    SessionCreateIn,
    SessionDeletedOut,
    SessionOut,
    SessionPatchIn,
    SessionsListOut,
)
from .service import (
    complete_session,
    create_session,
    delete_session,
    get_session,
    list_sessions,
    patch_session,
    record_character_event,
)

router = APIRouter(tags=["game_sessions"])


@router.get("/game-sessions", response_model=SessionsListOut)
def api_list_sessions(
    limit: int | None = Query(None),
    offset: int | None = Query(None),
    completed: bool | None = Query(None),
    player_id: str | None = Query(None),
    game_type: str | None = Query(None),
) -> SessionsListOut:
    lim = clamp_limit(limit)
    off = clamp_offset(offset)
    items, total = list_sessions(limit=lim, offset=off, completed=completed, player_id=player_id, game_type=game_type)
    return SessionsListOut(items=items, page=page_out(lim, off, total))


@router.post("/game-sessions", response_model=SessionOut, status_code=201)
def api_create_session(body: SessionCreateIn) -> SessionOut:
    return create_session(body.model_dump())


@router.get("/game-sessions/{session_id}", response_model=SessionOut)
def api_get_session(session_id: str) -> SessionOut:
    return get_session(session_id)


@router.patch("/game-sessions/{session_id}", response_model=SessionOut)
def api_patch_session(session_id: str, body: SessionPatchIn) -> SessionOut:
    return patch_session(session_id, body.model_dump(exclude_unset=True))


@router.post("/game-sessions/{session_id}/complete", response_model=SessionOut)
def api_complete_session(session_id: str, body: SessionCompleteIn) -> SessionOut:
    return complete_session(
        session_id,
        scores=body.scores,
        winner=body.winner,
        coop_result=body.coop_result,
        end_time=body.end_time,
    )


@router.post("/game-sessions/{session_id}/character-events", response_model=SessionOut)
def api_record_character_event(session_id: str, body: CharacterEventIn) -> SessionOut:
    return record_character_event(session_id, body.type, body.character_id, body.details)


@router.delete("/game-sessions/{session_id}", response_model=SessionDeletedOut)
def api_delete_session(session_id: str) -> SessionDeletedOut:
    return delete_session(session_id)
