from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path, Request

from tracker.core.kv_store import KeyValueStore
from .schemas import KvDeletedOut, KvEntryOut, KvKeysOut, KvPutIn

router = APIRouter(tags=["kv"])


def get_kv(request: Request) -> KeyValueStore:
    return request.app.state.kv


def _not_found(key: str) -> HTTPException:
    return HTTPException(status_code=404, detail={"error": "not_found", "message": f"key not found: {key}"})


@router.get("/kv", response_model=KvKeysOut)
def api_list_keys(kv: KeyValueStore = Depends(get_kv)) -> KvKeysOut:
    return KvKeysOut(keys=kv.keys())


@router.get("/kv/{key}", response_model=KvEntryOut)
def api_get_key(key: str = Path(..., min_length=1), kv: KeyValueStore = Depends(get_kv)) -> KvEntryOut:
    entry = kv.entry(key)
    if entry is None:
        raise _not_found(key)
    return KvEntryOut(**entry)


@router.put("/kv/{key}", response_model=KvEntryOut)
def api_put_key(body: KvPutIn, key: str = Path(..., min_length=1), kv: KeyValueStore = Depends(get_kv)) -> KvEntryOut:
    kv.set(key, body.value)
    return KvEntryOut(**kv.entry(key))


@router.delete("/kv/{key}", response_model=KvDeletedOut)
def api_delete_key(key: str = Path(..., min_length=1), kv: KeyValueStore = Depends(get_kv)) -> KvDeletedOut:
    if not kv.delete(key):
        raise _not_found(key)
    return KvDeletedOut(key=key)
