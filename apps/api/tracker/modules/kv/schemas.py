from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel


class KvPutIn(BaseModel):
    value: Any


class KvEntryOut(BaseModel):
    key: str
    value: Any = None
    updated_at: Optional[str] = None


class KvKeysOut(BaseModel):
    keys: List[str]


class KvDeletedOut(BaseModel):
    key: str
    status: str = "deleted"
