from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class TableSchemaOut(BaseModel):
    name: str
    schema_sql: Optional[str] = Field(default=None, alias="schema")

    model_config = {"populate_by_name": True}


class IndexFkOut(BaseModel):
    table: str
    indexes: List[Dict[str, Any]] = Field(default_factory=list)
    fks: List[Dict[str, Any]] = Field(default_factory=list)


class TableCountOut(BaseModel):
    name: str
    count: Optional[int] = None


class DocStatusOut(BaseModel):
    file: str
    exists: bool


class AuditReportOut(BaseModel):
    database: str
    declared_types_source: str
    tables: List[TableSchemaOut]
    indexes_and_fks: List[IndexFkOut]
    volumetry: List[TableCountOut]
    correspondence_issues: List[str] = Field(default_factory=list)
    relation_issues: List[str] = Field(default_factory=list)
    doc_status: List[DocStatusOut] = Field(default_factory=list)
