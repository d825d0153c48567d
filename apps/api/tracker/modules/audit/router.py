from __future__ import annotations

import sqlite3

from fastapi import APIRouter, HTTPException, Query

from .schemas import AuditReportOut
from .service import audit_report

router = APIRouter(tags=["audit"])


@router.get("/audit/report", response_model=AuditReportOut, response_model_by_alias=True)
def api_audit_report(from_models: bool = Query(False)) -> AuditReportOut:
    try:
        return audit_report(from_models=from_models)
    except sqlite3.OperationalError as e:
        raise HTTPException(status_code=503, detail={"error": "db_unavailable", "message": str(e)})
