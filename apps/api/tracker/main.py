from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
import os

from tracker.core.db import db_health
from tracker.core.kv_store import KeyValueStore

APP_VERSION = os.getenv("APP_VERSION", "0.1.0")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # one store per process; DATABASE_URL is read at startup
    app.state.kv = KeyValueStore()
    try:
        yield
    finally:
        app.state.kv.close()


app = FastAPI(title="Board Game Tracker API", version=APP_VERSION, lifespan=lifespan)

# === OBSERVABILITY FOUNDATIONS ===
# Contract locks:
# - /health keys: status, version, db, last_error_summary
# - X-Request-Id in/out (missing -> generated; always echoed back; also on errors)
# - Error envelope keys: error, message, request_id, details
import json, uuid, datetime, logging
from typing import Any, Dict, Optional
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

_log = logging.getLogger("tracker")
if not logging.getLogger().handlers:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

_last_error: Optional[Dict[str, Any]] = None


def _now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def _emit(level: str, event: str, message: str, request_id: Optional[str], module: str, **extra: Any) -> None:
    payload: Dict[str, Any] = {
        "ts": _now_iso(),
        "level": level.lower(),
        "message": message,
        "request_id": request_id,
        "event": event,
        "module": module,
    }
    payload.update(extra)
    print(json.dumps(payload, ensure_ascii=False), flush=True)


def _err_envelope(error: str, message: str, request_id: Optional[str], details: Any, status_code: int):
    headers = {}
    if request_id:
        headers["X-Request-Id"] = request_id
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "request_id": request_id,
            "details": details,
        },
        headers=headers,
    )


@app.middleware("http")
async def _request_id_mw(request: Request, call_next):
    rid = request.headers.get("X-Request-Id") or uuid.uuid4().hex.upper()
    request.state.request_id = rid
    _emit("info", "http.request.start", f"{request.method} {request.url.path}", rid, __name__)
    try:
        resp = await call_next(request)
    except Exception as e:
        _emit("error", "http.request.exception", str(e), rid, __name__)
        raise
    resp.headers["X-Request-Id"] = rid
    _emit("info", "http.request.end", f"{request.method} {request.url.path} -> {getattr(resp,'status_code',None)}", rid, __name__)
    return resp


@app.exception_handler(StarletteHTTPException)
async def _http_exc_handler(request: Request, exc: StarletteHTTPException):
    rid = getattr(request.state, "request_id", None)
    # services raise detail={"error", "message"[, "details"]}
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        details = {"status_code": exc.status_code}
        if exc.detail.get("details") is not None:
            details["details"] = exc.detail["details"]
        return _err_envelope(str(exc.detail["error"]), str(exc.detail.get("message", "")), rid, details, exc.status_code)
    return _err_envelope("http_error", str(exc.detail), rid, {"status_code": exc.status_code}, exc.status_code)


@app.exception_handler(RequestValidationError)
async def _validation_exc_handler(request: Request, exc: RequestValidationError):
    rid = getattr(request.state, "request_id", None)
    return _err_envelope("validation_error", "request validation failed", rid, jsonable_encoder(exc.errors()), 422)


@app.exception_handler(Exception)
async def _unhandled_exc_handler(request: Request, exc: Exception):
    global _last_error
    rid = getattr(request.state, "request_id", None)
    _log.exception("unhandled error on %s %s", request.method, request.url.path)
    _last_error = {"ts": _now_iso(), "type": type(exc).__name__, "message": str(exc), "request_id": rid}
    return _err_envelope("internal_error", "internal server error", rid, {"type": type(exc).__name__}, 500)

# === END OBSERVABILITY FOUNDATIONS ===


@app.get("/health")
def health():
    db = db_health()
    return {
        "status": "ok" if db.get("status") == "ok" else "degraded",
        "version": os.getenv("APP_VERSION", APP_VERSION),
        "db": db,
        "last_error_summary": _last_error,
    }


# --- routers ---
from tracker.modules.players.router import router as players_router
from tracker.modules.game_templates.router import router as game_templates_router
from tracker.modules.game_extensions.router import router as game_extensions_router
from tracker.modules.game_sessions.router import router as game_sessions_router
from tracker.modules.current_game.router import router as current_game_router
from tracker.modules.stats.router import router as stats_router
from tracker.modules.audit.router import router as audit_router
from tracker.modules.metadata.router import router as metadata_router
from tracker.modules.kv.router import router as kv_router

app.include_router(players_router)
app.include_router(game_templates_router)
app.include_router(game_extensions_router)
app.include_router(game_sessions_router)
app.include_router(current_game_router)
app.include_router(stats_router)
app.include_router(audit_router)
app.include_router(metadata_router)
app.include_router(kv_router)
