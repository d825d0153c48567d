"""Shared fixtures: every test gets its own SQLite file under tmp_path."""

from typing import Callable, Dict

import pytest
from fastapi.testclient import TestClient

from tracker.core.db import create_migration_engine, sqlite_url
from tracker.core.migrate import upgrade


@pytest.fixture
def db_url(tmp_path, monkeypatch) -> str:
    """Fresh, empty database; DATABASE_URL points at it for the whole test."""
    url = sqlite_url(tmp_path / "tracker.db")
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.delenv("AUDIT_TYPES_PATH", raising=False)
    monkeypatch.delenv("METADATA_ENABLED", raising=False)
    return url


@pytest.fixture
def migrated_db(db_url) -> str:
    """Database migrated to head through the real Alembic chain."""
    upgrade(db_url)
    return db_url


@pytest.fixture
def engine(db_url):
    """Migration-style engine (foreign keys off, transactional DDL)."""
    eng = create_migration_engine(db_url)
    yield eng
    eng.dispose()


@pytest.fixture
def client(migrated_db):
    from tracker.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_player(client) -> Callable[..., Dict]:
    def _make(name: str, **extra) -> Dict:
        r = client.post("/players", json={"name": name, **extra})
        assert r.status_code == 201, r.text
        return r.json()

    return _make


@pytest.fixture
def make_template(client) -> Callable[..., Dict]:
    def _make(name: str, **extra) -> Dict:
        r = client.post("/game-templates", json={"name": name, **extra})
        assert r.status_code == 201, r.text
        return r.json()

    return _make


@pytest.fixture
def make_session(client) -> Callable[..., Dict]:
    def _make(game_type: str, players, **extra) -> Dict:
        r = client.post("/game-sessions", json={"game_type": game_type, "players": list(players), **extra})
        assert r.status_code == 201, r.text
        return r.json()

    return _make
