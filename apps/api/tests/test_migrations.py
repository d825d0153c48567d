"""The Alembic chain and its ledger, driven through tracker.core.migrate."""

import sqlite3

import pytest

from tracker.core.db import get_db_path
from tracker.core.migrate import current_revision, revision_history, upgrade

ALL_REVISIONS = [
    "0001_initial_schema",
    "0002_session_tracking_columns",
    "0003_migrate_extensions",
    "0004_enrich_game_extensions",
    "0005_description_image_fields",
    "0006_kv_store",
]


def sql(db_url, query, args=()):
    conn = sqlite3.connect(get_db_path(db_url))
    try:
        return conn.execute(query, args).fetchall()
    finally:
        conn.close()


def cols(db_url, table):
    return [r[1] for r in sql(db_url, f"PRAGMA table_info('{table}')")]


class TestLedger:
    def test_fresh_database_gets_every_revision(self, db_url):
        assert current_revision(db_url) is None

        applied = upgrade(db_url)

        assert applied == ALL_REVISIONS
        assert current_revision(db_url) == "0006_kv_store"
        assert sql(db_url, "SELECT version_num FROM alembic_version") == [("0006_kv_store",)]

    def test_second_upgrade_is_a_no_op(self, db_url):
        upgrade(db_url)
        assert upgrade(db_url) == []
        assert current_revision(db_url) == "0006_kv_store"

    def test_history_flags_applied_revisions(self, db_url):
        assert [r["applied"] for r in revision_history(db_url)] == [False] * 6

        upgrade(db_url, revision="0003_migrate_extensions")
        history = revision_history(db_url)

        assert [r["revision"] for r in history] == ALL_REVISIONS
        assert [r["applied"] for r in history] == [True, True, True, False, False, False]
        assert history[0]["down_revision"] is None

    def test_partial_upgrade_then_head(self, db_url):
        assert upgrade(db_url, revision="0002_session_tracking_columns") == ALL_REVISIONS[:2]
        assert "extensions" in cols(db_url, "game_templates")

        assert upgrade(db_url) == ALL_REVISIONS[2:]


class TestDataCarriedThroughChain:
    def test_legacy_template_extensions_are_lifted(self, db_url):
        upgrade(db_url, revision="0002_session_tracking_columns")
        conn = sqlite3.connect(get_db_path(db_url))
        try:
            conn.execute(
                "INSERT INTO game_templates (name, has_characters, characters, extensions, supports_cooperative) "
                "VALUES ('Gloomhaven', 1, '[\"Brute\", \"Spellweaver\"]', '[\"Forgotten Circles\", \" \", \"Jaws of the Lion\"]', 1)"
            )
            conn.execute(
                "INSERT INTO game_sessions (id, game_type, players, scores, allow_resurrection) "
                "VALUES ('s1', 'Gloomhaven', '[\"p1\"]', '{\"p1\": 0}', 1)"
            )
            conn.commit()
        finally:
            conn.close()

        upgrade(db_url)

        assert "extensions" not in cols(db_url, "game_templates")
        assert "allow_resurrection" not in cols(db_url, "game_sessions")
        assert sql(db_url, "SELECT name, characters, supports_cooperative FROM game_templates") == [
            ("Gloomhaven", '["Brute", "Spellweaver"]', 1)
        ]
        assert sql(db_url, "SELECT name FROM game_extensions WHERE base_game_name='Gloomhaven' ORDER BY name") == [
            ("Forgotten Circles",),
            ("Jaws of the Lion",),
        ]
        assert sql(db_url, "SELECT id FROM game_sessions") == [("s1",)]

    def test_hand_built_database_without_ledger(self, db_url):
        # tables created out-of-band, some columns already present
        conn = sqlite3.connect(get_db_path(db_url))
        try:
            conn.execute("CREATE TABLE players (id TEXT PRIMARY KEY, name TEXT NOT NULL, created_at TEXT)")
            conn.execute(
                "CREATE TABLE game_templates (name TEXT PRIMARY KEY, has_characters INTEGER NOT NULL DEFAULT 0, "
                "characters TEXT, is_cooperative_by_default INTEGER NOT NULL DEFAULT 0, default_mode TEXT, image TEXT)"
            )
            conn.execute("INSERT INTO players (id, name) VALUES ('p1', 'Ann')")
            conn.execute("INSERT INTO game_templates (name, image) VALUES ('Azul', 'azul.png')")
            conn.commit()
        finally:
            conn.close()

        upgrade(db_url)

        assert current_revision(db_url) == "0006_kv_store"
        assert sql(db_url, "SELECT name, image FROM game_templates") == [("Azul", "azul.png")]
        assert sql(db_url, "SELECT name FROM players") == [("Ann",)]
        assert "base_game_name" in cols(db_url, "game_templates")


def test_final_shape(migrated_db):
    assert set(cols(migrated_db, "game_extensions")) == {
        "id",
        "name",
        "base_game_name",
        "description",
        "min_players",
        "max_players",
        "rules",
        "image",
    }
    assert "extensions" not in cols(migrated_db, "game_templates")
    fks = sql(migrated_db, "PRAGMA foreign_key_list('game_extensions')")
    assert [(r[2], r[3], r[4]) for r in fks] == [("game_templates", "base_game_name", "name")]


@pytest.mark.parametrize("table", ["players", "game_templates", "game_sessions", "current_game", "kv_entries"])
def test_head_has_table(migrated_db, table):
    assert sql(migrated_db, "SELECT name FROM sqlite_master WHERE type='table' AND name=?", (table,))
