"""/game-templates: modes, characters, extensions and renames."""

import sqlite3

from tracker.core.db import get_db_path


class TestCreate:
    def test_defaults(self, make_template):
        t = make_template("Azul")

        assert t["supports_competitive"] is True
        assert t["supports_cooperative"] is False
        assert t["default_mode"] == "competitive"
        assert t["characters"] == []
        assert t["extensions"] == []

    def test_cooperative_default_mode(self, make_template):
        t = make_template(
            "Pandemic",
            supports_cooperative=True,
            supports_competitive=False,
            is_cooperative_by_default=True,
        )
        assert t["default_mode"] == "cooperative"

    def test_characters_get_ids(self, make_template):
        t = make_template("Gloomhaven", has_characters=True, characters=[{"name": " Brute "}, {"id": "sw", "name": "Spellweaver"}])

        names = {c["name"]: c for c in t["characters"]}
        assert set(names) == {"Brute", "Spellweaver"}
        assert names["Spellweaver"]["id"] == "sw"
        assert names["Brute"]["id"]
        assert names["Brute"]["source"] == "manual"
        assert names["Brute"]["created_at"]

    def test_with_extension_names(self, client, make_template):
        make_template("Gloomhaven", extensions=["Forgotten Circles", " ", "Jaws of the Lion"])

        r = client.get("/game-templates/Gloomhaven/extensions")

        assert r.json() == ["Forgotten Circles", "Jaws of the Lion"]

    def test_duplicate(self, client, make_template):
        make_template("Azul")
        r = client.post("/game-templates", json={"name": "Azul"})
        assert r.status_code == 409

    def test_no_modes(self, client):
        r = client.post("/game-templates", json={"name": "Nothing", "supports_competitive": False})
        assert r.status_code == 400
        assert r.json()["error"] == "invalid_modes"

    def test_default_mode_must_be_supported(self, client):
        r = client.post("/game-templates", json={"name": "Azul", "default_mode": "campaign"})
        assert r.status_code == 400
        assert r.json()["error"] == "invalid_default_mode"

    def test_player_range(self, client):
        r = client.post("/game-templates", json={"name": "Azul", "min_players": 4, "max_players": 2})
        assert r.status_code == 400
        assert r.json()["error"] == "invalid_player_range"

    def test_base_game_must_exist(self, client, make_template):
        r = client.post("/game-templates", json={"name": "Seafarers", "base_game_name": "Catan"})
        assert r.status_code == 404

        make_template("Catan")
        assert client.post("/game-templates", json={"name": "Seafarers", "base_game_name": "Catan"}).status_code == 201


class TestPatch:
    def test_switching_modes_resets_default(self, client, make_template):
        make_template("Azul")

        r = client.patch(
            "/game-templates/Azul",
            json={"supports_competitive": False, "supports_cooperative": True},
        )

        assert r.status_code == 200
        assert r.json()["default_mode"] == "cooperative"

    def test_self_base_game(self, client, make_template):
        make_template("Azul")
        r = client.patch("/game-templates/Azul", json={"base_game_name": "Azul"})
        assert r.json()["error"] == "invalid_base_game"

    def test_characters_keep_created_at(self, client, make_template):
        t = make_template("Gloomhaven", characters=[{"id": "br", "name": "Brute"}])
        created = t["characters"][0]["created_at"]

        r = client.patch(
            "/game-templates/Gloomhaven",
            json={"characters": [{"id": "br", "name": "Brute"}, {"name": "Tinkerer"}]},
        )

        chars = {c["name"]: c for c in r.json()["characters"]}
        assert chars["Brute"]["created_at"] == created
        assert "Tinkerer" in chars

    def test_rename_cascades(self, client, make_template, make_player, make_session, migrated_db):
        make_template("Gloomhaven", extensions=["Forgotten Circles"])
        make_template("Gloomhaven Solo", base_game_name="Gloomhaven")
        p = make_player("Ann")
        s = make_session("Gloomhaven", [p["id"]])

        r = client.patch("/game-templates/Gloomhaven", json={"name": "Gloomhaven 2e"})

        assert r.status_code == 200
        assert r.json()["extensions"] == ["Forgotten Circles"]
        assert client.get("/game-templates/Gloomhaven").status_code == 404
        assert client.get(f"/game-sessions/{s['id']}").json()["game_type"] == "Gloomhaven 2e"
        assert client.get("/game-templates/Gloomhaven Solo").json()["base_game_name"] == "Gloomhaven 2e"

    def test_rename_onto_existing(self, client, make_template):
        make_template("Azul")
        make_template("Catan")
        r = client.patch("/game-templates/Azul", json={"name": "Catan"})
        assert r.status_code == 409


def test_delete_cascades_extensions(client, make_template, migrated_db):
    make_template("Gloomhaven", extensions=["Forgotten Circles", "Jaws of the Lion"])

    r = client.delete("/game-templates/Gloomhaven")

    assert r.json() == {"name": "Gloomhaven", "extensions_deleted": 2, "status": "deleted"}
    conn = sqlite3.connect(get_db_path(migrated_db))
    try:
        assert conn.execute("SELECT COUNT(*) FROM game_extensions").fetchone() == (0,)
    finally:
        conn.close()


def test_legacy_string_characters_are_readable(client, migrated_db):
    conn = sqlite3.connect(get_db_path(migrated_db))
    try:
        conn.execute(
            "INSERT INTO game_templates (name, characters, supports_competitive) VALUES ('Old', '[\"Brute\", \"\"]', 1)"
        )
        conn.commit()
    finally:
        conn.close()

    r = client.get("/game-templates/Old")

    assert r.status_code == 200
    assert r.json()["characters"] == [
        {
            "id": "Brute",
            "name": "Brute",
            "class_type": None,
            "description": None,
            "abilities": [],
            "image_url": None,
            "source": None,
            "external_id": None,
            "created_at": None,
        }
    ]


class TestDeleteWithSessions:
    def test_refused_while_session_is_open(self, client, make_template, make_player, make_session):
        make_template("Azul")
        p = make_player("Ann")
        s = make_session("Azul", [p["id"]])

        r = client.delete("/game-templates/Azul")

        assert r.status_code == 409
        assert r.json()["error"] == "template_in_open_session"
        assert client.post(f"/game-sessions/{s['id']}/complete", json={}).status_code == 200

    def test_allowed_once_sessions_are_completed(self, client, make_template, make_player, make_session):
        make_template("Azul")
        p = make_player("Ann")
        s = make_session("Azul", [p["id"]])
        client.post(f"/game-sessions/{s['id']}/complete", json={})

        assert client.delete("/game-templates/Azul").status_code == 200
        assert client.get(f"/game-sessions/{s['id']}").json()["game_type"] == "Azul"
