"""/game-extensions CRUD."""

import pytest


@pytest.fixture
def gloomhaven(make_template):
    return make_template("Gloomhaven")


@pytest.fixture
def make_extension(client):
    def _make(name, base_game_name="Gloomhaven", **extra):
        r = client.post("/game-extensions", json={"name": name, "base_game_name": base_game_name, **extra})
        assert r.status_code == 201, r.text
        return r.json()

    return _make


def test_create_and_get(client, gloomhaven, make_extension):
    e = make_extension("Forgotten Circles", min_players=1, max_players=4, rules="new scenarios")

    got = client.get(f"/game-extensions/{e['id']}").json()

    assert got == e
    assert got["rules"] == "new scenarios"
    assert client.get("/game-templates/Gloomhaven").json()["extensions"] == ["Forgotten Circles"]


class TestCreateErrors:
    def test_unknown_base_game(self, client):
        r = client.post("/game-extensions", json={"name": "X", "base_game_name": "Nope"})
        assert r.status_code == 404

    def test_duplicate_per_game(self, client, gloomhaven, make_template, make_extension):
        make_extension("Forgotten Circles")
        make_template("Frosthaven")

        dup = client.post("/game-extensions", json={"name": "Forgotten Circles", "base_game_name": "Gloomhaven"})
        other_game = client.post("/game-extensions", json={"name": "Forgotten Circles", "base_game_name": "Frosthaven"})

        assert dup.status_code == 409
        assert other_game.status_code == 201

    def test_player_range(self, client, gloomhaven):
        r = client.post(
            "/game-extensions",
            json={"name": "X", "base_game_name": "Gloomhaven", "min_players": 5, "max_players": 2},
        )
        assert r.json()["error"] == "invalid_player_range"


def test_list_filtered_by_game(client, gloomhaven, make_template, make_extension):
    make_template("Catan")
    make_extension("Seafarers", base_game_name="Catan")
    make_extension("Jaws of the Lion")
    make_extension("Forgotten Circles")

    all_items = client.get("/game-extensions").json()
    only_glo = client.get("/game-extensions", params={"base_game_name": "Gloomhaven"}).json()

    assert [e["name"] for e in all_items["items"]] == ["Seafarers", "Forgotten Circles", "Jaws of the Lion"]
    assert only_glo["page"]["total"] == 2


class TestPatchDelete:
    def test_patch(self, client, gloomhaven, make_extension):
        e = make_extension("Forgotten Circles")

        r = client.patch(f"/game-extensions/{e['id']}", json={"description": "Sequel", "image": "fc.png"})

        assert r.status_code == 200
        assert r.json()["description"] == "Sequel"
        assert r.json()["name"] == "Forgotten Circles"

    def test_rename_onto_sibling(self, client, gloomhaven, make_extension):
        make_extension("Forgotten Circles")
        e = make_extension("Jaws of the Lion")

        r = client.patch(f"/game-extensions/{e['id']}", json={"name": "Forgotten Circles"})

        assert r.status_code == 409

    def test_empty_patch(self, client, gloomhaven, make_extension):
        e = make_extension("Forgotten Circles")
        assert client.patch(f"/game-extensions/{e['id']}", json={}).json()["error"] == "no_updates"

    def test_delete(self, client, gloomhaven, make_extension):
        e = make_extension("Forgotten Circles")

        assert client.delete(f"/game-extensions/{e['id']}").json() == {"id": e["id"], "status": "deleted"}
        assert client.get(f"/game-extensions/{e['id']}").status_code == 404
        assert client.get("/game-templates/Gloomhaven/extensions").json() == []
