"""/players CRUD."""


class TestCreate:
    def test_generated_id(self, client):
        r = client.post("/players", json={"name": "  Ann  "})

        assert r.status_code == 201
        body = r.json()
        assert body["name"] == "Ann"
        assert len(body["id"]) == 26
        assert body["created_at"]

    def test_explicit_id_conflict(self, client, make_player):
        make_player("Ann", id="ann")

        r = client.post("/players", json={"name": "Other", "id": "ann"})

        assert r.status_code == 409
        assert r.json()["error"] == "conflict"

    def test_blank_name(self, client):
        r = client.post("/players", json={"name": "   "})
        assert r.status_code == 400
        assert r.json()["error"] == "invalid_name"

    def test_missing_name_is_a_validation_error(self, client):
        r = client.post("/players", json={})
        assert r.status_code == 422
        assert r.json()["error"] == "validation_error"


def test_list_is_sorted_and_paged(client, make_player):
    for name in ("carl", "Ann", "bea"):
        make_player(name)

    r = client.get("/players", params={"limit": 2})

    assert r.status_code == 200
    body = r.json()
    assert [p["name"] for p in body["items"]] == ["Ann", "bea"]
    assert body["page"] == {"limit": 2, "offset": 0, "total": 3, "has_more": True}

    rest = client.get("/players", params={"limit": 2, "offset": 2}).json()
    assert [p["name"] for p in rest["items"]] == ["carl"]
    assert rest["page"]["has_more"] is False


def test_limit_is_clamped(client):
    assert client.get("/players", params={"limit": 10_000}).json()["page"]["limit"] == 200
    assert client.get("/players", params={"limit": 0}).json()["page"]["limit"] == 1


class TestUpdateDelete:
    def test_rename(self, client, make_player):
        p = make_player("Ann")

        r = client.patch(f"/players/{p['id']}", json={"name": "Anne"})

        assert r.status_code == 200
        assert client.get(f"/players/{p['id']}").json()["name"] == "Anne"

    def test_empty_patch(self, client, make_player):
        p = make_player("Ann")
        r = client.patch(f"/players/{p['id']}", json={})
        assert r.status_code == 400
        assert r.json()["error"] == "no_updates"

    def test_delete(self, client, make_player):
        p = make_player("Ann")

        r = client.delete(f"/players/{p['id']}")

        assert r.json() == {"id": p["id"], "status": "deleted"}
        assert client.get(f"/players/{p['id']}").status_code == 404

    def test_unknown_player(self, client):
        r = client.get("/players/nobody")

        assert r.status_code == 404
        body = r.json()
        assert body["error"] == "not_found"
        assert body["details"] == {"status_code": 404}
        assert body["request_id"] == r.headers["X-Request-Id"]


class TestDeleteWithSessions:
    def test_refused_while_session_is_open(self, client, make_player, make_template, make_session):
        ann, bob = make_player("Ann"), make_player("Bob")
        make_template("Azul")
        s = make_session("Azul", [ann["id"], bob["id"]])

        r = client.delete(f"/players/{bob['id']}")

        assert r.status_code == 409
        assert r.json()["error"] == "player_in_open_session"
        assert r.json()["details"]["details"] == {"sessions": [s["id"]]}

        done = client.post(f"/game-sessions/{s['id']}/complete", json={"scores": {ann["id"]: 10}})
        assert done.status_code == 200
        assert done.json()["winner"] == ann["id"]

    def test_allowed_once_sessions_are_completed(self, client, make_player, make_template, make_session):
        ann, bob = make_player("Ann"), make_player("Bob")
        make_template("Azul")
        s = make_session("Azul", [ann["id"], bob["id"]])
        client.post(f"/game-sessions/{s['id']}/complete", json={"scores": {ann["id"]: 10}})

        assert client.delete(f"/players/{bob['id']}").status_code == 200
        assert client.get(f"/game-sessions/{s['id']}").json()["players"] == [ann["id"], bob["id"]]
        assert client.get(f"/players/{ann['id']}/stats").json()["games_played"] == 1
