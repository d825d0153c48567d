"""Statistics: pure computations, then the endpoints over real sessions."""

from tracker.modules.stats.compute import leaderboard, overview, player_stats


def session(game_type, players, **kw):
    s = {
        "game_type": game_type,
        "players": players,
        "scores": {},
        "completed": True,
        "is_cooperative": False,
        "winner": None,
        "coop_result": None,
        "dead_characters": {},
        "date": "2026-01-01",
        "duration": None,
    }
    s.update(kw)
    return s


SESSIONS = [
    session("Azul", ["a", "b"], scores={"a": 50, "b": 40}, winner="a", date="2026-01-03", duration=40),
    session("Azul", ["a", "b"], scores={"a": 30, "b": 60}, winner="b", date="2026-01-05", duration=50),
    session("Pandemic", ["a", "b"], is_cooperative=True, coop_result="won", dead_characters={"b": True}),
    session("Pandemic", ["b"], is_cooperative=True, coop_result="lost", date="2026-01-09"),
    session("Azul", ["a", "b"], completed=False),
]


class TestPlayerStats:
    def test_counts_completed_sessions_only(self):
        st = player_stats("a", SESSIONS, "Ann")

        assert st["games_played"] == 3
        assert st["competitive_wins"] == 1
        assert st["cooperative_wins"] == 1
        assert st["total_wins"] == 2
        assert st["win_rate"] == 66.7
        assert st["average_score"] == 40.0
        assert st["games_by_type"] == {"Azul": 2, "Pandemic": 1}
        assert st["favorite_game"] == "Azul"
        assert st["last_played"] == "2026-01-05"

    def test_deaths_and_losses(self):
        st = player_stats("b", SESSIONS)

        assert st["character_deaths"] == 1
        assert st["games_played"] == 4
        assert st["total_wins"] == 2
        assert st["favorite_game"] == "Azul"

    def test_no_games(self):
        st = player_stats("z", SESSIONS)
        assert st["games_played"] == 0
        assert st["win_rate"] == 0.0
        assert st["average_score"] is None
        assert st["favorite_game"] is None


def test_leaderboard_ordering():
    board = leaderboard([{"id": "a", "name": "Ann"}, {"id": "b", "name": "Bob"}, {"id": "z", "name": "Zed"}], SESSIONS)

    # equal wins: higher win rate first
    assert [e["player_id"] for e in board["entries"]] == ["a", "b", "z"]
    assert board["top_performer"]["player_id"] == "a"
    assert board["most_active"]["player_id"] == "b"


def test_leaderboard_without_games():
    board = leaderboard([{"id": "a", "name": "Ann"}], [])
    assert board["top_performer"] is None
    assert board["most_active"] is None


def test_overview():
    o = overview(2, 2, 0, SESSIONS)
    assert o["sessions_total"] == 5
    assert o["sessions_completed"] == 4
    assert o["sessions_in_progress"] == 1
    assert o["average_duration"] == 45.0


class TestEndpoints:
    def test_player_stats(self, client, make_player, make_template, make_session):
        ann, bob = make_player("Ann"), make_player("Bob")
        make_template("Azul")
        s = make_session("Azul", [ann["id"], bob["id"]])
        client.post(f"/game-sessions/{s['id']}/complete", json={"scores": {ann["id"]: 10, bob["id"]: 4}})
        make_session("Azul", [ann["id"], bob["id"]])

        st = client.get(f"/players/{ann['id']}/stats").json()

        assert st["name"] == "Ann"
        assert st["games_played"] == 1
        assert st["competitive_wins"] == 1
        assert st["win_rate"] == 100.0

        board = client.get("/stats/leaderboard").json()
        assert board["top_performer"]["player_id"] == ann["id"]

        o = client.get("/stats/overview").json()
        assert o["players"] == 2
        assert o["sessions_in_progress"] == 1

    def test_unknown_player(self, client):
        assert client.get("/players/ghost/stats").status_code == 404
