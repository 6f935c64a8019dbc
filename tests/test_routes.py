"""End-to-end tests of the HTTP surface with the in-process dispatcher."""

import pytest
from fastapi.testclient import TestClient

import config

CONNECT4 = {
    "game_type": "connect4",
    "board_width": 7,
    "board_height": 6,
    "game_players": [{"id": "alice"}, {"id": "bob"}],
}


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "DB_PATH", str(tmp_path / "api.sqlite3"))
    monkeypatch.setattr(config, "TURN_DISPATCHER", "local")
    from main import app

    with TestClient(app) as test_client:
        yield test_client


def start(client, game_id="g1", setup=CONNECT4):
    return client.post("/games/api/start_game", json={"session_id": "s1", "game_id": game_id, "setup": setup})


def submit(client, player_id, move, turn_number=0, game_id="g1"):
    return client.post(
        "/games/api/submit_move",
        json={"session_id": "s1", "game_id": game_id, "player_id": player_id, "turn_number": turn_number, "move": move},
    )


class TestPlayers:

    def test_create_and_public_info(self, client):
        resp = client.post(
            "/players/api/create_player",
            json={"player_id": "bot_1", "name": "Slither", "emoji": "🐍", "kind": "bot", "url": "http://bot"},
        )
        assert resp.status_code == 201

        info = client.get("/players/api/public_info", params={"player_id": "bot_1"}).json()
        assert info == {"player_id": "bot_1", "name": "Slither", "emoji": "🐍", "type": "bot"}

    def test_duplicate_player(self, client):
        body = {"player_id": "p1", "name": "Pat"}
        assert client.post("/players/api/create_player", json=body).status_code == 201
        assert client.post("/players/api/create_player", json=body).status_code == 409

    def test_bot_needs_url(self, client):
        resp = client.post("/players/api/create_player", json={"player_id": "b", "name": "B", "kind": "bot"})
        assert resp.status_code == 400

    def test_unknown_player(self, client):
        assert client.get("/players/api/public_info", params={"player_id": "ghost"}).status_code == 404


class TestGames:

    def test_full_turn_cycle(self, client):
        resp = start(client)
        assert resp.status_code == 201
        assert resp.json()["new_turn_number"] == 0

        first = submit(client, "alice", 3)
        assert first.status_code == 200
        assert first.json()["waiting_on"] == ["bob"]

        assert submit(client, "bob", 4).status_code == 200

        state = client.get("/games/api/game_state", params={"session_id": "s1", "game_id": "g1"}).json()
        assert [t["turn_number"] for t in state["turns"]] == [0, 1]
        assert state["turns"][1]["player_pieces"] == {"alice": [38], "bob": [39]}

        status = client.get(
            "/games/api/move_status", params={"session_id": "s1", "game_id": "g1", "turn_number": 1}
        ).json()
        assert status["waiting_on"] == ["alice", "bob"]

    def test_duplicate_game(self, client):
        assert start(client).status_code == 201
        assert start(client).status_code == 409

    def test_bad_setup(self, client):
        setup = dict(CONNECT4, board_width=2)
        assert start(client, setup=setup).status_code == 400

    def test_unknown_game_type(self, client):
        setup = dict(CONNECT4, game_type="chess")
        resp = start(client, setup=setup)
        assert resp.status_code == 400
        assert "chess" in resp.json()["detail"]

    def test_malformed_roster(self, client):
        setup = dict(CONNECT4, game_players=[{"name": "no id"}])
        assert start(client, setup=setup).status_code == 400

    def test_missing_body_field(self, client):
        resp = client.post("/games/api/start_game", json={"session_id": "s1", "game_id": "g1"})
        assert resp.status_code == 422

    def test_bad_id(self, client):
        resp = client.post(
            "/games/api/start_game",
            json={"session_id": "s 1", "game_id": "g1", "setup": CONNECT4},
        )
        assert resp.status_code == 400

    @pytest.mark.parametrize(
        "player_id,move,turn_number,expected",
        [
            ("alice", 99, 0, 400),
            ("carol", 1, 0, 400),
            ("alice", 1, 3, 409),
        ],
    )
    def test_move_rejections(self, client, player_id, move, turn_number, expected):
        start(client)
        assert submit(client, player_id, move, turn_number).status_code == expected

    def test_double_submit(self, client):
        start(client)
        assert submit(client, "alice", 1).status_code == 200
        assert submit(client, "alice", 2).status_code == 409

    def test_move_on_unknown_game(self, client):
        assert submit(client, "alice", 1, game_id="nope").status_code == 404

    def test_process_turn_is_idempotent(self, client):
        start(client)
        body = {"session_id": "s1", "game_id": "g1", "turn_number": 0}

        first = client.post("/games/api/process_turn", json=body).json()
        again = client.post("/games/api/process_turn", json=body).json()

        assert first["new_turn_created"] is True
        assert again["new_turn_created"] is False
        assert again["reason"] == "stale_turn"

    def test_process_unknown_game(self, client):
        body = {"session_id": "s1", "game_id": "nope", "turn_number": 0}
        assert client.post("/games/api/process_turn", json=body).status_code == 404
