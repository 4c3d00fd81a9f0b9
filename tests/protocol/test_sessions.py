from __future__ import annotations

from fastapi.testclient import TestClient

from hourglass.config import Settings
from hourglass.engine.fen import STARTPOS_FEN
from hourglass.protocol.http.app import create_app


def _client(**overrides: int) -> TestClient:
    return TestClient(create_app(Settings(**overrides)))


def _new_game(client: TestClient) -> str:
    r = client.post("/api/games")
    assert r.status_code == 200
    return r.json()["game_id"]


def test_create_game_and_get_state() -> None:
    client = _client()
    r = client.post("/api/games")
    assert r.status_code == 200
    body = r.json()
    assert "game_id" in body and isinstance(body["game_id"], str) and body["game_id"]
    game_id = body["game_id"]
    assert body["fen"] == STARTPOS_FEN

    r2 = client.get(f"/api/games/{game_id}/state")
    assert r2.status_code == 200
    state = r2.json()
    assert state["game_id"] == game_id
    assert state["active_color"] == "w"
    assert len(state["legal_moves"]) == 20
    assert state["in_check"] is False
    assert state["checkmate"] is False and state["stalemate"] is False


def test_get_state_unknown_id_404() -> None:
    client = _client()
    r = client.get("/api/games/does-not-exist/state")
    assert r.status_code == 404
    body = r.json()
    assert body["error"]["code"] == "not_found"


def test_set_position_validation_and_success() -> None:
    client = _client()
    game_id = _new_game(client)

    r_bad = client.post(f"/api/games/{game_id}/position", json={"fen": ""})
    assert r_bad.status_code == 400
    err = r_bad.json()["error"]
    assert err["code"] == "invalid_fen"
    assert err["details"]["field"] == "placement"

    r_bad = client.post(
        f"/api/games/{game_id}/position",
        json={"fen": "8/8/8/8/8/8/8/8 w KQA - 0 1"},
    )
    assert r_bad.status_code == 400
    assert r_bad.json()["error"]["details"] == {"field": "castle rights", "char_index": 2}

    fen = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
    r_ok = client.post(f"/api/games/{game_id}/position", json={"fen": fen})
    assert r_ok.status_code == 200
    state = r_ok.json()
    assert state["fen"] == fen
    assert state["in_check"] is True
    assert state["checkmate"] is True
    assert state["legal_moves"] == []


def test_set_position_requires_both_kings() -> None:
    client = _client()
    game_id = _new_game(client)
    r = client.post(
        f"/api/games/{game_id}/position",
        json={"fen": "8/8/8/8/8/8/8/4K3 w - - 0 1"},
    )
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "bad_request"
    # Rejected position did not replace the game
    assert client.get(f"/api/games/{game_id}/state").json()["fen"] == STARTPOS_FEN


def test_play_moves() -> None:
    client = _client()
    game_id = _new_game(client)
    r = client.post(f"/api/games/{game_id}/move", json={"move": "e2e4"})
    assert r.status_code == 200
    state = r.json()
    assert state["fen"] == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
    assert state["active_color"] == "b"


def test_move_errors_carry_engine_codes() -> None:
    client = _client()
    game_id = _new_game(client)

    r = client.post(f"/api/games/{game_id}/move", json={"move": "e7e5"})
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "not_your_piece"
    assert err["details"] == {"move": "e7e5"}

    r = client.post(f"/api/games/{game_id}/move", json={"move": "e2e5"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "illegal_move"

    r = client.post(f"/api/games/{game_id}/move", json={"move": "e2"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "bad_request"

    r = client.post(f"/api/games/{game_id}/move", json={"move": "e2e4", "promote": "k"})
    assert r.status_code == 422

    # Nothing was played
    assert client.get(f"/api/games/{game_id}/state").json()["fen"] == STARTPOS_FEN


def test_promotion_over_http() -> None:
    client = _client()
    game_id = _new_game(client)
    client.post(
        f"/api/games/{game_id}/position",
        json={"fen": "k7/4P3/8/8/8/8/8/4K3 w - - 0 1"},
    )

    r = client.post(f"/api/games/{game_id}/move", json={"move": "e7e8"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "no_promotion"

    r = client.post(f"/api/games/{game_id}/move", json={"move": "e7e8", "promote": "r"})
    assert r.status_code == 200
    assert r.json()["fen"] == "k3R3/8/8/8/8/8/8/4K3 b - - 0 1"


def test_moves_for_square() -> None:
    client = _client()
    game_id = _new_game(client)
    r = client.get(f"/api/games/{game_id}/moves/e2")
    assert r.status_code == 200
    assert r.json() == {"square": "e2", "moves": ["e2e3", "e2e4"]}

    r = client.get(f"/api/games/{game_id}/moves/e7")
    assert r.json()["moves"] == []

    r = client.get(f"/api/games/{game_id}/moves/z9")
    assert r.status_code == 400


def test_best_move() -> None:
    client = _client()
    game_id = _new_game(client)
    r = client.post(f"/api/games/{game_id}/best-move", json={"depth": 1})
    assert r.status_code == 200
    body = r.json()
    assert body["best_move"] in client.get(f"/api/games/{game_id}/state").json()["legal_moves"]
    assert body["depth"] == 1
    assert body["nodes"] >= 21
    assert body["mate"] is None
    assert body["score"] == 0


def test_best_move_reports_mate() -> None:
    client = _client()
    game_id = _new_game(client)
    client.post(
        f"/api/games/{game_id}/position",
        json={"fen": "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"},
    )
    r = client.post(f"/api/games/{game_id}/best-move", json={"depth": 2})
    assert r.status_code == 200
    body = r.json()
    assert body["best_move"] == "a1a8"
    assert body["mate"] == "win"
    assert body["score"] is None


def test_best_move_depth_is_capped() -> None:
    client = _client(max_search_depth=2)
    game_id = _new_game(client)
    r = client.post(f"/api/games/{game_id}/best-move", json={"depth": 3})
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "depth must be <= 2"


def test_perft_endpoint() -> None:
    client = _client()
    r = client.post("/api/perft", json={"depth": 2})
    assert r.status_code == 200
    assert r.json() == {"nodes": 400}

    r = client.post(
        "/api/perft",
        json={"fen": "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1", "depth": 1},
    )
    assert r.json() == {"nodes": 14}

    r = client.post("/api/perft", json={"depth": 9})
    assert r.status_code == 400


def test_position_with_capturable_king_is_rejected() -> None:
    client = _client()
    game_id = _new_game(client)
    r = client.post(
        f"/api/games/{game_id}/position",
        json={"fen": "4k3/8/8/8/8/8/8/4RK2 w - - 0 1"},
    )
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "bad_request"
    assert r.json()["error"]["message"] == "black is in check but not to move"

    # The session keeps its previous position and stays usable
    r = client.post(f"/api/games/{game_id}/move", json={"move": "e2e4"})
    assert r.status_code == 200
    assert client.get(f"/api/games/{game_id}/state").status_code == 200


def test_perft_with_capturable_king_is_rejected() -> None:
    client = _client()
    r = client.post("/api/perft", json={"fen": "4k3/8/8/8/8/8/8/4RK2 w - - 0 1", "depth": 2})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "bad_request"


def test_delete_game() -> None:
    app = create_app(Settings())
    client = TestClient(app)
    game_id = _new_game(client)
    assert len(app.state.store) == 1

    r = client.delete(f"/api/games/{game_id}")
    assert r.status_code == 204
    assert len(app.state.store) == 0
    assert client.get(f"/api/games/{game_id}/state").status_code == 404

    r = client.delete(f"/api/games/{game_id}")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "not_found"
