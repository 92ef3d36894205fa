from __future__ import annotations

from typing import Optional

from fastapi.testclient import TestClient

from gambit.config import EngineConfig
from gambit.protocol.http.app import create_app


CAPTURE_FEN = "4k3/8/8/3p4/4P3/8/8/4K3 w - - 0 1"


def _client(config: Optional[EngineConfig] = None) -> TestClient:
    return TestClient(create_app(config))


def _new_game(client: TestClient, **body) -> str:
    r = client.post("/api/games", json=body)
    assert r.status_code == 200
    return r.json()["game_id"]


def test_two_player_undo_takes_back_one_ply() -> None:
    client = _client()
    game_id = _new_game(client, mode="two-player")
    for uci in ("e2e4", "e7e5"):
        client.post(f"/api/games/{game_id}/move", json={"move": uci})

    state = client.post(f"/api/games/{game_id}/undo").json()
    assert state["move_history"] == ["e2e4"]
    assert state["turn"] == "black"
    assert state["last_move"] == "e2e4"


def test_computer_undo_takes_back_engine_reply() -> None:
    client = _client()
    game_id = _new_game(client, mode="computer-easy", fen=CAPTURE_FEN)
    state = client.post(f"/api/games/{game_id}/move", json={"move": "e4d5"}).json()
    assert state["captured"]["white"] == ["p"]
    assert len(state["move_history"]) == 2

    state = client.post(f"/api/games/{game_id}/undo").json()
    assert state["fen"] == CAPTURE_FEN
    assert state["turn"] == "white"
    assert state["move_history"] == []
    assert state["captured"] == {"white": [], "black": []}
    assert "e4d5" in state["legal_moves"]


def test_computer_undo_with_engine_to_move_takes_one_ply() -> None:
    # Only the engine's reply exists, so undo leaves the human to move
    client = _client()
    fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
    game_id = _new_game(client, mode="computer-easy", fen=fen)
    client.post(f"/api/games/{game_id}/ai-move")

    state = client.post(f"/api/games/{game_id}/undo").json()
    assert state["fen"] == fen
    assert state["move_history"] == []


def test_undo_without_moves_is_bad_request() -> None:
    client = _client()
    game_id = _new_game(client, mode="computer-hard")
    r = client.post(f"/api/games/{game_id}/undo")
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "bad_request"


def test_hard_reply_respects_time_budget() -> None:
    client = _client(EngineConfig(reply_movetime_ms=1))
    game_id = _new_game(client, mode="computer-hard")
    state = client.post(f"/api/games/{game_id}/move", json={"move": "e2e4"}).json()
    assert state["engine_move"] is not None
    assert state["turn"] == "white"
    assert len(state["move_history"]) == 2
