from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from gambit.config import EngineConfig
from gambit.engine.game import Game, GameMode
from gambit.protocol.http.app import create_app
from gambit.protocol.http.session import GameStore


def test_create_and_get() -> None:
    store = GameStore()
    gid = store.create(Game.new())
    assert isinstance(store.get(gid), Game)
    assert len(store) == 1
    assert store.get("nope") is None


def test_replace_existing_only() -> None:
    store = GameStore()
    gid = store.create(Game.new())
    replacement = Game.new(GameMode.COMPUTER_HARD)
    store.replace(gid, replacement)
    assert store.get(gid) is replacement
    with pytest.raises(KeyError):
        store.replace("missing", replacement)


def test_least_recently_used_game_is_dropped() -> None:
    store = GameStore(capacity=2)
    first = store.create(Game.new())
    second = store.create(Game.new())
    store.get(first)
    third = store.create(Game.new())
    assert len(store) == 2
    assert store.get(second) is None
    assert store.get(first) is not None
    assert store.get(third) is not None


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        GameStore(capacity=0)


def test_delete_game_endpoint() -> None:
    client = TestClient(create_app(EngineConfig(max_games=4)))
    game_id = client.post("/api/games").json()["game_id"]
    r = client.delete(f"/api/games/{game_id}")
    assert r.status_code == 200
    assert r.json() == {"game_id": game_id, "status": "deleted"}
    assert client.get(f"/api/games/{game_id}/state").status_code == 404
    assert client.delete(f"/api/games/{game_id}").status_code == 404
