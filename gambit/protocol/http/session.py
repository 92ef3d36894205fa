from __future__ import annotations

import threading
import uuid
from collections import OrderedDict
from typing import Optional

from ...engine.game import Game


class GameStore:
    """Live games keyed by id, bounded by ``capacity``.

    Lookups refresh a game's recency; creating a game beyond capacity drops
    the least recently used one.
    """

    def __init__(self, capacity: int = 1024) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._lock = threading.RLock()
        self._games: "OrderedDict[str, Game]" = OrderedDict()

    def create(self, game: Game) -> str:
        game_id = uuid.uuid4().hex
        with self._lock:
            self._games[game_id] = game
            while len(self._games) > self.capacity:
                self._games.popitem(last=False)
        return game_id

    def get(self, game_id: str) -> Optional[Game]:
        with self._lock:
            game = self._games.get(game_id)
            if game is not None:
                self._games.move_to_end(game_id)
            return game

    def replace(self, game_id: str, game: Game) -> None:
        with self._lock:
            if game_id not in self._games:
                raise KeyError(game_id)
            self._games[game_id] = game
            self._games.move_to_end(game_id)

    def discard(self, game_id: str) -> bool:
        with self._lock:
            return self._games.pop(game_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)
