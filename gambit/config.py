from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def depth(self) -> int:
        return SEARCH_DEPTH[self]


SEARCH_DEPTH = {
    Difficulty.EASY: 1,
    Difficulty.MEDIUM: 2,
    Difficulty.HARD: 3,
}


@dataclass(frozen=True)
class EngineConfig:
    """Settings shared by the HTTP service, the UCI loop and the CLI.

    Attributes:
        difficulty: Tier used when a caller asks for a move without a depth.
        max_depth: Largest search depth a request may ask for.
        movetime_ms: Optional wall-clock budget per search; ``None`` lets the
            search run to completion.
        reply_movetime_ms: Budget for the engine's automatic HTTP replies when
            ``movetime_ms`` is unset.
        log_level: Level handed to ``logging.basicConfig``.
        host: Bind address for the HTTP server.
        port: Bind port for the HTTP server.
        max_games: Live HTTP games kept before the least recently used is
            dropped.
    """

    difficulty: Difficulty = Difficulty.MEDIUM
    max_depth: int = 4
    movetime_ms: Optional[int] = None
    reply_movetime_ms: Optional[int] = 5000
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000
    max_games: int = 1024

    def clamp_depth(self, depth: Optional[int]) -> int:
        if depth is None:
            return self.difficulty.depth
        return max(1, min(self.max_depth, depth))

    def reply_budget_ms(self) -> Optional[int]:
        if self.movetime_ms is not None:
            return self.movetime_ms
        return self.reply_movetime_ms
