from __future__ import annotations

from typing import List, Callable
import time

from gambit.config import EngineConfig
from gambit.protocol.uci.loop import UCIEngine


def capture_writer(buf: List[str]):
    def _w(line: str) -> None:
        buf.append(line)

    return _w


def _wait_until(predicate: Callable[[], bool], timeout_ms: int = 1500) -> None:
    deadline = time.time() + (timeout_ms / 1000)
    while time.time() < deadline:
        if predicate():
            return
        time.sleep(0.01)


def test_go_with_clock_controls_uses_difficulty():
    eng = UCIEngine(EngineConfig())
    eng.cmd_setoption(["name", "Difficulty", "value", "easy"])
    eng.cmd_position(["startpos"])
    out: List[str] = []
    # Clock-based controls are ignored; the difficulty depth applies
    eng.cmd_go(["wtime", "300", "btime", "300", "winc", "50", "binc", "50"], capture_writer(out))

    _wait_until(lambda: any(line.startswith("bestmove ") for line in out), timeout_ms=3000)
    assert any(line.startswith("bestmove ") for line in out)
    assert any(line.startswith("info depth 1 ") for line in out)


def test_go_movetime_bounds_search():
    eng = UCIEngine()
    eng.cmd_position(["startpos"])
    out: List[str] = []
    eng.cmd_go(["depth", "3", "movetime", "1"], capture_writer(out))

    _wait_until(lambda: any(line.startswith("bestmove ") for line in out), timeout_ms=5000)
    assert any(line.startswith("bestmove ") for line in out)


def test_go_depth_is_clamped():
    eng = UCIEngine(EngineConfig(max_depth=1))
    eng.cmd_position(["startpos"])
    out: List[str] = []
    eng.cmd_go(["depth", "7"], capture_writer(out))

    _wait_until(lambda: any(line.startswith("bestmove ") for line in out), timeout_ms=3000)
    assert any(line.startswith("info depth 1 ") for line in out)
