from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

from ...config import Difficulty, EngineConfig
from ...engine.board import Color
from ...engine.game import Game
from ...search.service import SearchResult, SearchService


logger = logging.getLogger(__name__)

Writer = Callable[[str], None]

# Seconds stop waits for the interrupted search to answer
STOP_GRACE_S = 1.0


@dataclass
class GoParams:
    depth: Optional[int] = None
    movetime_ms: Optional[int] = None


class UCIEngine:
    """UCI protocol adapter around the core engine.

    Notes:
    - Core remains pure; I/O is isolated here.
    - Command set: uci, isready, ucinewgame, position, go (depth|movetime),
      setoption (Difficulty), stop, quit.
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()
        self.game: Game = Game.new()
        self.search = SearchService()
        self.difficulty: Difficulty = self.config.difficulty
        self._search_thread: Optional[threading.Thread] = None
        self._result_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._gen = 0  # generation id to invalidate stale workers
        self._pending_gen: Optional[int] = None  # search that still owes a bestmove

    # ---- Command handlers ----
    def cmd_uci(self, write: Writer) -> None:
        write("id name gambit")
        write("id author gambit developers")
        write("option name Difficulty type combo default medium var easy var medium var hard")
        write("uciok")

    def cmd_isready(self, write: Writer) -> None:
        write("readyok")

    def cmd_ucinewgame(self) -> None:
        self._cancel_running_search()
        self.game = Game.new()

    def cmd_position(self, args: List[str]) -> None:
        # position [startpos | fen <FEN> ] [moves m1 m2 ...]
        if not args:
            return
        idx = 0
        if args[idx] == "startpos":
            self.game = Game.new()
            idx += 1
        elif args[idx] == "fen":
            idx += 1
            fen_tokens: List[str] = []
            while idx < len(args) and args[idx] != "moves":
                fen_tokens.append(args[idx])
                idx += 1
            try:
                self.game = Game.from_fen(" ".join(fen_tokens))
            except ValueError:
                logger.warning("ignoring invalid FEN", extra={"fen": " ".join(fen_tokens)})
                return
        if idx < len(args) and args[idx] == "moves":
            for token in args[idx + 1 :]:
                try:
                    self.game.play_uci(token)
                except ValueError:
                    # Stop at the first invalid/illegal move per typical UCI robustness
                    logger.warning("ignoring illegal move", extra={"move": token})
                    break

    def cmd_setoption(self, args: List[str]) -> None:
        # setoption name <name> [value <value>]
        if "name" not in args:
            return
        i = args.index("name") + 1
        name_tokens: List[str] = []
        while i < len(args) and args[i] != "value":
            name_tokens.append(args[i])
            i += 1
        value = " ".join(args[i + 1 :]).strip().lower()
        if " ".join(name_tokens).strip().lower() == "difficulty":
            try:
                self.difficulty = Difficulty(value)
            except ValueError:
                logger.warning("unknown difficulty", extra={"value": value})

    def cmd_go(self, args: List[str], write: Writer) -> None:
        params = self._parse_go_args(args)
        depth = (
            self.config.clamp_depth(params.depth)
            if params.depth is not None
            else self.difficulty.depth
        )
        movetime = params.movetime_ms or self.config.movetime_ms
        self._cancel_running_search()
        stop_event = threading.Event()
        self._stop_event = stop_event
        game = self.game
        with self._result_lock:
            self._gen += 1
            gen = self._gen
            self._pending_gen = gen

        def worker() -> None:
            res = self.search.search(
                game, depth=depth, movetime_ms=movetime, stop_event=stop_event
            )
            with self._result_lock:
                # A newer go, a stop or a new game already took over
                if self._pending_gen != gen:
                    return
                self._pending_gen = None
            self._emit_info(res, game.turn, write)
            best = res.best_move.to_uci() if res.best_move else "(none)"
            write(f"bestmove {best}")

        self._search_thread = threading.Thread(target=worker, name="uci-search", daemon=True)
        self._search_thread.start()

    def cmd_stop(self, write: Writer) -> None:
        thread = self._search_thread
        self._stop_event.set()
        if thread is not None:
            thread.join(STOP_GRACE_S)
        with self._result_lock:
            pending = self._pending_gen is not None
            self._pending_gen = None
        if thread is not None and not pending:
            # The search already answered with its own bestmove
            return
        legal = self.game.legal_moves()
        write(f"bestmove {legal[0].to_uci() if legal else '(none)'}")

    # ---- Utilities ----
    def _cancel_running_search(self) -> None:
        self._stop_event.set()
        with self._result_lock:
            self._pending_gen = None

    def _parse_go_args(self, args: List[str]) -> GoParams:
        gp = GoParams()
        i = 0
        while i < len(args):
            tok = args[i]
            if tok in ("depth", "movetime") and i + 1 < len(args):
                try:
                    value = int(args[i + 1])
                except ValueError:
                    value = None
                if tok == "depth":
                    gp.depth = value
                else:
                    gp.movetime_ms = value
                i += 2
                continue
            # Clock-based time controls are not supported; ignore them
            i += 1
        return gp

    def _emit_info(self, res: SearchResult, turn: Color, write: Writer) -> None:
        # Engine scores favour black; UCI wants the side to move's view
        score = res.score or 0
        cp = score if turn is Color.BLACK else -score
        nps = int(res.nodes * 1000 / max(1, res.time_ms))
        pv = res.best_move.to_uci() if res.best_move else ""
        write(
            f"info depth {res.depth} time {res.time_ms} nodes {res.nodes} nps {nps} "
            f"score cp {cp} pv {pv}".rstrip()
        )


def _default_writer(line: str) -> None:
    # Ensure newline termination and immediate flush
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


def run_uci(config: Optional[EngineConfig] = None) -> None:
    eng = UCIEngine(config)
    for raw in sys.stdin:
        line = raw.strip()
        if not line:
            continue
        parts = line.split()
        cmd, args = parts[0], parts[1:]

        if cmd == "uci":
            eng.cmd_uci(_default_writer)
        elif cmd == "isready":
            eng.cmd_isready(_default_writer)
        elif cmd == "setoption":
            eng.cmd_setoption(args)
        elif cmd == "ucinewgame":
            eng.cmd_ucinewgame()
        elif cmd == "position":
            eng.cmd_position(args)
        elif cmd == "go":
            eng.cmd_go(args, _default_writer)
        elif cmd == "stop":
            eng.cmd_stop(_default_writer)
        elif cmd == "quit":
            break
        # Ignore unknown commands per UCI convention
