from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from gambit.config import Difficulty
from gambit.engine.board import Board, CastlingRights, Color, Position
from gambit.engine.move import Move
from gambit.engine.rules import (
    apply_move,
    en_passant_target_after,
    has_legal_move,
    legal_moves,
    update_castling_rights,
)
from gambit.eval import PIECE_VALUES, evaluate_board

if TYPE_CHECKING:
    from gambit.engine.game import Game


logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: Optional[int]
    nodes: int
    depth: int
    time_ms: int
    timed_out: bool


class _Minimax:
    """Depth-limited minimax with alpha-beta pruning.

    Scores follow the evaluator's convention (positive favours black), so the
    black side maximises and the white side minimises. Every child node owns a
    fresh board copy. The search is cut short once the deadline passes or the
    stop event is set.
    """

    def __init__(
        self,
        deadline: Optional[float] = None,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        self.deadline = deadline
        self.stop_event = stop_event
        self.nodes = 0
        self.timed_out = False

    def out_of_time(self) -> bool:
        if self.stop_event is not None and self.stop_event.is_set():
            self.timed_out = True
        elif self.deadline is not None and time.perf_counter() >= self.deadline:
            self.timed_out = True
        return self.timed_out

    def root(
        self,
        board: Board,
        depth: int,
        maximizing: bool,
        en_passant_target: Optional[Position],
        castling_rights: Optional[CastlingRights],
    ) -> tuple[Optional[Move], Optional[int]]:
        color = Color.BLACK if maximizing else Color.WHITE
        moves = legal_moves(board, color, en_passant_target, castling_rights)
        if not moves:
            return None, None

        best_move: Optional[Move] = None
        best_score = -math.inf if maximizing else math.inf
        for move in moves:
            if best_move is not None and self.out_of_time():
                break
            child = board.copy()
            apply_move(child, move)
            score = self.minimax(
                child,
                depth - 1,
                -math.inf,
                math.inf,
                not maximizing,
                en_passant_target_after(move),
                _rights_after(castling_rights, move),
            )
            if (maximizing and score > best_score) or (not maximizing and score < best_score):
                best_score = score
                best_move = move
        return best_move, int(best_score)

    def minimax(
        self,
        board: Board,
        depth: int,
        alpha: float,
        beta: float,
        maximizing: bool,
        en_passant_target: Optional[Position],
        castling_rights: Optional[CastlingRights],
    ) -> int:
        self.nodes += 1
        if depth <= 0 or self.out_of_time():
            return evaluate_board(board)

        color = Color.BLACK if maximizing else Color.WHITE
        moves = legal_moves(board, color, en_passant_target, castling_rights)
        # Mate or stalemate of either side ends the line
        if not moves or not has_legal_move(board, color.opponent):
            return evaluate_board(board)
        moves.sort(key=_capture_value, reverse=True)

        if maximizing:
            best = -math.inf
            for move in moves:
                child = board.copy()
                apply_move(child, move)
                score = self.minimax(
                    child,
                    depth - 1,
                    alpha,
                    beta,
                    False,
                    en_passant_target_after(move),
                    _rights_after(castling_rights, move),
                )
                best = max(best, score)
                alpha = max(alpha, score)
                if beta <= alpha:
                    break
            return int(best)

        best = math.inf
        for move in moves:
            child = board.copy()
            apply_move(child, move)
            score = self.minimax(
                child,
                depth - 1,
                alpha,
                beta,
                True,
                en_passant_target_after(move),
                _rights_after(castling_rights, move),
            )
            best = min(best, score)
            beta = min(beta, score)
            if beta <= alpha:
                break
        return int(best)


def _capture_value(move: Move) -> int:
    if move.captured_piece is None:
        return 0
    return PIECE_VALUES[move.captured_piece.type]


def _rights_after(rights: Optional[CastlingRights], move: Move) -> Optional[CastlingRights]:
    if rights is None:
        return None
    return update_castling_rights(rights, move)


def find_best_move(
    board: Board,
    depth: int,
    maximizing_for_black: bool,
    en_passant_target: Optional[Position] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> Optional[Move]:
    """Pick a move for the side to move.

    Args:
        board (Board): Current position; never mutated.
        depth (int): Search depth in plies (at least 1).
        maximizing_for_black (bool): True when black is to move.
        en_passant_target (Optional[Position]): Current en-passant square.
        castling_rights (Optional[CastlingRights]): Current castling rights;
            ``None`` means no castling is considered.

    Returns:
        Optional[Move]: Best move found, or ``None`` when the side to move has
            no legal move.
    """
    best, _ = _Minimax().root(
        board, max(1, depth), maximizing_for_black, en_passant_target, castling_rights
    )
    return best


class SearchService:
    """Runs the minimax search for a game's side to move."""

    def search(
        self,
        game: "Game",
        depth: Optional[int] = None,
        difficulty: Optional[Difficulty] = None,
        movetime_ms: Optional[int] = None,
        stop_event: Optional[threading.Event] = None,
    ) -> SearchResult:
        """Search the side to move of ``game``.

        ``movetime_ms`` and ``stop_event`` both end the search early; the best
        move found so far is returned with ``timed_out`` set.
        """
        if depth is None:
            depth = (difficulty or Difficulty.MEDIUM).depth
        depth = max(1, depth)
        start = time.perf_counter()
        deadline = start + movetime_ms / 1000 if movetime_ms is not None else None

        engine = _Minimax(deadline, stop_event)
        best, score = engine.root(
            game.board,
            depth,
            game.turn is Color.BLACK,
            game.en_passant_target,
            game.castling_rights,
        )
        time_ms = int((time.perf_counter() - start) * 1000)
        logger.debug(
            "search finished",
            extra={
                "depth": depth,
                "nodes": engine.nodes,
                "time_ms": time_ms,
                "best_move": best.to_uci() if best else None,
                "timed_out": engine.timed_out,
            },
        )
        return SearchResult(
            best_move=best,
            score=score,
            nodes=engine.nodes,
            depth=depth,
            time_ms=time_ms,
            timed_out=engine.timed_out,
        )
