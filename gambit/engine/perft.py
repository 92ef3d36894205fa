from __future__ import annotations

from typing import Dict, Optional

from .board import Board, CastlingRights, Color, Position
from .move import Move
from .rules import apply_move, en_passant_target_after, legal_moves, update_castling_rights


def perft(
    board: Board,
    color: Color,
    depth: int,
    en_passant_target: Optional[Position] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> int:
    """Compute perft node count for ``board`` with ``color`` to move.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Each child is searched on its own board copy with the en-passant target
    and castling rights that follow from the move just played.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    moves = legal_moves(board, color, en_passant_target, castling_rights)
    if depth == 1:
        return len(moves)

    nodes = 0
    for m in moves:
        child = board.copy()
        apply_move(child, m)
        rights = _rights_after(castling_rights, m)
        nodes += perft(child, color.opponent, depth - 1, en_passant_target_after(m), rights)
    return nodes


def divide(
    board: Board,
    color: Color,
    depth: int,
    en_passant_target: Optional[Position] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> Dict[str, int]:
    """Return perft(depth - 1) per root move, keyed by UCI string."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    out: Dict[str, int] = {}
    for m in legal_moves(board, color, en_passant_target, castling_rights):
        child = board.copy()
        apply_move(child, m)
        rights = _rights_after(castling_rights, m)
        out[m.to_uci()] = perft(
            child, color.opponent, depth - 1, en_passant_target_after(m), rights
        )
    return out


def _rights_after(rights: Optional[CastlingRights], move: Move) -> Optional[CastlingRights]:
    return update_castling_rights(rights, move) if rights is not None else None
