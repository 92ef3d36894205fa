"""Static position evaluation.

Pure, deterministic, and side-effect free. Scores are in centipawns and
positive values favour black, the side the computer plays.
"""

from __future__ import annotations

from typing import Dict, Final, List, Optional, Sequence

from gambit.engine.board import Board, Color, PieceType, Position
from gambit.engine.rules import is_king_in_check, legal_moves


PIECE_VALUES: Final[Dict[PieceType, int]] = {
    PieceType.PAWN: 100,
    PieceType.KNIGHT: 320,
    PieceType.BISHOP: 330,
    PieceType.ROOK: 500,
    PieceType.QUEEN: 900,
    PieceType.KING: 20000,
}

WIN_SCORE: Final = 10000
CHECK_BONUS: Final = 50
SHIELD_PAWN_BONUS: Final = 10
MOBILITY_WEIGHT: Final = 2
ENDGAME_MAX_PIECES: Final = 4

# Piece-square tables from white's point of view: row 0 is the eighth rank.
# Black pieces read them with the row mirrored.
PSQT_PAWN: Final = (
    (0, 0, 0, 0, 0, 0, 0, 0),
    (50, 50, 50, 50, 50, 50, 50, 50),
    (10, 10, 20, 30, 30, 20, 10, 10),
    (5, 5, 10, 25, 25, 10, 5, 5),
    (0, 0, 0, 20, 20, 0, 0, 0),
    (5, -5, -10, 0, 0, -10, -5, 5),
    (5, 10, 10, -20, -20, 10, 10, 5),
    (0, 0, 0, 0, 0, 0, 0, 0),
)
PSQT_KNIGHT: Final = (
    (-50, -40, -30, -30, -30, -30, -40, -50),
    (-40, -20, 0, 0, 0, 0, -20, -40),
    (-30, 0, 10, 15, 15, 10, 0, -30),
    (-30, 5, 15, 20, 20, 15, 5, -30),
    (-30, 0, 15, 20, 20, 15, 0, -30),
    (-30, 5, 10, 15, 15, 10, 5, -30),
    (-40, -20, 0, 5, 5, 0, -20, -40),
    (-50, -40, -30, -30, -30, -30, -40, -50),
)
PSQT_BISHOP: Final = (
    (-20, -10, -10, -10, -10, -10, -10, -20),
    (-10, 0, 0, 0, 0, 0, 0, -10),
    (-10, 0, 10, 10, 10, 10, 0, -10),
    (-10, 5, 5, 10, 10, 5, 5, -10),
    (-10, 0, 5, 10, 10, 5, 0, -10),
    (-10, 5, 5, 5, 5, 5, 5, -10),
    (-10, 0, 5, 0, 0, 5, 0, -10),
    (-20, -10, -10, -10, -10, -10, -10, -20),
)
PSQT_ROOK: Final = (
    (0, 0, 0, 0, 0, 0, 0, 0),
    (5, 10, 10, 10, 10, 10, 10, 5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (0, 0, 0, 5, 5, 0, 0, 0),
)
PSQT_QUEEN: Final = (
    (-20, -10, -10, -5, -5, -10, -10, -20),
    (-10, 0, 0, 0, 0, 0, 0, -10),
    (-10, 0, 5, 5, 5, 5, 0, -10),
    (-5, 0, 5, 5, 5, 5, 0, -5),
    (0, 0, 5, 5, 5, 5, 0, -5),
    (-10, 5, 5, 5, 5, 5, 0, -10),
    (-10, 0, 5, 0, 0, 0, 0, -10),
    (-20, -10, -10, -5, -5, -10, -10, -20),
)
PSQT_KING: Final = (
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-20, -30, -30, -40, -40, -30, -30, -20),
    (-10, -20, -20, -20, -20, -20, -20, -10),
    (20, 20, 0, 0, 0, 0, 20, 20),
    (20, 30, 10, 0, 0, 10, 30, 20),
)
PSQT_KING_EG: Final = (
    (-50, -40, -30, -20, -20, -30, -40, -50),
    (-30, -20, -10, 0, 0, -10, -20, -30),
    (-30, -10, 20, 30, 30, 20, -10, -30),
    (-30, -10, 30, 40, 40, 30, -10, -30),
    (-30, -10, 30, 40, 40, 30, -10, -30),
    (-30, -10, 20, 30, 30, 20, -10, -30),
    (-30, -30, 0, 0, 0, 0, -30, -30),
    (-50, -30, -30, -30, -30, -30, -30, -50),
)

PSQT: Final[Dict[PieceType, Sequence[Sequence[int]]]] = {
    PieceType.PAWN: PSQT_PAWN,
    PieceType.KNIGHT: PSQT_KNIGHT,
    PieceType.BISHOP: PSQT_BISHOP,
    PieceType.ROOK: PSQT_ROOK,
    PieceType.QUEEN: PSQT_QUEEN,
    PieceType.KING: PSQT_KING,
}


def _signed(color: Color, value: int) -> int:
    return value if color is Color.BLACK else -value


def material_score(board: Board) -> int:
    score = 0
    for _, piece in board.pieces():
        score += _signed(piece.color, PIECE_VALUES[piece.type])
    return score


def is_endgame(board: Board) -> bool:
    """Both sides without queens, or both sides down to four pieces or fewer."""
    queens = {Color.WHITE: 0, Color.BLACK: 0}
    counts = {Color.WHITE: 0, Color.BLACK: 0}
    for _, piece in board.pieces():
        counts[piece.color] += 1
        if piece.type is PieceType.QUEEN:
            queens[piece.color] += 1
    no_queens = queens[Color.WHITE] == 0 and queens[Color.BLACK] == 0
    few_pieces = (
        counts[Color.WHITE] <= ENDGAME_MAX_PIECES and counts[Color.BLACK] <= ENDGAME_MAX_PIECES
    )
    return no_queens or few_pieces


def square_value(kind: PieceType, color: Color, pos: Position, endgame: bool = False) -> int:
    """Piece-square bonus for a piece of ``kind`` and ``color`` on ``pos``."""
    table = PSQT_KING_EG if (kind is PieceType.KING and endgame) else PSQT[kind]
    row = pos.row if color is Color.WHITE else 7 - pos.row
    return table[row][pos.col]


def positional_score(board: Board) -> int:
    endgame = is_endgame(board)
    score = 0
    for pos, piece in board.pieces():
        score += _signed(piece.color, square_value(piece.type, piece.color, pos, endgame))
    return score


def pawn_shield(board: Board, king: Position, color: Color) -> int:
    """Bonus for friendly pawns on the three squares in front of ``king``."""
    total = 0
    for dcol in (-1, 0, 1):
        sq = king.offset(color.forward, dcol)
        if sq is None:
            continue
        piece = board.piece_at(sq)
        if piece is not None and piece.type is PieceType.PAWN and piece.color is color:
            total += SHIELD_PAWN_BONUS
    return total


def king_safety_score(board: Board) -> int:
    white_king = board.find_king(Color.WHITE)
    black_king = board.find_king(Color.BLACK)
    if white_king is None or black_king is None:
        return 0
    score = 0
    if is_king_in_check(board, Color.WHITE):
        score += CHECK_BONUS
    if is_king_in_check(board, Color.BLACK):
        score -= CHECK_BONUS
    score += pawn_shield(board, black_king, Color.BLACK)
    score -= pawn_shield(board, white_king, Color.WHITE)
    return score


def mobility_score(board: Board, moves: Optional[Dict[Color, List]] = None) -> int:
    if moves is None:
        moves = {c: legal_moves(board, c) for c in Color}
    return MOBILITY_WEIGHT * (len(moves[Color.BLACK]) - len(moves[Color.WHITE]))


def terminal_score(board: Board, moves: Dict[Color, List]) -> Optional[int]:
    """Decisive score when either side is mated or stalemated, else None."""
    white_stuck = not moves[Color.WHITE]
    black_stuck = not moves[Color.BLACK]
    if white_stuck and is_king_in_check(board, Color.WHITE):
        return WIN_SCORE
    if black_stuck and is_king_in_check(board, Color.BLACK):
        return -WIN_SCORE
    if white_stuck or black_stuck:
        return 0
    return None


def evaluate_board(board: Board) -> int:
    """Return the static score of ``board``; positive favours black.

    Material and piece-square terms come first. A mate or stalemate on the
    board replaces the whole score before king safety and mobility are added.
    """
    moves = {c: legal_moves(board, c) for c in Color}
    terminal = terminal_score(board, moves)
    if terminal is not None:
        return terminal
    score = material_score(board) + positional_score(board)
    score += king_safety_score(board)
    score += mobility_score(board, moves)
    return score
