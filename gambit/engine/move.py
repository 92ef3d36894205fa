from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .board import Piece, PieceType, Position


FILES = "abcdefgh"
RANKS = "87654321"

PROMOTION_TYPES: Tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)
PROMOTION_CHARS = {
    PieceType.QUEEN: "q",
    PieceType.ROOK: "r",
    PieceType.BISHOP: "b",
    PieceType.KNIGHT: "n",
}
CHAR_TO_PROMOTION = {v: k for k, v in PROMOTION_CHARS.items()}


class MoveType(str, Enum):
    NORMAL = "normal"
    CAPTURE = "capture"
    CASTLE_KINGSIDE = "castle-kingside"
    CASTLE_QUEENSIDE = "castle-queenside"
    EN_PASSANT = "en-passant"
    PROMOTION = "promotion"
    CAPTURE_AND_PROMOTION = "capture-and-promotion"

    @property
    def is_castle(self) -> bool:
        return self in (MoveType.CASTLE_KINGSIDE, MoveType.CASTLE_QUEENSIDE)

    @property
    def is_promotion(self) -> bool:
        return self in (MoveType.PROMOTION, MoveType.CAPTURE_AND_PROMOTION)

    @property
    def is_capture(self) -> bool:
        return self in (MoveType.CAPTURE, MoveType.EN_PASSANT, MoveType.CAPTURE_AND_PROMOTION)


@dataclass(frozen=True)
class Move:
    """Immutable description of one transition.

    Attributes:
        from_sq (Position): Origin square.
        to_sq (Position): Destination square.
        type (MoveType): Kind of move.
        piece (Piece): Moving piece as it stood before the move.
        captured_piece (Optional[Piece]): Piece removed by the move, if any.
        promotion (Optional[PieceType]): Promotion choice for promotion kinds.
        castling_rook_from (Optional[Position]): Rook origin when castling.
        castling_rook_to (Optional[Position]): Rook destination when castling.
        en_passant_capture_pos (Optional[Position]): Square of the pawn taken
            en passant (never the destination square).
    """

    from_sq: Position
    to_sq: Position
    type: MoveType
    piece: Piece
    captured_piece: Optional[Piece] = None
    promotion: Optional[PieceType] = None
    castling_rook_from: Optional[Position] = None
    castling_rook_to: Optional[Position] = None
    en_passant_capture_pos: Optional[Position] = None

    def to_uci(self) -> str:
        """Serialize the move into long algebraic UCI form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        promo = PROMOTION_CHARS[self.promotion] if self.promotion is not None else ""
        return square_to_str(self.from_sq) + square_to_str(self.to_sq) + promo


def parse_uci(uci: str) -> Tuple[Position, Position, Optional[PieceType]]:
    """Parse a UCI move string.

    Args:
        uci (str): Move encoded in long algebraic notation (e.g. ``"e2e4"``).

    Returns:
        Tuple[Position, Position, Optional[PieceType]]: Origin, destination and
            promotion choice.

    Raises:
        ValueError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if len(uci) not in (4, 5):
        raise ValueError(f"invalid UCI move length: {uci!r}")
    from_sq = str_to_square(uci[0:2])
    to_sq = str_to_square(uci[2:4])
    promo: Optional[PieceType] = None
    if len(uci) == 5:
        ch = uci[4].lower()
        if ch not in CHAR_TO_PROMOTION:
            raise ValueError(f"invalid promotion piece: {ch!r}")
        promo = CHAR_TO_PROMOTION[ch]
    return from_sq, to_sq, promo


def str_to_square(s: str) -> Position:
    """Convert algebraic notation into a board position.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        Position: Row/column pair; ``"a8"`` maps to ``Position(0, 0)``.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] not in FILES or s[1] not in RANKS:
        raise ValueError(f"invalid square: {s!r}")
    return Position(RANKS.index(s[1]), FILES.index(s[0]))


def square_to_str(pos: Position) -> str:
    """Convert a board position into algebraic notation.

    Raises:
        ValueError: If ``pos`` lies outside the board.
    """
    if not (0 <= pos.row < 8 and 0 <= pos.col < 8):
        raise ValueError(f"invalid position: {pos}")
    return FILES[pos.col] + RANKS[pos.row]
