from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterator, List, Optional, Tuple


BOARD_SIZE = 8


class Color(str, Enum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def forward(self) -> int:
        """Row delta of a pawn advance (white moves towards row 0)."""
        return -1 if self is Color.WHITE else 1

    @property
    def home_row(self) -> int:
        return 7 if self is Color.WHITE else 0


class PieceType(str, Enum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


PIECE_TO_CHAR = {
    PieceType.PAWN: "p",
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
    PieceType.KING: "k",
}
CHAR_TO_PIECE = {v: k for k, v in PIECE_TO_CHAR.items()}


@dataclass(frozen=True)
class Position:
    """Board coordinate; row 0 is black's back rank, col 0 is the a-file."""

    row: int
    col: int

    def offset(self, drow: int, dcol: int) -> Optional["Position"]:
        r = self.row + drow
        c = self.col + dcol
        if 0 <= r < BOARD_SIZE and 0 <= c < BOARD_SIZE:
            return Position(r, c)
        return None


@dataclass(frozen=True)
class Piece:
    type: PieceType
    color: Color
    has_moved: bool = False

    def moved(self) -> "Piece":
        return self if self.has_moved else replace(self, has_moved=True)

    @property
    def symbol(self) -> str:
        ch = PIECE_TO_CHAR[self.type]
        return ch.upper() if self.color is Color.WHITE else ch


@dataclass(frozen=True)
class SideCastling:
    king_side: bool = False
    queen_side: bool = False


@dataclass(frozen=True)
class CastlingRights:
    """Castling availability per color.

    Rights only ever shrink; updates produce a new value.
    """

    white: SideCastling = SideCastling()
    black: SideCastling = SideCastling()

    @classmethod
    def all(cls) -> "CastlingRights":
        return cls(SideCastling(True, True), SideCastling(True, True))

    @classmethod
    def none(cls) -> "CastlingRights":
        return cls()

    def for_color(self, color: Color) -> SideCastling:
        return self.white if color is Color.WHITE else self.black

    def without(
        self, color: Color, *, king_side: bool = False, queen_side: bool = False
    ) -> "CastlingRights":
        side = self.for_color(color)
        updated = SideCastling(
            king_side=side.king_side and not king_side,
            queen_side=side.queen_side and not queen_side,
        )
        if updated == side:
            return self
        if color is Color.WHITE:
            return replace(self, white=updated)
        return replace(self, black=updated)


BACK_RANK: Tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


class Board:
    """8x8 grid of optional pieces, row-major.

    Pieces are immutable values, so ``copy`` only has to duplicate the rows to
    give every caller a board it may mutate freely.
    """

    __slots__ = ("grid",)

    def __init__(self, grid: Optional[List[List[Optional[Piece]]]] = None) -> None:
        if grid is None:
            grid = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        self.grid = grid

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    @classmethod
    def initial(cls) -> "Board":
        """Return the standard starting position."""
        board = cls()
        for col, kind in enumerate(BACK_RANK):
            board.grid[0][col] = Piece(kind, Color.BLACK)
            board.grid[1][col] = Piece(PieceType.PAWN, Color.BLACK)
            board.grid[6][col] = Piece(PieceType.PAWN, Color.WHITE)
            board.grid[7][col] = Piece(kind, Color.WHITE)
        return board

    def copy(self) -> "Board":
        return Board([row[:] for row in self.grid])

    def piece_at(self, pos: Position) -> Optional[Piece]:
        return self.grid[pos.row][pos.col]

    def put(self, pos: Position, piece: Optional[Piece]) -> None:
        self.grid[pos.row][pos.col] = piece

    def remove(self, pos: Position) -> Optional[Piece]:
        piece = self.grid[pos.row][pos.col]
        self.grid[pos.row][pos.col] = None
        return piece

    def pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[Position, Piece]]:
        for r, row in enumerate(self.grid):
            for c, piece in enumerate(row):
                if piece is not None and (color is None or piece.color is color):
                    yield Position(r, c), piece

    def find_king(self, color: Color) -> Optional[Position]:
        for r, row in enumerate(self.grid):
            for c, piece in enumerate(row):
                if piece is not None and piece.type is PieceType.KING and piece.color is color:
                    return Position(r, c)
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.grid == other.grid

    def __repr__(self) -> str:
        rows = []
        for row in self.grid:
            rows.append("".join(p.symbol if p is not None else "." for p in row))
        return "Board(" + "/".join(rows) + ")"
