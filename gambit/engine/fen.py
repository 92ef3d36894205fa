from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .board import (
    BOARD_SIZE,
    CHAR_TO_PIECE,
    Board,
    CastlingRights,
    Color,
    Piece,
    Position,
    SideCastling,
)
from .move import square_to_str, str_to_square


INITIAL_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


@dataclass
class FenPosition:
    board: Board
    active_color: Color
    castling_rights: CastlingRights
    en_passant_target: Optional[Position]
    halfmove_clock: int
    fullmove_number: int


def parse_fen(fen: str) -> FenPosition:
    """Parse a Forsyth-Edwards Notation (FEN) string.

    Args:
        fen (str): FEN string describing the position to load.

    Returns:
        FenPosition: Board plus side to move, castling rights, en-passant
            target and move counters.

    Raises:
        ValueError: If ``fen`` is empty, has the wrong number of fields, or
            contains invalid piece placement, castling rights, en passant
            square, or move counters.

    Notes:
        Every parsed piece starts with ``has_moved=False``; castling
        eligibility is carried by the returned rights.
    """
    if not fen or not isinstance(fen, str):
        raise ValueError("FEN must be a non-empty string")
    parts = fen.strip().split()
    if len(parts) != 6:
        raise ValueError("FEN must have 6 fields")
    placement, stm, castling, ep, halfmove, fullmove = parts

    rows = placement.split("/")
    if len(rows) != BOARD_SIZE:
        raise ValueError("FEN board must have 8 ranks")
    board = Board.empty()
    for row_idx, rank in enumerate(rows):
        col = 0
        for ch in rank:
            if ch.isdigit():
                n = int(ch)
                if n < 1 or n > 8:
                    raise ValueError("invalid empty count in FEN rank")
                col += n
            else:
                kind = CHAR_TO_PIECE.get(ch.lower())
                if kind is None:
                    raise ValueError(f"invalid piece in FEN: {ch!r}")
                if col >= BOARD_SIZE:
                    raise ValueError("too many squares in FEN rank")
                color = Color.WHITE if ch.isupper() else Color.BLACK
                board.grid[row_idx][col] = Piece(kind, color)
                col += 1
        if col != BOARD_SIZE:
            raise ValueError("rank does not sum to 8 squares in FEN")

    if stm not in ("w", "b"):
        raise ValueError("side to move must be 'w' or 'b'")
    active = Color.WHITE if stm == "w" else Color.BLACK

    if castling != "-" and any(ch not in "KQkq" for ch in castling):
        raise ValueError("invalid castling rights")
    rights = CastlingRights(
        white=SideCastling(king_side="K" in castling, queen_side="Q" in castling),
        black=SideCastling(king_side="k" in castling, queen_side="q" in castling),
    )

    ep_target: Optional[Position]
    if ep == "-":
        ep_target = None
    else:
        try:
            ep_target = str_to_square(ep)
        except ValueError as e:
            raise ValueError("invalid en passant square") from e
        # Skipped squares only exist on the third and sixth ranks
        if ep_target.row not in (2, 5):
            raise ValueError("invalid en passant square rank")

    try:
        halfmove_clock = int(halfmove)
        fullmove_number = int(fullmove)
    except ValueError as e:
        raise ValueError("invalid move counters in FEN") from e
    if halfmove_clock < 0 or fullmove_number <= 0:
        raise ValueError("invalid move counters in FEN")

    return FenPosition(
        board=board,
        active_color=active,
        castling_rights=rights,
        en_passant_target=ep_target,
        halfmove_clock=halfmove_clock,
        fullmove_number=fullmove_number,
    )


def format_fen(
    board: Board,
    active_color: Color,
    castling_rights: CastlingRights,
    en_passant_target: Optional[Position],
    halfmove_clock: int = 0,
    fullmove_number: int = 1,
) -> str:
    """Serialize a position into a normalized FEN string."""
    ranks: List[str] = []
    for row in board.grid:
        run = 0
        out = []
        for piece in row:
            if piece is None:
                run += 1
                continue
            if run:
                out.append(str(run))
                run = 0
            out.append(piece.symbol)
        if run:
            out.append(str(run))
        ranks.append("".join(out))

    castling = ""
    if castling_rights.white.king_side:
        castling += "K"
    if castling_rights.white.queen_side:
        castling += "Q"
    if castling_rights.black.king_side:
        castling += "k"
    if castling_rights.black.queen_side:
        castling += "q"

    stm = "w" if active_color is Color.WHITE else "b"
    ep = square_to_str(en_passant_target) if en_passant_target is not None else "-"
    return (
        f"{'/'.join(ranks)} {stm} {castling or '-'} {ep} {halfmove_clock} {fullmove_number}"
    )
