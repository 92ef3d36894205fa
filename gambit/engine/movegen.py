"""Pseudo-legal move generation.

Moves produced here obey piece geometry and board occupancy only. They may
leave the mover's own king in check; ``rules.filter_legal_moves`` removes
those.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from .board import Board, CastlingRights, Color, Piece, PieceType, Position
from .move import PROMOTION_TYPES, Move, MoveType


KNIGHT_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
)
DIAGONALS: Tuple[Tuple[int, int], ...] = ((-1, 1), (1, 1), (1, -1), (-1, -1))
ORTHOGONALS: Tuple[Tuple[int, int], ...] = ((-1, 0), (0, 1), (1, 0), (0, -1))
ALL_DIRECTIONS: Tuple[Tuple[int, int], ...] = ORTHOGONALS + DIAGONALS

Generator = Callable[
    [Board, Position, Piece, List[Move], Optional[Position], Optional[CastlingRights]], None
]


def get_possible_moves(
    board: Board,
    position: Position,
    en_passant_target: Optional[Position] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> List[Move]:
    """Return pseudo-legal moves for the piece standing on ``position``.

    Args:
        board (Board): Position to generate from; never mutated.
        position (Position): Square of the moving piece.
        en_passant_target (Optional[Position]): Square skipped by the last
            two-square pawn advance, if any.
        castling_rights (Optional[CastlingRights]): Rights to honour when
            generating castling moves. ``None`` generates no castling moves.

    Returns:
        List[Move]: Generated moves; empty when the square is empty.
    """
    piece = board.piece_at(position)
    if piece is None:
        return []
    moves: List[Move] = []
    _GENERATORS[piece.type](board, position, piece, moves, en_passant_target, castling_rights)
    return moves


def pseudo_moves_for(
    board: Board,
    color: Color,
    en_passant_target: Optional[Position] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> List[Move]:
    moves: List[Move] = []
    for pos, piece in board.pieces(color):
        _GENERATORS[piece.type](board, pos, piece, moves, en_passant_target, castling_rights)
    return moves


def _pawn_moves(
    board: Board,
    pos: Position,
    piece: Piece,
    moves: List[Move],
    en_passant_target: Optional[Position],
    castling_rights: Optional[CastlingRights],
) -> None:
    direction = piece.color.forward
    last_row = 0 if piece.color is Color.WHITE else 7
    start_row = 6 if piece.color is Color.WHITE else 1

    one = pos.offset(direction, 0)
    if one is not None and board.piece_at(one) is None:
        if one.row == last_row:
            _add_promotions(moves, pos, one, piece, None)
        else:
            moves.append(Move(pos, one, MoveType.NORMAL, piece))
        if pos.row == start_row:
            two = pos.offset(2 * direction, 0)
            if two is not None and board.piece_at(two) is None:
                moves.append(Move(pos, two, MoveType.NORMAL, piece))

    for dcol in (-1, 1):
        target = pos.offset(direction, dcol)
        if target is None:
            continue
        victim = board.piece_at(target)
        if victim is not None and victim.color is not piece.color:
            if target.row == last_row:
                _add_promotions(moves, pos, target, piece, victim)
            else:
                moves.append(Move(pos, target, MoveType.CAPTURE, piece, captured_piece=victim))
        if en_passant_target is not None and target == en_passant_target:
            # Captured pawn sits beside the mover on its own rank
            beside = Position(pos.row, target.col)
            passed = board.piece_at(beside)
            if (
                passed is not None
                and passed.type is PieceType.PAWN
                and passed.color is not piece.color
            ):
                moves.append(
                    Move(
                        pos,
                        target,
                        MoveType.EN_PASSANT,
                        piece,
                        captured_piece=passed,
                        en_passant_capture_pos=beside,
                    )
                )


def _add_promotions(
    moves: List[Move],
    from_sq: Position,
    to_sq: Position,
    piece: Piece,
    captured: Optional[Piece],
) -> None:
    kind = MoveType.PROMOTION if captured is None else MoveType.CAPTURE_AND_PROMOTION
    for promo in PROMOTION_TYPES:
        moves.append(Move(from_sq, to_sq, kind, piece, captured_piece=captured, promotion=promo))


def _step_moves(
    board: Board,
    pos: Position,
    piece: Piece,
    moves: List[Move],
    offsets: Tuple[Tuple[int, int], ...],
) -> None:
    for dr, dc in offsets:
        target = pos.offset(dr, dc)
        if target is None:
            continue
        occupant = board.piece_at(target)
        if occupant is None:
            moves.append(Move(pos, target, MoveType.NORMAL, piece))
        elif occupant.color is not piece.color:
            moves.append(Move(pos, target, MoveType.CAPTURE, piece, captured_piece=occupant))


def _ray_moves(
    board: Board,
    pos: Position,
    piece: Piece,
    moves: List[Move],
    directions: Tuple[Tuple[int, int], ...],
) -> None:
    for dr, dc in directions:
        r, c = pos.row + dr, pos.col + dc
        while 0 <= r < 8 and 0 <= c < 8:
            target = Position(r, c)
            occupant = board.grid[r][c]
            if occupant is None:
                moves.append(Move(pos, target, MoveType.NORMAL, piece))
            else:
                if occupant.color is not piece.color:
                    moves.append(
                        Move(pos, target, MoveType.CAPTURE, piece, captured_piece=occupant)
                    )
                break
            r += dr
            c += dc


def _knight_moves(
    board: Board,
    pos: Position,
    piece: Piece,
    moves: List[Move],
    en_passant_target: Optional[Position],
    castling_rights: Optional[CastlingRights],
) -> None:
    _step_moves(board, pos, piece, moves, KNIGHT_OFFSETS)


def _bishop_moves(
    board: Board,
    pos: Position,
    piece: Piece,
    moves: List[Move],
    en_passant_target: Optional[Position],
    castling_rights: Optional[CastlingRights],
) -> None:
    _ray_moves(board, pos, piece, moves, DIAGONALS)


def _rook_moves(
    board: Board,
    pos: Position,
    piece: Piece,
    moves: List[Move],
    en_passant_target: Optional[Position],
    castling_rights: Optional[CastlingRights],
) -> None:
    _ray_moves(board, pos, piece, moves, ORTHOGONALS)


def _queen_moves(
    board: Board,
    pos: Position,
    piece: Piece,
    moves: List[Move],
    en_passant_target: Optional[Position],
    castling_rights: Optional[CastlingRights],
) -> None:
    _ray_moves(board, pos, piece, moves, ALL_DIRECTIONS)


def _king_moves(
    board: Board,
    pos: Position,
    piece: Piece,
    moves: List[Move],
    en_passant_target: Optional[Position],
    castling_rights: Optional[CastlingRights],
) -> None:
    _step_moves(board, pos, piece, moves, ALL_DIRECTIONS)
    if castling_rights is None or piece.has_moved:
        return
    rights = castling_rights.for_color(piece.color)
    row = piece.color.home_row
    if pos != Position(row, 4):
        return
    # Attacked squares are the legality filter's concern, not geometry's
    if rights.king_side and _castle_path_clear(board, piece.color, row, 7, (5, 6)):
        moves.append(
            Move(
                pos,
                Position(row, 6),
                MoveType.CASTLE_KINGSIDE,
                piece,
                castling_rook_from=Position(row, 7),
                castling_rook_to=Position(row, 5),
            )
        )
    if rights.queen_side and _castle_path_clear(board, piece.color, row, 0, (1, 2, 3)):
        moves.append(
            Move(
                pos,
                Position(row, 2),
                MoveType.CASTLE_QUEENSIDE,
                piece,
                castling_rook_from=Position(row, 0),
                castling_rook_to=Position(row, 3),
            )
        )


def _castle_path_clear(
    board: Board, color: Color, row: int, rook_col: int, between: Tuple[int, ...]
) -> bool:
    if any(board.grid[row][c] is not None for c in between):
        return False
    rook = board.grid[row][rook_col]
    return (
        rook is not None
        and rook.type is PieceType.ROOK
        and rook.color is color
        and not rook.has_moved
    )


_GENERATORS: Dict[PieceType, Generator] = {
    PieceType.PAWN: _pawn_moves,
    PieceType.KNIGHT: _knight_moves,
    PieceType.BISHOP: _bishop_moves,
    PieceType.ROOK: _rook_moves,
    PieceType.QUEEN: _queen_moves,
    PieceType.KING: _king_moves,
}
