"""Check detection, legality filtering, move application and game status.

Pure functions of a board plus optional en-passant/castling context. Nothing
here raises on the search hot path: lookups that find nothing return ``None``
or an empty list.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from .board import Board, CastlingRights, Color, Piece, PieceType, Position
from .move import Move, MoveType
from .movegen import ALL_DIRECTIONS, DIAGONALS, KNIGHT_OFFSETS, ORTHOGONALS, get_possible_moves


class GameStatus(str, Enum):
    ACTIVE = "active"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


def is_square_attacked(board: Board, pos: Position, by_color: Color) -> bool:
    """Return True if any piece of ``by_color`` could move onto ``pos``.

    Scans outward from the target square instead of generating every enemy
    move, so the check runs without building Move objects.
    """
    grid = board.grid
    row, col = pos.row, pos.col

    # Pawns attack diagonally forward, so look one row behind the target
    pawn_row = row - by_color.forward
    if 0 <= pawn_row < 8:
        for pc in (col - 1, col + 1):
            if 0 <= pc < 8:
                p = grid[pawn_row][pc]
                if p is not None and p.color is by_color and p.type is PieceType.PAWN:
                    return True

    for dr, dc in KNIGHT_OFFSETS:
        r, c = row + dr, col + dc
        if 0 <= r < 8 and 0 <= c < 8:
            p = grid[r][c]
            if p is not None and p.color is by_color and p.type is PieceType.KNIGHT:
                return True

    for dr, dc in ALL_DIRECTIONS:
        r, c = row + dr, col + dc
        if 0 <= r < 8 and 0 <= c < 8:
            p = grid[r][c]
            if p is not None and p.color is by_color and p.type is PieceType.KING:
                return True

    for directions, sliders in (
        (ORTHOGONALS, (PieceType.ROOK, PieceType.QUEEN)),
        (DIAGONALS, (PieceType.BISHOP, PieceType.QUEEN)),
    ):
        for dr, dc in directions:
            r, c = row + dr, col + dc
            while 0 <= r < 8 and 0 <= c < 8:
                p = grid[r][c]
                if p is not None:
                    if p.color is by_color and p.type in sliders:
                        return True
                    break
                r += dr
                c += dc
    return False


def is_king_in_check(board: Board, color: Color) -> bool:
    """Return True if the king of ``color`` is attacked.

    A board without a king of ``color`` is never in check.
    """
    king = board.find_king(color)
    if king is None:
        return False
    return is_square_attacked(board, king, color.opponent)


def apply_move(board: Board, move: Move) -> None:
    """Apply an already validated move to ``board`` in place.

    Promotion kinds place the promoted piece (queen when no choice was
    recorded). Castling also relocates the rook and en passant clears the
    captured pawn's square.
    """
    grid = board.grid
    grid[move.from_sq.row][move.from_sq.col] = None
    if move.type.is_promotion:
        placed = Piece(move.promotion or PieceType.QUEEN, move.piece.color, True)
    else:
        placed = move.piece.moved()
    grid[move.to_sq.row][move.to_sq.col] = placed

    if move.type.is_castle and move.castling_rook_from and move.castling_rook_to:
        rook = grid[move.castling_rook_from.row][move.castling_rook_from.col]
        grid[move.castling_rook_from.row][move.castling_rook_from.col] = None
        if rook is not None:
            grid[move.castling_rook_to.row][move.castling_rook_to.col] = rook.moved()

    if move.type is MoveType.EN_PASSANT and move.en_passant_capture_pos is not None:
        grid[move.en_passant_capture_pos.row][move.en_passant_capture_pos.col] = None


def filter_legal_moves(board: Board, moves: List[Move], color: Color) -> List[Move]:
    """Keep the moves that do not leave the king of ``color`` in check.

    Castling is also rejected when the king starts in check or crosses an
    attacked square.
    """
    legal: List[Move] = []
    in_check_now: Optional[bool] = None
    for move in moves:
        if move.type.is_castle:
            if in_check_now is None:
                in_check_now = is_king_in_check(board, color)
            if in_check_now:
                continue
            transit = move.castling_rook_to
            if transit is not None and is_square_attacked(board, transit, color.opponent):
                continue
        scratch = board.copy()
        apply_move(scratch, move)
        if not is_king_in_check(scratch, color):
            legal.append(move)
    return legal


def legal_moves(
    board: Board,
    color: Color,
    en_passant_target: Optional[Position] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> List[Move]:
    """Return every legal move of ``color``."""
    result: List[Move] = []
    for pos, _ in board.pieces(color):
        candidates = get_possible_moves(board, pos, en_passant_target, castling_rights)
        result.extend(filter_legal_moves(board, candidates, color))
    return result


def legal_moves_from(
    board: Board,
    position: Position,
    en_passant_target: Optional[Position] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> List[Move]:
    piece = board.piece_at(position)
    if piece is None:
        return []
    candidates = get_possible_moves(board, position, en_passant_target, castling_rights)
    return filter_legal_moves(board, candidates, piece.color)


def has_legal_move(
    board: Board,
    color: Color,
    en_passant_target: Optional[Position] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> bool:
    for pos, _ in board.pieces(color):
        candidates = get_possible_moves(board, pos, en_passant_target, castling_rights)
        for move in candidates:
            if filter_legal_moves(board, [move], color):
                return True
    return False


def find_legal_move(
    board: Board,
    from_sq: Position,
    to_sq: Position,
    promotion: Optional[PieceType] = None,
    en_passant_target: Optional[Position] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> Optional[Move]:
    """Look up the legal move matching origin, destination and promotion.

    Returns:
        Optional[Move]: The matching move, or ``None`` when there is none. A
            promotion move only matches when ``promotion`` names its piece.
    """
    for move in legal_moves_from(board, from_sq, en_passant_target, castling_rights):
        if move.to_sq == to_sq and move.promotion == promotion:
            return move
    return None


def is_checkmate(
    board: Board,
    color: Color,
    en_passant_target: Optional[Position] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> bool:
    if not is_king_in_check(board, color):
        return False
    return not has_legal_move(board, color, en_passant_target, castling_rights)


def is_stalemate(
    board: Board,
    color: Color,
    en_passant_target: Optional[Position] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> bool:
    if is_king_in_check(board, color):
        return False
    return not has_legal_move(board, color, en_passant_target, castling_rights)


def classify(
    board: Board,
    color: Color,
    en_passant_target: Optional[Position] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> GameStatus:
    """Return the status of the position for the side ``color`` to move."""
    in_check = is_king_in_check(board, color)
    can_move = has_legal_move(board, color, en_passant_target, castling_rights)
    if in_check:
        return GameStatus.CHECK if can_move else GameStatus.CHECKMATE
    return GameStatus.ACTIVE if can_move else GameStatus.STALEMATE


def update_castling_rights(rights: CastlingRights, move: Move) -> CastlingRights:
    """Return ``rights`` after ``move``: king or home-corner rook moves and
    rook captures on a home corner revoke the matching rights."""
    color = move.piece.color
    if move.piece.type is PieceType.KING:
        rights = rights.without(color, king_side=True, queen_side=True)
    elif move.piece.type is PieceType.ROOK and move.from_sq.row == color.home_row:
        if move.from_sq.col == 7:
            rights = rights.without(color, king_side=True)
        elif move.from_sq.col == 0:
            rights = rights.without(color, queen_side=True)

    captured = move.captured_piece
    if captured is not None and captured.type is PieceType.ROOK:
        owner = captured.color
        if move.to_sq.row == owner.home_row:
            if move.to_sq.col == 7:
                rights = rights.without(owner, king_side=True)
            elif move.to_sq.col == 0:
                rights = rights.without(owner, queen_side=True)
    return rights


def en_passant_target_after(move: Move) -> Optional[Position]:
    """Return the square skipped by a two-square pawn advance, else None."""
    if move.piece.type is not PieceType.PAWN or move.type is not MoveType.NORMAL:
        return None
    if abs(move.to_sq.row - move.from_sq.row) != 2:
        return None
    return Position((move.from_sq.row + move.to_sq.row) // 2, move.to_sq.col)
