from __future__ import annotations

from gambit.engine.board import Board, CastlingRights, Color, Piece, PieceType, Position
from gambit.engine.fen import parse_fen
from gambit.engine.move import Move, MoveType, str_to_square
from gambit.engine.rules import (
    GameStatus,
    apply_move,
    classify,
    en_passant_target_after,
    find_legal_move,
    is_checkmate,
    is_king_in_check,
    is_square_attacked,
    is_stalemate,
    legal_moves,
    update_castling_rights,
)


def _legal_uci(fen: str) -> set[str]:
    pos = parse_fen(fen)
    return {
        m.to_uci()
        for m in legal_moves(
            pos.board, pos.active_color, pos.en_passant_target, pos.castling_rights
        )
    }


def test_rook_gives_check_down_the_file() -> None:
    b = Board.empty()
    b.put(Position(7, 4), Piece(PieceType.KING, Color.WHITE))
    b.put(Position(0, 4), Piece(PieceType.ROOK, Color.BLACK))
    assert is_king_in_check(b, Color.WHITE)


def test_missing_king_is_never_in_check() -> None:
    b = Board.empty()
    b.put(Position(0, 4), Piece(PieceType.ROOK, Color.BLACK))
    assert not is_king_in_check(b, Color.WHITE)
    assert not is_king_in_check(b, Color.BLACK)


def test_blocked_slider_does_not_attack() -> None:
    b = Board.empty()
    b.put(Position(7, 4), Piece(PieceType.KING, Color.WHITE))
    b.put(Position(6, 4), Piece(PieceType.PAWN, Color.WHITE))
    b.put(Position(0, 4), Piece(PieceType.ROOK, Color.BLACK))
    assert not is_king_in_check(b, Color.WHITE)


def test_pawn_attacks_are_diagonal_and_forward() -> None:
    b = Board.empty()
    b.put(str_to_square("e4"), Piece(PieceType.PAWN, Color.WHITE))
    assert is_square_attacked(b, str_to_square("d5"), Color.WHITE)
    assert is_square_attacked(b, str_to_square("f5"), Color.WHITE)
    assert not is_square_attacked(b, str_to_square("e5"), Color.WHITE)
    assert not is_square_attacked(b, str_to_square("d3"), Color.WHITE)


def test_back_rank_queen_mate() -> None:
    b = Board.empty()
    b.put(Position(7, 7), Piece(PieceType.KING, Color.WHITE))
    b.put(Position(6, 6), Piece(PieceType.QUEEN, Color.BLACK))
    b.put(Position(5, 5), Piece(PieceType.KING, Color.BLACK))
    assert is_checkmate(b, Color.WHITE)
    assert not is_stalemate(b, Color.WHITE)
    assert not is_king_in_check(b, Color.BLACK)
    assert classify(b, Color.WHITE) is GameStatus.CHECKMATE


def test_unprotected_queen_can_be_taken() -> None:
    b = Board.empty()
    b.put(Position(7, 7), Piece(PieceType.KING, Color.WHITE))
    b.put(Position(6, 6), Piece(PieceType.QUEEN, Color.BLACK))
    b.put(Position(0, 0), Piece(PieceType.KING, Color.BLACK))
    assert is_king_in_check(b, Color.WHITE)
    assert not is_checkmate(b, Color.WHITE)
    assert classify(b, Color.WHITE) is GameStatus.CHECK


def test_stalemate_position() -> None:
    pos = parse_fen("k7/2Q5/8/8/8/8/8/7K b - - 0 1")
    assert is_stalemate(pos.board, Color.BLACK)
    assert not is_checkmate(pos.board, Color.BLACK)
    assert classify(pos.board, Color.BLACK) is GameStatus.STALEMATE
    assert legal_moves(pos.board, Color.BLACK) == []


def test_kings_only_is_active() -> None:
    pos = parse_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
    assert classify(pos.board, Color.WHITE) is GameStatus.ACTIVE
    assert classify(pos.board, Color.BLACK) is GameStatus.ACTIVE


def test_legal_moves_never_leave_king_in_check() -> None:
    # Pinned knight on e2 may not move
    fen = "4r1k1/8/8/8/8/8/4N3/4K3 w - - 0 1"
    ms = _legal_uci(fen)
    assert not any(m.startswith("e2") for m in ms)
    pos = parse_fen(fen)
    for m in legal_moves(pos.board, Color.WHITE):
        child = pos.board.copy()
        apply_move(child, m)
        assert not is_king_in_check(child, Color.WHITE)


def test_castling_through_attacked_square_is_rejected() -> None:
    ms = _legal_uci("r3kr2/8/8/8/8/8/8/R3K2R w KQq - 0 1")
    assert "e1g1" not in ms
    assert "e1c1" in ms


def test_castling_into_check_is_rejected() -> None:
    ms = _legal_uci("r3k1r1/8/8/8/8/8/8/R3K2R w KQq - 0 1")
    assert "e1g1" not in ms
    assert "e1c1" in ms


def test_castling_out_of_check_is_rejected() -> None:
    ms = _legal_uci("r3r1k1/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    assert "e1g1" not in ms
    assert "e1c1" not in ms


def test_apply_castling_moves_rook() -> None:
    pos = parse_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    move = find_legal_move(
        pos.board,
        str_to_square("e1"),
        str_to_square("g1"),
        castling_rights=pos.castling_rights,
    )
    assert move is not None and move.type is MoveType.CASTLE_KINGSIDE
    apply_move(pos.board, move)
    assert pos.board.piece_at(str_to_square("g1")) == Piece(PieceType.KING, Color.WHITE, True)
    assert pos.board.piece_at(str_to_square("f1")) == Piece(PieceType.ROOK, Color.WHITE, True)
    assert pos.board.piece_at(str_to_square("h1")) is None
    assert pos.board.piece_at(str_to_square("e1")) is None


def test_apply_en_passant_clears_captured_pawn() -> None:
    pos = parse_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1")
    move = find_legal_move(
        pos.board, str_to_square("e5"), str_to_square("d6"), None, pos.en_passant_target
    )
    assert move is not None and move.type is MoveType.EN_PASSANT
    apply_move(pos.board, move)
    assert pos.board.piece_at(str_to_square("d5")) is None
    assert pos.board.piece_at(str_to_square("e5")) is None
    assert pos.board.piece_at(str_to_square("d6")).type is PieceType.PAWN


def test_en_passant_exposing_king_is_illegal() -> None:
    # Removing both pawns would open the fifth rank to the rook
    ms = _legal_uci("8/8/8/KPp4r/8/8/8/7k w - c6 0 1")
    assert "b5c6" not in ms


def test_promotion_without_choice_defaults_to_queen() -> None:
    b = Board.empty()
    pawn = Piece(PieceType.PAWN, Color.WHITE, True)
    b.put(str_to_square("a7"), pawn)
    apply_move(
        b, Move(str_to_square("a7"), str_to_square("a8"), MoveType.PROMOTION, pawn)
    )
    assert b.piece_at(str_to_square("a8")) == Piece(PieceType.QUEEN, Color.WHITE, True)


def test_find_legal_move_requires_promotion_choice() -> None:
    pos = parse_fen("4k3/P7/8/8/8/8/8/4K3 w - - 0 1")
    a7, a8 = str_to_square("a7"), str_to_square("a8")
    assert find_legal_move(pos.board, a7, a8) is None
    knight = find_legal_move(pos.board, a7, a8, PieceType.KNIGHT)
    assert knight is not None and knight.promotion is PieceType.KNIGHT


def test_update_castling_rights() -> None:
    pos = parse_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    rights = pos.castling_rights
    king = pos.board.piece_at(str_to_square("e1"))
    rook = pos.board.piece_at(str_to_square("h1"))
    black_rook = pos.board.piece_at(str_to_square("a8"))

    after_king = update_castling_rights(
        rights, Move(str_to_square("e1"), str_to_square("e2"), MoveType.NORMAL, king)
    )
    assert after_king.white.king_side is False and after_king.white.queen_side is False
    assert after_king.black == rights.black

    after_rook = update_castling_rights(
        rights, Move(str_to_square("h1"), str_to_square("h5"), MoveType.NORMAL, rook)
    )
    assert after_rook.white.king_side is False and after_rook.white.queen_side is True

    rook_takes_rook = Move(
        str_to_square("a1"),
        str_to_square("a8"),
        MoveType.CAPTURE,
        pos.board.piece_at(str_to_square("a1")),
        captured_piece=black_rook,
    )
    after_capture = update_castling_rights(rights, rook_takes_rook)
    assert after_capture.white.queen_side is False
    assert after_capture.black.queen_side is False
    assert after_capture.black.king_side is True


def test_rights_never_grow() -> None:
    none = CastlingRights.none()
    king = Piece(PieceType.KING, Color.WHITE)
    move = Move(str_to_square("e1"), str_to_square("e2"), MoveType.NORMAL, king)
    assert update_castling_rights(none, move) == none


def test_en_passant_target_after_double_push_only() -> None:
    pawn = Piece(PieceType.PAWN, Color.WHITE)
    double = Move(str_to_square("e2"), str_to_square("e4"), MoveType.NORMAL, pawn)
    single = Move(str_to_square("e2"), str_to_square("e3"), MoveType.NORMAL, pawn)
    assert en_passant_target_after(double) == str_to_square("e3")
    assert en_passant_target_after(single) is None

    black = Piece(PieceType.PAWN, Color.BLACK)
    assert en_passant_target_after(
        Move(str_to_square("d7"), str_to_square("d5"), MoveType.NORMAL, black)
    ) == str_to_square("d6")
