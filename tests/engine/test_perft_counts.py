from __future__ import annotations

import pytest

from gambit.engine.board import Board, Color
from gambit.engine.fen import INITIAL_FEN, parse_fen
from gambit.engine.perft import divide, perft


def _perft(fen: str, depth: int) -> int:
    pos = parse_fen(fen)
    return perft(
        pos.board, pos.active_color, depth, pos.en_passant_target, pos.castling_rights
    )


@pytest.mark.parametrize("depth,expected", [(0, 1), (1, 20), (2, 400), (3, 8902)])
def test_perft_startpos(depth: int, expected: int) -> None:
    assert _perft(INITIAL_FEN, depth) == expected


def test_perft_kiwipete() -> None:
    fen = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
    assert _perft(fen, 1) == 48
    assert _perft(fen, 2) == 2039


def test_perft_en_passant_pins() -> None:
    fen = "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1"
    assert _perft(fen, 1) == 14
    assert _perft(fen, 2) == 191
    assert _perft(fen, 3) == 2812


def test_divide_sums_to_perft() -> None:
    b = Board.initial()
    counts = divide(b, Color.WHITE, 2)
    assert len(counts) == 20
    assert counts["e2e4"] == 20
    assert sum(counts.values()) == 400
    assert b == Board.initial()


def test_negative_depth_rejected() -> None:
    with pytest.raises(ValueError):
        perft(Board.initial(), Color.WHITE, -1)
