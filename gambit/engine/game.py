from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from gambit.config import Difficulty

from .board import Board, CastlingRights, Color, Piece, PieceType, Position
from .fen import INITIAL_FEN, format_fen, parse_fen
from .move import Move, parse_uci, str_to_square
from .rules import (
    GameStatus,
    apply_move,
    classify,
    en_passant_target_after,
    find_legal_move,
    legal_moves,
    legal_moves_from,
    update_castling_rights,
)


logger = logging.getLogger(__name__)


class GameMode(str, Enum):
    TWO_PLAYER = "two-player"
    COMPUTER_EASY = "computer-easy"
    COMPUTER_MEDIUM = "computer-medium"
    COMPUTER_HARD = "computer-hard"

    @property
    def difficulty(self) -> Optional[Difficulty]:
        return _MODE_DIFFICULTY.get(self)


_MODE_DIFFICULTY = {
    GameMode.COMPUTER_EASY: Difficulty.EASY,
    GameMode.COMPUTER_MEDIUM: Difficulty.MEDIUM,
    GameMode.COMPUTER_HARD: Difficulty.HARD,
}

COMPUTER_COLOR = Color.BLACK


@dataclass
class _Snapshot:
    board: Board
    turn: Color
    castling_rights: CastlingRights
    en_passant_target: Optional[Position]
    halfmove_clock: int
    fullmove_number: int
    captured: Dict[Color, List[Piece]]


@dataclass
class Game:
    """Game wrapper around a board with the state the rules need.

    Responsibility: track side to move, castling rights, en-passant target and
    move counters; expose legal moves; apply and undo moves.
    """

    board: Board
    turn: Color = Color.WHITE
    castling_rights: CastlingRights = field(default_factory=CastlingRights.all)
    en_passant_target: Optional[Position] = None
    halfmove_clock: int = 0
    fullmove_number: int = 1
    mode: GameMode = GameMode.TWO_PLAYER
    move_stack: List[Move] = field(default_factory=list)
    # Pieces taken, keyed by the color that captured them
    captured: Dict[Color, List[Piece]] = field(
        default_factory=lambda: {Color.WHITE: [], Color.BLACK: []}
    )
    _snapshots: List[_Snapshot] = field(default_factory=list, repr=False)

    @classmethod
    def new(cls, mode: GameMode = GameMode.TWO_PLAYER) -> "Game":
        return cls.from_fen(INITIAL_FEN, mode)

    @classmethod
    def from_fen(cls, fen: str, mode: GameMode = GameMode.TWO_PLAYER) -> "Game":
        parsed = parse_fen(fen)
        return cls(
            board=parsed.board,
            turn=parsed.active_color,
            castling_rights=parsed.castling_rights,
            en_passant_target=parsed.en_passant_target,
            halfmove_clock=parsed.halfmove_clock,
            fullmove_number=parsed.fullmove_number,
            mode=mode,
        )

    def to_fen(self) -> str:
        return format_fen(
            self.board,
            self.turn,
            self.castling_rights,
            self.en_passant_target,
            self.halfmove_clock,
            self.fullmove_number,
        )

    def legal_moves(self) -> List[Move]:
        return legal_moves(self.board, self.turn, self.en_passant_target, self.castling_rights)

    def legal_moves_from(self, square: str) -> List[Move]:
        pos = str_to_square(square)
        piece = self.board.piece_at(pos)
        if piece is None or piece.color is not self.turn:
            return []
        return legal_moves_from(self.board, pos, self.en_passant_target, self.castling_rights)

    def find_move(
        self, from_sq: Position, to_sq: Position, promotion: Optional[PieceType] = None
    ) -> Optional[Move]:
        piece = self.board.piece_at(from_sq)
        if piece is None or piece.color is not self.turn:
            return None
        return find_legal_move(
            self.board, from_sq, to_sq, promotion, self.en_passant_target, self.castling_rights
        )

    def play_uci(self, uci: str) -> Move:
        """Parse and apply a UCI move string.

        Raises:
            ValueError: If the text is malformed or the move is illegal.
        """
        from_sq, to_sq, promo = parse_uci(uci)
        move = self.find_move(from_sq, to_sq, promo)
        if move is None:
            raise ValueError("illegal move")
        self.apply_move(move)
        return move

    def apply_move(self, move: Move) -> None:
        if move not in self.legal_moves():
            raise ValueError("illegal move")
        self._snapshots.append(
            _Snapshot(
                board=self.board.copy(),
                turn=self.turn,
                castling_rights=self.castling_rights,
                en_passant_target=self.en_passant_target,
                halfmove_clock=self.halfmove_clock,
                fullmove_number=self.fullmove_number,
                captured={c: list(ps) for c, ps in self.captured.items()},
            )
        )
        apply_move(self.board, move)
        self.castling_rights = update_castling_rights(self.castling_rights, move)
        self.en_passant_target = en_passant_target_after(move)
        if move.captured_piece is not None:
            self.captured[move.piece.color].append(move.captured_piece)
        # Counters are kept for FEN output only; they never end the game
        if move.piece.type is PieceType.PAWN or move.captured_piece is not None:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1
        if self.turn is Color.BLACK:
            self.fullmove_number += 1
        self.turn = self.turn.opponent
        self.move_stack.append(move)
        logger.debug("move applied", extra={"move": move.to_uci(), "type": move.type.value})

    def undo_move(self) -> Move:
        if not self.move_stack:
            raise ValueError("no moves to undo")
        snap = self._snapshots.pop()
        self.board = snap.board
        self.turn = snap.turn
        self.castling_rights = snap.castling_rights
        self.en_passant_target = snap.en_passant_target
        self.halfmove_clock = snap.halfmove_clock
        self.fullmove_number = snap.fullmove_number
        self.captured = snap.captured
        return self.move_stack.pop()

    # --- State flags for protocol ---
    def status(self) -> GameStatus:
        return classify(self.board, self.turn, self.en_passant_target, self.castling_rights)

    def in_check(self) -> bool:
        return self.status() in (GameStatus.CHECK, GameStatus.CHECKMATE)

    def checkmate(self) -> bool:
        return self.status() is GameStatus.CHECKMATE

    def stalemate(self) -> bool:
        return self.status() is GameStatus.STALEMATE

    def is_over(self) -> bool:
        return self.status() in (GameStatus.CHECKMATE, GameStatus.STALEMATE)

    def computer_to_move(self) -> bool:
        return self.mode.difficulty is not None and self.turn is COMPUTER_COLOR

    def move_history_uci(self) -> List[str]:
        return [m.to_uci() for m in self.move_stack]

    def captured_symbols(self) -> Tuple[List[str], List[str]]:
        """Symbols of pieces captured by white and by black."""
        return (
            [p.symbol for p in self.captured[Color.WHITE]],
            [p.symbol for p in self.captured[Color.BLACK]],
        )
