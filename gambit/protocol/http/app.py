from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    value_error_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import GameStore
from ...config import EngineConfig
from ...engine.board import Color
from ...engine.fen import parse_fen
from ...engine.game import Game, GameMode
from ...engine.perft import perft as perft_nodes
from ...engine.rules import GameStatus, classify
from ...eval import evaluate_board
from ...search.service import SearchResult, SearchService


logger = logging.getLogger(__name__)


class CreateGameRequest(BaseModel):
    mode: GameMode = GameMode.TWO_PLAYER
    fen: Optional[str] = Field(default=None, description="Starting FEN, default initial")


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str
    mode: GameMode


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="UCI move string, e.g., e2e4")


class AIMoveRequest(BaseModel):
    depth: Optional[int] = Field(default=None, ge=1, le=8)


class SearchRequest(BaseModel):
    depth: Optional[int] = Field(default=None, ge=1, le=8)
    movetime_ms: Optional[int] = Field(default=None, ge=1)


class FenRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class PerftRequest(BaseModel):
    fen: str = Field(..., description="FEN string")
    depth: int = Field(default=1, ge=0, le=5)


class CapturedPieces(BaseModel):
    white: List[str]
    black: List[str]


class GameState(BaseModel):
    game_id: str
    fen: str
    mode: GameMode
    turn: Color
    status: str
    legal_moves: list[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    last_move: Optional[str]
    engine_move: Optional[str] = None
    move_history: list[str]
    captured: CapturedPieces


class PieceMoves(BaseModel):
    square: str
    moves: list[str]


def create_app(config: Optional[EngineConfig] = None) -> FastAPI:
    config = config or EngineConfig()
    app = FastAPI(title="Gambit Chess Engine API", version="0.1.0")

    logging.basicConfig(level=config.log_level)

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = GameStore(config.max_games)
    service = SearchService()

    def run_search(game: Game, depth: Optional[int]) -> SearchResult:
        return service.search(
            game, depth=config.clamp_depth(depth), movetime_ms=config.reply_budget_ms()
        )

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        req = req or CreateGameRequest()
        game = Game.from_fen(req.fen, req.mode) if req.fen else Game.new(req.mode)
        game_id = store.create(game)
        logger.info("game created", extra={"game_id": game_id, "mode": req.mode.value})
        return CreateGameResponse(game_id=game_id, fen=game.to_fen(), mode=game.mode)

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, str]:
        if not store.discard(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        logger.info("game deleted", extra={"game_id": game_id})
        return {"game_id": game_id, "status": "deleted"}

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        return _state(game_id, _require_game(store, game_id))

    @app.get("/api/games/{game_id}/moves", response_model=PieceMoves)
    async def piece_moves(game_id: str, square: str = Query(..., min_length=2)) -> PieceMoves:
        game = _require_game(store, game_id)
        moves = game.legal_moves_from(square)
        return PieceMoves(square=square, moves=[m.to_uci() for m in moves])

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        current = _require_game(store, game_id)
        try:
            game = Game.from_fen(req.fen, current.mode)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        store.replace(game_id, game)
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    def make_move(game_id: str, req: MoveRequest) -> GameState:
        game = _require_game(store, game_id)
        if game.computer_to_move():
            raise HTTPException(status_code=409, detail="waiting for engine move")
        game.play_uci(req.move)

        engine_move: Optional[str] = None
        if game.computer_to_move() and not game.is_over():
            difficulty = game.mode.difficulty
            res = run_search(game, difficulty.depth if difficulty else None)
            if res.best_move is not None:
                game.apply_move(res.best_move)
                engine_move = res.best_move.to_uci()
        return _state(game_id, game, engine_move)

    @app.post("/api/games/{game_id}/ai-move", response_model=GameState)
    def ai_move(game_id: str, req: Optional[AIMoveRequest] = None) -> GameState:
        game = _require_game(store, game_id)
        depth = req.depth if req else None
        if depth is None and game.mode.difficulty is not None:
            depth = game.mode.difficulty.depth
        res = run_search(game, depth)
        if res.best_move is None:
            raise HTTPException(status_code=409, detail="no legal moves")
        game.apply_move(res.best_move)
        return _state(game_id, game, res.best_move.to_uci())

    @app.post("/api/games/{game_id}/search")
    def search(game_id: str, req: SearchRequest) -> Dict[str, Any]:
        game = _require_game(store, game_id)
        res = service.search(
            game,
            depth=config.clamp_depth(req.depth),
            movetime_ms=req.movetime_ms or config.movetime_ms,
        )
        return {
            "best_move": res.best_move.to_uci() if res.best_move else None,
            "score": res.score,
            "nodes": res.nodes,
            "depth": res.depth,
            "time_ms": res.time_ms,
            "timed_out": res.timed_out,
        }

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    async def undo(game_id: str) -> GameState:
        game = _require_game(store, game_id)
        try:
            game.undo_move()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        # Against the computer, take back its reply too so the human is to move
        if game.computer_to_move() and game.move_stack:
            game.undo_move()
        return _state(game_id, game)

    @app.post("/api/evaluate")
    def evaluate(req: FenRequest) -> Dict[str, Any]:
        parsed = parse_fen(req.fen)
        status = classify(
            parsed.board,
            parsed.active_color,
            parsed.en_passant_target,
            parsed.castling_rights,
        )
        return {"score": evaluate_board(parsed.board), "status": status.value}

    @app.post("/api/perft")
    def perft(req: PerftRequest) -> Dict[str, Any]:
        try:
            parsed = parse_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        nodes = perft_nodes(
            parsed.board,
            parsed.active_color,
            req.depth,
            parsed.en_passant_target,
            parsed.castling_rights,
        )
        return {"nodes": nodes}

    return app


def _state(game_id: str, game: Game, engine_move: Optional[str] = None) -> GameState:
    status = game.status()
    history = game.move_history_uci()
    by_white, by_black = game.captured_symbols()
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        mode=game.mode,
        turn=game.turn,
        status=status.value,
        legal_moves=[m.to_uci() for m in game.legal_moves()],
        in_check=status in (GameStatus.CHECK, GameStatus.CHECKMATE),
        checkmate=status is GameStatus.CHECKMATE,
        stalemate=status is GameStatus.STALEMATE,
        last_move=history[-1] if history else None,
        engine_move=engine_move,
        move_history=history,
        captured=CapturedPieces(white=by_white, black=by_black),
    )


def _require_game(store: GameStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game
