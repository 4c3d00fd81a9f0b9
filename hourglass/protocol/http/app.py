from __future__ import annotations

import logging
import math
from typing import Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...config import Settings
from ...engine.board import Board
from ...engine.errors import FenError, MoveError
from ...engine.fen import STARTPOS_FEN
from ...engine.move import Move, promote_from_char, str_to_square
from ...engine.perft import perft as perft_nodes
from ...engine.pieces import KING, Player, make_piece
from ...eval import SCORERS
from ...search.service import SearchService
from .error import (
    engine_error_handler,
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import BoardSessionStore


logger = logging.getLogger(__name__)


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Two square names, e.g. e2e4")
    promote: Optional[Literal["n", "b", "r", "q"]] = Field(
        default=None, description="Promotion piece for pawns reaching the last rank"
    )


class BestMoveRequest(BaseModel):
    depth: int = Field(default=2, ge=0)
    scorer: Literal["material"] = "material"


class BestMoveResponse(BaseModel):
    best_move: Optional[str]
    # Finite scores only; forced mates are reported through `mate`
    score: Optional[float]
    mate: Optional[Literal["win", "loss"]]
    depth: int
    nodes: int
    time_ms: int


class PerftRequest(BaseModel):
    fen: str = STARTPOS_FEN
    depth: int = Field(default=1, ge=0)


class MovesResponse(BaseModel):
    square: str
    moves: List[str]


class GameState(BaseModel):
    game_id: str
    fen: str
    active_color: Literal["w", "b"]
    legal_moves: List[str]
    in_check: bool
    checkmate: bool
    stalemate: bool


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI(title="hourglass", version="0.1.0")
    app.state.settings = settings

    logging.basicConfig(level=settings.log_level)

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(MoveError, engine_error_handler)
    app.add_exception_handler(FenError, engine_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = BoardSessionStore()
    app.state.store = store
    search_service = SearchService()

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    def create_game() -> CreateGameResponse:
        game_id = store.create()
        with store.lock:
            fen = _require_board(store, game_id).get_fen()
        return CreateGameResponse(game_id=game_id, fen=fen)

    @app.delete("/api/games/{game_id}", status_code=204)
    def delete_game(game_id: str) -> Response:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return Response(status_code=204)

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    def get_state(game_id: str) -> GameState:
        with store.lock:
            return _state(game_id, _require_board(store, game_id))

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        candidate = Board.from_fen(req.fen)
        _require_playable(candidate)
        with store.lock:
            board = _require_board(store, game_id)
            board.load_fen(req.fen)
            return _state(game_id, board)

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    def make_move(game_id: str, req: MoveRequest) -> GameState:
        try:
            move = Move.parse(req.move)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if req.promote is not None:
            move = move.with_promote(promote_from_char(req.promote))
        with store.lock:
            board = _require_board(store, game_id)
            board.try_move(move)
            logger.info("move played", extra={"game_id": game_id, "move": move.to_uci()})
            return _state(game_id, board)

    @app.get("/api/games/{game_id}/moves/{square}", response_model=MovesResponse)
    def moves_for(game_id: str, square: str) -> MovesResponse:
        try:
            idx = str_to_square(square)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        with store.lock:
            moves = _require_board(store, game_id).get_moves_for(idx)
        return MovesResponse(square=square, moves=[m.to_uci() for m in moves])

    @app.post("/api/games/{game_id}/best-move", response_model=BestMoveResponse)
    def best_move(game_id: str, req: BestMoveRequest) -> BestMoveResponse:
        if req.depth > settings.max_search_depth:
            raise HTTPException(
                status_code=400,
                detail=f"depth must be <= {settings.max_search_depth}",
            )
        with store.lock:
            board = _require_board(store, game_id).copy()
        res = search_service.best_move(board, req.depth, SCORERS[req.scorer])
        mate: Optional[Literal["win", "loss"]] = None
        score: Optional[float] = res.score
        if math.isinf(res.score):
            mate = "win" if res.score > 0 else "loss"
            score = None
        return BestMoveResponse(
            best_move=res.best_move.to_uci() if res.best_move else None,
            score=score,
            mate=mate,
            depth=res.depth,
            nodes=res.nodes,
            time_ms=res.time_ms,
        )

    @app.post("/api/perft")
    def perft(req: PerftRequest) -> Dict[str, int]:
        if req.depth > settings.max_perft_depth:
            raise HTTPException(
                status_code=400,
                detail=f"depth must be <= {settings.max_perft_depth}",
            )
        board = Board.from_fen(req.fen)
        _require_playable(board)
        return {"nodes": perft_nodes(board, req.depth)}

    return app


def _require_board(store: BoardSessionStore, game_id: str) -> Board:
    board = store.get(game_id)
    if board is None:
        raise HTTPException(status_code=404, detail="game not found")
    return board


def _require_playable(board: Board) -> None:
    # The engine assumes one king per side and a king that cannot be captured
    for player in Player:
        if board.squares.count(make_piece(player.color, KING)) != 1:
            raise HTTPException(
                status_code=400,
                detail=f"position must contain exactly one {player.name.lower()} king",
            )
    waiting = board.active_color.opponent
    if board.is_in_check(waiting):
        raise HTTPException(
            status_code=400,
            detail=f"{waiting.name.lower()} is in check but not to move",
        )


def _state(game_id: str, board: Board) -> GameState:
    legal = board.generate_moves()
    in_check = board.is_in_check()
    return GameState(
        game_id=game_id,
        fen=board.get_fen(),
        active_color=board.active_color.value,
        legal_moves=[m.to_uci() for m in legal],
        in_check=in_check,
        checkmate=not legal and in_check,
        stalemate=not legal and not in_check,
    )
