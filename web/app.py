"""
FastAPI web application for the chess engine.

Exposes two JSON endpoints:
    POST /api/move      — best move for a FEN position at a given depth
    POST /api/evaluate  — static evaluation of a FEN position, term by term

Architecture notes:
- Sync endpoints (not async): FastAPI runs sync handlers in a thread pool,
  which is the correct pattern for CPU-bound blocking calls like engine search.
- Stateless per request: the client sends the full FEN each time and every
  request gets its own Searcher, so concurrent requests never share a
  transposition table.
"""

import logging

import chess
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, field_validator

from chessmind.constants import DEFAULT_DEPTH, MAX_DEPTH
from chessmind.evaluate import Evaluator
from chessmind.search import Searcher

# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

logging.basicConfig(level=logging.INFO)
_log = logging.getLogger(__name__)

app = FastAPI(title="chessmind", version="1.0.0")


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class MoveRequest(BaseModel):
    """
    Client request for an engine move.

    Fields:
        fen:   Full FEN string representing the current board position.
        depth: Iterative-deepening depth, clamped to [1, MAX_DEPTH]. The
               search has no clock, so depth is the only way to bound it.
    """

    fen: str
    depth: int = DEFAULT_DEPTH

    @field_validator("depth")
    @classmethod
    def clamp_depth(cls, v: int) -> int:
        """Clamp depth to a safe operating range."""
        return max(1, min(v, MAX_DEPTH))


class MoveResponse(BaseModel):
    """
    Engine response after computing the best move.

    Fields:
        move:  Best move in UCI notation (e.g. "e2e4", "e7e8q").
        fen:   Board FEN after the engine's move is applied.
        score: White-relative evaluation of the chosen line.
        depth: Depth completed by iterative deepening (0 for a forced move).
        nodes: Minimax plus quiescence nodes visited.
    """

    move: str
    fen: str
    score: int
    depth: int
    nodes: int


class EvaluateRequest(BaseModel):
    fen: str


class EvaluateResponse(BaseModel):
    """
    Static evaluation of a position.

    Fields:
        score: White-relative total.
        terms: Contribution of each evaluation term; for a finished game
               only "terminal" and "total".
    """

    score: int
    terms: dict[str, int]


def _parse_fen(fen: str) -> chess.Board:
    try:
        return chess.Board(fen)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid FEN: {exc}") from exc


# ---------------------------------------------------------------------------
# API routes
# ---------------------------------------------------------------------------


@app.post("/api/move", response_model=MoveResponse)
def api_move(request: MoveRequest) -> MoveResponse:
    """
    Compute the engine's best move for the given position.

    Raises:
        HTTPException 400: Malformed FEN or game already over.
        HTTPException 500: Search failed or returned no move.
    """
    board = _parse_fen(request.fen)

    if board.is_game_over():
        raise HTTPException(
            status_code=400,
            detail=f"Game is already over: {board.result()}",
        )

    searcher = Searcher()
    try:
        result = searcher.search(board, request.depth)
    except Exception as exc:
        _log.exception("Engine search failed for FEN=%s", request.fen)
        raise HTTPException(status_code=500, detail=f"Engine error: {exc}") from exc

    if result.move is None:
        raise HTTPException(status_code=500, detail="Engine returned no move")

    _log.info(
        "Move=%s score=%d depth=%d nodes=%d fen=%s",
        result.move.uci(),
        result.score,
        result.depth,
        result.nodes + result.qnodes,
        request.fen[:40],
    )

    board.push(result.move)
    return MoveResponse(
        move=result.move.uci(),
        fen=board.fen(),
        score=result.score,
        depth=result.depth,
        nodes=result.nodes + result.qnodes,
    )


@app.post("/api/evaluate", response_model=EvaluateResponse)
def api_evaluate(request: EvaluateRequest) -> EvaluateResponse:
    """Static evaluation of the given position, without searching."""
    board = _parse_fen(request.fen)
    terms = Evaluator(board).breakdown()
    return EvaluateResponse(score=terms.pop("total"), terms=terms)
