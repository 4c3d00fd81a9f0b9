from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Tuple

from ..engine.attacks import is_in_check
from ..engine.move import Move
from ..engine.movegen import generate_legal_moves

if TYPE_CHECKING:
    from ..engine.board import Board


logger = logging.getLogger(__name__)

ScoreFn = Callable[["Board"], float]


def search(board: "Board", depth: int, score_fn: ScoreFn) -> Tuple[int, float]:
    """Exhaustive negamax over the legal move tree.

    Args:
        board (Board): Position to search; never modified.
        depth (int): Remaining plies; 0 scores ``board`` directly.
        score_fn (ScoreFn): Pure function scoring a position for its side to
            move (higher is better for whoever moves).

    Returns:
        Tuple[int, float]: Index of the best move within
            ``generate_legal_moves(board)`` and its score. A mated side to
            move scores ``-inf``, a stalemated one ``0``; both report index 0.

    Raises:
        ValueError: If ``depth`` is negative.

    Notes:
        The first move reaching the best score wins ties.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    return _negamax(board, depth, score_fn)[:2]


def _negamax(board: "Board", depth: int, score_fn: ScoreFn) -> Tuple[int, float, int]:
    # Third element is the number of nodes visited, for reporting only
    if depth == 0:
        return 0, score_fn(board), 1

    moves = generate_legal_moves(board)
    if not moves:
        if is_in_check(board, board.active_color):
            return 0, -math.inf, 1
        return 0, 0.0, 1

    best_idx = 0
    best_score = -math.inf
    nodes = 1
    for idx, move in enumerate(moves):
        child = board.copy()
        child.make_move(move)
        _, child_score, child_nodes = _negamax(child, depth - 1, score_fn)
        nodes += child_nodes
        # Scores are always from the mover's point of view
        score = -child_score
        if score > best_score:
            best_score = score
            best_idx = idx
    return best_idx, best_score, nodes


def get_best_move(board: "Board", depth: int, score_fn: ScoreFn) -> Optional[Move]:
    """Return the move chosen by ``search``, or None without legal moves."""
    if depth < 0:
        raise ValueError("depth must be >= 0")
    moves = generate_legal_moves(board)
    if not moves:
        return None
    idx, _ = search(board, depth, score_fn)
    return moves[idx]


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: float
    depth: int
    nodes: int
    time_ms: int


class SearchService:
    """Runs a search and reports what it did.

    Wraps ``search`` with timing, node counting and logging; the chosen move
    is identical to ``get_best_move`` for the same inputs.
    """

    def best_move(self, board: "Board", depth: int, score_fn: ScoreFn) -> SearchResult:
        if depth < 0:
            raise ValueError("depth must be >= 0")
        start = time.perf_counter()
        moves = generate_legal_moves(board)
        idx, score, nodes = _negamax(board, depth, score_fn)
        time_ms = int((time.perf_counter() - start) * 1000)
        best = moves[idx] if moves else None

        logger.info(
            "search finished",
            extra={
                "depth": depth,
                "best_move": best.to_uci() if best else None,
                "score": score,
                "nodes": nodes,
                "time_ms": time_ms,
            },
        )
        return SearchResult(
            best_move=best,
            score=score,
            depth=depth,
            nodes=nodes,
            time_ms=time_ms,
        )
