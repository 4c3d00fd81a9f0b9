"""Scoring functions for the search.

A scorer maps a position to a number from the point of view of the side to
move: higher is better for whoever moves next. ``score_material`` is pure and
deterministic and is the default everywhere; ``bogo_score`` is random and only
meant for tests and placeholders.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Callable, Dict, Final

from ..engine.pieces import (
    BISHOP,
    COLOR_MASK,
    KING,
    KNIGHT,
    PAWN,
    QUEEN,
    ROOK,
    TYPE_MASK,
    WHITE,
    Player,
)

if TYPE_CHECKING:
    from ..engine.board import Board


# Material values in centipawns
P_VAL: Final = 100
N_VAL: Final = 320
B_VAL: Final = 330
R_VAL: Final = 500
Q_VAL: Final = 900

PIECE_VALUES: Dict[int, int] = {
    PAWN: P_VAL,
    KNIGHT: N_VAL,
    BISHOP: B_VAL,
    ROOK: R_VAL,
    QUEEN: Q_VAL,
    KING: 0,
}


def score_value(piece: int) -> int:
    """Signed material value of ``piece``: positive for White, negative for Black."""
    if not piece & COLOR_MASK:
        return 0
    value = PIECE_VALUES[piece & TYPE_MASK]
    return value if piece & WHITE else -value


def score_material(board: "Board") -> int:
    """Material balance in centipawns for the side to move."""
    total = sum(score_value(p) for p in board.squares)
    return total if board.active_color is Player.WHITE else -total


def bogo_score(board: "Board") -> float:
    """Random score in [0, 1). Breaks search determinism; tests only."""
    return random.random()


SCORERS: Dict[str, Callable[["Board"], float]] = {
    "material": score_material,
}
