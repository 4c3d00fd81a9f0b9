"""Squares-to-edge lookup shared by every ray and offset routine.

The table is computed once at import and never mutated afterwards.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Tuple


class Direction(IntEnum):
    NORTH = 0
    SOUTH = 1
    WEST = 2
    EAST = 3
    NORTH_WEST = 4
    SOUTH_EAST = 5
    NORTH_EAST = 6
    SOUTH_WEST = 7

    @property
    def offset(self) -> int:
        return OFFSETS[self]


# Square-index step for each direction, indexed by Direction value
OFFSETS: Tuple[int, ...] = (8, -8, -1, 1, 7, -7, 9, -9)

ALL_DIRECTIONS: Tuple[Direction, ...] = tuple(Direction)
ROOK_DIRECTIONS: Tuple[Direction, ...] = (
    Direction.NORTH,
    Direction.SOUTH,
    Direction.WEST,
    Direction.EAST,
)
BISHOP_DIRECTIONS: Tuple[Direction, ...] = (
    Direction.NORTH_WEST,
    Direction.SOUTH_EAST,
    Direction.NORTH_EAST,
    Direction.SOUTH_WEST,
)


def _build_table() -> Tuple[Tuple[int, ...], ...]:
    rows = []
    for sq in range(64):
        rank, file = divmod(sq, 8)
        north = 7 - rank
        south = rank
        west = file
        east = 7 - file
        rows.append(
            (
                north,
                south,
                west,
                east,
                min(north, west),
                min(south, east),
                min(north, east),
                min(south, west),
            )
        )
    return tuple(rows)


SQUARES_TO_EDGE: Tuple[Tuple[int, ...], ...] = _build_table()


def squares_to_edge(square: int, direction: Direction) -> int:
    """Return how many steps fit between ``square`` and the board edge.

    Args:
        square (int): Square index in range 0..63.
        direction (Direction): One of the eight compass directions.

    Returns:
        int: Number of squares that can be stepped over in ``direction``.
    """
    return SQUARES_TO_EDGE[square][direction]
