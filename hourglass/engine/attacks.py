"""Attack maps and check detection.

Attack maps never consult king safety; the legality filter is built on top
of them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Tuple

from .distance import (
    ALL_DIRECTIONS,
    BISHOP_DIRECTIONS,
    OFFSETS,
    ROOK_DIRECTIONS,
    SQUARES_TO_EDGE,
    Direction,
)
from .pieces import (
    BISHOP,
    KING,
    KNIGHT,
    PAWN,
    QUEEN,
    ROOK,
    TYPE_MASK,
    Player,
    make_piece,
)

if TYPE_CHECKING:
    from .board import Board


# (file delta, rank delta)
KNIGHT_DELTAS = ((-2, 1), (-1, 2), (1, 2), (2, 1), (2, -1), (1, -2), (-1, -2), (-2, -1))

SLIDING_DIRECTIONS = {
    BISHOP: BISHOP_DIRECTIONS,
    ROOK: ROOK_DIRECTIONS,
    QUEEN: ALL_DIRECTIONS,
}


def _knight_targets(square: int) -> Tuple[int, ...]:
    edge = SQUARES_TO_EDGE[square]
    targets = []
    for dx, dy in KNIGHT_DELTAS:
        x_dir = Direction.EAST if dx > 0 else Direction.WEST
        y_dir = Direction.NORTH if dy > 0 else Direction.SOUTH
        if edge[x_dir] >= abs(dx) and edge[y_dir] >= abs(dy):
            targets.append(square + dy * 8 + dx)
    return tuple(targets)


def _king_targets(square: int) -> Tuple[int, ...]:
    edge = SQUARES_TO_EDGE[square]
    return tuple(square + OFFSETS[d] for d in ALL_DIRECTIONS if edge[d] >= 1)


# Bounded-offset destinations per square, derived from the distance table
KNIGHT_TARGETS: Tuple[Tuple[int, ...], ...] = tuple(_knight_targets(sq) for sq in range(64))
KING_TARGETS: Tuple[Tuple[int, ...], ...] = tuple(_king_targets(sq) for sq in range(64))


def generate_attack_map(board: "Board", player: Player) -> List[bool]:
    """Return the 64 squares threatened by ``player``'s pieces.

    Pawns threaten their two forward diagonals only. Squares occupied by
    ``player``'s own pieces are never marked.
    """
    attacked = [False] * 64
    color = player.color
    squares = board.squares
    for sq, piece in enumerate(squares):
        if piece & color:
            mark_attacks_for(squares, attacked, player, sq)
    return attacked


def mark_attacks_for(
    squares: List[int], attacked: List[bool], player: Player, start: int
) -> None:
    color = player.color
    kind = squares[start] & TYPE_MASK
    if kind == PAWN:
        edge = SQUARES_TO_EDGE[start]
        if edge[player.forward] < 1:
            return
        ahead = start + player.forward_step
        if edge[Direction.WEST] >= 1 and not squares[ahead - 1] & color:
            attacked[ahead - 1] = True
        if edge[Direction.EAST] >= 1 and not squares[ahead + 1] & color:
            attacked[ahead + 1] = True
    elif kind == KNIGHT:
        for target in KNIGHT_TARGETS[start]:
            if not squares[target] & color:
                attacked[target] = True
    elif kind == KING:
        for target in KING_TARGETS[start]:
            if not squares[target] & color:
                attacked[target] = True
    else:
        edge = SQUARES_TO_EDGE[start]
        for d in SLIDING_DIRECTIONS[kind]:
            step = OFFSETS[d]
            target = start
            for _ in range(edge[d]):
                target += step
                occupant = squares[target]
                if occupant & color:
                    break
                attacked[target] = True
                if occupant:
                    break


def find_king(board: "Board", player: Player) -> int:
    """Return the square of ``player``'s king.

    Raises:
        RuntimeError: If the board has no king of that color. Positions the
            engine operates on must always hold one king per side.
    """
    try:
        return board.squares.index(make_piece(player.color, KING))
    except ValueError:
        raise RuntimeError(f"no {player.name.lower()} king on the board") from None


def is_in_check(board: "Board", player: Player) -> bool:
    """Return True if ``player``'s king stands on a square the opponent attacks."""
    return generate_attack_map(board, player.opponent)[find_king(board, player)]
