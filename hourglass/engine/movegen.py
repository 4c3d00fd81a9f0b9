from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

from .attacks import (
    KING_TARGETS,
    KNIGHT_TARGETS,
    SLIDING_DIRECTIONS,
    find_king,
    generate_attack_map,
)
from .distance import OFFSETS, SQUARES_TO_EDGE, Direction
from .move import Move
from .pieces import (
    CASTLE_WINGS,
    EMPTY,
    KING,
    KNIGHT,
    PAWN,
    PROMOTION_TYPES,
    ROOK,
    SLIDING_TYPES,
    TYPE_MASK,
    Player,
    make_piece,
)

if TYPE_CHECKING:
    from .board import Board


logger = logging.getLogger(__name__)


def generate_pseudo_legal_moves_for(board: "Board", square: int) -> List[Move]:
    """Return moves obeying the movement pattern of the piece on ``square``.

    King safety is not verified. Returns an empty list when ``square`` is
    empty or holds a piece of the side not to move.
    """
    mover = board.active_color
    piece = board.squares[square]
    if not piece & mover.color:
        return []

    moves: List[Move] = []
    kind = piece & TYPE_MASK
    if kind in SLIDING_TYPES:
        _sliding_moves(board, moves, square, kind, mover)
    elif kind == KNIGHT:
        _knight_moves(board, moves, square, mover)
    elif kind == PAWN:
        _pawn_moves(board, moves, square, mover)
    elif kind == KING:
        _king_moves(board, moves, square, mover)
    return moves


def generate_legal_moves(board: "Board") -> List[Move]:
    """Return every legal move for the side to move, in ascending origin order."""
    color = board.active_color.color
    legal: List[Move] = []
    for sq, piece in enumerate(board.squares):
        if piece & color:
            legal.extend(legal_moves_for(board, sq))
    return legal


def legal_moves_for(board: "Board", square: int) -> List[Move]:
    """Return the legal moves originating on ``square``.

    Each pseudo-legal candidate is played on a scratch copy and dropped when
    it leaves the mover's own king attacked.
    """
    mover = board.active_color
    return [
        m
        for m in generate_pseudo_legal_moves_for(board, square)
        if _keeps_king_safe(board, m, mover)
    ]


def _keeps_king_safe(board: "Board", move: Move, mover: Player) -> bool:
    scratch = board.copy()
    scratch.make_move(move)
    king_sq = find_king(scratch, mover)
    if generate_attack_map(scratch, mover.opponent)[king_sq]:
        logger.debug("rejecting %s: it would leave the king in check", move.to_uci())
        return False
    return True


def _sliding_moves(
    board: "Board", moves: List[Move], start: int, kind: int, mover: Player
) -> None:
    squares = board.squares
    own = mover.color
    edge = SQUARES_TO_EDGE[start]
    for d in SLIDING_DIRECTIONS[kind]:
        step = OFFSETS[d]
        target = start
        for _ in range(edge[d]):
            target += step
            occupant = squares[target]
            # Blocked by a friendly piece
            if occupant & own:
                break
            moves.append(Move(start, target))
            # Capture ends the ray
            if occupant:
                break


def _knight_moves(board: "Board", moves: List[Move], start: int, mover: Player) -> None:
    squares = board.squares
    own = mover.color
    for target in KNIGHT_TARGETS[start]:
        if not squares[target] & own:
            moves.append(Move(start, target))


def _pawn_moves(board: "Board", moves: List[Move], start: int, mover: Player) -> None:
    edge = SQUARES_TO_EDGE[start]
    if edge[mover.forward] < 1:
        return
    squares = board.squares
    enemy = mover.opponent.color
    ahead = start + mover.forward_step

    # Diagonals only capture, or land on the en-passant target
    if edge[Direction.WEST] >= 1:
        target = ahead - 1
        if squares[target] & enemy or board.en_passant == target:
            _add_pawn_move(moves, start, target, mover)
    if edge[Direction.EAST] >= 1:
        target = ahead + 1
        if squares[target] & enemy or board.en_passant == target:
            _add_pawn_move(moves, start, target, mover)

    if squares[ahead] != EMPTY:
        return
    _add_pawn_move(moves, start, ahead, mover)

    if start // 8 == mover.pawn_rank:
        target = ahead + mover.forward_step
        if squares[target] == EMPTY:
            moves.append(Move(start, target))


def _add_pawn_move(moves: List[Move], start: int, target: int, mover: Player) -> None:
    if target // 8 == mover.last_rank:
        for promote in PROMOTION_TYPES:
            moves.append(Move(start, target, promote))
    else:
        moves.append(Move(start, target))


def _king_moves(board: "Board", moves: List[Move], start: int, mover: Player) -> None:
    squares = board.squares
    own = mover.color
    for target in KING_TARGETS[start]:
        if not squares[target] & own:
            moves.append(Move(start, target))
    _castling_moves(board, moves, start, mover)


def _castling_moves(board: "Board", moves: List[Move], start: int, mover: Player) -> None:
    squares = board.squares
    own_rook = make_piece(mover.color, ROOK)
    attacked: Optional[List[bool]] = None
    for wing in CASTLE_WINGS:
        if wing.player is not mover or not board.castle_rights & wing.right:
            continue
        # Rights from an inconsistent FEN are ignored rather than trusted
        if start != wing.king_from or squares[wing.rook_from] != own_rook:
            continue
        if any(squares[sq] != EMPTY for sq in wing.between):
            continue
        if squares[wing.king_to] != EMPTY:
            continue
        if attacked is None:
            attacked = generate_attack_map(board, mover.opponent)
        if any(attacked[sq] for sq in wing.king_path):
            continue
        moves.append(Move(start, wing.king_to))
