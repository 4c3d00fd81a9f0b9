from __future__ import annotations

from enum import Enum, IntFlag
from typing import Final, NamedTuple, Tuple

from .distance import Direction


# Piece types occupy the low three bits, colors the next two.
EMPTY: Final = 0
KING: Final = 1
PAWN: Final = 2
KNIGHT: Final = 3
BISHOP: Final = 4
ROOK: Final = 5
QUEEN: Final = 6

WHITE: Final = 8
BLACK: Final = 16

TYPE_MASK: Final = 0b00111
COLOR_MASK: Final = 0b11000

PROMOTION_TYPES = (KNIGHT, BISHOP, ROOK, QUEEN)
SLIDING_TYPES = frozenset((BISHOP, ROOK, QUEEN))

TYPE_TO_CHAR = {
    KING: "k",
    PAWN: "p",
    KNIGHT: "n",
    BISHOP: "b",
    ROOK: "r",
    QUEEN: "q",
}
CHAR_TO_TYPE = {v: k for k, v in TYPE_TO_CHAR.items()}


def make_piece(color: int, kind: int) -> int:
    """Combine color bits and a piece type into one packed piece value."""
    return color | kind


def piece_type(piece: int) -> int:
    return piece & TYPE_MASK


def piece_color(piece: int) -> int:
    return piece & COLOR_MASK


def piece_to_char(piece: int) -> str:
    """Return the FEN letter for ``piece`` (uppercase for White).

    Raises:
        ValueError: If ``piece`` is empty or carries no valid type.
    """
    kind = piece & TYPE_MASK
    if kind not in TYPE_TO_CHAR or not piece & COLOR_MASK:
        raise ValueError(f"not a piece: {piece!r}")
    ch = TYPE_TO_CHAR[kind]
    return ch.upper() if piece & WHITE else ch


def char_to_piece(ch: str) -> int | None:
    """Map a FEN letter to a packed piece, or ``None`` if unrecognized."""
    kind = CHAR_TO_TYPE.get(ch.lower())
    if kind is None:
        return None
    return make_piece(WHITE if ch.isupper() else BLACK, kind)


class Player(Enum):
    """Side to move. Values are the FEN active-color letters."""

    WHITE = "w"
    BLACK = "b"

    @property
    def color(self) -> int:
        return WHITE if self is Player.WHITE else BLACK

    @property
    def opponent(self) -> "Player":
        return Player.BLACK if self is Player.WHITE else Player.WHITE

    @property
    def forward(self) -> Direction:
        return Direction.NORTH if self is Player.WHITE else Direction.SOUTH

    @property
    def forward_step(self) -> int:
        return 8 if self is Player.WHITE else -8

    @property
    def pawn_rank(self) -> int:
        return 1 if self is Player.WHITE else 6

    @property
    def last_rank(self) -> int:
        return 7 if self is Player.WHITE else 0


class CastleRights(IntFlag):
    NONE = 0
    WHITE_KING_SIDE = 1 << 0
    WHITE_QUEEN_SIDE = 1 << 1
    BLACK_KING_SIDE = 1 << 2
    BLACK_QUEEN_SIDE = 1 << 3

    @classmethod
    def all(cls) -> "CastleRights":
        return (
            cls.WHITE_KING_SIDE
            | cls.WHITE_QUEEN_SIDE
            | cls.BLACK_KING_SIDE
            | cls.BLACK_QUEEN_SIDE
        )

    @classmethod
    def for_player(cls, player: Player) -> "CastleRights":
        if player is Player.WHITE:
            return cls.WHITE_KING_SIDE | cls.WHITE_QUEEN_SIDE
        return cls.BLACK_KING_SIDE | cls.BLACK_QUEEN_SIDE

    def revoke(self, rights: "CastleRights") -> "CastleRights":
        """Return a copy with ``rights`` cleared; rights are never re-granted."""
        return CastleRights(self & ~rights & CastleRights.all())


# FEN letters in canonical output order
CASTLE_CHARS = (
    ("K", CastleRights.WHITE_KING_SIDE),
    ("Q", CastleRights.WHITE_QUEEN_SIDE),
    ("k", CastleRights.BLACK_KING_SIDE),
    ("q", CastleRights.BLACK_QUEEN_SIDE),
)

# Corner square -> right lost when a piece leaves or is captured there
ROOK_HOME_RIGHTS = {
    0: CastleRights.WHITE_QUEEN_SIDE,
    7: CastleRights.WHITE_KING_SIDE,
    56: CastleRights.BLACK_QUEEN_SIDE,
    63: CastleRights.BLACK_KING_SIDE,
}


class CastleWing(NamedTuple):
    player: Player
    right: CastleRights
    king_from: int
    king_to: int
    rook_from: int
    rook_to: int
    # squares strictly between king and rook
    between: Tuple[int, ...]
    # squares the king stands on or crosses, start and destination included
    king_path: Tuple[int, ...]


CASTLE_WINGS = (
    CastleWing(Player.WHITE, CastleRights.WHITE_KING_SIDE, 4, 6, 7, 5, (5, 6), (4, 5, 6)),
    CastleWing(Player.WHITE, CastleRights.WHITE_QUEEN_SIDE, 4, 2, 0, 3, (1, 2, 3), (4, 3, 2)),
    CastleWing(Player.BLACK, CastleRights.BLACK_KING_SIDE, 60, 62, 63, 61, (61, 62), (60, 61, 62)),
    CastleWing(
        Player.BLACK, CastleRights.BLACK_QUEEN_SIDE, 60, 58, 56, 59, (57, 58, 59), (60, 59, 58)
    ),
)
CASTLE_WING_BY_KING_TO = {wing.king_to: wing for wing in CASTLE_WINGS}
