from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .pieces import CHAR_TO_TYPE, PROMOTION_TYPES, TYPE_TO_CHAR


@dataclass(frozen=True)
class Move:
    """Engine move representation.

    Attributes:
        from_sq (int): Origin square index (0-based).
        to_sq (int): Destination square index (0-based).
        promote (Optional[int]): Piece type a pawn promotes to, if any.
    """

    from_sq: int
    to_sq: int
    promote: Optional[int] = None

    @classmethod
    def parse(cls, text: str) -> "Move":
        """Parse a move written as two square names, e.g. ``"e2e4"``.

        Only the 4-character form is accepted; promotions have to be built
        with ``Move(from_sq, to_sq, promote)``.

        Raises:
            ValueError: If ``text`` is not exactly two valid square names.
        """
        if len(text) != 4:
            raise ValueError(f"invalid move length: {text!r}")
        return cls(str_to_square(text[0:2]), str_to_square(text[2:4]))

    def with_promote(self, promote: Optional[int]) -> "Move":
        return Move(self.from_sq, self.to_sq, promote)

    def to_uci(self) -> str:
        """Serialize the move into long algebraic form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        suffix = TYPE_TO_CHAR[self.promote] if self.promote is not None else ""
        return square_to_str(self.from_sq) + square_to_str(self.to_sq) + suffix

    def __str__(self) -> str:
        return self.to_uci()


def promote_from_char(ch: str) -> int:
    """Map ``"n"``, ``"b"``, ``"r"`` or ``"q"`` (any case) to a piece type.

    Raises:
        ValueError: If ``ch`` does not name a promotable piece.
    """
    kind = CHAR_TO_TYPE.get(ch.lower())
    if kind not in PROMOTION_TYPES:
        raise ValueError(f"invalid promotion piece: {ch!r}")
    return kind


def str_to_square(s: str) -> int:
    """Convert algebraic notation into a 0-based square index.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        int: Zero-based square index.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    file = ord(s[0]) - ord("a")
    rank = int(s[1]) - 1
    return rank * 8 + file


def square_to_str(idx: int) -> str:
    """Convert a 0-based square index into algebraic notation.

    Raises:
        ValueError: If ``idx`` is outside the valid square range.
    """
    if idx < 0 or idx > 63:
        raise ValueError(f"invalid square index: {idx}")
    file = idx % 8
    rank = idx // 8
    return chr(ord("a") + file) + str(rank + 1)
