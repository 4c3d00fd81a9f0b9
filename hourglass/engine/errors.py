from __future__ import annotations

from enum import Enum
from typing import Optional

from .move import Move


class MoveError(ValueError):
    """Base class for moves rejected by ``Board.try_move``.

    Attributes:
        move (Move): The rejected move.
        code (str): Stable machine-readable error code.
    """

    code = "invalid_move"
    default_message = "invalid move"

    def __init__(self, move: Move, message: Optional[str] = None) -> None:
        super().__init__(message or f"{self.default_message}: {move.to_uci()}")
        self.move = move


class NotYourPiece(MoveError):
    code = "not_your_piece"
    default_message = "origin square holds no piece of the side to move"


class IllegalMove(MoveError):
    code = "illegal_move"
    default_message = "illegal move"


class NoPromotion(MoveError):
    code = "no_promotion"
    default_message = "pawn reaching the last rank needs a promotion piece"


class FenField(Enum):
    PLACEMENT = "placement"
    ACTIVE_COLOR = "active color"
    CASTLE_RIGHTS = "castle rights"
    EN_PASSANT = "en passant"
    HALFMOVE = "halfmove clock"
    FULLMOVE = "fullmove number"


FEN_FIELDS = tuple(FenField)


class FenError(ValueError):
    code = "invalid_fen"


class MissingComponent(FenError):
    def __init__(self, field: FenField) -> None:
        super().__init__(f"missing component {field.value}")
        self.field = field


class InvalidData(FenError):
    def __init__(self, field: FenField, char_index: int, message: str) -> None:
        super().__init__(f"invalid data for {field.value}, at char {char_index}: {message}")
        self.field = field
        self.char_index = char_index
        self.message = message


class TooManyComponents(FenError):
    def __init__(self) -> None:
        super().__init__("too many components in the fen")
