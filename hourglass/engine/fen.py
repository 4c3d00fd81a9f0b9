"""Forsyth–Edwards Notation codec."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, NamedTuple, Optional

from .errors import (
    FEN_FIELDS,
    FenField,
    InvalidData,
    MissingComponent,
    TooManyComponents,
)
from .move import square_to_str, str_to_square
from .pieces import CASTLE_CHARS, EMPTY, CastleRights, Player, char_to_piece, piece_to_char

if TYPE_CHECKING:
    from .board import Board


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_CASTLE_BY_CHAR = dict(CASTLE_CHARS)


class FenFields(NamedTuple):
    squares: List[int]
    castle_rights: CastleRights
    active_color: Player
    en_passant: Optional[int]
    halfmove: int
    fullmove: int


def parse_fen(fen: str) -> FenFields:
    """Parse a FEN string into the fields of a position.

    Args:
        fen (str): Six space-separated FEN fields.

    Returns:
        FenFields: Parsed position state.

    Raises:
        MissingComponent: If fewer than six fields are present; names the
            first absent field.
        TooManyComponents: If more than six fields are present.
        InvalidData: If a field holds malformed data; carries the field and
            the offending character index.
    """
    parts = fen.split()
    if len(parts) < len(FEN_FIELDS):
        raise MissingComponent(FEN_FIELDS[len(parts)])
    if len(parts) > len(FEN_FIELDS):
        raise TooManyComponents()
    placement, active, castling, ep, halfmove, fullmove = parts

    return FenFields(
        squares=_parse_placement(placement),
        active_color=_parse_active_color(active),
        castle_rights=_parse_castle_rights(castling),
        en_passant=_parse_en_passant(ep),
        halfmove=_parse_counter(halfmove, FenField.HALFMOVE),
        fullmove=_parse_counter(fullmove, FenField.FULLMOVE),
    )


def _parse_placement(placement: str) -> List[int]:
    squares = [EMPTY] * 64
    rank = 7
    file = 0
    for idx, ch in enumerate(placement):
        if ch == "/":
            if file != 8:
                raise InvalidData(FenField.PLACEMENT, idx, "rank does not cover 8 files")
            if rank == 0:
                raise InvalidData(FenField.PLACEMENT, idx, "more than 8 ranks")
            rank -= 1
            file = 0
            continue
        if ch in "12345678":
            file += int(ch)
            if file > 8:
                raise InvalidData(FenField.PLACEMENT, idx, "overran rank")
            continue
        piece = char_to_piece(ch)
        if piece is None:
            raise InvalidData(FenField.PLACEMENT, idx, "invalid char")
        if file >= 8:
            raise InvalidData(FenField.PLACEMENT, idx, "overran rank")
        squares[rank * 8 + file] = piece
        file += 1
    if rank != 0 or file != 8:
        raise InvalidData(FenField.PLACEMENT, len(placement), "placement does not cover 64 squares")
    return squares


def _parse_active_color(active: str) -> Player:
    if active == "w":
        return Player.WHITE
    if active == "b":
        return Player.BLACK
    raise InvalidData(FenField.ACTIVE_COLOR, 0, "the active color must be 'w' or 'b'")


def _parse_castle_rights(castling: str) -> CastleRights:
    rights = CastleRights.NONE
    if castling == "-":
        return rights
    for idx, ch in enumerate(castling):
        right = _CASTLE_BY_CHAR.get(ch)
        if right is None:
            raise InvalidData(
                FenField.CASTLE_RIGHTS,
                idx,
                "character must be either 'K', 'Q', 'k', or 'q'",
            )
        rights |= right
    return rights


def _parse_en_passant(ep: str) -> Optional[int]:
    if ep == "-":
        return None
    try:
        return str_to_square(ep)
    except ValueError:
        raise InvalidData(
            FenField.EN_PASSANT,
            0,
            "the en passant field must be a square name or '-'",
        ) from None


def _parse_counter(value: str, field: FenField) -> int:
    for idx, ch in enumerate(value):
        if ch not in "0123456789":
            raise InvalidData(field, idx, f"{field.value} should be an unsigned int")
    return int(value)


def dump_fen(board: "Board") -> str:
    """Serialize ``board`` into a FEN string.

    Returns:
        str: FEN string describing the board state.
    """
    ranks_str: List[str] = []
    for rank_idx in range(7, -1, -1):  # 7..0 maps to ranks 8..1
        run = 0
        row = []
        for file_idx in range(8):
            piece = board.squares[rank_idx * 8 + file_idx]
            if piece == EMPTY:
                run += 1
            else:
                if run > 0:
                    row.append(str(run))
                    run = 0
                row.append(piece_to_char(piece))
        if run > 0:
            row.append(str(run))
        ranks_str.append("".join(row))
    placement = "/".join(ranks_str)

    castling = "".join(ch for ch, right in CASTLE_CHARS if board.castle_rights & right) or "-"
    ep = square_to_str(board.en_passant) if board.en_passant is not None else "-"
    return (
        f"{placement} {board.active_color.value} {castling} {ep} "
        f"{board.halfmove} {board.fullmove}"
    )
