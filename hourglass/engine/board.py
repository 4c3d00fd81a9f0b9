from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from ..search.service import get_best_move as _get_best_move
from ..search.service import search as _search
from .attacks import find_king, generate_attack_map, is_in_check
from .errors import IllegalMove, NoPromotion, NotYourPiece
from .fen import STARTPOS_FEN, dump_fen, parse_fen
from .move import Move
from .movegen import generate_legal_moves, legal_moves_for
from .pieces import (
    CASTLE_WING_BY_KING_TO,
    EMPTY,
    KING,
    PAWN,
    ROOK_HOME_RIGHTS,
    TYPE_MASK,
    CastleRights,
    Player,
    make_piece,
)


ScoreFn = Callable[["Board"], float]


@dataclass
class Board:
    """A chess position backed by a flat 64-entry array.

    Notes:
    - Squares are 0..63 (a1=0 .. h8=63), rank-major from White's perspective.
    - Each entry is a packed piece (see ``pieces``) or ``EMPTY``.
    - Boards hold no shared references: ``copy()`` is the only thing needed
      to explore a move without committing it.
    - Precondition: exactly one king per color. Operations that look for a
      king raise ``RuntimeError`` when it is missing.
    """

    squares: List[int] = field(default_factory=lambda: [EMPTY] * 64)
    castle_rights: CastleRights = CastleRights.NONE
    active_color: Player = Player.WHITE
    en_passant: Optional[int] = None
    halfmove: int = 0
    fullmove: int = 1

    @classmethod
    def empty(cls) -> "Board":
        """Create a board with no pieces, White to move and no rights."""
        return cls()

    @classmethod
    def new(cls) -> "Board":
        """Create a board initialized to the standard chess starting position."""
        return cls.from_fen(STARTPOS_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a Forsyth–Edwards Notation (FEN) string.

        Raises:
            FenError: If ``fen`` is malformed (see ``fen.parse_fen``).
        """
        return cls(*parse_fen(fen))

    def copy(self) -> "Board":
        return Board(
            self.squares[:],
            self.castle_rights,
            self.active_color,
            self.en_passant,
            self.halfmove,
            self.fullmove,
        )

    def load_fen(self, fen: str) -> None:
        """Replace this board's state with the position encoded in ``fen``.

        The board is left untouched when parsing fails.
        """
        parsed = parse_fen(fen)
        (
            self.squares,
            self.castle_rights,
            self.active_color,
            self.en_passant,
            self.halfmove,
            self.fullmove,
        ) = parsed

    def get_fen(self) -> str:
        return dump_fen(self)

    # --- Queries ---
    def piece_at(self, square: int) -> int:
        return self.squares[square]

    def find_king(self, player: Player) -> int:
        return find_king(self, player)

    def is_in_check(self, player: Optional[Player] = None) -> bool:
        """Return True if ``player`` (default: side to move) is in check."""
        return is_in_check(self, self.active_color if player is None else player)

    def attack_map(self, player: Player) -> List[bool]:
        return generate_attack_map(self, player)

    def generate_moves(self) -> List[Move]:
        """Return the legal moves of the side to move."""
        return generate_legal_moves(self)

    def get_moves_for(self, square: int) -> List[Move]:
        """Return the legal moves whose origin is ``square``."""
        return legal_moves_for(self, square)

    def is_checkmate(self) -> bool:
        return not self.generate_moves() and self.is_in_check()

    def is_stalemate(self) -> bool:
        return not self.generate_moves() and not self.is_in_check()

    # --- Mutation ---
    def try_move(self, move: Move) -> None:
        """Validate ``move`` and play it for the side to move.

        Every check runs before the first mutation, so a rejected move leaves
        the board exactly as it was.

        Raises:
            IllegalMove: If either square lies off the board.
            NotYourPiece: If the origin square is empty or holds an opponent
                piece.
            NoPromotion: If a pawn move to the last rank names no promotion
                piece.
            IllegalMove: If the move is not among the legal moves of its
                origin square.
        """
        if not (0 <= move.from_sq < 64 and 0 <= move.to_sq < 64):
            raise IllegalMove(
                move, f"square out of range: {move.from_sq} -> {move.to_sq}"
            )
        if not self.squares[move.from_sq] & self.active_color.color:
            raise NotYourPiece(move)

        legal = self.get_moves_for(move.from_sq)
        if move not in legal:
            if move.promote is None and any(
                m.to_sq == move.to_sq and m.promote is not None for m in legal
            ):
                raise NoPromotion(move)
            raise IllegalMove(move)

        self.make_move(move)

    def make_move(self, move: Move) -> None:
        """Apply ``move`` in place without checking that it is legal.

        Handles en-passant captures, castling rook relocation, castling-rights
        revocation, promotion, move counters and the side to move.

        Raises:
            NoPromotion: If a pawn reaches the last rank without a promotion
                piece. Raised before anything is modified.
        """
        squares = self.squares
        mover = self.active_color
        from_sq, to_sq = move.from_sq, move.to_sq
        piece = squares[from_sq]
        kind = piece & TYPE_MASK

        promoting = kind == PAWN and to_sq // 8 == mover.last_rank
        if promoting and move.promote is None:
            raise NoPromotion(move)

        captured = squares[to_sq] != EMPTY

        if kind == PAWN and to_sq == self.en_passant:
            # The double-pushed pawn sits one rank behind the target
            squares[to_sq - mover.forward_step] = EMPTY
            captured = True

        if kind == PAWN and abs(to_sq - from_sq) == 16:
            self.en_passant = from_sq + mover.forward_step
        else:
            self.en_passant = None

        if kind == KING and abs(to_sq - from_sq) == 2:
            wing = CASTLE_WING_BY_KING_TO[to_sq]
            squares[wing.rook_to] = squares[wing.rook_from]
            squares[wing.rook_from] = EMPTY

        if self.castle_rights:
            self.castle_rights = self._revoked_rights(kind, mover, from_sq, to_sq)

        squares[to_sq] = make_piece(mover.color, move.promote) if promoting else piece
        squares[from_sq] = EMPTY

        if kind == PAWN or captured:
            self.halfmove = 0
        else:
            self.halfmove += 1
        if mover is Player.BLACK:
            self.fullmove += 1

        self.active_color = mover.opponent

    def _revoked_rights(
        self, kind: int, mover: Player, from_sq: int, to_sq: int
    ) -> CastleRights:
        rights = self.castle_rights
        if kind == KING:
            rights = rights.revoke(CastleRights.for_player(mover))
        # A rook leaving its corner, or being captured there
        for sq in (from_sq, to_sq):
            right = ROOK_HOME_RIGHTS.get(sq)
            if right is not None:
                rights = rights.revoke(right)
        return rights

    # --- Search ---
    def search(self, depth: int, score_fn: ScoreFn) -> Tuple[int, float]:
        return _search(self, depth, score_fn)

    def get_best_move(self, depth: int, score_fn: ScoreFn) -> Optional[Move]:
        return _get_best_move(self, depth, score_fn)
