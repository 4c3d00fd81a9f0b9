from __future__ import annotations

import pytest

from hourglass.engine.board import Board
from hourglass.engine.fen import STARTPOS_FEN
from hourglass.engine.perft import perft, perft_divide


KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
POSITION_3 = "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1"
POSITION_4 = "r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 w kq - 0 1"
POSITION_5 = "rnbq1k1r/pp1Pbppp/2p5/8/2B5/8/PPP1NnPP/RNBQK2R w KQ - 1 8"


@pytest.mark.parametrize(
    "fen,depth,nodes",
    [
        (STARTPOS_FEN, 0, 1),
        (STARTPOS_FEN, 1, 20),
        (STARTPOS_FEN, 2, 400),
        (STARTPOS_FEN, 3, 8902),
        (KIWIPETE, 1, 48),
        (KIWIPETE, 2, 2039),
        (POSITION_3, 1, 14),
        (POSITION_3, 2, 191),
        (POSITION_3, 3, 2812),
        (POSITION_4, 1, 6),
        (POSITION_4, 2, 264),
        (POSITION_5, 1, 44),
        (POSITION_5, 2, 1486),
    ],
)
def test_perft_known_counts(fen: str, depth: int, nodes: int) -> None:
    assert perft(Board.from_fen(fen), depth) == nodes


@pytest.mark.slow
def test_perft_startpos_depth_4() -> None:
    assert perft(Board.new(), 4) == 197281


def test_perft_does_not_modify_board() -> None:
    b = Board.from_fen(KIWIPETE)
    perft(b, 2)
    assert b.get_fen() == KIWIPETE


def test_perft_divide_sums_to_perft() -> None:
    b = Board.new()
    divide = perft_divide(b, 2)
    assert len(divide) == 20
    assert set(divide.values()) == {20}
    assert sum(divide.values()) == perft(b, 2)


def test_negative_depth_rejected() -> None:
    with pytest.raises(ValueError):
        perft(Board.new(), -1)
    with pytest.raises(ValueError):
        perft_divide(Board.new(), 0)
