from __future__ import annotations

import logging
import math

import pytest

from hourglass.engine.board import Board
from hourglass.eval import bogo_score, score_material
from hourglass.search.service import SearchResult, SearchService, get_best_move, search


MATED = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
STALEMATE = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
BACK_RANK = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"


def _positional(b: Board) -> float:
    # Deterministic, side-dependent and full of distinct values
    return (sum(i * p for i, p in enumerate(b.squares)) % 97) + (b.active_color.value == "w")


def test_depth_zero_returns_score_unchanged() -> None:
    b = Board.new()
    assert search(b, 0, lambda _: 42.5) == (0, 42.5)


@pytest.mark.parametrize(
    "fen",
    [
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",
        "4k3/8/8/3q4/8/8/8/3RK3 w - - 0 1",
        "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
    ],
)
def test_depth_one_maximizes_negated_child_score(fen: str) -> None:
    b = Board.from_fen(fen)
    scores = []
    for m in b.generate_moves():
        child = b.copy()
        child.make_move(m)
        scores.append(-_positional(child))
    best = max(scores)
    assert search(b, 1, _positional) == (scores.index(best), best)


def test_depth_one_material_takes_the_queen() -> None:
    b = Board.from_fen("4k3/8/8/3q4/8/8/8/3RK3 w - - 0 1")
    idx, score = search(b, 1, score_material)
    assert b.generate_moves()[idx].to_uci() == "d1d5"
    assert score == 500


def test_ties_keep_the_first_move() -> None:
    b = Board.new()
    assert search(b, 1, lambda _: 0.0) == (0, 0.0)
    assert search(b, 2, lambda _: 0.0) == (0, 0.0)


def test_checkmated_side_scores_negative_infinity() -> None:
    b = Board.from_fen(MATED)
    idx, score = search(b, 3, score_material)
    assert idx == 0
    assert score == -math.inf
    assert get_best_move(b, 3, score_material) is None


def test_stalemate_scores_zero() -> None:
    b = Board.from_fen(STALEMATE)
    assert search(b, 2, score_material) == (0, 0.0)


def test_finds_mate_in_one() -> None:
    b = Board.from_fen(BACK_RANK)
    move = get_best_move(b, 2, score_material)
    assert move is not None and move.to_uci() == "a1a8"
    assert search(b, 2, score_material)[1] == math.inf


def test_search_does_not_modify_board() -> None:
    b = Board.from_fen(BACK_RANK)
    before = b.copy()
    search(b, 2, score_material)
    assert b == before


def test_board_delegates_to_search() -> None:
    b = Board.from_fen(BACK_RANK)
    assert b.search(2, score_material) == search(b, 2, score_material)
    assert b.get_best_move(2, score_material) == get_best_move(b, 2, score_material)


def test_depth_zero_best_move_is_first_move() -> None:
    b = Board.new()
    assert get_best_move(b, 0, bogo_score) == b.generate_moves()[0]


def test_search_service_reports_result(caplog: pytest.LogCaptureFixture) -> None:
    svc = SearchService()
    b = Board.from_fen(BACK_RANK)
    with caplog.at_level(logging.INFO, logger="hourglass.search.service"):
        res = svc.best_move(b, 2, score_material)
    assert isinstance(res, SearchResult)
    assert res.best_move == get_best_move(b, 2, score_material)
    assert res.score == math.inf
    assert res.depth == 2
    assert res.nodes > len(b.generate_moves())
    assert res.time_ms >= 0
    assert any(r.getMessage() == "search finished" for r in caplog.records)


def test_search_service_without_moves() -> None:
    res = SearchService().best_move(Board.from_fen(STALEMATE), 2, score_material)
    assert res.best_move is None
    assert res.score == 0.0


def test_search_service_rejects_negative_depth() -> None:
    with pytest.raises(ValueError):
        SearchService().best_move(Board.new(), -1, score_material)


def test_negative_depth_rejected() -> None:
    b = Board.new()
    with pytest.raises(ValueError):
        search(b, -1, score_material)
    with pytest.raises(ValueError):
        get_best_move(b, -1, score_material)
    # Rejected even when there is nothing to search
    with pytest.raises(ValueError):
        get_best_move(Board.from_fen(STALEMATE), -1, score_material)
