#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import os
import sys
import time
from typing import Dict

# Allow running this script directly via `python scripts/perft.py`
# by adding the repo root (which contains `hourglass/`) to sys.path.
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from hourglass.engine.board import Board
from hourglass.engine.fen import STARTPOS_FEN
from hourglass.engine.perft import perft, perft_divide


def reference_divide(fen: str, depth: int) -> Dict[str, int]:
    """Divide counts from python-chess, used to locate move generator bugs."""
    try:
        import chess
    except ImportError:
        print(
            "Missing dependency: chess. Please install it (e.g., pip install chess)",
            file=sys.stderr,
        )
        raise

    board = chess.Board(fen)
    out: Dict[str, int] = {}
    for mv in board.legal_moves:
        board.push(mv)
        out[mv.uci()] = _reference_perft(board, depth - 1)
        board.pop()
    return out


def _reference_perft(board, depth: int) -> int:
    if depth == 0:
        return 1
    nodes = 0
    for mv in board.legal_moves:
        board.push(mv)
        nodes += _reference_perft(board, depth - 1)
        board.pop()
    return nodes


def main() -> None:
    parser = argparse.ArgumentParser(description="Run perft on a given FEN and depth")
    parser.add_argument(
        "--fen", type=str, default=STARTPOS_FEN, help="FEN string (default: startpos)"
    )
    parser.add_argument("--depth", type=int, default=3, help="Perft depth (default: 3)")
    parser.add_argument(
        "--divide", action="store_true", help="Print node counts per root move"
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Compare per-root-move counts against python-chess",
    )
    args = parser.parse_args()

    board = Board.from_fen(args.fen)
    start = time.perf_counter()
    if args.divide or args.verify:
        divide = perft_divide(board, args.depth)
        nodes = sum(divide.values())
    else:
        divide = {}
        nodes = perft(board, args.depth)
    dt = time.perf_counter() - start

    if args.divide:
        for uci in sorted(divide):
            print(f"{uci}: {divide[uci]}")
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")

    if args.verify:
        expected = reference_divide(args.fen, args.depth)
        mismatched = sorted(set(divide) | set(expected))
        bad = [uci for uci in mismatched if divide.get(uci) != expected.get(uci)]
        for uci in bad:
            print(f"MISMATCH {uci}: engine={divide.get(uci)} reference={expected.get(uci)}")
        if bad:
            sys.exit(1)
        print("verify: ok")


if __name__ == "__main__":
    main()
