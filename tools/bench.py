#!/usr/bin/env python3
"""
Benchmark: nodes searched and time per move at each difficulty.

Runs the selector over a fixed set of positions with the opening book
disabled (the ply counter is placed past every opening line), so every
move comes from search. A lower node count at the same depth means more
effective pruning.

Usage: python3 tools/bench.py [easy|intermediate|hard ...]
"""
import os
import sys

REPO = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO not in sys.path:
    sys.path.insert(0, REPO)

import chess

from engine.difficulty import Difficulty
from engine.search import SearchState
from engine.selector import MoveSelector

# Past the end of every opening line.
NO_BOOK_PLY = 100

# Fixed forever, so numbers stay comparable between changes.
POSITIONS = [
    ("Start",        chess.STARTING_FEN),
    ("Sicilian",     "rnbqkbnr/pp1ppppp/8/2p5/4P3/8/PPPP1PPP/RNBQKBNR w KQkq c6 0 2"),
    ("Italian",      "r1bqkbnr/pppp1ppp/2n5/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R b KQkq - 3 3"),
    ("Mid-open",     "r1bqkb1r/pppp1ppp/2n2n2/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 4 4"),
    ("Rook mate",    "7k/p1pp4/6K1/8/8/8/2PPP3/1R6 w - - 0 1"),
    ("Queen ending", "6k1/ppp2ppp/8/3p4/3P4/8/PPP2PPP/6K1 w - - 0 1"),
    ("Pawn race",    "8/1p4k1/p7/P1K5/8/8/8/8 w - - 0 1"),
]


def run_position(label: str, fen: str, difficulty: Difficulty) -> dict:
    """Choose one move for fen and return its metrics."""
    board = chess.Board(fen)
    selector = MoveSelector(difficulty, move_count=NO_BOOK_PLY)
    state = SearchState()
    result = selector.choose_move(board, state)
    return {
        "label": label,
        "move": result.san or "(none)",
        "score": result.score if result.score is not None else 0,
        "nodes": state.node_count,
        "time_ms": int(state.elapsed_ms()),
    }


def main(argv: list[str]) -> None:
    """Run all benchmark positions and print a summary table per difficulty."""
    levels = [Difficulty(a) for a in argv] or list(Difficulty)

    for difficulty in levels:
        print(f"Difficulty: {difficulty.value}")
        print(f"{'Position':<14} {'Move':<7} {'Score':>7} {'Nodes':>9} {'Time(ms)':>9}")
        print("-" * 50)
        total_nodes = total_ms = 0
        for label, fen in POSITIONS:
            r = run_position(label, fen, difficulty)
            total_nodes += r["nodes"]
            total_ms += r["time_ms"]
            print(
                f"{r['label']:<14} {r['move']:<7} {r['score']:>7} "
                f"{r['nodes']:>9,} {r['time_ms']:>9,}"
            )
        print("-" * 50)
        print(f"{'TOTAL':<14} {'':<7} {'':>7} {total_nodes:>9,} {total_ms:>9,}")
        print()


if __name__ == "__main__":
    main(sys.argv[1:])
