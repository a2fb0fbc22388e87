"""
Fixed-depth minimax search with alpha-beta pruning.

The search walks the game tree on the one live chess.Board, making each
move with push() and undoing it with pop(). Every push is paired with a
pop on every exit path (normal return, pruning break, exception), so the
board is identical before and after the top-level call.

Scores are from the perspective of one colour, White by default. That
colour's nodes maximize and its opponent's nodes minimize; the caller
passes the flag for the side to move at the node it searches. There is
no quiescence search, move ordering or transposition table: the opponent
is meant to be beatable, and depth is the difficulty knob.

Cancellation:
    A SearchState carries a stop event plus optional node and time budgets.
    Once the stop event is set, every node returns 0 immediately. Callers
    must check state.stop_event after a call and discard its result if the
    event fired.
"""

import math
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

import chess

from engine.constants import TIME_CHECK_NODES
from engine.evaluate import evaluate


@dataclass
class SearchState:
    """
    Mutable state for one AI turn.

    Attributes:
        stop_event:    Set by the caller (UCI "stop", a UI closing) or by the
                       search itself once a budget runs out.
        time_limit_ms: Wall-clock budget in milliseconds; inf disables it.
        node_limit:    Maximum number of nodes to visit; None disables it.
        node_count:    Nodes visited so far, for statistics and the budget.
        start_time:    Monotonic timestamp when the turn started.
    """

    stop_event: threading.Event = field(default_factory=threading.Event)
    time_limit_ms: float = float("inf")
    node_limit: int | None = None
    node_count: int = 0
    start_time: float = field(default_factory=time.monotonic)

    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.start_time) * 1000

    def should_stop(self) -> bool:
        """
        Count one node and report whether the search must stop.

        The clock is only read every TIME_CHECK_NODES nodes. Exceeding
        either budget sets stop_event, so every later call returns True.
        """
        if self.stop_event.is_set():
            return True

        self.node_count += 1

        if self.node_limit is not None and self.node_count > self.node_limit:
            self.stop_event.set()
            return True

        if self.node_count % TIME_CHECK_NODES == 0:
            if self.elapsed_ms() >= self.time_limit_ms:
                self.stop_event.set()
                return True

        return False


@contextmanager
def applied(board: chess.Board, move: chess.Move) -> Iterator[chess.Board]:
    """Push move for the duration of the with-block, then pop it."""
    board.push(move)
    try:
        yield board
    finally:
        board.pop()


def minimax(
    board: chess.Board,
    depth: int,
    maximizing: bool,
    alpha: float = -math.inf,
    beta: float = math.inf,
    state: SearchState | None = None,
    color: chess.Color = chess.WHITE,
) -> int:
    """
    Minimax value of board searched depth plies deep.

    Alpha-beta keeps the returned value identical to plain minimax: once
    beta <= alpha the remaining siblings cannot change the result seen by
    the caller, so they are skipped.

    Args:
        board:      Position to search. Modified in place during the
                    search and restored before returning.
        depth:      Remaining plies. At 0 the static evaluation is returned.
        maximizing: True when color is to move at this node.
        alpha:      Best score the maximizing side is already guaranteed.
        beta:       Best score the minimizing side is already guaranteed.
        state:      Optional cancellation state and node counter.
        color:      Side the scores are computed for.

    Returns:
        Score in centipawns from color's perspective. A node without legal
        moves (checkmate or stalemate) returns its static evaluation.
        Returns 0 once state.stop_event is set; the caller discards it.
    """
    if state is not None and state.should_stop():
        return 0

    if depth <= 0:
        return evaluate(board, color)

    moves = list(board.legal_moves)
    if not moves:
        return evaluate(board, color)

    if maximizing:
        best = -math.inf
        for move in moves:
            with applied(board, move):
                value = minimax(board, depth - 1, False, alpha, beta, state, color)
            best = max(best, value)
            alpha = max(alpha, value)
            if beta <= alpha:
                break
    else:
        best = math.inf
        for move in moves:
            with applied(board, move):
                value = minimax(board, depth - 1, True, alpha, beta, state, color)
            best = min(best, value)
            beta = min(beta, value)
            if beta <= alpha:
                break

    return int(best)
