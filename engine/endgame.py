"""
Endgame pattern heuristic.

Once the board is sparse, the selector adds a bonus to each root move that
checks or mates in a copy of the position, plus a small bonus for Black
pieces standing on the four central squares. The bonus is counted once per
pattern in the difficulty's catalog, so catalogs with more patterns push
harder toward forcing moves.

The bonus is only ever computed at the root. It replays the candidate move
on a private copy of the board and never touches the live search position.
"""

import logging
from typing import Iterable

import chess

from engine.constants import (
    CENTER_CONTROL_BONUS,
    CENTER_SQUARES,
    ENDGAME_PIECE_LIMIT,
    PATTERN_CHECK_BONUS,
    PATTERN_MATE_BONUS,
)
from engine.difficulty import EndgamePattern

_log = logging.getLogger(__name__)


def piece_count(board: chess.Board) -> int:
    """Number of pieces on the board, kings included."""
    return chess.popcount(board.occupied)


def is_endgame(board: chess.Board) -> bool:
    """True once at most ENDGAME_PIECE_LIMIT pieces remain."""
    return piece_count(board) <= ENDGAME_PIECE_LIMIT


def _center_bonus(board: chess.Board) -> int:
    return CENTER_CONTROL_BONUS * sum(
        1 for sq in CENTER_SQUARES if board.color_at(sq) == chess.BLACK
    )


def endgame_bonus(
    board: chess.Board,
    move: chess.Move,
    patterns: Iterable[EndgamePattern],
) -> int:
    """
    Bonus for playing move from board, summed over patterns.

    Returns 0 immediately unless the position is an endgame. For each
    pattern the move is replayed (by SAN, as a user would enter it) on an
    independent copy of board. If the replay is rejected, that pattern
    contributes nothing. Otherwise the pattern contributes
    PATTERN_MATE_BONUS on checkmate or PATTERN_CHECK_BONUS on check, plus
    CENTER_CONTROL_BONUS per central square held by Black after the move.

    Args:
        board:    Position before move. Not modified.
        move:     Candidate root move.
        patterns: The difficulty's endgame catalog.

    Returns:
        Non-negative bonus in centipawns.
    """
    if not is_endgame(board):
        return 0

    if not board.is_legal(move):
        _log.debug("endgame: %s is not legal in %s", move, board.fen())
        return 0
    san = board.san(move)

    bonus = 0
    for pattern in patterns:
        simulated = chess.Board(board.fen())
        try:
            simulated.push_san(san)
        except ValueError:
            _log.debug("endgame: %s skipped, %s rejected", pattern.name, san)
            continue

        if simulated.is_checkmate():
            bonus += PATTERN_MATE_BONUS
        elif simulated.is_check():
            bonus += PATTERN_CHECK_BONUS
        bonus += _center_bonus(simulated)

    return bonus
