"""
Static position evaluation: material, pawn placement and terminal terms.

The evaluator is deliberately simple. The opponent's strength is tuned by
search depth, not by evaluation quality, so the score only needs to tell
the search which side has more material and whether pawns are advancing.

The score is from one side's perspective, White unless a colour is given:
positive means that side is ahead. The search maximizes on that side's
plies and minimizes on its opponent's plies.
"""

import chess

from engine.constants import (
    CHECK_BONUS,
    CHECKMATE_BONUS,
    PAWN_TABLE,
    PIECE_VALUES,
)


def pawn_bonus(square: chess.Square, color: chess.Color) -> int:
    """
    Piece-square bonus for a pawn of the given colour standing on square.

    The table is written from the pawn owner's point of view, so a White
    pawn on e2 and a Black pawn on e7 receive the same bonus.
    """
    rank = chess.square_rank(square)
    row = 7 - rank if color == chess.WHITE else rank
    return PAWN_TABLE[row][chess.square_file(square)]


def evaluate(board: chess.Board, color: chess.Color = chess.WHITE) -> int:
    """
    Centipawn evaluation of board from color's perspective (White by default).

    Adds, for every piece, its material value plus (for pawns) the
    piece-square bonus, positive for color and negative for its opponent. Then
    adds CHECK_BONUS when the side to move is in check and CHECKMATE_BONUS
    when it is checkmated. Drawn positions get no extra term.

    The check and checkmate terms are flat: they are not negated when it is
    color that is in check, so a mated king of either colour raises the
    score by the same amount. This is the opponent's historical
    playing style and is pinned by tests.

    Args:
        board: The position to score. Not modified.
        color: Side whose material counts positively.

    Returns:
        Score in centipawns. Unbounded; only comparable to other scores
        produced during the same search.

    Example:
        >>> evaluate(chess.Board())
        0
    """
    total = 0

    for square, piece in board.piece_map().items():
        value = PIECE_VALUES[piece.piece_type]
        if piece.piece_type == chess.PAWN:
            value += pawn_bonus(square, piece.color)
        total += value if piece.color == color else -value

    # Checkmate implies check, so a mate scores both terms.
    if board.is_check():
        total += CHECK_BONUS
        if board.is_checkmate():
            total += CHECKMATE_BONUS

    return total
