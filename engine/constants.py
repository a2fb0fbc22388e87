"""
Engine constants: piece values, the pawn piece-square table, evaluation
terms, endgame bonuses and search parameters.

All numeric constants used throughout the engine are defined here so that
the evaluator, the endgame heuristic and the search never introduce their
own magic numbers. Tuning the opponent's style means editing this file.

Scores follow the centipawn convention (1 pawn = 100) and are always from
White's point of view: positive favours White, negative favours Black.
"""

import chess

# ---------------------------------------------------------------------------
# Piece values (centipawns)
# ---------------------------------------------------------------------------
# The king is counted like any other piece. Both kings are always on the
# board, so its value cancels out in every legal position.

PAWN_VALUE: int = 100
KNIGHT_VALUE: int = 320
BISHOP_VALUE: int = 330
ROOK_VALUE: int = 500
QUEEN_VALUE: int = 900
KING_VALUE: int = 20_000

PIECE_VALUES: dict[int, int] = {
    chess.PAWN:   PAWN_VALUE,
    chess.KNIGHT: KNIGHT_VALUE,
    chess.BISHOP: BISHOP_VALUE,
    chess.ROOK:   ROOK_VALUE,
    chess.QUEEN:  QUEEN_VALUE,
    chess.KING:   KING_VALUE,
}

# ---------------------------------------------------------------------------
# Pawn piece-square table
# ---------------------------------------------------------------------------
# Row 0 is the promotion rank as seen by the pawn's owner, row 7 its own
# back rank. Columns are files a..h. A White pawn on rank r (0-based) reads
# row 7 - r; a Black pawn reads row r, which mirrors the table vertically.

# fmt: off
PAWN_TABLE: tuple[tuple[int, ...], ...] = (
    ( 0,  0,   0,   0,   0,   0,  0,  0),
    (50, 50,  50,  50,  50,  50, 50, 50),
    (10, 10,  20,  30,  30,  20, 10, 10),
    ( 5,  5,  10,  25,  25,  10,  5,  5),
    ( 0,  0,   0,  20,  20,   0,  0,  0),
    ( 5, -5, -10,   0,   0, -10, -5,  5),
    ( 5, 10,  10, -20, -20,  10, 10,  5),
    ( 0,  0,   0,   0,   0,   0,  0,  0),
)
# fmt: on

# ---------------------------------------------------------------------------
# Terminal-state terms
# ---------------------------------------------------------------------------
# These are flat bonuses, added regardless of which side is in check or
# mated. See DESIGN.md ("Flat check/checkmate terms").

CHECK_BONUS: int = 50
CHECKMATE_BONUS: int = 10_000

# ---------------------------------------------------------------------------
# Endgame heuristic
# ---------------------------------------------------------------------------
# A position counts as an endgame once at most ENDGAME_PIECE_LIMIT pieces
# (kings included) remain on the board.

ENDGAME_PIECE_LIMIT: int = 10
PATTERN_MATE_BONUS: int = 500
PATTERN_CHECK_BONUS: int = 200
CENTER_CONTROL_BONUS: int = 50
CENTER_SQUARES: tuple[int, ...] = (chess.D4, chess.D5, chess.E4, chess.E5)

# ---------------------------------------------------------------------------
# Search parameters
# ---------------------------------------------------------------------------
# TIME_CHECK_NODES: how often (in nodes) the search reads the clock.
# Reading it at every node costs more than the evaluation itself.
TIME_CHECK_NODES: int = 1_024
