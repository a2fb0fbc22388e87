"""
Chess opponent engine package.

This package implements the move-decision engine of an automated chess
opponent: a fixed-depth minimax search with alpha-beta pruning, a simple
material evaluation, scripted opening lines and an endgame bonus. The
rules of chess (move generation, make/undo, terminal states) come from
python-chess.

Modules:
    constants    — Piece values, pawn table, evaluation and endgame terms
    difficulty   — Difficulty levels and their per-game configuration
    evaluate     — Static position evaluation from one side's perspective
    opening_book — Opening line selection and lookup
    endgame      — Endgame pattern bonus for root moves
    search       — Minimax with alpha-beta pruning and cancellation
    selector     — MoveSelector, the per-game entry point
"""
