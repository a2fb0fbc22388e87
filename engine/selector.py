"""
Move selection: the single entry point the UI layers call once per AI turn.

A MoveSelector represents one game against the automated opponent. It
resolves the difficulty's configuration and draws the opening line once,
then owns the ply counter for the rest of the game.

Per turn, choose_move():
    1. reports game over (no move) if the position is already finished;
    2. plays the scripted opening move for the current ply, if there is
       one and it is legal in the live position;
    3. otherwise scores every legal move with minimax at depth - 1 plus the
       endgame bonus, and keeps the last move with the highest score;
    4. pushes the chosen move on the live board and advances the counter.
"""

import logging
import math
from dataclasses import dataclass

import chess

from engine.difficulty import Difficulty, OpeningLine, get_config
from engine.endgame import endgame_bonus
from engine.opening_book import RandomSource, book_move, select_opening
from engine.search import SearchState, applied, minimax

_log = logging.getLogger(__name__)


@dataclass
class MoveResult:
    """
    Outcome of one AI turn.

    Attributes:
        move:         The move played, or None when the game was already over.
        san:          move in SAN, computed before it was pushed.
        score:        Root score of move from the engine's perspective; None
                      for book moves and finished games.
        from_book:    True when move came from the opening line.
        move_count:   Ply counter after the turn.
        is_check, is_checkmate, is_draw, is_game_over:
                      Terminal-state flags of the position after the turn.
    """

    move: chess.Move | None
    san: str | None
    score: int | None
    from_book: bool
    move_count: int
    is_check: bool
    is_checkmate: bool
    is_draw: bool
    is_game_over: bool


def _is_draw(board: chess.Board) -> bool:
    """
    True when the current position is drawn.

    Only the position on the board counts: a legal move that would complete
    a threefold repetition does not make the game a draw yet.
    """
    return (
        board.is_stalemate()
        or board.is_insufficient_material()
        or board.is_repetition(3)
        or board.halfmove_clock >= 100
        or board.is_seventyfive_moves()
        or board.is_fivefold_repetition()
    )


def is_finished(board: chess.Board) -> bool:
    """True once the game is decided or the current position is drawn."""
    return board.is_game_over() or _is_draw(board)


class MoveSelector:
    """
    The automated opponent for one game.

    Attributes:
        difficulty:   The game's difficulty.
        config:       Search depth and catalogs, resolved once.
        opening_line: Opening line drawn at game start; never replaced.
        move_count:   Plies played so far by both sides. It is the only
                      index into opening_line.
    """

    def __init__(
        self,
        difficulty: Difficulty | str,
        opening_line: OpeningLine | None = None,
        move_count: int = 0,
        rng: RandomSource | None = None,
    ) -> None:
        self.difficulty = Difficulty(difficulty)
        self.config = get_config(self.difficulty)
        if opening_line is None:
            opening_line = select_opening(self.difficulty, rng)
        self.opening_line = opening_line
        self.move_count = move_count
        _log.debug(
            "new game: difficulty=%s depth=%d opening=%s",
            self.difficulty.value,
            self.config.search_depth,
            self.opening_line.name,
        )

    # -----------------------------------------------------------------------
    # Turns
    # -----------------------------------------------------------------------

    def play_player_move(
        self,
        board: chess.Board,
        from_square: chess.Square,
        to_square: chess.Square,
        promotion: chess.PieceType = chess.QUEEN,
    ) -> chess.Move:
        """
        Apply the human player's move and advance the ply counter.

        promotion is only used when the move takes a pawn to the last rank.

        Raises:
            chess.IllegalMoveError: No such legal move. Neither board nor
                                    counter is changed.
        """
        piece = board.piece_at(from_square)
        promotes = (
            piece is not None
            and piece.piece_type == chess.PAWN
            and chess.square_rank(to_square) in (0, 7)
        )
        move = chess.Move(from_square, to_square, promotion if promotes else None)
        if not board.is_legal(move):
            raise chess.IllegalMoveError(
                f"illegal move {move.uci()} in {board.fen()}"
            )
        board.push(move)
        self.move_count += 1
        return move

    def choose_move(
        self,
        board: chess.Board,
        state: SearchState | None = None,
    ) -> MoveResult:
        """
        Choose and play the engine's move on the live board.

        Args:
            board: The game position; the chosen move is pushed on it.
            state: Optional cancellation state (stop event, node and time
                   budgets). When the search is cut short, the best fully
                   scored root move is played.

        Returns:
            MoveResult for the turn. move is None when the game was already
            over; the counter is then unchanged.
        """
        if is_finished(board) or not any(board.legal_moves):
            _log.debug("game over: %s", board.fen())
            return self._result(board, None, None, None, from_book=False)

        move = self._book_move(board)
        if move is not None:
            return self._play(board, move, None, from_book=True)

        move, score = self._search_move(board, state or SearchState())
        return self._play(board, move, score, from_book=False)

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _book_move(self, board: chess.Board) -> chess.Move | None:
        san = book_move(self.opening_line, self.move_count)
        if san is None:
            return None
        try:
            return board.parse_san(san)
        except ValueError:
            _log.debug(
                "book move %s (%s, ply %d) rejected, searching instead",
                san,
                self.opening_line.name,
                self.move_count,
            )
            return None

    def _search_move(
        self,
        board: chess.Board,
        state: SearchState,
    ) -> tuple[chess.Move, int | None]:
        """
        Score every legal root move and return the last one with the top score.

        Every move is scored as minimax(child, depth - 1, False) plus the
        endgame bonus, with evaluations taken from the engine's colour, so
        the flat check and checkmate terms favour the engine whichever colour
        it plays. Ties go to the move enumerated last (>= comparison).
        """
        depth = self.config.search_depth
        patterns = self.config.endgame_patterns
        color = board.turn

        moves = list(board.legal_moves)
        best_move: chess.Move | None = None
        best_score = -math.inf

        for move in moves:
            bonus = endgame_bonus(board, move, patterns)
            with applied(board, move):
                value = minimax(
                    board, depth - 1, False, -math.inf, math.inf, state, color
                )
            if state.stop_event.is_set():
                _log.warning(
                    "search stopped after %d nodes, %.0f ms",
                    state.node_count,
                    state.elapsed_ms(),
                )
                break

            score = value + bonus
            if score >= best_score:
                best_score = score
                best_move = move

        _log.debug(
            "searched depth=%d nodes=%d best=%s score=%s",
            depth,
            state.node_count,
            best_move,
            best_score,
        )

        if best_move is None:
            return moves[0], None
        return best_move, int(best_score)

    def _play(
        self,
        board: chess.Board,
        move: chess.Move,
        score: int | None,
        from_book: bool,
    ) -> MoveResult:
        san = board.san(move)
        board.push(move)
        self.move_count += 1
        return self._result(board, move, san, score, from_book)

    def _result(
        self,
        board: chess.Board,
        move: chess.Move | None,
        san: str | None,
        score: int | None,
        from_book: bool,
    ) -> MoveResult:
        return MoveResult(
            move=move,
            san=san,
            score=score,
            from_book=from_book,
            move_count=self.move_count,
            is_check=board.is_check(),
            is_checkmate=board.is_checkmate(),
            is_draw=_is_draw(board),
            is_game_over=is_finished(board),
        )
