import chess
import pytest

from engine.difficulty import OpeningLine
from engine.evaluate import evaluate
from engine.search import SearchState
from engine.selector import MoveSelector

# Past the end of every opening line, so every move is searched.
NO_BOOK = 100

ROOK_MATE = "7k/p1pp4/6K1/8/8/8/2PPP3/1R6 w - - 0 1"
# Mirror image for Black: Rb1 is mate.
BLACK_ROOK_MATE = "1r6/2ppp3/8/8/8/6k1/P1PP4/7K b - - 0 1"
FOOLS_MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"


class PickIndex:
    def __init__(self, index: int) -> None:
        self.index = index

    def choice(self, seq):
        return seq[self.index]


class TestOpeningBook:

    def test_first_move_comes_from_opening_line(self):
        board = chess.Board()
        selector = MoveSelector("easy", rng=PickIndex(0))
        assert selector.opening_line.name == "King's Pawn"

        result = selector.choose_move(board)

        assert result.move == chess.Move.from_uci("e2e4")
        assert result.san == "e4"
        assert result.from_book
        assert result.score is None
        assert result.move_count == 1
        assert board.move_stack == [chess.Move.from_uci("e2e4")]

    def test_book_move_on_black_ply(self):
        board = chess.Board()
        board.push_san("e4")
        selector = MoveSelector("easy", rng=PickIndex(0), move_count=1)
        result = selector.choose_move(board)
        assert result.san == "e5"
        assert result.from_book

    def test_illegal_book_move_falls_back_to_search(self):
        board = chess.Board()
        legal = list(board.legal_moves)
        selector = MoveSelector("easy", opening_line=OpeningLine("Broken", ("Qh5",)))

        result = selector.choose_move(board)

        assert not result.from_book
        assert result.move in legal
        assert result.score is not None
        assert result.move_count == 1

    def test_exhausted_line_falls_back_to_search(self):
        board = chess.Board()
        board.push_san("e4")
        line = OpeningLine("English Opening", ("c4",))
        selector = MoveSelector("easy", opening_line=line, move_count=1)
        result = selector.choose_move(board)
        assert not result.from_book

    def test_opening_line_is_fixed_for_the_game(self):
        board = chess.Board()
        selector = MoveSelector("intermediate", rng=PickIndex(0))
        line = selector.opening_line

        selector.choose_move(board)
        selector.play_player_move(board, chess.E7, chess.E5)
        result = selector.choose_move(board)

        assert selector.opening_line is line
        assert result.san == "Nf3"
        assert selector.move_count == board.ply() == 3


class TestSearchSelection:

    def test_ties_go_to_last_enumerated_move(self):
        # Only king moves are legal and none of them changes the evaluation.
        board = chess.Board("b6k/8/8/p1p1p1p1/P1P1P1P1/8/8/7K w - - 0 1")
        moves = list(board.legal_moves)
        assert len(moves) >= 2
        scores = set()
        for move in moves:
            board.push(move)
            scores.add(evaluate(board))
            board.pop()
        assert len(scores) == 1

        result = MoveSelector("easy", move_count=NO_BOOK).choose_move(board)

        assert result.move == moves[-1]
        assert result.move != moves[0]

    def test_single_legal_move_is_played(self):
        board = chess.Board("k7/8/8/8/8/8/1q6/K7 w - - 0 1")
        assert list(board.legal_moves) == [chess.Move.from_uci("a1b2")]
        result = MoveSelector("hard", move_count=NO_BOOK).choose_move(board)
        assert result.move == chess.Move.from_uci("a1b2")

    def test_mating_move_includes_pattern_and_checkmate_terms(self):
        board = chess.Board(ROOK_MATE)
        result = MoveSelector("easy", move_count=NO_BOOK).choose_move(board)

        assert result.move == chess.Move.from_uci("b1b8")
        assert result.is_checkmate
        assert result.is_game_over
        # Two easy patterns, each +500 for the mate.
        assert result.score == evaluate(board) + 1000
        assert result.score >= 10_000 + 500

    def test_black_mating_move_includes_pattern_and_checkmate_terms(self):
        board = chess.Board(BLACK_ROOK_MATE)
        result = MoveSelector("easy", move_count=NO_BOOK).choose_move(board)

        assert result.move == chess.Move.from_uci("b8b1")
        assert result.is_checkmate
        assert result.score == evaluate(board, chess.BLACK) + 1000
        assert result.score >= 10_000 + 500

    def test_black_engine_scores_from_its_own_side(self):
        board = chess.Board("4k3/3q4/8/8/R7/8/8/4K3 b - - 0 1")
        result = MoveSelector("easy", move_count=NO_BOOK).choose_move(board)
        assert result.move == chess.Move.from_uci("d7a4")

    def test_white_engine_wins_material(self):
        board = chess.Board("4k3/8/8/8/r7/8/8/3QK3 w - - 0 1")
        result = MoveSelector("intermediate", move_count=NO_BOOK).choose_move(board)
        assert result.move == chess.Move.from_uci("d1a4")

    @pytest.mark.parametrize("difficulty", ["easy", "intermediate"])
    @pytest.mark.parametrize(
        "fen",
        [
            chess.STARTING_FEN,
            "r1bqkb1r/pppp1ppp/2n2n2/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 4 4",
            "r1bqkbnr/pppp1ppp/2n5/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R b KQkq - 3 3",
            ROOK_MATE,
        ],
    )
    def test_chosen_move_is_legal(self, difficulty, fen):
        board = chess.Board(fen)
        legal = list(board.legal_moves)
        result = MoveSelector(difficulty, move_count=NO_BOOK).choose_move(board)
        assert result.move in legal
        assert board.move_stack[-1] == result.move
        assert board.fen() != fen

    def test_search_leaves_only_the_chosen_move_on_the_board(self):
        board = chess.Board()
        board.push_san("d4")
        result = MoveSelector("intermediate", move_count=NO_BOOK).choose_move(board)
        assert board.move_stack == [chess.Move.from_uci("d2d4"), result.move]

    def test_cancelled_search_still_plays_a_legal_move(self):
        board = chess.Board()
        first = next(iter(board.legal_moves))
        state = SearchState(node_limit=5)

        result = MoveSelector("hard", move_count=NO_BOOK).choose_move(board, state)

        assert state.stop_event.is_set()
        assert result.move == first
        assert result.score is None
        assert result.move_count == NO_BOOK + 1


class TestGameOver:

    def test_checkmated_side_gets_no_move(self):
        board = chess.Board(FOOLS_MATE)
        selector = MoveSelector("easy", move_count=4)

        result = selector.choose_move(board)

        assert result.move is None
        assert result.san is None
        assert result.is_checkmate
        assert result.is_check
        assert result.is_game_over
        assert not result.is_draw
        assert result.move_count == 4
        assert board.fen() == FOOLS_MATE

    def test_stalemate_is_a_draw(self):
        board = chess.Board("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
        result = MoveSelector("easy", move_count=NO_BOOK).choose_move(board)
        assert result.move is None
        assert result.is_draw
        assert result.is_game_over
        assert not result.is_checkmate

    def test_insufficient_material_is_game_over(self):
        board = chess.Board("7k/8/8/8/8/8/8/K7 w - - 0 1")
        result = MoveSelector("easy", move_count=NO_BOOK).choose_move(board)
        assert result.move is None
        assert result.is_draw

    def test_threefold_repetition_ends_the_game(self):
        board = chess.Board()
        for san in ("Nf3", "Nf6", "Ng1", "Ng8", "Nf3", "Nf6", "Ng1", "Ng8"):
            board.push_san(san)
        result = MoveSelector("easy", move_count=8).choose_move(board)
        assert result.move is None
        assert result.is_draw
        assert result.is_game_over
        assert not result.is_checkmate

    def test_fifty_move_rule_ends_the_game(self):
        board = chess.Board("4k3/8/8/8/8/8/8/R3K3 w - - 100 80")
        result = MoveSelector("easy", move_count=NO_BOOK).choose_move(board)
        assert result.move is None
        assert result.is_draw


class TestPlayerMove:

    def test_player_move_advances_counter(self):
        board = chess.Board()
        selector = MoveSelector("easy")
        move = selector.play_player_move(board, chess.E2, chess.E4)
        assert move == chess.Move.from_uci("e2e4")
        assert selector.move_count == 1

    def test_illegal_player_move_changes_nothing(self):
        board = chess.Board()
        selector = MoveSelector("easy")
        with pytest.raises(chess.IllegalMoveError):
            selector.play_player_move(board, chess.E2, chess.E5)
        assert selector.move_count == 0
        assert board == chess.Board()

    def test_promotion_defaults_to_queen(self):
        board = chess.Board("8/P6k/8/8/8/8/8/K7 w - - 0 1")
        move = MoveSelector("easy").play_player_move(board, chess.A7, chess.A8)
        assert move.promotion == chess.QUEEN
        assert board.piece_at(chess.A8) == chess.Piece(chess.QUEEN, chess.WHITE)

    def test_underpromotion(self):
        board = chess.Board("8/P6k/8/8/8/8/8/K7 w - - 0 1")
        move = MoveSelector("easy").play_player_move(board, chess.A7, chess.A8, chess.KNIGHT)
        assert move.promotion == chess.KNIGHT

    def test_promotion_piece_ignored_for_ordinary_moves(self):
        board = chess.Board()
        move = MoveSelector("easy").play_player_move(board, chess.G1, chess.F3, chess.ROOK)
        assert move == chess.Move.from_uci("g1f3")


class TestGameInProgress:
    """A draw that could be claimed on the next move does not end the game."""

    def test_repetition_available_next_move_is_played_on(self):
        board = chess.Board()
        for san in ("Nf3", "Nf6", "Ng1", "Ng8", "Nf3", "Nf6", "Ng1"):
            board.push_san(san)
        assert board.can_claim_draw()

        result = MoveSelector("easy", move_count=NO_BOOK).choose_move(board)

        assert result.move is not None
        assert result.move_count == NO_BOOK + 1

    def test_fifty_move_rule_one_ply_away_is_played_on(self):
        board = chess.Board("4k3/8/8/8/8/8/8/R3K3 w - - 99 80")
        assert board.can_claim_draw()

        result = MoveSelector("easy", move_count=NO_BOOK).choose_move(board)

        assert result.move in chess.Board("4k3/8/8/8/8/8/8/R3K3 w - - 99 80").legal_moves
