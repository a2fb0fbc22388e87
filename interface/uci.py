"""
UCI (Universal Chess Interface) protocol handler.

UCI is the standard text-based protocol that allows chess GUIs and testing
tools (like cutechess-cli) to play against an engine. The handler reads
commands from stdin and writes responses to stdout. All output lines must
be flushed immediately; GUIs read line by line.

Protocol overview:
    GUI → Engine: uci, isready, setoption, ucinewgame, position, go, stop, quit
    Engine → GUI: id name, id author, option, uciok, readyok, info, bestmove

Options:
    Difficulty  combo easy | intermediate | hard. Changing it starts a new
                game (new opening line).
    NodeLimit   spin, 0 = unlimited. Caps the nodes searched per move.

Threading model:
    The UCI loop runs on the main thread and never blocks on the search.
    "go" spawns a daemon thread that runs the selector on a copy of the
    board. "stop" sets the shared stop event; the selector then plays the
    best move it has fully scored.

Critical rule: NEVER print to stdout except for valid UCI responses.
Diagnostics go to stderr through logging.
"""

import logging
import os
import sys
import threading

# ---------------------------------------------------------------------------
# Path setup: make 'engine' importable when this script is run directly
# (`python interface/uci.py` from the repo root).
# ---------------------------------------------------------------------------
_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

import chess

from engine.difficulty import Difficulty
from engine.search import SearchState
from engine.selector import MoveSelector

_log = logging.getLogger(__name__)

ENGINE_NAME = "ChessOpponent"
ENGINE_AUTHOR = "Chess Opponent Project"


def _send(line: str) -> None:
    """Write a line to stdout and flush immediately."""
    print(line, flush=True)


class UciHandler:
    """
    Stateful handler for the UCI protocol.

    Attributes:
        board:         The current position, updated by "position" commands.
        difficulty:    The Difficulty option.
        node_limit:    The NodeLimit option (None = unlimited).
        selector:      The MoveSelector for the current game. Replaced on
                       "ucinewgame" and when the difficulty changes.
        search_thread: The active search thread, or None.
        stop_event:    Event shared with the search thread.
    """

    def __init__(self, difficulty: Difficulty | str = Difficulty.EASY) -> None:
        self.board: chess.Board = chess.Board()
        self.difficulty = Difficulty(difficulty)
        self.node_limit: int | None = None
        self.selector = MoveSelector(self.difficulty)
        self.search_thread: threading.Thread | None = None
        self.stop_event: threading.Event = threading.Event()

    # -----------------------------------------------------------------------
    # Command handlers
    # -----------------------------------------------------------------------

    def handle_uci(self) -> None:
        """Identify the engine and list its options."""
        _send(f"id name {ENGINE_NAME}")
        _send(f"id author {ENGINE_AUTHOR}")
        levels = " ".join(f"var {d.value}" for d in Difficulty)
        _send(
            f"option name Difficulty type combo default {self.difficulty.value} {levels}"
        )
        _send("option name NodeLimit type spin default 0 min 0 max 100000000")
        _send("uciok")

    def handle_isready(self) -> None:
        _send("readyok")

    def handle_setoption(self, tokens: list[str]) -> None:
        """
        Parse "setoption name <Name> value <Value>".

        Unknown option names are logged and ignored.
        """
        if "name" not in tokens:
            return
        name_idx = tokens.index("name") + 1
        value_idx = tokens.index("value") if "value" in tokens else len(tokens)
        name = " ".join(tokens[name_idx:value_idx]).lower()
        value = " ".join(tokens[value_idx + 1:])

        if name == "difficulty":
            try:
                self.difficulty = Difficulty(value.lower())
            except ValueError:
                _log.error("uci: unknown difficulty %r", value)
                return
            self.handle_ucinewgame()
        elif name == "nodelimit":
            try:
                limit = int(value)
            except ValueError:
                _log.error("uci: NodeLimit must be an integer, got %r", value)
                return
            self.node_limit = limit if limit > 0 else None
        else:
            _log.warning("uci: ignoring unknown option %r", name)

    def handle_ucinewgame(self) -> None:
        """Start a new game: new board, new selector, new opening line."""
        self._stop_search()
        self.board = chess.Board()
        self.selector = MoveSelector(self.difficulty)

    def handle_position(self, tokens: list[str]) -> None:
        """
        Parse and apply a "position" command.

        Command formats:
            position startpos [moves e2e4 e7e5 ...]
            position fen <FEN> [moves e2e4 e7e5 ...]

        The selector's ply counter is resynchronised to the position's ply
        number, so the opening line stays aligned with the game. A running
        search is stopped first; it shares that counter.
        """
        self._stop_search()

        try:
            if not tokens:
                return

            if tokens[0] == "startpos":
                board = chess.Board()
                move_tokens = tokens[2:] if len(tokens) > 1 and tokens[1] == "moves" else []
            elif tokens[0] == "fen":
                if "moves" in tokens:
                    moves_idx = tokens.index("moves")
                    fen = " ".join(tokens[1:moves_idx])
                    move_tokens = tokens[moves_idx + 1:]
                else:
                    fen = " ".join(tokens[1:])
                    move_tokens = []
                board = chess.Board(fen)
            else:
                _log.error("uci: unknown position type: %s", tokens[0])
                return

            for uci_move in move_tokens:
                move = chess.Move.from_uci(uci_move)
                if move in board.legal_moves:
                    board.push(move)
                else:
                    _log.error("uci: illegal move in position command: %s", uci_move)
                    break

        except ValueError as e:
            _log.error("uci: error in position command: %s", e)
            return

        self.board = board
        self.selector.move_count = board.ply()

    def handle_go(self, tokens: list[str]) -> None:
        """
        Start choosing a move in a background thread.

        Time controls (movetime, wtime/btime/winc/binc) become the search's
        wall-clock budget; the NodeLimit option becomes its node budget.
        """
        self._stop_search()

        self.stop_event = threading.Event()
        state = SearchState(
            stop_event=self.stop_event,
            time_limit_ms=float(self._parse_go_time(tokens)),
            node_limit=self.node_limit,
        )
        board_copy = self.board.copy()
        selector = self.selector

        def search_and_reply() -> None:
            try:
                result = selector.choose_move(board_copy, state)
                if result.move is None:
                    _send("bestmove (none)")
                    return
                elapsed_ms = max(1, int(state.elapsed_ms()))
                nps = state.node_count * 1000 // elapsed_ms
                score = f" score cp {result.score}" if result.score is not None else ""
                _send(
                    f"info depth {selector.config.search_depth}{score} "
                    f"nodes {state.node_count} nps {nps} time {elapsed_ms}"
                )
                _send(f"bestmove {result.move.uci()}")
            except Exception:
                _log.exception("search error")
                _send("bestmove (none)")

        self.search_thread = threading.Thread(target=search_and_reply, daemon=True)
        self.search_thread.start()

    def handle_stop(self) -> None:
        self._stop_search()

    def handle_quit(self) -> None:
        self._stop_search()
        sys.exit(0)

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _stop_search(self) -> None:
        """
        Signal the current search thread to stop and wait for it to exit.

        The join timeout keeps the loop responsive if the thread misbehaves.
        """
        self.stop_event.set()
        if self.search_thread is not None and self.search_thread.is_alive():
            self.search_thread.join(timeout=2.0)
        self.search_thread = None

    def _parse_go_time(self, tokens: list[str]) -> float:
        """
        Extract the time budget in milliseconds from "go" command tokens.

        Supports:
            movetime <ms>
            wtime <ms> btime <ms> [winc <ms> binc <ms>]
                        1/40 of the remaining time plus the increment

        Anything else ("go", "go infinite", "go depth N") is unbounded: the
        opponent searches its fixed depth until done or stopped.
        """
        params: dict[str, int] = {}
        i = 0
        while i < len(tokens) - 1:
            key = tokens[i]
            try:
                params[key] = int(tokens[i + 1])
                i += 2
            except (ValueError, IndexError):
                i += 1

        if "movetime" in params:
            return params["movetime"]

        color = self.board.turn
        time_key = "wtime" if color == chess.WHITE else "btime"
        inc_key = "winc" if color == chess.WHITE else "binc"

        if time_key in params:
            time_left = params[time_key]
            increment = params.get(inc_key, 0)
            return max(1, time_left // 40 + increment)

        return float("inf")


def dispatch(handler: UciHandler, line: str) -> None:
    """
    Dispatch one input line to handler.

    Errors are logged and swallowed so a bug in one command handler does
    not crash the engine mid-game.
    """
    tokens = line.split()
    if not tokens:
        return
    command, args = tokens[0], tokens[1:]

    try:
        if command == "uci":
            handler.handle_uci()
        elif command == "isready":
            handler.handle_isready()
        elif command == "setoption":
            handler.handle_setoption(args)
        elif command == "ucinewgame":
            handler.handle_ucinewgame()
        elif command == "position":
            handler.handle_position(args)
        elif command == "go":
            handler.handle_go(args)
        elif command == "stop":
            handler.handle_stop()
        elif command == "quit":
            handler.handle_quit()
        else:
            # Unknown commands are ignored per the UCI specification.
            _log.debug("uci: ignoring unknown command: %r", command)
    except Exception:
        _log.exception("uci: unhandled error for command %r", command)


def run_uci_loop() -> None:
    """
    Main UCI protocol loop.

    Reads lines from stdin until "quit" or end of input.
    """
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    handler = UciHandler()

    for raw_line in sys.stdin:
        dispatch(handler, raw_line.strip())

    handler.handle_stop()


if __name__ == "__main__":
    run_uci_loop()
