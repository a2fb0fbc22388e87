"""
FastAPI web application for the chess opponent.

Exposes the engine's single caller-facing operation over HTTP: "apply the
player's move (if any), then choose and play the opponent's move for this
position, difficulty and move count". The response carries the applied
move and the terminal-state flags a board UI needs for display.

Architecture notes:
- Sync endpoints (not async): FastAPI runs sync handlers in a thread pool,
  which is the correct pattern for CPU-bound blocking calls like search.
- Stateless per request: the client sends the FEN, the ply counter and the
  name of the game's opening line each time. The first request of a game
  omits the opening; the server draws one and returns it for the client
  to echo back, so the line is chosen once per game.
"""

import logging
from typing import Literal

import chess
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, field_validator

from engine.difficulty import Difficulty, get_config
from engine.opening_book import find_opening
from engine.search import SearchState
from engine.selector import MoveSelector

# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

logging.basicConfig(level=logging.INFO)
_log = logging.getLogger(__name__)

app = FastAPI(title="Chess Opponent", version="1.0.0")

_PROMOTIONS = {
    "q": chess.QUEEN,
    "r": chess.ROOK,
    "b": chess.BISHOP,
    "n": chess.KNIGHT,
}


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class PlayerMove(BaseModel):
    """
    The human player's move, as produced by a drag-and-drop board.

    Fields:
        from_square: Source square name, e.g. "e2".
        to_square:   Destination square name, e.g. "e4".
        promotion:   Piece a pawn promotes to on the last rank; ignored for
                     any other move.
    """

    from_square: str
    to_square: str
    promotion: Literal["q", "r", "b", "n"] = "q"

    @field_validator("from_square", "to_square")
    @classmethod
    def check_square(cls, v: str) -> str:
        """Reject anything that is not a square name."""
        v = v.lower()
        if v not in chess.SQUARE_NAMES:
            raise ValueError(f"not a square: {v!r}")
        return v


class MoveRequest(BaseModel):
    """
    Client request to the opponent.

    Fields:
        fen:         Full FEN of the current position.
        difficulty:  easy, intermediate or hard.
        move_count:  Plies played so far in this game by both sides.
        opening:     Name of the game's opening line; omitted on the first
                     request of a game.
        player_move: Optional player move applied before the engine replies.
        time_limit:  Seconds allowed for the engine's search, clamped to
                     [0.1, 30.0]. When it runs out, the best move scored so
                     far is played.
    """

    fen: str = chess.STARTING_FEN
    difficulty: Difficulty = Difficulty.EASY
    move_count: int = Field(default=0, ge=0)
    opening: str | None = None
    player_move: PlayerMove | None = None
    time_limit: float = 10.0

    @field_validator("time_limit")
    @classmethod
    def clamp_time_limit(cls, v: float) -> float:
        """Clamp time_limit to a safe operating range."""
        return max(0.1, min(v, 30.0))


class MoveResponse(BaseModel):
    """
    Outcome of the engine's turn.

    Fields:
        move:       Engine move in UCI notation, or None if the game is over.
        san:        Engine move in SAN.
        fen:        Position after the engine's move.
        move_count: Ply counter after the engine's move.
        opening:    The game's opening line, to be echoed back.
        from_book:  Whether the move came from the opening line.
        score:      Root score of the move from the engine's perspective.
        check, checkmate, draw, game_over: Flags of the resulting position.
    """

    move: str | None
    san: str | None
    fen: str
    move_count: int
    opening: str
    from_book: bool
    score: int | None
    check: bool
    checkmate: bool
    draw: bool
    game_over: bool


class OpeningInfo(BaseModel):
    name: str
    moves: list[str]


# ---------------------------------------------------------------------------
# API routes
# ---------------------------------------------------------------------------


@app.post("/api/move", response_model=MoveResponse)
def api_move(request: MoveRequest) -> MoveResponse:
    """
    Apply the player's move (if given) and play the engine's reply.

    Returns:
        MoveResponse. A finished game is not an error: move is None and the
        terminal flags are set.

    Raises:
        HTTPException 400: Malformed FEN, unknown opening or illegal player
                           move.
        HTTPException 500: The engine failed unexpectedly.
    """
    try:
        board = chess.Board(request.fen)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid FEN: {exc}") from exc

    opening_line = None
    if request.opening is not None:
        try:
            opening_line = find_opening(request.difficulty, request.opening)
        except KeyError as exc:
            raise HTTPException(
                status_code=400,
                detail=f"Unknown opening for {request.difficulty.value}: {request.opening}",
            ) from exc

    selector = MoveSelector(
        request.difficulty,
        opening_line=opening_line,
        move_count=request.move_count,
    )

    if request.player_move is not None:
        pm = request.player_move
        try:
            selector.play_player_move(
                board,
                chess.parse_square(pm.from_square),
                chess.parse_square(pm.to_square),
                _PROMOTIONS[pm.promotion],
            )
        except chess.IllegalMoveError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    state = SearchState(time_limit_ms=request.time_limit * 1000)
    try:
        result = selector.choose_move(board, state)
    except Exception as exc:
        _log.exception("Engine search failed for FEN=%s", board.fen())
        raise HTTPException(status_code=500, detail=f"Engine error: {exc}") from exc

    _log.info(
        "difficulty=%s move=%s book=%s score=%s nodes=%d fen=%s",
        request.difficulty.value,
        result.move.uci() if result.move else None,
        result.from_book,
        result.score,
        state.node_count,
        board.fen()[:40],
    )

    return MoveResponse(
        move=result.move.uci() if result.move else None,
        san=result.san,
        fen=board.fen(),
        move_count=result.move_count,
        opening=selector.opening_line.name,
        from_book=result.from_book,
        score=result.score,
        check=result.is_check,
        checkmate=result.is_checkmate,
        draw=result.is_draw,
        game_over=result.is_game_over,
    )


@app.get("/api/openings/{difficulty}", response_model=list[OpeningInfo])
def api_openings(difficulty: Difficulty) -> list[OpeningInfo]:
    """List the opening lines a game at this difficulty may draw."""
    return [
        OpeningInfo(name=line.name, moves=list(line.moves))
        for line in get_config(difficulty).openings
    ]
