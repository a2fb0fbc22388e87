"""
Difficulty levels and their per-game configuration.

Each difficulty maps to exactly one DifficultyConfig record: the fixed
search depth, the catalog of scripted opening lines and the catalog of
endgame patterns. The selector resolves the record once when a game starts
and never looks the difficulty up again.
"""

from dataclasses import dataclass
from enum import Enum


class Difficulty(str, Enum):
    EASY = "easy"
    INTERMEDIATE = "intermediate"
    HARD = "hard"


@dataclass(frozen=True)
class OpeningLine:
    """A named sequence of opening moves in standard algebraic notation."""

    name: str
    moves: tuple[str, ...]


@dataclass(frozen=True)
class EndgamePattern:
    """
    A known mating configuration.

    Attributes:
        name:   Identifier such as "rook_king_mate".
        pieces: Minimal piece set as FEN letters (upper case White, lower
                case Black), e.g. ("k", "r", "K").
    """

    name: str
    pieces: tuple[str, ...]


@dataclass(frozen=True)
class DifficultyConfig:
    """
    Everything a game needs to know about its difficulty.

    Attributes:
        search_depth:     Plies searched from the root (the root move
                          itself counts as the first ply).
        openings:         Catalog the game's opening line is drawn from.
        endgame_patterns: Patterns summed by the endgame bonus.
    """

    search_depth: int
    openings: tuple[OpeningLine, ...]
    endgame_patterns: tuple[EndgamePattern, ...]


DIFFICULTY_CONFIGS: dict[Difficulty, DifficultyConfig] = {
    Difficulty.EASY: DifficultyConfig(
        search_depth=1,
        openings=(
            OpeningLine("King's Pawn", ("e4", "e5")),
            OpeningLine("Queen's Pawn", ("d4", "d5")),
            OpeningLine("English Opening", ("c4",)),
        ),
        endgame_patterns=(
            EndgamePattern("rook_king_mate", ("k", "r", "K")),
            EndgamePattern("queen_mate", ("k", "q", "K")),
        ),
    ),
    Difficulty.INTERMEDIATE: DifficultyConfig(
        search_depth=2,
        openings=(
            OpeningLine("Ruy Lopez", ("e4", "e5", "Nf3", "Nc6", "Bb5")),
            OpeningLine("Sicilian Defense", ("e4", "c5")),
            OpeningLine("French Defense", ("e4", "e6")),
        ),
        endgame_patterns=(
            EndgamePattern("two_bishops_mate", ("k", "b", "b", "K")),
            EndgamePattern("rook_bishop_mate", ("k", "r", "b", "K")),
        ),
    ),
    Difficulty.HARD: DifficultyConfig(
        search_depth=3,
        openings=(
            OpeningLine("Queen's Gambit", ("d4", "d5", "c4")),
            OpeningLine("King's Indian Defense", ("d4", "Nf6", "c4", "g6")),
            OpeningLine("Caro-Kann Defense", ("e4", "c6")),
        ),
        endgame_patterns=(
            EndgamePattern("queen_knight_mate", ("k", "q", "n", "K")),
            EndgamePattern("rook_knight_mate", ("k", "r", "n", "K")),
        ),
    ),
}


def get_config(difficulty: Difficulty | str) -> DifficultyConfig:
    """
    Return the configuration record for difficulty.

    Accepts a Difficulty member or its lowercase name.

    Raises:
        ValueError: difficulty is not one of easy, intermediate, hard.
    """
    return DIFFICULTY_CONFIGS[Difficulty(difficulty)]
