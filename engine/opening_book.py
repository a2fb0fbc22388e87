"""
Scripted opening lines.

Each difficulty owns a small catalog of named lines. One line is drawn at
random when a game starts and never changes afterwards; the move counter
(ply count of the game) is the only index into it. Entries are SAN strings
covering both sides' moves, so the engine only ever plays the entries that
fall on its own plies.

The book does not know the rules of chess. If the opponent left the line,
the scripted SAN may be illegal in the live position; the selector is
responsible for checking legality and falling back to search.
"""

import random
from typing import Protocol, Sequence, TypeVar

from engine.difficulty import Difficulty, OpeningLine, get_config

_T = TypeVar("_T")


class RandomSource(Protocol):
    """Anything with a random.Random-compatible choice() method."""

    def choice(self, seq: Sequence[_T]) -> _T: ...


def select_opening(
    difficulty: Difficulty | str,
    rng: RandomSource | None = None,
) -> OpeningLine:
    """
    Pick one opening line uniformly at random from the difficulty's catalog.

    Called once per game. Tests pass a seeded random.Random (or any object
    with a choice() method) to force a particular line.

    Args:
        difficulty: A Difficulty member or its string name.
        rng:        Random source; defaults to the module-level random.
    """
    catalog = get_config(difficulty).openings
    return (rng or random).choice(catalog)


def find_opening(difficulty: Difficulty | str, name: str) -> OpeningLine:
    """
    Look up an opening line of the difficulty's catalog by name.

    Raises:
        KeyError: No line with that name exists for this difficulty.
    """
    for line in get_config(difficulty).openings:
        if line.name == name:
            return line
    raise KeyError(name)


def book_move(line: OpeningLine | None, move_index: int) -> str | None:
    """Return the scripted SAN for ply move_index, or None past the end of line."""
    if line is None or not 0 <= move_index < len(line.moves):
        return None
    return line.moves[move_index]
