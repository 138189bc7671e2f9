"""Run progression across levels: scoring completions, advancing and restarting.

A run is endless. Completing the last level scores it, then starts a new run
at level 1 with the total score cleared.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ballsort.logic.scoring import calculate_level_score
from ballsort.logic.types import LevelCompletion

if TYPE_CHECKING:
    import random

    from ballsort.logic.board import Board


def complete_level(board: Board, rng: random.Random | None = None) -> LevelCompletion:
    """Score a solved board and add the result to the run total.

    Must be called once per completion. When the completed level is the last
    one, the board is regenerated at level 1 with ``total_score`` reset.
    """
    if not board.is_complete:
        raise ValueError("board is not complete")

    level = board.level
    moves = board.moves
    seconds = board.elapsed_seconds()
    level_score = calculate_level_score(level, moves, seconds)
    board.total_score += level_score
    total_score = board.total_score

    game_reset = level >= board.rules.max_level
    if game_reset:
        board.total_score = 0
        board.generate(1, rng=rng)

    return LevelCompletion(
        level=level,
        moves=moves,
        time=seconds,
        level_score=level_score,
        total_score=total_score,
        game_reset=game_reset,
    )


def advance_level(board: Board, rng: random.Random | None = None) -> None:
    """Move on to the next level, keeping the run total."""
    board.generate(board.level + 1, rng=rng)


def restart_game(board: Board, rng: random.Random | None = None) -> None:
    """Abandon the run and start over at level 1."""
    board.total_score = 0
    board.generate(1, rng=rng)
