"""Level score calculation.

A level is worth more the bigger the board and the fewer moves and seconds it
took to solve:

    level_score = round(total_balls * 10000 / (moves * 0.25 * max(seconds, 1)))

where ``total_balls = (level + 3 - 1) * (level + 3)``. The ball count here is
derived from the level alone and is not clamped to the maximum grid size.
"""

import math

from ballsort.logic.settings import GRID_SIZE_OFFSET

SCORE_SCALE = 10000
MOVE_WEIGHT = 0.25


def total_balls_for_level(level: int) -> int:
    grid_size = level + GRID_SIZE_OFFSET
    return (grid_size - 1) * grid_size


def calculate_level_score(level: int, moves: int, elapsed_seconds: int) -> int:
    """Score a completed level.

    A level cannot be solved without moving a ball, so ``moves == 0`` scores 0
    instead of dividing by zero. Elapsed time is floored at one second.
    """
    if moves <= 0:
        return 0
    seconds = max(elapsed_seconds, 1)
    raw = total_balls_for_level(level) * SCORE_SCALE / (moves * MOVE_WEIGHT * seconds)
    # round half up; the builtin round() would round half to even
    return math.floor(raw + 0.5)
