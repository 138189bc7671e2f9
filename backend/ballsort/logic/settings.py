"""Gameplay rules for the ball sorting puzzle."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

MAX_LEVEL = 10  # completing this level starts a new run at level 1
MAX_GRID_SIZE = 10
GRID_SIZE_OFFSET = 3  # level 1 plays on a 4x4 grid

# Enough distinct colors for the largest grid (MAX_GRID_SIZE - 1 colored columns).
BALL_COLORS = (
    "red",
    "blue",
    "green",
    "yellow",
    "purple",
    "orange",
    "pink",
    "cyan",
    "lime",
    "magenta",
)


class MoveRule(StrEnum):
    """Which destination columns accept a ball."""

    ANY = "any"  # any non-full column, regardless of color
    MATCH_TOP = "match_top"  # empty column, or top ball of the same color


class GameRules(BaseModel):
    """Rules a board is generated and played under."""

    model_config = ConfigDict(frozen=True)

    move_rule: MoveRule = MoveRule.ANY
    max_level: int = MAX_LEVEL


def grid_size_for_level(level: int) -> int:
    """Return the column count (and column capacity) used for a level."""
    if level < 1:
        raise ValueError(f"level must be >= 1, got {level}")
    return min(level + GRID_SIZE_OFFSET, MAX_GRID_SIZE)
