"""Client-facing views of game state.

Field names are camelCase on the wire; models are populated and accessed with
snake_case names in Python.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class BoardView(_WireModel):
    """Snapshot of a board sent after every state-changing request."""

    level: int
    moves: int
    columns: list[list[str]]
    selected_column: int | None
    elapsed_time: int
    is_complete: bool
    stack_height: int
    total_score: int


class LevelCompletion(_WireModel):
    """Outcome of solving a level.

    ``total_score`` is the run total including this level, even when
    ``game_reset`` is set and the board has already started a new run.
    """

    level: int
    moves: int
    time: int
    level_score: int
    total_score: int
    game_reset: bool
