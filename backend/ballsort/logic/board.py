"""Ball sorting board: generation, move legality and completion.

Columns are stacks of color names with the top ball last. A level with grid
size ``n`` has ``n - 1`` columns filled with ``n`` shuffled balls each plus one
empty column. Balls are only ever moved between columns, never created or
destroyed.
"""

from __future__ import annotations

import math
import random
import secrets
import time
from dataclasses import dataclass, field

from ballsort.logic.settings import BALL_COLORS, GameRules, MoveRule, grid_size_for_level
from ballsort.logic.types import BoardView

_system_random = secrets.SystemRandom()


@dataclass
class Board:
    rules: GameRules = field(default_factory=GameRules)
    level: int = 1
    columns: list[list[str]] = field(default_factory=list)
    stack_height: int = 0
    moves: int = 0
    selected_column: int | None = None
    start_time: float = 0.0
    completed_at: float | None = None
    is_complete: bool = False
    total_score: int = 0

    @classmethod
    def new(cls, level: int = 1, rules: GameRules | None = None, rng: random.Random | None = None) -> Board:
        """Create a board with a freshly generated level."""
        board = cls(rules=rules or GameRules())
        board.generate(level, rng=rng)
        return board

    @classmethod
    def from_columns(
        cls,
        columns: list[list[str]],
        *,
        level: int = 1,
        stack_height: int | None = None,
        rules: GameRules | None = None,
    ) -> Board:
        """Build a board around a fixed layout (puzzle fixtures, tests)."""
        board = cls(
            rules=rules or GameRules(),
            level=level,
            columns=[list(column) for column in columns],
            stack_height=stack_height if stack_height is not None else len(columns),
            start_time=time.time(),
        )
        board.check_complete()
        return board

    @property
    def column_count(self) -> int:
        return len(self.columns)

    @property
    def ball_count(self) -> int:
        return sum(len(column) for column in self.columns)

    def generate(self, level: int, rng: random.Random | None = None) -> None:
        """Replace the board with a new shuffled layout for ``level``.

        Resets moves, selection, completion and the timer. ``total_score`` is
        left alone; callers decide whether a run continues.
        """
        grid_size = grid_size_for_level(level)
        num_colors = grid_size - 1

        balls = [color for color in BALL_COLORS[:num_colors] for _ in range(grid_size)]
        (rng or _system_random).shuffle(balls)

        self.level = level
        self.stack_height = grid_size
        self.columns = [balls[i * grid_size : (i + 1) * grid_size] for i in range(num_colors)]
        self.columns.append([])
        self.moves = 0
        self.selected_column = None
        self.is_complete = False
        self.completed_at = None
        self.start_time = time.time()

    def _in_range(self, index: int) -> bool:
        return 0 <= index < len(self.columns)

    def can_move(self, from_column: int, to_column: int) -> bool:
        """Check whether the top ball of ``from_column`` may go onto ``to_column``."""
        if from_column == to_column:
            return False
        if not self._in_range(from_column) or not self._in_range(to_column):
            return False

        source = self.columns[from_column]
        target = self.columns[to_column]
        if not source:
            return False
        if len(target) >= self.stack_height:
            return False
        if self.rules.move_rule == MoveRule.MATCH_TOP and target:
            return target[-1] == source[-1]
        return True

    def move(self, from_column: int, to_column: int) -> bool:
        """Move one ball if legal. Return False (and change nothing) otherwise."""
        if not self.can_move(from_column, to_column):
            return False

        self.columns[to_column].append(self.columns[from_column].pop())
        self.moves += 1
        if self.check_complete() and self.completed_at is None:
            self.completed_at = time.time()
        return True

    def check_complete(self) -> bool:
        """Recompute and cache whether every ball is sorted.

        Complete means every non-empty column is full of a single color and at
        least one column is empty.
        """
        has_empty = False
        for column in self.columns:
            if not column:
                has_empty = True
                continue
            if len(column) != self.stack_height or any(ball != column[0] for ball in column):
                self.is_complete = False
                return False
        self.is_complete = has_empty
        return self.is_complete

    def select_column(self, column: int | None) -> bool:
        """Set the highlighted column. Out-of-range indexes are refused."""
        if column is not None and not self._in_range(column):
            return False
        self.selected_column = column
        return True

    def elapsed_seconds(self) -> int:
        """Whole seconds spent on this level, frozen once it is complete."""
        end = self.completed_at if self.completed_at is not None else time.time()
        return max(0, math.floor(end - self.start_time))

    def snapshot(self) -> BoardView:
        return BoardView(
            level=self.level,
            moves=self.moves,
            columns=[list(column) for column in self.columns],
            selected_column=self.selected_column,
            elapsed_time=self.elapsed_seconds(),
            is_complete=self.is_complete,
            stack_height=self.stack_height,
            total_score=self.total_score,
        )
