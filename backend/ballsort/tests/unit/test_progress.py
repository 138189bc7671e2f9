import random

import pytest

from ballsort.logic.board import Board
from ballsort.logic.progress import advance_level, complete_level, restart_game
from ballsort.logic.scoring import calculate_level_score
from ballsort.logic.settings import GameRules


def _solved_board(level: int, *, moves: int = 5, total_score: int = 0, rules: GameRules | None = None) -> Board:
    board = Board.from_columns([["red"] * 3, ["blue"] * 3, []], level=level, stack_height=3, rules=rules)
    board.moves = moves
    board.total_score = total_score
    return board


class TestCompleteLevel:
    def test_incomplete_board_rejected(self):
        board = Board.new(1, rng=random.Random(1))
        with pytest.raises(ValueError, match="not complete"):
            complete_level(board)

    def test_adds_level_score_to_total(self):
        board = _solved_board(3, moves=8, total_score=1000)

        completion = complete_level(board)

        assert completion.level == 3
        assert completion.moves == 8
        assert completion.level_score == calculate_level_score(3, 8, completion.time)
        assert completion.total_score == 1000 + completion.level_score
        assert completion.game_reset is False
        assert board.total_score == completion.total_score
        assert board.level == 3

    def test_completing_last_level_starts_new_run(self):
        board = _solved_board(10, moves=40, total_score=5000)

        completion = complete_level(board, rng=random.Random(2))

        assert completion.game_reset is True
        assert completion.level == 10
        assert completion.total_score == 5000 + completion.level_score
        assert board.level == 1
        assert board.total_score == 0
        assert board.moves == 0
        assert board.is_complete is False
        assert board.column_count == 4

    def test_max_level_follows_rules(self):
        board = _solved_board(3, rules=GameRules(max_level=3))
        assert complete_level(board).game_reset is True
        assert board.level == 1

    def test_zero_move_completion_scores_zero(self):
        board = _solved_board(2, moves=0, total_score=10)

        completion = complete_level(board)

        assert completion.level_score == 0
        assert completion.total_score == 10

    def test_completion_uses_wire_field_names(self):
        data = complete_level(_solved_board(1)).model_dump(by_alias=True)
        assert set(data) == {"level", "moves", "time", "levelScore", "totalScore", "gameReset"}


class TestAdvanceAndRestart:
    def test_advance_level_keeps_total_score(self):
        board = _solved_board(4, total_score=900)

        advance_level(board, rng=random.Random(3))

        assert board.level == 5
        assert board.total_score == 900
        assert board.moves == 0
        assert board.stack_height == 8

    def test_restart_returns_to_level_one_and_clears_score(self):
        board = _solved_board(6, total_score=900)

        restart_game(board, rng=random.Random(4))

        assert board.level == 1
        assert board.total_score == 0
        assert board.ball_count == 12
