from __future__ import annotations

import random

import pytest

from game_logic import BODY, FOOD, Snake, SnakeConfig, SnakeGame


def install_snake(game: SnakeGame, positions, direction: str) -> None:
    """Swap the game's snake for one at positions, keeping the grid in sync."""
    for pos in game.snake:
        game.grid.clear(pos)
    game.snake = Snake(positions, direction)
    for pos in positions:
        game.grid.mark_body(pos)


def assert_consistent(game: SnakeGame) -> None:
    body = list(game.snake)
    assert len(body) == len(set(body))
    for a, b in zip(body, body[1:]):
        assert abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1
    assert set(game.grid.cells_of(BODY)) == set(body)
    if not game.game_over:
        assert game.grid.cells_of(FOOD) == [game.food]


@pytest.fixture
def open_config() -> SnakeConfig:
    return SnakeConfig(grid_width=20, grid_height=15, obstacles=False)


@pytest.fixture
def open_game(open_config: SnakeConfig) -> SnakeGame:
    return SnakeGame(open_config, random.Random(7))


@pytest.fixture
def installer():
    return install_snake


@pytest.fixture
def consistency():
    return assert_consistent
