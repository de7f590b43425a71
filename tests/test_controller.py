from __future__ import annotations

import random

import pytest

from controller import GameController
from game_logic import (
    ADVANCED,
    ATE_FOOD,
    BODY,
    COLLIDED,
    MODE_ARCADE,
    MODE_AUTOPILOT,
    SnakeConfig,
)


@pytest.fixture
def controller(open_config):
    return GameController(open_config, random.Random(3))


def test_scenario_through_controller(controller):
    controller.game.place_food((15, 7))
    outcomes = []
    for _ in range(5):
        controller.request_direction("right")
        outcomes.append(controller.tick().outcome)
    assert outcomes == [ADVANCED] * 4 + [ATE_FOOD]
    snap = controller.snapshot()
    assert snap.length == 4
    assert snap.score == 1
    assert snap.head == (15, 7)


def test_reverse_request_keeps_heading(controller):
    controller.game.place_food((0, 0))
    controller.request_direction("right")
    controller.tick()
    controller.request_direction("left")
    result = controller.tick()
    assert result.outcome == ADVANCED
    assert result.snapshot.head == (12, 7)
    assert controller.game.snake.direction == "right"


def test_last_request_before_tick_wins(controller):
    controller.game.place_food((0, 0))
    controller.request_direction("up")
    controller.request_direction("down")
    controller.request_direction("sideways")
    controller.tick()
    assert controller.game.snake.head == (10, 8)


def test_pause_suspends_ticks_and_step_advances_once(controller):
    controller.game.place_food((0, 0))
    controller.toggle_pause()
    result = controller.tick()
    assert result.outcome is None
    assert result.snapshot.paused
    assert controller.game.steps == 0

    stepped = controller.step()
    assert stepped.outcome == ADVANCED
    assert controller.game.steps == 1
    assert controller.paused

    controller.toggle_pause()
    assert controller.step().outcome is None
    assert controller.tick().outcome == ADVANCED


def test_game_over_cannot_be_paused_or_advanced(controller):
    controller.game.grid.place_obstacle((11, 7))
    result = controller.tick()
    assert result.outcome == COLLIDED
    assert result.terminated
    assert result.snapshot.game_over
    assert result.snapshot.crash == (11, 7)

    controller.toggle_pause()
    assert not controller.paused
    assert controller.tick().outcome is None


def test_restart_reinitializes_round(controller):
    controller.game.place_food((11, 7))
    controller.tick()
    controller.toggle_pause()
    controller.request_restart()
    snap = controller.snapshot()
    assert snap.score == 0
    assert not snap.game_over
    assert not snap.paused
    assert snap.length == 3
    assert snap.head == (10, 7)


def test_quit_terminates(controller):
    controller.request_quit()
    result = controller.tick()
    assert result.terminated
    assert result.outcome is None


def test_adjust_interval_is_bounded(controller):
    assert controller.adjust_interval(-1000) == controller.config.min_interval_ms
    assert controller.adjust_interval(50) == controller.config.min_interval_ms + 50
    assert controller.adjust_interval(1000) == controller.config.max_interval_ms
    assert controller.tick().interval_ms == controller.config.max_interval_ms


def test_arcade_interval_only_changes_on_food():
    config = SnakeConfig(obstacles=False, mode=MODE_ARCADE, interval_ms=100)
    controller = GameController(config, random.Random(8))
    assert controller.adjust_interval(-20) == 100

    controller.game.place_food((12, 7))
    first = controller.tick()
    assert first.outcome == ADVANCED
    assert first.interval_ms == 100
    second = controller.tick()
    assert second.outcome == ATE_FOOD
    assert second.interval_ms < 100


def test_autopilot_ignores_player_input_and_reaches_food():
    config = SnakeConfig(obstacles=False, mode=MODE_AUTOPILOT)
    controller = GameController(config, random.Random(4))
    controller.game.place_food((10, 2))
    controller.request_direction("down")
    result = controller.tick()
    assert result.snapshot.head == (10, 6)

    for _ in range(4):
        result = controller.tick()
    assert result.outcome == ATE_FOOD
    assert result.snapshot.score == 1


@pytest.mark.parametrize("fallback", ["open_space", "clearance"])
def test_autopilot_round_keeps_invariants(fallback, consistency):
    config = SnakeConfig(mode=MODE_AUTOPILOT, fallback=fallback)
    controller = GameController(config, random.Random(21))
    previous_length = len(controller.game.snake)
    previous_score = 0
    for _ in range(400):
        result = controller.tick()
        if result.outcome != COLLIDED:
            consistency(controller.game)
        if result.outcome == ATE_FOOD:
            assert result.snapshot.length == previous_length + 1
            assert result.snapshot.score == previous_score + 1
        elif result.outcome == ADVANCED:
            assert result.snapshot.length == previous_length
        previous_length = result.snapshot.length
        previous_score = result.snapshot.score
        if result.terminated:
            break
    assert controller.game.score >= 1


def test_snapshot_is_a_read_only_copy(controller):
    snap = controller.snapshot()
    assert snap.cells.shape == (15, 20)
    assert int((snap.cells == BODY).sum()) == snap.length
    assert not snap.cells.flags.writeable
    controller.game.place_food((0, 0))
    controller.tick()
    assert snap.steps == 0
