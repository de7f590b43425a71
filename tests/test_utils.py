from __future__ import annotations

import numpy as np
import pytest

from compare_strategies import compare_strategies
from game_logic import ADVANCED, ATE_FOOD, MODE_NORMAL, SnakeConfig
from utils import chunked_stat, make_controller, run_episode, summarize_scores


def test_chunked_stat_handles_short_last_chunk():
    x_end, means = chunked_stat([1, 2, 3, 4, 5], 2)
    assert x_end.tolist() == [2.0, 4.0, 5.0]
    assert means.tolist() == [1.5, 3.5, 5.0]

    _, medians = chunked_stat([5, 1, 3, 9], 4, np.median)
    assert medians.tolist() == [4.0]


def test_chunked_stat_validates_input():
    with pytest.raises(ValueError):
        chunked_stat([1.0], 0)
    x_end, values = chunked_stat([], 3)
    assert x_end.size == 0 and values.size == 0


def test_summarize_scores():
    summary = summarize_scores([1, 2, 3, 4])
    assert summary["Mean score"] == pytest.approx(2.5)
    assert summary["Max score"] == 4.0
    assert summary["Min score"] == 1.0
    with pytest.raises(ValueError):
        summarize_scores([])


def test_make_controller_forces_autopilot():
    controller = make_controller(SnakeConfig(mode=MODE_NORMAL, obstacles=False), seed=1)
    assert controller.autopilot is not None


def test_run_episode_is_reproducible():
    config = SnakeConfig(grid_width=10, grid_height=8)
    first = run_episode(config, max_steps=300, seed=12)
    second = run_episode(config, max_steps=300, seed=12)
    assert first == second
    assert 0 < first.steps <= 300
    assert first.length == 3 + first.score


def test_run_episode_stops_at_max_steps():
    result = run_episode(SnakeConfig(obstacles=False), max_steps=5, seed=3)
    assert result.steps == 5
    assert result.outcome in (ADVANCED, ATE_FOOD)
    assert not result.won

    with pytest.raises(ValueError):
        run_episode(SnakeConfig(), max_steps=0)


def test_compare_strategies_prints_table(capsys):
    config = SnakeConfig(grid_width=8, grid_height=6)
    scores1, scores2 = compare_strategies("open_space", "clearance", config, num_games=2, max_steps=150)
    assert len(scores1) == len(scores2) == 2
    out = capsys.readouterr().out
    assert "COMPARISON RESULTS" in out
    assert "Head-to-head" in out

    with pytest.raises(ValueError):
        compare_strategies("open_space", "wander", config, num_games=1)
