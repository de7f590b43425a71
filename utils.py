# Shared helpers: headless autopilot runs and per-chunk score summaries.
from __future__ import annotations

from dataclasses import dataclass, replace
import random
from typing import Callable

import numpy as np

# Support both package imports and running this file directly.
try:
    from .controller import GameController
    from .game_logic import MODE_AUTOPILOT, SnakeConfig
except ImportError:
    from controller import GameController
    from game_logic import MODE_AUTOPILOT, SnakeConfig


@dataclass
class EpisodeResult:
    score: int
    length: int
    steps: int
    outcome: str | None
    won: bool


def make_controller(config: SnakeConfig, seed: int | None = None) -> GameController:
    """Autopilot controller for config, seeded for reproducible boards."""
    if config.mode != MODE_AUTOPILOT:
        config = replace(config, mode=MODE_AUTOPILOT)
    return GameController(config, random.Random(seed))


def run_episode(config: SnakeConfig, max_steps: int, seed: int | None = None) -> EpisodeResult:
    """Let the autopilot play one round until it ends or max_steps ticks pass."""
    if max_steps <= 0:
        raise ValueError("max_steps must be > 0")

    controller = make_controller(config, seed)
    outcome = None
    for _ in range(max_steps):
        result = controller.tick()
        outcome = result.outcome
        if result.terminated:
            break

    game = controller.game
    return EpisodeResult(score=game.score, length=len(game.snake), steps=game.steps, outcome=outcome, won=game.won)


def chunked_stat(
    values: list[float],
    chunk_size: int,
    stat: Callable[[np.ndarray], float] = np.mean,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Summarize values per fixed-size chunk (the last chunk may be shorter).
    Returns (x_end, summary): the running count at each chunk end and stat(chunk).
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be > 0")

    arr = np.asarray(values, dtype=np.float32)
    if arr.size == 0:
        empty = np.array([], dtype=np.float32)
        return empty, empty

    x_end: list[float] = []
    summary: list[float] = []
    for start in range(0, arr.size, chunk_size):
        chunk = arr[start : start + chunk_size]
        x_end.append(float(start + chunk.size))
        summary.append(float(stat(chunk)))

    return np.asarray(x_end, dtype=np.float32), np.asarray(summary, dtype=np.float32)


def summarize_scores(scores: list[float]) -> dict[str, float]:
    """Headline statistics for a list of per-game scores."""
    arr = np.asarray(scores, dtype=np.float32)
    if arr.size == 0:
        raise ValueError("scores must not be empty")
    return {
        "Mean score": float(arr.mean()),
        "Median score": float(np.median(arr)),
        "Max score": float(arr.max()),
        "Min score": float(arr.min()),
        "Std dev": float(arr.std()),
        "25th percentile": float(np.percentile(arr, 25)),
        "75th percentile": float(np.percentile(arr, 75)),
    }
