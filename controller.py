# Game controller: the only object the terminal front-end and benchmarks talk to.
from __future__ import annotations

from dataclasses import dataclass
import logging
import random

import numpy as np

# Support both package imports and running this file directly.
try:
    from .agent import AutopilotAgent
    from .game_logic import (
        DIRECTION_OFFSETS,
        MODE_ARCADE,
        MODE_AUTOPILOT,
        Position,
        SnakeConfig,
        SnakeGame,
    )
except ImportError:
    from agent import AutopilotAgent
    from game_logic import (
        DIRECTION_OFFSETS,
        MODE_ARCADE,
        MODE_AUTOPILOT,
        Position,
        SnakeConfig,
        SnakeGame,
    )


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Render-ready view of one frame; cells is a read-only [y, x] array of cell kinds."""
    width: int
    height: int
    cells: np.ndarray
    head: Position
    crash: Position | None
    score: int
    length: int
    steps: int
    interval_ms: int
    mode: str
    paused: bool
    game_over: bool
    won: bool


@dataclass(frozen=True)
class TickResult:
    snapshot: Snapshot
    interval_ms: int
    terminated: bool
    outcome: str | None  # None when the tick did not advance the game


class GameController:
    """Owns one SnakeGame and turns input/timer events into ticks."""

    def __init__(self, config: SnakeConfig, rng: random.Random | None = None) -> None:
        self.config = config
        self.game = SnakeGame(config, rng)
        self.autopilot = AutopilotAgent(config.fallback, self.game.rng) if config.mode == MODE_AUTOPILOT else None
        self.pending_direction: str | None = None
        self.paused = False
        self.quit_requested = False

    @property
    def terminated(self) -> bool:
        return self.game.game_over or self.quit_requested

    def request_direction(self, direction: str) -> None:
        """Queue a direction for the next tick; the last request before a tick wins."""
        if self.autopilot is not None or direction not in DIRECTION_OFFSETS:
            return
        self.pending_direction = direction

    def toggle_pause(self) -> None:
        """Pause/resume without touching the board."""
        if self.game.game_over:
            return
        self.paused = not self.paused

    def request_restart(self) -> None:
        self.game.reset()
        self.pending_direction = None
        self.paused = False

    def request_quit(self) -> None:
        self.quit_requested = True

    def adjust_interval(self, delta: int) -> int:
        """Manual speed change, bounded by the configured limits; arcade mode owns its own pace."""
        if self.config.mode != MODE_ARCADE:
            new_interval = self.game.interval_ms + delta
            new_interval = max(self.config.min_interval_ms, min(self.config.max_interval_ms, new_interval))
            self.game.interval_ms = new_interval
        return self.game.interval_ms

    def _advance(self) -> str:
        if self.autopilot is not None:
            direction = self.autopilot.select_direction(self.game)
        else:
            direction = self.pending_direction
        self.pending_direction = None
        outcome = self.game.step(direction)
        logger.debug("tick %d: %s (score=%d)", self.game.steps, outcome, self.game.score)
        return outcome

    def tick(self) -> TickResult:
        """Run one timer tick; paused or finished games are left untouched."""
        outcome = None
        if not self.paused and not self.terminated:
            outcome = self._advance()
        return self._result(outcome)

    def step(self) -> TickResult:
        """Advance exactly one tick while paused."""
        outcome = None
        if self.paused and not self.terminated:
            outcome = self._advance()
        return self._result(outcome)

    def _result(self, outcome: str | None) -> TickResult:
        return TickResult(self.snapshot(), self.game.interval_ms, self.terminated, outcome)

    def snapshot(self) -> Snapshot:
        game = self.game
        return Snapshot(
            width=game.grid.width,
            height=game.grid.height,
            cells=game.grid.copy_cells(),
            head=game.snake.head,
            crash=game.crash,
            score=game.score,
            length=len(game.snake),
            steps=game.steps,
            interval_ms=game.interval_ms,
            mode=self.config.mode,
            paused=self.paused,
            game_over=game.game_over,
            won=game.won,
        )
