# Terminal Snake front-end: key mapping, tick timing and drawing on top of GameController.
from __future__ import annotations

import logging
import random
import time

from blessed import Terminal
from blessed.keyboard import Keystroke

# Support both package imports and running this file directly.
try:
    from .controller import GameController, Snapshot
    from .game_logic import BODY, FOOD, OBSTACLE, SnakeConfig
except ImportError:
    from controller import GameController, Snapshot
    from game_logic import BODY, FOOD, OBSTACLE, SnakeConfig


logger = logging.getLogger(__name__)

SPEED_STEP_MS = 10
HEADER_ROWS = 1


def max_grid_size(term: Terminal) -> tuple[int, int]:
    """Largest grid that fits the terminal: two columns per cell plus the border box."""
    return (term.width - 2) // 2, term.height - 2 - HEADER_ROWS


class SnakeTUI:
    """Blessed presentation layer for GameController; redraws the whole board every frame."""

    DIRECTION_KEYS = {
        "KEY_UP": "up",
        "KEY_DOWN": "down",
        "KEY_LEFT": "left",
        "KEY_RIGHT": "right",
        "w": "up",
        "s": "down",
        "a": "left",
        "d": "right",
    }

    def __init__(self, config: SnakeConfig, term: Terminal | None = None, seed: int | None = None) -> None:
        self.term = term or Terminal()
        self.config = config
        self.controller = GameController(config, random.Random(seed))

    def _symbol(self, kind: int) -> str:
        term = self.term
        if kind == BODY:
            return term.green("██")
        if kind == FOOD:
            return term.yellow("██")
        if kind == OBSTACLE:
            return term.white("▓▓")
        return "  "

    def _origin(self, snap: Snapshot) -> tuple[int, int]:
        """Top-left corner of the border box so the board is centered."""
        x_adjust = max(0, (self.term.width - (snap.width * 2 + 2)) // 2)
        y_adjust = max(HEADER_ROWS, (self.term.height - (snap.height + 2)) // 2)
        return x_adjust, y_adjust

    def handle_key(self, key: Keystroke) -> None:
        """Translate one keystroke into a controller call."""
        ctrl = self.controller
        name = key.name if key.is_sequence else str(key).lower()
        if name in self.DIRECTION_KEYS:
            ctrl.request_direction(self.DIRECTION_KEYS[name])
        elif name in ("q", "KEY_ESCAPE"):
            ctrl.request_quit()
        elif name == " ":
            ctrl.toggle_pause()
        elif name == ".":
            ctrl.step()
        elif name == "r":
            ctrl.request_restart()
        elif name == "+":
            ctrl.adjust_interval(-SPEED_STEP_MS)
        elif name == "-":
            ctrl.adjust_interval(SPEED_STEP_MS)

    def draw(self, snap: Snapshot) -> None:
        """Render border, cells, crash marker and the status line."""
        term = self.term
        x0, y0 = self._origin(snap)
        inner = snap.width * 2
        out = [term.home + term.clear]

        steps = f"Steps: {snap.steps}  Score: {snap.score}"
        length = f"Snake length: {snap.length}"
        out.append(term.move_xy(x0, y0 - 1) + steps)
        out.append(term.move_xy(x0 + inner + 2 - len(length), y0 - 1) + length)

        out.append(term.move_xy(x0, y0) + term.magenta("╔" + "═" * inner + "╗"))
        for y in range(snap.height):
            row = "".join(self._symbol(int(kind)) for kind in snap.cells[y])
            out.append(term.move_xy(x0, y0 + 1 + y) + term.magenta("║") + row + term.magenta("║"))
        out.append(term.move_xy(x0, y0 + snap.height + 1) + term.magenta("╚" + "═" * inner + "╝"))

        if snap.crash is not None:
            cx, cy = snap.crash
            out.append(term.move_xy(x0 + 1 + cx * 2, y0 + 1 + cy) + term.red_on_white("××"))

        status = f"{snap.mode}  {snap.interval_ms} ms"
        if snap.won:
            status += "  BOARD CLEARED - r restarts, q quits"
        elif snap.game_over:
            status += "  GAME OVER - r restarts, q quits"
        elif snap.paused:
            status += "  PAUSED - space resumes, . steps"
        out.append(term.move_xy(x0, y0 + snap.height + 2) + status)
        print("".join(out), end="", flush=True)

    def run(self) -> None:
        """Single-threaded loop: wait for a key until the next tick is due, then tick."""
        term = self.term
        ctrl = self.controller
        with term.fullscreen(), term.cbreak(), term.hidden_cursor():
            self.draw(ctrl.snapshot())
            next_tick = time.monotonic() + ctrl.game.interval_ms / 1000
            while not ctrl.quit_requested:
                key = term.inkey(timeout=max(0.0, next_tick - time.monotonic()))
                if key:
                    self.handle_key(key)
                    self.draw(ctrl.snapshot())
                if time.monotonic() >= next_tick:
                    result = ctrl.tick()
                    if result.outcome is not None:
                        self.draw(result.snapshot)
                    next_tick = time.monotonic() + result.interval_ms / 1000
        logger.info("quit with score %d after %d steps", ctrl.game.score, ctrl.game.steps)


def run_terminal_game(config: SnakeConfig, seed: int | None = None, term: Terminal | None = None) -> None:
    """Launch the terminal Snake game."""
    SnakeTUI(config, term, seed).run()
