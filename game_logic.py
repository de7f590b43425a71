# Core Snake game state and rules, independent from terminal/autopilot code.
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import logging
import random
from typing import Iterable, Iterator, Sequence

import numpy as np


logger = logging.getLogger(__name__)

Position = tuple[int, int]

# Bounds used by the CLI when validating user input.
MIN_GRID_SIZE = 5
MAX_GRID_SIZE = 200
MIN_INTERVAL_MS = 30
MAX_INTERVAL_MS = 300
DEFAULT_INTERVAL_MS = 175
ARCADE_STEP_MS = 5
MIN_INITIAL_LENGTH = 1
OBSTACLE_DENSITY = 50  # one obstacle per this many cells
OBSTACLE_ATTEMPTS_PER_CELL = 20

ACTIONS = ("up", "down", "left", "right")
REVERSE_DIRECTION = {"up": "down", "down": "up", "left": "right", "right": "left"}
DIRECTION_OFFSETS = {"up": (0, -1), "down": (0, 1), "left": (-1, 0), "right": (1, 0)}

EMPTY = 0
OBSTACLE = 1
FOOD = 2
BODY = 3

MODE_NORMAL = "normal"
MODE_ARCADE = "arcade"
MODE_AUTOPILOT = "autopilot"
MODES = (MODE_NORMAL, MODE_ARCADE, MODE_AUTOPILOT)

ADVANCED = "advanced"
ATE_FOOD = "ate_food"
COLLIDED = "collided"
BOARD_FULL = "board_full"
TERMINAL_OUTCOMES = (COLLIDED, BOARD_FULL)

FALLBACK_NAMES = ("open_space", "clearance", "random")


class SnakeError(Exception):
    """Base class for errors raised by the game core."""


class InvalidConfiguration(SnakeError):
    """A configuration value is out of range; carries the offending field name."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class NoSpaceAvailable(SnakeError):
    """No empty cell is left for placement."""


def offset(pos: Position, direction: str) -> Position:
    """Translate a position by one tile in the given direction."""
    dx, dy = DIRECTION_OFFSETS[direction]
    return pos[0] + dx, pos[1] + dy


def direction_between(src: Position, dst: Position) -> str:
    """Direction of the single step from src to an adjacent dst."""
    delta = (dst[0] - src[0], dst[1] - src[1])
    for direction, step in DIRECTION_OFFSETS.items():
        if step == delta:
            return direction
    raise ValueError(f"{src} and {dst} are not adjacent")


@dataclass
class SnakeConfig:
    """Runtime settings shared between the core, the CLI and the terminal front-end."""
    grid_width: int = 20
    grid_height: int = 15
    interval_ms: int = DEFAULT_INTERVAL_MS
    mode: str = MODE_NORMAL
    obstacles: bool = True
    obstacle_count: int | None = None  # None derives the count from the grid area
    initial_length: int = 3
    min_interval_ms: int = MIN_INTERVAL_MS
    max_interval_ms: int = MAX_INTERVAL_MS
    arcade_step_ms: int = ARCADE_STEP_MS
    fallback: str = "open_space"

    def validate(self) -> None:
        """Raise InvalidConfiguration naming the first field that is out of range."""
        for name in ("grid_width", "grid_height"):
            value = getattr(self, name)
            if not (MIN_GRID_SIZE <= value <= MAX_GRID_SIZE):
                raise InvalidConfiguration(name, f"must be between {MIN_GRID_SIZE} and {MAX_GRID_SIZE}, got {value}")
        if self.min_interval_ms <= 0:
            raise InvalidConfiguration("min_interval_ms", "must be positive")
        if self.max_interval_ms < self.min_interval_ms:
            raise InvalidConfiguration("max_interval_ms", "must not be below min_interval_ms")
        if not (self.min_interval_ms <= self.interval_ms <= self.max_interval_ms):
            raise InvalidConfiguration(
                "interval_ms",
                f"must be between {self.min_interval_ms} and {self.max_interval_ms}, got {self.interval_ms}",
            )
        if self.arcade_step_ms <= 0:
            raise InvalidConfiguration("arcade_step_ms", "must be positive")
        if self.mode not in MODES:
            raise InvalidConfiguration("mode", f"must be one of {MODES}, got {self.mode!r}")
        if not (MIN_INITIAL_LENGTH <= self.initial_length < self.grid_width):
            raise InvalidConfiguration(
                "initial_length",
                f"must be between {MIN_INITIAL_LENGTH} and {self.grid_width - 1}, got {self.initial_length}",
            )
        if self.obstacle_count is not None and self.obstacle_count < 0:
            raise InvalidConfiguration("obstacle_count", "must be >= 0")
        if self.fallback not in FALLBACK_NAMES:
            raise InvalidConfiguration("fallback", f"must be one of {FALLBACK_NAMES}, got {self.fallback!r}")

    def resolved_obstacle_count(self) -> int:
        if not self.obstacles:
            return 0
        if self.obstacle_count is not None:
            return self.obstacle_count
        return max(1, self.grid_width * self.grid_height // OBSTACLE_DENSITY)


class Grid:
    """Fixed-size cell space; every cell is EMPTY, OBSTACLE, FOOD or BODY."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.cells = np.full((height, width), EMPTY, dtype=np.int8)  # indexed [y, x]

    def is_inside(self, pos: Position) -> bool:
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def classify(self, pos: Position) -> int:
        x, y = pos
        return int(self.cells[y, x])

    def neighbors(self, pos: Position) -> list[Position]:
        """In-bounds adjacent cells, in ACTIONS order."""
        result = []
        for direction in ACTIONS:
            nxt = offset(pos, direction)
            if self.is_inside(nxt):
                result.append(nxt)
        return result

    def _set(self, pos: Position, kind: int) -> None:
        x, y = pos
        self.cells[y, x] = kind

    def place_food(self, pos: Position) -> None:
        self._set(pos, FOOD)

    def place_obstacle(self, pos: Position) -> None:
        self._set(pos, OBSTACLE)

    def mark_body(self, pos: Position) -> None:
        self._set(pos, BODY)

    def clear(self, pos: Position) -> None:
        self._set(pos, EMPTY)

    def cells_of(self, kind: int) -> list[Position]:
        ys, xs = np.nonzero(self.cells == kind)
        return [(int(x), int(y)) for y, x in zip(ys, xs)]

    def count(self, kind: int) -> int:
        return int(np.count_nonzero(self.cells == kind))

    def copy_cells(self) -> np.ndarray:
        """Read-only copy of the occupancy array for snapshots."""
        cells = self.cells.copy()
        cells.flags.writeable = False
        return cells


class Snake:
    """Ordered body (head at index 0) plus a set for O(1) collision lookup."""

    def __init__(self, positions: Sequence[Position], direction: str) -> None:
        if not positions:
            raise ValueError("a snake needs at least one segment")
        self.body_set: set[Position] = set(positions)
        if len(self.body_set) != len(positions):
            raise ValueError("snake segments must not overlap")
        for a, b in zip(positions, positions[1:]):
            if abs(a[0] - b[0]) + abs(a[1] - b[1]) != 1:
                raise ValueError(f"snake segments {a} and {b} are not adjacent")
        self.body: deque[Position] = deque(positions)
        self.direction = direction

    @property
    def head(self) -> Position:
        return self.body[0]

    @property
    def tail(self) -> Position:
        return self.body[-1]

    def __len__(self) -> int:
        return len(self.body)

    def __iter__(self) -> Iterator[Position]:
        return iter(self.body)

    def advance(self, direction: str) -> Position:
        """Next head position in direction; nothing is committed."""
        return offset(self.head, direction)

    def contains(self, pos: Position, tail_vacates: bool = False) -> bool:
        """Body membership; the tail is skipped when it moves away this tick."""
        if tail_vacates and pos == self.tail:
            return False
        return pos in self.body_set

    def grow(self, new_head: Position, keep_tail: bool = False) -> Position | None:
        """Prepend new_head; drop the tail unless food was eaten. Returns the dropped tail."""
        removed = None
        if not keep_tail:
            removed = self.body.pop()
            self.body_set.discard(removed)
        self.body.appendleft(new_head)
        self.body_set.add(new_head)
        return removed


def random_empty_cell(
    grid: Grid,
    snake: Iterable[Position] = (),
    rng: random.Random | None = None,
    exclude: Iterable[Position] = (),
) -> Position:
    """Uniform choice among EMPTY cells outside snake and exclude."""
    rng = rng or random
    blocked = set(snake) | set(exclude)
    candidates = [pos for pos in grid.cells_of(EMPTY) if pos not in blocked]
    if not candidates:
        raise NoSpaceAvailable(f"no empty cell left on {grid.width}x{grid.height} grid")
    return candidates[rng.randrange(len(candidates))]


# 3x3 ring around a cell, walked clockwise; odd indices are the orthogonal neighbors.
_RING = ((-1, -1), (0, -1), (1, -1), (1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0))


def _free_neighbors(free: list[list[bool]], pos: Position) -> list[Position]:
    x, y = pos
    height, width = len(free), len(free[0])
    result = []
    for dx, dy in DIRECTION_OFFSETS.values():
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and 0 <= ny < height and free[ny][nx]:
            result.append((nx, ny))
    return result


def _creates_dead_end(free: list[list[bool]], pos: Position) -> bool:
    # A free neighbor left with fewer than two exits is a pocket the snake can't leave.
    return any(len(_free_neighbors(free, nxt)) < 2 for nxt in _free_neighbors(free, pos))


def _ring_keeps_neighbors_joined(free: list[list[bool]], pos: Position) -> bool:
    """True when the free orthogonal neighbors of pos are still linked through the ring around it."""
    x, y = pos
    height, width = len(free), len(free[0])
    ring = [0 <= x + dx < width and 0 <= y + dy < height and free[y + dy][x + dx] for dx, dy in _RING]
    if all(ring):
        return True

    start = ring.index(False)
    runs = 0
    in_run = touches_neighbor = False
    for i in range(start, start + len(ring)):
        k = i % len(ring)
        if ring[k]:
            in_run = True
            touches_neighbor = touches_neighbor or k % 2 == 1
        elif in_run:
            runs += touches_neighbor
            in_run = touches_neighbor = False
    runs += in_run and touches_neighbor
    return runs <= 1


def _open_cells_connected(free: list[list[bool]], start: Position, total: int) -> bool:
    """True when all total free cells are reachable from start."""
    seen = {start}
    queue = deque([start])
    while queue:
        for nxt in _free_neighbors(free, queue.popleft()):
            if nxt not in seen:
                seen.add(nxt)
                queue.append(nxt)
    return len(seen) == total


def spawn_obstacles(grid: Grid, snake: Snake, count: int, rng: random.Random | None = None) -> list[Position]:
    """Place up to count obstacles away from the snake without sealing off any area."""
    rng = rng or random
    reserved = set(snake)
    ahead = snake.head
    for _ in range(2):
        ahead = offset(ahead, snake.direction)
        reserved.add(ahead)

    # Each candidate is drawn at most once.
    candidates = [pos for pos in grid.cells_of(EMPTY) if pos not in reserved]
    free = (grid.cells != OBSTACLE).tolist()
    open_cells = grid.width * grid.height - grid.count(OBSTACLE)

    placed: list[Position] = []
    attempts = count * OBSTACLE_ATTEMPTS_PER_CELL
    while len(placed) < count and attempts > 0 and candidates:
        attempts -= 1
        index = rng.randrange(len(candidates))
        candidates[index], candidates[-1] = candidates[-1], candidates[index]
        pos = candidates.pop()

        x, y = pos
        free[y][x] = False
        if _creates_dead_end(free, pos) or not (
            _ring_keeps_neighbors_joined(free, pos) or _open_cells_connected(free, snake.head, open_cells - 1)
        ):
            free[y][x] = True
            continue
        grid.place_obstacle(pos)
        open_cells -= 1
        placed.append(pos)

    if len(placed) < count:
        logger.warning("placed %d of %d obstacles", len(placed), count)
    return placed


class SnakeGame:
    """Pure game state + rules (no terminal code)."""

    def __init__(self, config: SnakeConfig, rng: random.Random | None = None) -> None:
        config.validate()
        self.config = config
        self.rng = rng or random.Random()
        self.reset()

    def reset(self) -> None:
        """Initialize a fresh board with a centered snake, obstacles and food."""
        cfg = self.config
        self.grid = Grid(cfg.grid_width, cfg.grid_height)
        self.snake = self.spawn_snake(cfg.initial_length)
        self.food: Position | None = None
        self.score = 0
        self.steps = 0
        self.interval_ms = cfg.interval_ms
        self.game_over = False
        self.won = False
        self.crash: Position | None = None
        self.last_outcome: str | None = None

        for pos in self.snake:
            self.grid.mark_body(pos)
        self.obstacles = spawn_obstacles(self.grid, self.snake, cfg.resolved_obstacle_count(), self.rng)
        self.place_food(random_empty_cell(self.grid, self.snake, self.rng))
        logger.info(
            "new round: %dx%d grid, mode=%s, %d obstacles",
            cfg.grid_width,
            cfg.grid_height,
            cfg.mode,
            len(self.obstacles),
        )

    def spawn_snake(self, length: int) -> Snake:
        """Place snake so the head starts at the board center, body extending left."""
        center_x = self.config.grid_width // 2
        center_y = self.config.grid_height // 2
        positions = [(center_x - i, center_y) for i in range(length)]

        # Fallback for tiny boards / long initial length.
        if positions[-1][0] < 0:
            tail_x = (self.config.grid_width - length) // 2
            head_x = tail_x + length - 1
            positions = [(head_x - i, center_y) for i in range(length)]
        return Snake(positions, "right")

    def place_food(self, pos: Position) -> None:
        """Move the single food item to pos (an EMPTY or FOOD cell)."""
        if not self.grid.is_inside(pos):
            raise ValueError(f"food position {pos} is outside the grid")
        if self.grid.classify(pos) not in (EMPTY, FOOD):
            raise ValueError(f"cannot place food on occupied cell {pos}")
        if self.food is not None and self.grid.classify(self.food) == FOOD:
            self.grid.clear(self.food)
        self.grid.place_food(pos)
        self.food = pos

    def resolve_direction(self, requested: str | None) -> str:
        current = self.snake.direction
        if requested is None or requested not in DIRECTION_OFFSETS:
            return current
        if len(self.snake) > 1 and REVERSE_DIRECTION[requested] == current:
            return current
        return requested

    def is_blocked(self, pos: Position) -> bool:
        """Would the head die entering pos this tick (see step)?"""
        if not self.grid.is_inside(pos):
            return True
        kind = self.grid.classify(pos)
        if kind == OBSTACLE:
            return True
        return kind == BODY and self.snake.contains(pos, tail_vacates=True)

    def step(self, direction: str | None = None) -> str:
        """Advance one tick and return the outcome."""
        if self.game_over:
            return self.last_outcome or COLLIDED

        direction = self.resolve_direction(direction)
        candidate = self.snake.advance(direction)

        if self.is_blocked(candidate):
            self.game_over = True
            self.crash = candidate if self.grid.is_inside(candidate) else self.snake.head
            self.last_outcome = COLLIDED
            logger.debug("collision at %s after %d steps", candidate, self.steps)
            return COLLIDED

        self.snake.direction = direction
        self.steps += 1

        if self.grid.classify(candidate) == FOOD:
            self.snake.grow(candidate, keep_tail=True)
            self.grid.mark_body(candidate)
            self.food = None
            self.score += 1
            if self.config.mode == MODE_ARCADE:
                self.interval_ms = max(self.config.min_interval_ms, self.interval_ms - self.config.arcade_step_ms)
            try:
                self.place_food(random_empty_cell(self.grid, self.snake, self.rng))
            except NoSpaceAvailable:
                self.game_over = True
                self.won = True
                self.last_outcome = BOARD_FULL
                logger.info("board full with length %d", len(self.snake))
                return BOARD_FULL
            self.last_outcome = ATE_FOOD
            return ATE_FOOD

        removed = self.snake.grow(candidate)
        if removed is not None and removed != candidate:
            self.grid.clear(removed)
        self.grid.mark_body(candidate)
        self.last_outcome = ADVANCED
        return ADVANCED
