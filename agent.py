# A* autopilot for Snake: shortest route to the food, local fallback when none exists.
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import heapq
import itertools
import logging
import random
from typing import Callable, Sequence

import numpy as np

# Support both package imports and running this file directly.
try:
    from .game_logic import (
        ACTIONS,
        BODY,
        EMPTY,
        FOOD,
        OBSTACLE,
        REVERSE_DIRECTION,
        Grid,
        Position,
        SnakeGame,
        direction_between,
        offset,
    )
except ImportError:
    from game_logic import (
        ACTIONS,
        BODY,
        EMPTY,
        FOOD,
        OBSTACLE,
        REVERSE_DIRECTION,
        Grid,
        Position,
        SnakeGame,
        direction_between,
        offset,
    )


logger = logging.getLogger(__name__)

PASSABLE = (EMPTY, FOOD)


@dataclass(frozen=True)
class SearchResult:
    path: list[Position] | None  # start..target inclusive, None when unreachable
    expanded: int


@dataclass(frozen=True)
class Decision:
    direction: str
    path: list[Position] | None
    expanded: int
    used_fallback: bool


def manhattan(a: Position, b: Position) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def find_path(grid: Grid, start: Position, target: Position) -> SearchResult:
    """
    A* from start to target over EMPTY/FOOD cells with unit edge cost.

    Heap entries are (f, g, discovery_order, pos): among equal f the lower g is
    popped first, then the node discovered earliest. Neighbors are discovered in
    ACTIONS order, so results are fully deterministic. Each cell is expanded at
    most once, which caps the work at width * height expansions.
    """
    if not grid.is_inside(target):
        return SearchResult(None, 0)

    order = itertools.count()
    open_heap = [(manhattan(start, target), 0, next(order), start)]
    best_g: dict[Position, int] = {start: 0}
    parents: dict[Position, Position | None] = {start: None}
    closed: set[Position] = set()
    expanded = 0

    while open_heap:
        _, g, _, pos = heapq.heappop(open_heap)
        if pos in closed:
            continue
        closed.add(pos)
        expanded += 1

        if pos == target:
            path = [pos]
            parent = parents[pos]
            while parent is not None:
                path.append(parent)
                parent = parents[parent]
            path.reverse()
            return SearchResult(path, expanded)

        for nxt in grid.neighbors(pos):
            if nxt in closed or grid.classify(nxt) not in PASSABLE:
                continue
            tentative_g = g + 1
            if tentative_g < best_g.get(nxt, tentative_g + 1):
                best_g[nxt] = tentative_g
                parents[nxt] = pos
                heapq.heappush(open_heap, (tentative_g + manhattan(nxt, target), tentative_g, next(order), nxt))

    return SearchResult(None, expanded)


def safe_moves(grid: Grid, body: Sequence[Position], direction: str) -> list[str]:
    """Directions the head can take this tick without colliding, in ACTIONS order."""
    head, tail = body[0], body[-1]
    moves = []
    for action in ACTIONS:
        # The engine ignores a reverse request, so it is never a real option.
        if len(body) > 1 and action == REVERSE_DIRECTION[direction]:
            continue
        nxt = offset(head, action)
        if not grid.is_inside(nxt):
            continue
        kind = grid.classify(nxt)
        if kind == OBSTACLE or (kind == BODY and nxt != tail):
            continue
        moves.append(action)
    return moves


def open_space(grid: Grid, body: Sequence[Position], start: Position) -> int:
    """Cells reachable from start once the head is there and the tail has moved on."""
    tail = body[-1]
    seen = {start}
    queue = deque([start])
    while queue:
        pos = queue.popleft()
        for nxt in grid.neighbors(pos):
            if nxt in seen:
                continue
            kind = grid.classify(nxt)
            if kind == OBSTACLE or (kind == BODY and nxt != tail):
                continue
            seen.add(nxt)
            queue.append(nxt)
    return len(seen)


def clearance(grid: Grid, body: Sequence[Position], pos: Position) -> int:
    """
    Manhattan distance from pos (the head's next cell) to the nearest wall,
    obstacle or body cell. The current head becomes the neck right behind pos
    and the tail moves on, so neither counts.
    """
    x, y = pos
    walls = min(x + 1, y + 1, grid.width - x, grid.height - y)
    blocked = (grid.cells == OBSTACLE) | (grid.cells == BODY)
    for seg_x, seg_y in (body[0], body[-1]):
        blocked[seg_y, seg_x] = False
    ys, xs = np.nonzero(blocked)
    if xs.size == 0:
        return int(walls)
    nearest = int(np.min(np.abs(xs - x) + np.abs(ys - y)))
    return min(int(walls), nearest)


def _by_open_space(grid: Grid, body: Sequence[Position], moves: list[str], rng: random.Random) -> str:
    head = body[0]

    def key(action: str) -> tuple[int, int, int]:
        nxt = offset(head, action)
        return (-open_space(grid, body, nxt), -clearance(grid, body, nxt), ACTIONS.index(action))

    return min(moves, key=key)


def _by_clearance(grid: Grid, body: Sequence[Position], moves: list[str], rng: random.Random) -> str:
    head = body[0]
    return min(moves, key=lambda action: (-clearance(grid, body, offset(head, action)), ACTIONS.index(action)))


def _at_random(grid: Grid, body: Sequence[Position], moves: list[str], rng: random.Random) -> str:
    return rng.choice(moves)


FALLBACK_STRATEGIES: dict[str, Callable[[Grid, Sequence[Position], list[str], random.Random], str]] = {
    "open_space": _by_open_space,
    "clearance": _by_clearance,
    "random": _at_random,
}


def fallback_direction(
    grid: Grid,
    body: Sequence[Position],
    direction: str,
    strategy: str = "open_space",
    rng: random.Random | None = None,
) -> str:
    """One-step survival move when no route to the food is known."""
    moves = safe_moves(grid, body, direction)
    if not moves:
        # Boxed in; the engine reports the collision next tick.
        return direction
    return FALLBACK_STRATEGIES[strategy](grid, body, moves, rng or random.Random())


def plan(
    grid: Grid,
    body: Sequence[Position],
    direction: str,
    target: Position | None,
    strategy: str = "open_space",
    rng: random.Random | None = None,
) -> Decision:
    """Pick the next direction for the head at body[0]; keeps no state between calls."""
    path = None
    expanded = 0
    if target is not None:
        result = find_path(grid, body[0], target)
        path, expanded = result.path, result.expanded
        if path is not None and len(path) > 1:
            return Decision(direction_between(path[0], path[1]), path, expanded, False)
        logger.debug("no path from %s to %s after %d expansions", body[0], target, expanded)
    return Decision(fallback_direction(grid, body, direction, strategy, rng), None, expanded, True)


def next_direction(
    grid: Grid,
    body: Sequence[Position],
    direction: str,
    target: Position | None,
    strategy: str = "open_space",
    rng: random.Random | None = None,
) -> str:
    return plan(grid, body, direction, target, strategy, rng).direction


class AutopilotAgent:
    """Chooses the snake's direction each tick from the current board only."""

    def __init__(self, strategy: str = "open_space", rng: random.Random | None = None) -> None:
        if strategy not in FALLBACK_STRATEGIES:
            raise ValueError(f"Unsupported fallback strategy: {strategy}")
        self.strategy = strategy
        self.rng = rng or random.Random()

    def decide(self, game: SnakeGame) -> Decision:
        return plan(game.grid, tuple(game.snake), game.snake.direction, game.food, self.strategy, self.rng)

    def select_direction(self, game: SnakeGame) -> str:
        return self.decide(game).direction
