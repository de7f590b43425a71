# Command-line launcher for terminal Snake.
from __future__ import annotations

import argparse
import logging

from blessed import Terminal

# Support both package imports and running this file directly.
try:
    from .game_logic import (
        DEFAULT_INTERVAL_MS,
        FALLBACK_NAMES,
        MAX_GRID_SIZE,
        MAX_INTERVAL_MS,
        MIN_GRID_SIZE,
        MIN_INTERVAL_MS,
        MODE_ARCADE,
        MODE_AUTOPILOT,
        MODE_NORMAL,
        InvalidConfiguration,
        SnakeConfig,
    )
    from .snake_tui import max_grid_size, run_terminal_game
except ImportError:
    from game_logic import (
        DEFAULT_INTERVAL_MS,
        FALLBACK_NAMES,
        MAX_GRID_SIZE,
        MAX_INTERVAL_MS,
        MIN_GRID_SIZE,
        MIN_INTERVAL_MS,
        MODE_ARCADE,
        MODE_AUTOPILOT,
        MODE_NORMAL,
        InvalidConfiguration,
        SnakeConfig,
    )
    from snake_tui import max_grid_size, run_terminal_game


def build_parser() -> argparse.ArgumentParser:
    defaults = SnakeConfig()
    # -h is taken by --grid-height, so help is only available as --help.
    parser = argparse.ArgumentParser(description="Game of snake", add_help=False)
    parser.add_argument(
        "-i",
        "--interval",
        type=int,
        default=DEFAULT_INTERVAL_MS,
        help=f"Snake advance interval in ms ({MIN_INTERVAL_MS}-{MAX_INTERVAL_MS}).",
    )
    # None means not given; --fit-grid rejects an explicit size.
    parser.add_argument("-w", "--grid-width", type=int, help=f"Width of the grid (default {defaults.grid_width})")
    parser.add_argument("-h", "--grid-height", type=int, help=f"Height of the grid (default {defaults.grid_height})")
    parser.add_argument("-f", "--fit-grid", action="store_true", help="Fit the grid to the screen")
    parser.add_argument("-n", "--no-obstacles", action="store_true", help="Don't draw obstacles on the grid")
    parser.add_argument("--autopilot", action="store_true", help="The computer controls the snake")
    parser.add_argument("--arcade", action="store_true", help="The snake gets faster with every food eaten")
    parser.add_argument(
        "--fallback",
        choices=FALLBACK_NAMES,
        default=defaults.fallback,
        help="Autopilot move choice when the food is unreachable.",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for obstacle and food placement")
    parser.add_argument("--log-file", type=str, default="", help="Write debug logs to this file.")
    parser.add_argument("--help", action="help", help="Print help information")
    return parser


def config_from_args(args: argparse.Namespace, term: Terminal | None = None) -> SnakeConfig:
    """Build and validate a SnakeConfig; raises InvalidConfiguration."""
    if args.autopilot and args.arcade:
        raise InvalidConfiguration("mode", "--autopilot and --arcade are mutually exclusive")
    mode = MODE_NORMAL
    if args.autopilot:
        mode = MODE_AUTOPILOT
    elif args.arcade:
        mode = MODE_ARCADE

    defaults = SnakeConfig()
    if args.fit_grid and (args.grid_width is not None or args.grid_height is not None):
        raise InvalidConfiguration("fit_grid", "--fit-grid cannot be combined with --grid-width or --grid-height")
    width = defaults.grid_width if args.grid_width is None else args.grid_width
    height = defaults.grid_height if args.grid_height is None else args.grid_height
    if args.fit_grid:
        width, height = (min(MAX_GRID_SIZE, size) for size in max_grid_size(term or Terminal()))
    elif term is not None:
        max_width, max_height = max_grid_size(term)
        if width > max_width:
            raise InvalidConfiguration("grid_width", f"not in range {MIN_GRID_SIZE}-{max_width} for this terminal")
        if height > max_height:
            raise InvalidConfiguration("grid_height", f"not in range {MIN_GRID_SIZE}-{max_height} for this terminal")

    config = SnakeConfig(
        grid_width=width,
        grid_height=height,
        interval_ms=args.interval,
        mode=mode,
        obstacles=not args.no_obstacles,
        fallback=args.fallback,
    )
    config.validate()
    return config


def configure_logging(log_file: str) -> None:
    # Anything written to stderr would land on top of the game screen.
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    else:
        logging.getLogger().addHandler(logging.NullHandler())


def main() -> None:
    args = build_parser().parse_args()
    configure_logging(args.log_file)
    term = Terminal()
    try:
        config = config_from_args(args, term)
    except InvalidConfiguration as exc:
        raise SystemExit(f"Invalid setting {exc.field}: {exc.message}")
    run_terminal_game(config, args.seed, term)


if __name__ == "__main__":
    main()
