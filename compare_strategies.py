"""Compare two autopilot fallback strategies over the same seeded boards."""
from __future__ import annotations

import argparse
from dataclasses import replace

import numpy as np

# Support both package imports and running this file directly.
try:
    from .agent import FALLBACK_STRATEGIES
    from .game_logic import MODE_AUTOPILOT, InvalidConfiguration, SnakeConfig
    from .utils import chunked_stat, run_episode, summarize_scores
except ImportError:
    from agent import FALLBACK_STRATEGIES
    from game_logic import MODE_AUTOPILOT, InvalidConfiguration, SnakeConfig
    from utils import chunked_stat, run_episode, summarize_scores


def _compare_metric(name: str, value1: float, value2: float) -> None:
    if value1 > value2:
        winner = "Strategy 1"
    elif value2 > value1:
        winner = "Strategy 2"
    else:
        winner = "Tie"
    print(f"{name:<20} {value1:>15.2f} {value2:>15.2f} {winner:>12}")


def _plot_trend(scores1: list[float], scores2: list[float], labels: tuple[str, str], chunk_size: int) -> None:
    import matplotlib.pyplot as plt

    plt.figure("Autopilot strategy comparison", figsize=(10, 5))
    for scores, label, color in zip((scores1, scores2), labels, ("#1f77b4", "#ff7f0e")):
        x_end, means = chunked_stat(scores, chunk_size, np.mean)
        plt.plot(x_end, means, color=color, linewidth=2.0, marker="o", markersize=4, label=f"{label} mean")
    plt.title(f"Score per {chunk_size} games")
    plt.xlabel("Game")
    plt.ylabel("Score")
    plt.grid(alpha=0.25)
    plt.legend(loc="upper left")
    plt.tight_layout()
    plt.show()


def compare_strategies(
    strategy1: str,
    strategy2: str,
    config: SnakeConfig,
    num_games: int = 100,
    max_steps: int = 5000,
    plot: bool = False,
) -> tuple[list[float], list[float]]:
    """Play both strategies on identical seeds and print a comparison table."""
    if num_games <= 0:
        raise ValueError("num_games must be > 0")
    for strategy in (strategy1, strategy2):
        if strategy not in FALLBACK_STRATEGIES:
            raise ValueError(f"Unsupported fallback strategy: {strategy}")

    configs = [
        replace(config, mode=MODE_AUTOPILOT, fallback=strategy)
        for strategy in (strategy1, strategy2)
    ]

    scores1: list[float] = []
    scores2: list[float] = []
    wins = [0, 0]
    print(f"\nRunning {num_games} games for each strategy on {config.grid_width}x{config.grid_height}...")
    for game_index in range(1, num_games + 1):
        if game_index % 10 == 0 or game_index == num_games:
            print(f"Game {game_index}/{num_games}", end="\r", flush=True)

        result1 = run_episode(configs[0], max_steps, seed=game_index)
        result2 = run_episode(configs[1], max_steps, seed=game_index)
        scores1.append(float(result1.score))
        scores2.append(float(result2.score))
        wins[0] += int(result1.won)
        wins[1] += int(result2.won)
    print()

    summary1 = summarize_scores(scores1)
    summary2 = summarize_scores(scores2)

    print("=" * 64)
    print("COMPARISON RESULTS")
    print("=" * 64)
    print(f"{'Metric':<20} {strategy1:>15} {strategy2:>15} {'Winner':>12}")
    print("-" * 64)
    for name in summary1:
        _compare_metric(name, summary1[name], summary2[name])
    _compare_metric("Boards cleared", float(wins[0]), float(wins[1]))
    print("=" * 64)

    arr1 = np.asarray(scores1, dtype=np.float32)
    arr2 = np.asarray(scores2, dtype=np.float32)
    better1 = int(np.sum(arr1 > arr2))
    better2 = int(np.sum(arr2 > arr1))
    ties = int(np.sum(arr1 == arr2))
    print(f"Head-to-head: {strategy1} wins {better1}, {strategy2} wins {better2}, Ties {ties}")

    if plot:
        _plot_trend(scores1, scores2, (strategy1, strategy2), max(1, num_games // 10))
    return scores1, scores2


def main() -> None:
    strategies = sorted(FALLBACK_STRATEGIES)
    parser = argparse.ArgumentParser(description="Compare Snake autopilot fallback strategies")
    parser.add_argument("strategy1", choices=strategies, help="First fallback strategy")
    parser.add_argument("strategy2", choices=strategies, help="Second fallback strategy")
    parser.add_argument("--games", type=int, default=100, help="Number of games per strategy")
    parser.add_argument("--width", type=int, default=20, help="Grid width")
    parser.add_argument("--height", type=int, default=15, help="Grid height")
    parser.add_argument("--max-steps", type=int, default=5000, help="Tick limit per game")
    parser.add_argument("--no-obstacles", action="store_true", help="Play on an empty grid")
    parser.add_argument("--plot", action="store_true", help="Show a matplotlib score trend at the end")
    args = parser.parse_args()

    config = SnakeConfig(grid_width=args.width, grid_height=args.height, obstacles=not args.no_obstacles)
    try:
        config.validate()
    except InvalidConfiguration as exc:
        raise SystemExit(f"Invalid setting {exc.field}: {exc.message}")
    try:
        compare_strategies(args.strategy1, args.strategy2, config, args.games, args.max_steps, args.plot)
    except ValueError as exc:
        raise SystemExit(str(exc))


if __name__ == "__main__":
    main()
