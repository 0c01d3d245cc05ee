"""
Headless Simulation
===================

Runs many matches without a display and tallies the winners.

Usage:
    python -m tools.simulate [--matches N] [--seed SEED] [--max-ticks T] [--output results.json]
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from collections import Counter
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import List, Optional

import numpy as np

from rps_arena.arena_core.arena import ArenaController, TickClock
from rps_arena.arena_core.config_loader import ArenaConfig, load_config
from rps_arena.logging_config import configure_logging


@dataclass
class MatchResult:
    """Result for a single seed."""
    seed: int
    winner: Optional[str]
    ticks: int
    sim_seconds: float
    elapsed_time: float


def run_match(
    config: ArenaConfig,
    seed: int,
    max_ticks: int,
    viewport: int,
    fps: float
) -> MatchResult:
    """
    Run one headless match.

    Args:
        config: Arena configuration.
        seed: Random seed.
        max_ticks: Tick cap; the match counts as unfinished past it.
        viewport: Square viewport size.
        fps: Simulated frames per second (drives the boost timer).

    Returns:
        MatchResult for the seed.
    """
    clock = TickClock(1.0 / fps)
    controller = ArenaController(config=config, seed=seed, clock=clock)

    start = time.time()
    controller.start((viewport, viewport))
    winner = controller.run_headless(max_ticks, before_tick=clock.advance)
    result = MatchResult(
        seed=seed,
        winner=winner.display_name if winner is not None else None,
        ticks=controller.tick_count,
        sim_seconds=controller.elapsed,
        elapsed_time=time.time() - start
    )
    controller.stop()
    return result


def main():
    parser = argparse.ArgumentParser(description="Run headless arena matches")
    parser.add_argument("--matches", type=int, default=10, help="Number of matches")
    parser.add_argument("--seed", type=int, default=0, help="Base seed")
    parser.add_argument("--max-ticks", type=int, default=60 * 600, help="Tick cap per match")
    parser.add_argument("--viewport", type=int, default=600, help="Square viewport size")
    parser.add_argument("--fps", type=float, default=60.0, help="Simulated frames per second")
    parser.add_argument("--config", type=str, default=None, help="Path to arena_config.yaml")
    parser.add_argument("--output", type=str, default=None, help="Path to save results JSON")
    parser.add_argument("--quiet", action="store_true", help="Reduce output verbosity")

    args = parser.parse_args()
    configure_logging("WARNING" if args.quiet else None)

    config = load_config(args.config)

    results: List[MatchResult] = []
    total_start = time.time()
    for i in range(args.matches):
        seed = args.seed + i
        result = run_match(config, seed, args.max_ticks, args.viewport, args.fps)
        results.append(result)
        if not args.quiet:
            print(f"[{i+1}/{args.matches}] seed={seed} winner={result.winner} "
                  f"ticks={result.ticks} sim={result.sim_seconds:.1f}s")

    tally = Counter(r.winner or "unfinished" for r in results)
    finished_ticks = np.array([r.ticks for r in results if r.winner is not None])

    print()
    print("=" * 50)
    print("SIMULATION SUMMARY")
    print("=" * 50)
    print(f"Matches:         {len(results)}")
    for name in ("Rock", "Paper", "Scissors", "unfinished"):
        print(f"{name + ':':<17}{tally.get(name, 0)}")
    if finished_ticks.size:
        print(f"Mean ticks:      {finished_ticks.mean():.1f}")
        print(f"Median ticks:    {np.median(finished_ticks):.1f}")
    print(f"Total time:      {time.time() - total_start:.2f}s")
    print("=" * 50)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump({"results": [asdict(r) for r in results], "tally": dict(tally)}, f, indent=2)
        print(f"Results saved to {output_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
