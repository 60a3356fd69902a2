#!/usr/bin/env python3
"""
Snowdrift Performance Benchmark Runner

Times the per-frame operations and reports each one as a share of a 60 Hz
frame. Exits non-zero when any operation goes over its share.

Usage:
    python -m benchmarks.run_benchmarks [options]

Options:
    --quick         Run with fewer iterations (faster but less accurate)
    --full          Run with more iterations (slower but more accurate)
    --json          Output results as JSON
    --component X   Only run benchmarks for component X (settling, sprites)
    --save FILE     Save results to FILE
"""

import argparse
import json
import platform
import sys
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from benchmarks.bench_settling import SettlingBenchmarks
from benchmarks.bench_sprites import SpriteBenchmarks
from snowdrift.constants import Timing


FRAME_BUDGET_US = Timing.FRAME_INTERVAL * 1_000_000

# Largest share of one 60 Hz frame each per-frame operation may take
FRAME_SHARE_LIMITS = {
    "tick_light": 0.10,
    "tick_medium": 0.25,
    "tick_heavy": 0.50,
    "deposit": 0.02,
    "decay_tick": 0.05,
    "occlusion": 0.05,
}

SUITES = {
    "settling": lambda n: SettlingBenchmarks(iterations=n),
    "sprites": lambda n: SpriteBenchmarks(iterations=max(1, n // 4)),
}


def get_system_info() -> Dict[str, str]:
    return {
        "platform": platform.platform(),
        "python_version": platform.python_version(),
        "machine": platform.machine(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def frame_share(stats: Dict[str, Any]) -> float:
    """Fraction of a 60 Hz frame spent in one call, by p99 latency."""
    return stats["p99_us"] / FRAME_BUDGET_US


def check_frame_budget(results: Dict[str, Dict[str, Dict[str, Any]]]) -> List[str]:
    """Names of per-frame benchmarks whose p99 exceeds their frame share."""
    over = []
    for suite in results.values():
        for name, stats in suite.items():
            limit = FRAME_SHARE_LIMITS.get(name)
            if limit is not None and frame_share(stats) > limit:
                over.append(name)
    return over


def print_report(results: Dict[str, Dict[str, Dict[str, Any]]]):
    info = get_system_info()
    print(f"Snowdrift benchmarks - Python {info['python_version']} on {info['platform']}")
    print(f"Frame budget at 60 Hz: {FRAME_BUDGET_US:.0f} µs")
    print()
    print(f"{'Benchmark':<24} {'Mean (µs)':>10} {'P99 (µs)':>10} {'Frame %':>8}  Limit")
    for suite in results.values():
        for name, stats in suite.items():
            limit = FRAME_SHARE_LIMITS.get(name)
            limit_text = f"{limit:.0%}" if limit is not None else "-"
            print(f"{name:<24} {stats['mean_us']:>10.1f} {stats['p99_us']:>10.1f} "
                  f"{frame_share(stats):>8.1%}  {limit_text}")
    print()

    over = check_frame_budget(results)
    if over:
        print(f"Over frame budget: {', '.join(over)}")
    else:
        print("All per-frame operations fit their frame budget")


def run_all_benchmarks(
    iterations: int = 2000,
    components: Optional[List[str]] = None
) -> Dict[str, Dict[str, Dict[str, Any]]]:
    """Run the selected suites; all of them by default."""
    selected = components or list(SUITES)
    return {name: SUITES[name](iterations).run_all() for name in selected}


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run snowdrift performance benchmarks")
    speed = parser.add_mutually_exclusive_group()
    speed.add_argument("--quick", action="store_const", dest="iterations", const=300,
                       help="300 iterations per benchmark")
    speed.add_argument("--full", action="store_const", dest="iterations", const=10000,
                       help="10000 iterations per benchmark")
    parser.add_argument("--json", action="store_true", help="Output results as JSON")
    parser.add_argument("--component", action="append", choices=sorted(SUITES),
                        help="Only run the given suite(s)")
    parser.add_argument("--save", metavar="FILE", help="Save results to a JSON file")
    parser.set_defaults(iterations=2000)
    args = parser.parse_args(argv)

    started = time.perf_counter()
    results = run_all_benchmarks(iterations=args.iterations, components=args.component)
    output = {
        "system": get_system_info(),
        "iterations": args.iterations,
        "frame_budget_us": FRAME_BUDGET_US,
        "elapsed_seconds": time.perf_counter() - started,
        "over_budget": check_frame_budget(results),
        "results": results,
    }

    if args.json:
        print(json.dumps(output, indent=2))
    else:
        print_report(results)

    if args.save:
        with open(args.save, 'w') as f:
            json.dump(output, f, indent=2)

    return 1 if output["over_budget"] else 0


if __name__ == "__main__":
    sys.exit(main())
