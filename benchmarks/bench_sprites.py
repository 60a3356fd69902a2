"""
Sprite Decoding Benchmarks

Measures XPM parse time for a sleigh-sized pixmap.
"""

import statistics
import time
from typing import Any, Dict, List

from snowdrift.sprites import parse_xpm


def make_xpm(width: int = 96, height: int = 48) -> str:
    """Synthetic four-colour XPM3 document."""
    palette = ['. c None', 'r c #CC0000', 'b c #8B4513', 'w c white']
    keys = '.rbw'
    rows = [''.join(keys[(x + y) % 4] for x in range(width)) for y in range(height)]
    lines = [f'"{width} {height} 4 1",'] + [f'"{p}",' for p in palette] + [f'"{r}",' for r in rows]
    return "static char *sleigh[] = {\n" + "\n".join(lines) + "\n};\n"


class SpriteBenchmarks:
    """Benchmarks for XPM decoding."""

    def __init__(self, iterations: int = 500):
        self.iterations = iterations
        self.results: Dict[str, Dict[str, Any]] = {}

    def bench_parse_xpm(self) -> Dict[str, Any]:
        text = make_xpm()
        times = []
        for _ in range(self.iterations):
            start = time.perf_counter_ns()
            parse_xpm(text)
            times.append(time.perf_counter_ns() - start)
        return self._compute_stats("parse_xpm", times)

    def _compute_stats(self, name: str, times_ns: List[int]) -> Dict[str, Any]:
        times_us = [t / 1000 for t in times_ns]
        ordered = sorted(times_us)
        stats = {
            "name": name,
            "iterations": len(times_us),
            "mean_us": statistics.mean(times_us),
            "median_us": statistics.median(times_us),
            "stdev_us": statistics.stdev(times_us) if len(times_us) > 1 else 0,
            "min_us": ordered[0],
            "max_us": ordered[-1],
            "p95_us": ordered[int(len(ordered) * 0.95)],
            "p99_us": ordered[int(len(ordered) * 0.99)],
            "ops_per_sec": 1_000_000 / statistics.mean(times_us) if times_us else 0,
        }
        self.results[name] = stats
        return stats

    def run_all(self) -> Dict[str, Dict[str, Any]]:
        print(f"\nRunning Sprite Benchmarks ({self.iterations} iterations each)...")
        print("-" * 60)
        print("  Parse 96x48 XPM...", end=" ", flush=True)
        result = self.bench_parse_xpm()
        print(f"{result['mean_us']:.2f} µs (p99: {result['p99_us']:.2f} µs)")
        return self.results


if __name__ == "__main__":
    SpriteBenchmarks().run_all()
