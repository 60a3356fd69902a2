"""
Settling Simulation Performance Benchmarks

Measures:
- Full tick latency at each snow intensity
- Deposit (accretion + aggressive redistribution) cost
- Decay tick cost on a full pile
- Occlusion pass cost with overlapping windows
"""

import logging
import random
import statistics
import time
from typing import Any, Dict, List

from snowdrift.accretion import AccretionEngine
from snowdrift.config import SettlingConfig, SnowIntensity, SnowSettings
from snowdrift.decay import DecayEngine
from snowdrift.height_field import HeightFieldStore
from snowdrift.models import Rect, WindowSnapshot
from snowdrift.occlusion import OcclusionFilter
from snowdrift.redistribution import RedistributionEngine
from snowdrift.simulation import SettlingSimulation
from snowdrift.snowfall import ParticleField
from snowdrift.windows import StaticWindowDirectory

SCREEN_WIDTH = 1920.0
SCREEN_HEIGHT = 1080.0


def create_desktop(count: int = 6, seed: int = 7) -> List[WindowSnapshot]:
    """Overlapping windows spread over a 1080p screen."""
    rng = random.Random(seed)
    windows = []
    for rank in range(count):
        w = rng.uniform(400, 900)
        h = rng.uniform(300, 600)
        x = rng.uniform(0, SCREEN_WIDTH - w)
        y = rng.uniform(0, SCREEN_HEIGHT - h - 100)
        windows.append(WindowSnapshot(rank + 1, Rect(x, y, w, h), stack_rank=rank))
    return windows


def fill_pile(store: HeightFieldStore, window: WindowSnapshot, rng: random.Random):
    pile = store.upsert(window.window_id, window.rect)
    columns = int(window.rect.width // pile.column_width)
    for index in range(2, columns - 1):
        pile.set_height(index, rng.uniform(5.0, 40.0), age=rng.uniform(0.0, 100.0))
    return pile


class SettlingBenchmarks:
    """Benchmarks for the settling core."""

    def __init__(self, iterations: int = 2000):
        self.iterations = iterations
        self.results: Dict[str, Dict[str, Any]] = {}
        logging.getLogger('snowdrift').setLevel(logging.CRITICAL)

    def _bench_tick(self, name: str, intensity: SnowIntensity) -> Dict[str, Any]:
        rng = random.Random(1)
        directory = StaticWindowDirectory(create_desktop())
        simulation = SettlingSimulation(directory, SettlingConfig(),
                                        SnowSettings(intensity=intensity), rng)
        field = ParticleField(SCREEN_WIDTH, SCREEN_HEIGHT, intensity, rng=rng)

        times = []
        for _ in range(self.iterations):
            field.step()
            start = time.perf_counter_ns()
            result = simulation.tick(1 / 60, field.particles)
            times.append(time.perf_counter_ns() - start)
            for event in result.events:
                field.respawn(event.particle_index)

        return self._compute_stats(name, times)

    def bench_tick_light(self) -> Dict[str, Any]:
        return self._bench_tick("tick_light", SnowIntensity.LIGHT)

    def bench_tick_medium(self) -> Dict[str, Any]:
        return self._bench_tick("tick_medium", SnowIntensity.MEDIUM)

    def bench_tick_heavy(self) -> Dict[str, Any]:
        return self._bench_tick("tick_heavy", SnowIntensity.HEAVY)

    def bench_deposit(self) -> Dict[str, Any]:
        """Benchmark a deposit into a half-full pile."""
        rng = random.Random(2)
        config = SettlingConfig()
        store = HeightFieldStore(config)
        window = create_desktop(1)[0]
        pile = fill_pile(store, window, rng)
        accretion = AccretionEngine(config, RedistributionEngine(config, rng))

        times = []
        for _ in range(self.iterations):
            x = rng.uniform(window.rect.x + 20, window.rect.max_x - 20)
            start = time.perf_counter_ns()
            accretion.deposit(pile, x, 4.0)
            times.append(time.perf_counter_ns() - start)

        return self._compute_stats("deposit", times)

    def bench_decay_tick(self) -> Dict[str, Any]:
        """Benchmark decay over six populated piles."""
        rng = random.Random(3)
        config = SettlingConfig(max_age=1e9, idle_melt_threshold=1e9)
        store = HeightFieldStore(config)
        for window in create_desktop():
            fill_pile(store, window, rng)
        decay = DecayEngine(config, RedistributionEngine(config, rng))

        times = []
        for _ in range(self.iterations):
            start = time.perf_counter_ns()
            decay.tick(store, 1 / 60)
            times.append(time.perf_counter_ns() - start)

        return self._compute_stats("decay_tick", times)

    def bench_occlusion(self) -> Dict[str, Any]:
        """Benchmark occlusion over populated piles (idempotent after the first pass)."""
        rng = random.Random(4)
        windows = create_desktop()
        store = HeightFieldStore()
        for window in windows:
            fill_pile(store, window, rng)
        occlusion = OcclusionFilter()

        times = []
        for _ in range(self.iterations):
            start = time.perf_counter_ns()
            occlusion.filter_occluded(store, windows)
            times.append(time.perf_counter_ns() - start)

        return self._compute_stats("occlusion_pass", times)

    def _compute_stats(self, name: str, times_ns: List[int]) -> Dict[str, Any]:
        """Compute statistics from timing measurements."""
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
        """Run all benchmarks and return results."""
        print(f"\nRunning Settling Benchmarks ({self.iterations} iterations each)...")
        print("-" * 60)

        benchmarks = [
            ("Tick (light)", self.bench_tick_light),
            ("Tick (medium)", self.bench_tick_medium),
            ("Tick (heavy)", self.bench_tick_heavy),
            ("Deposit", self.bench_deposit),
            ("Decay tick", self.bench_decay_tick),
            ("Occlusion pass", self.bench_occlusion),
        ]

        for desc, bench_func in benchmarks:
            print(f"  {desc}...", end=" ", flush=True)
            result = bench_func()
            print(f"{result['mean_us']:.2f} µs (p99: {result['p99_us']:.2f} µs)")

        return self.results


if __name__ == "__main__":
    bench = SettlingBenchmarks(iterations=2000)
    bench.run_all()
