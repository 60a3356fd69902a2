"""
Snowdrift TUI - terminal host for the settling simulation.

Runs the particle field, the settling simulation and the sleigh in one
frame loop and draws them with curses. Without ``--x11`` a handful of
simulated windows drift around the terminal so there is something for the
snow to settle on.
"""

import logging
import math
import os
import random
import sys
import time
from pathlib import Path
from typing import List, Optional

from ..config import (
    SettlingConfig,
    SnowIntensity,
    SnowSettings,
    frame_interval,
    intensity_from_env,
    load_settings,
)
from ..constants import Timing
from ..exceptions import ConfigError
from ..features import FEATURES, get_feature_status, log_feature_summary
from ..models import Rect
from ..simulation import SettlingSimulation
from ..snowfall import ParticleField
from ..sprites import SleighFlight, SleighScheduler, load_frames
from ..utils.error_handling import (
    ErrorCategory,
    get_error_aggregator,
    handle_error,
    safe_execute,
    with_error_handling,
)
from ..windows import CachedWindowDirectory, WindowRecord, WindowSource, X11WindowDirectory
from .colors import CURSES_AVAILABLE, Colors, curses
from .renderer import SnowRenderer

logger = logging.getLogger(__name__)

# World units per terminal cell in demo mode; one column per cell
CELL_WIDTH = 8.0
CELL_HEIGHT = 16.0

DEMO_TITLES = ["Terminal", "Editor", "Browser", "Mail", "Music", "Notes"]


class DemoWindowDirectory(WindowSource):
    """
    Simulated desktop: a few windows that drift sideways, get raised to
    the front every so often and are occasionally closed and replaced.
    """

    RAISE_INTERVAL = 20.0
    REPLACE_INTERVAL = 45.0
    DRIFT_SPEED = 0.05   # radians per second of the sideways sway

    def __init__(self, width: float, height: float, count: int = 3,
                 rng: Optional[random.Random] = None):
        self.width = width
        self.height = height
        self.count = count
        self.rng = rng or random.Random()
        self._next_id = 1
        self._windows: List[dict] = []
        self._elapsed = 0.0
        self._since_raise = 0.0
        self._since_replace = 0.0
        self._layout()

    def _new_window(self) -> dict:
        rng = self.rng
        w = rng.uniform(0.25, 0.45) * self.width
        h = rng.uniform(0.2, 0.4) * self.height
        window = {
            'id': self._next_id,
            'title': rng.choice(DEMO_TITLES),
            'x': rng.uniform(0.0, max(0.0, self.width - w)),
            'y': rng.uniform(0.0, max(0.0, self.height * 0.75 - h)),
            'w': w,
            'h': h,
            'sway': rng.uniform(0.0, self.width * 0.05),
            'phase': rng.uniform(0.0, 6.28),
        }
        self._next_id += 1
        return window

    def _layout(self):
        self._windows = [self._new_window() for _ in range(self.count)]

    def resize(self, width: float, height: float):
        self.width = width
        self.height = height
        self._layout()

    def raise_random(self):
        if len(self._windows) > 1:
            window = self._windows.pop(self.rng.randrange(1, len(self._windows)))
            self._windows.insert(0, window)

    def replace_random(self):
        if self._windows:
            index = self.rng.randrange(len(self._windows))
            old = self._windows[index]
            self._windows[index] = self._new_window()
            logger.debug(f"Demo window {old['id']} closed, {self._windows[index]['id']} opened")

    def advance(self, delta_time: float):
        self._elapsed += delta_time
        self._since_raise += delta_time
        self._since_replace += delta_time
        if self._since_raise >= self.RAISE_INTERVAL:
            self._since_raise = 0.0
            self.raise_random()
        if self._since_replace >= self.REPLACE_INTERVAL:
            self._since_replace = 0.0
            self.replace_random()

    def list_windows(self) -> List[WindowRecord]:
        records = []
        for window in self._windows:
            offset = math.sin(self._elapsed * self.DRIFT_SPEED + window['phase']) * window['sway']
            x = min(max(0.0, window['x'] + offset), max(0.0, self.width - window['w']))
            records.append(WindowRecord(
                window_id=window['id'],
                rect=Rect(x, window['y'], window['w'], window['h']),
                title=window['title'],
            ))
        return records


class SnowApp:
    """Frame loop wiring the particle field, simulation and sleigh together."""

    def __init__(self, settings: Optional[SnowSettings] = None,
                 config: Optional[SettlingConfig] = None,
                 source: Optional[WindowSource] = None,
                 world_size: Optional[tuple] = None,
                 sprite_dir: Optional[str] = None,
                 fps: float = Timing.FRAME_RATE,
                 rng: Optional[random.Random] = None,
                 clock=time.monotonic):
        self.settings = settings or SnowSettings()
        self.config = config or SettlingConfig()
        self.rng = rng or random.Random()
        self.frame_interval = frame_interval(fps)
        self._clock = clock
        self.screen = None
        self.renderer: Optional[SnowRenderer] = None
        self.running = False

        self.world_width, self.world_height = world_size or (80 * CELL_WIDTH, 24 * CELL_HEIGHT)
        self.source = source or DemoWindowDirectory(self.world_width, self.world_height, rng=self.rng)
        # The live desktop follows its own size; the demo follows the terminal
        self.follows_terminal = isinstance(self.source, DemoWindowDirectory)
        self.directory = CachedWindowDirectory(self.source, clock=clock)
        self.simulation = SettlingSimulation(self.directory, self.config, self.settings, self.rng)
        self.field = ParticleField(self.world_width, self.world_height,
                                   self.settings.intensity, self.settings.wind_enabled, self.rng)

        frames = self._load_sprites(sprite_dir) if sprite_dir else []
        self.sleigh = SleighFlight(self.world_width, self.world_height, frames, self.rng)
        self.scheduler = SleighScheduler(self.sleigh, self.settings.sleigh_enabled, self.rng)

    @staticmethod
    @with_error_handling(category=ErrorCategory.ASSET, operation="load_sleigh_sprites",
                         default_return=[])
    def _load_sprites(sprite_dir: str) -> list:
        """Sleigh frames; a broken sprite file only grounds the sleigh."""
        return load_frames(sprite_dir)

    # ------------------------------------------------------------------
    # Settings toggles

    def set_intensity(self, intensity: SnowIntensity):
        self.settings.intensity = intensity
        self.field.set_intensity(intensity)

    def toggle_wind(self):
        self.settings.wind_enabled = not self.settings.wind_enabled
        self.field.set_wind_enabled(self.settings.wind_enabled)

    def toggle_settling(self):
        self.simulation.set_settling_enabled(not self.settings.settling_enabled)

    def toggle_sleigh(self):
        self.settings.sleigh_enabled = not self.settings.sleigh_enabled
        self.scheduler.set_enabled(self.settings.sleigh_enabled)

    def handle_key(self, key: int) -> bool:
        """Apply a key press; returns False when the app should quit."""
        if key == -1:
            return True
        char = chr(key).lower() if 0 <= key < 256 else ""
        if char == 'q':
            return False
        if char == '1':
            self.set_intensity(SnowIntensity.LIGHT)
        elif char == '2':
            self.set_intensity(SnowIntensity.MEDIUM)
        elif char == '3':
            self.set_intensity(SnowIntensity.HEAVY)
        elif char == 'w':
            self.toggle_wind()
        elif char == 's':
            self.toggle_settling()
        elif char == 'x':
            self.toggle_sleigh()
        elif char == 'c':
            self.simulation.clear()
        return True

    # ------------------------------------------------------------------
    # Frame loop

    def resize_world(self, width: float, height: float):
        self.world_width, self.world_height = width, height
        self.field.resize(width, height)
        self.sleigh.width, self.sleigh.height = width, height
        if isinstance(self.source, DemoWindowDirectory):
            self.source.resize(width, height)
            self.simulation.clear()
        self.directory.invalidate()
        if self.renderer is not None:
            self.renderer.resize(width, height)

    def step(self, delta_time: float):
        """Advance everything by one frame."""
        delta_time = min(max(0.0, delta_time), Timing.MAX_TICK_DELTA)
        if isinstance(self.source, DemoWindowDirectory):
            self.source.advance(delta_time)

        self.field.step()
        result = self.simulation.tick(delta_time, self.field.particles)
        for event in result.events:
            self.field.respawn(event.particle_index)
        self.scheduler.advance(delta_time)
        return result

    def status_line(self) -> str:
        stats = self.simulation.stats()
        s = self.settings
        line = (f" snowdrift | {s.intensity.value} | wind {'on' if s.wind_enabled else 'off'}"
                f" | settling {'on' if s.settling_enabled else 'off'}"
                f" | sleigh {'on' if s.sleigh_enabled else 'off'}"
                f" | piles {stats['piles']} cols {stats['columns']}")
        errors = get_error_aggregator().get_error_summary()['total_errors']
        if errors:
            line += f" | errors {errors}"
        return line + " | 1/2/3 w s x c q"

    def run(self):
        curses.wrapper(self._main_loop)

    def _main_loop(self, screen):
        self.screen = screen
        self.running = True
        curses.curs_set(0)
        Colors.init_colors()
        screen.nodelay(True)

        self._sync_terminal_size()
        self.renderer = SnowRenderer(screen, self.world_width, self.world_height)

        last = self._clock()
        while self.running:
            try:
                now = self._clock()
                delta = now - last
                last = now

                if self._sync_terminal_size():
                    self.renderer.resize(self.world_width, self.world_height)

                self.step(delta)
                self.renderer.render(self.simulation.windows, self.simulation.snapshot(),
                                     self.field.particles, self.sleigh, self.status_line())

                key = screen.getch()
                if not self.handle_key(key):
                    self.running = False

                spent = self._clock() - now
                if spent < self.frame_interval:
                    time.sleep(self.frame_interval - spent)
            except KeyboardInterrupt:
                self.running = False
            except curses.error as e:
                handle_error(e, "render_frame", category=ErrorCategory.RENDER)

    def _sync_terminal_size(self) -> bool:
        """Match the demo world to the terminal; True if it changed."""
        if not self.follows_terminal:
            return False
        height, width = self.screen.getmaxyx()
        world = (width * CELL_WIDTH, max(1, height - 1) * CELL_HEIGHT)
        if world == (self.world_width, self.world_height):
            return False
        self.resize_world(*world)
        return True


def _setup_logging(log_file: Optional[str], level: str):
    handlers = [logging.FileHandler(log_file)] if log_file else [logging.NullHandler()]
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s %(name)s [%(levelname)s] %(message)s',
        handlers=handlers,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for the snowdrift command."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Snowdrift - snow that settles on your windows",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    snowdrift                        # Demo windows in the terminal
    snowdrift --intensity heavy      # 500 flakes
    snowdrift --x11 --log-file snow.log
    snowdrift --features             # Which backends this machine supports

Keyboard Shortcuts:
    1/2/3 Light / medium / heavy snow
    w     Toggle wind
    s     Toggle settling (off clears all snow)
    x     Toggle the sleigh
    c     Clear settled snow
    q     Quit
        """
    )
    parser.add_argument("--intensity", "-i", choices=[m.value for m in SnowIntensity],
                        help="Snowfall intensity (default: medium, or $SNOWDRIFT_INTENSITY)")
    parser.add_argument("--no-wind", action="store_true", help="Disable wind sway")
    parser.add_argument("--no-settling", action="store_true", help="Disable snow settling")
    parser.add_argument("--no-sleigh", action="store_true", help="Disable the sleigh")
    parser.add_argument("--config", "-c", type=str, help="JSON settings file")
    parser.add_argument("--fps", type=float, default=Timing.FRAME_RATE,
                        help="Frame rate (default: 60)")
    parser.add_argument("--sprites", type=str,
                        help="Directory holding RegularSantaRudolf1..4.xpm")
    parser.add_argument("--log-file", type=str, help="Write logs to this file")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--features", action="store_true",
                        help="Show which optional features are available and exit")
    parser.add_argument("--x11", action="store_true",
                        help="Settle on real X11 windows instead of demo windows")

    args = parser.parse_args(argv)
    _setup_logging(args.log_file, args.log_level)
    log_feature_summary(logging.DEBUG)

    if args.features:
        for name, status in sorted(get_feature_status().items()):
            mark = "yes" if status["available"] else "no"
            print(f"{name:<8} {mark:<4} {status['reason']}")
        return 0

    try:
        settings, physics = load_settings(args.config)
        if os.environ.get("SNOWDRIFT_INTENSITY"):
            settings.intensity = intensity_from_env(settings.intensity)
    except ConfigError as e:
        handle_error(e, "load_settings", category=ErrorCategory.CONFIG)
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.intensity:
        settings.intensity = SnowIntensity.from_name(args.intensity)
    if args.no_wind:
        settings.wind_enabled = False
    if args.no_settling:
        settings.settling_enabled = False
    if args.no_sleigh:
        settings.sleigh_enabled = False

    if not CURSES_AVAILABLE or not FEATURES.CURSES:
        print("Error: curses library not available.", file=sys.stderr)
        if sys.platform == 'win32':
            print("Try: pip install windows-curses", file=sys.stderr)
        return 1

    source: Optional[WindowSource] = None
    world_size = None
    if args.x11:
        if not FEATURES.X11:
            info = FEATURES.get_info("X11")
            print(f"Error: X11 backend unavailable ({info.reason if info else 'unknown'})",
                  file=sys.stderr)
            return 1
        x11 = X11WindowDirectory()
        with safe_execute("x11_screen_size", ErrorCategory.WINDOWING) as result:
            result.value = x11.screen_size()
        if not result.success:
            print(f"Error: {result.error.error}", file=sys.stderr)
            return 1
        world_size = result.value
        source = x11

    sprite_dir = args.sprites
    if sprite_dir and not Path(sprite_dir).is_dir():
        logger.warning(f"Sprite directory {sprite_dir} does not exist")
        sprite_dir = None

    app = SnowApp(settings, physics, source=source, world_size=world_size,
                  sprite_dir=sprite_dir, fps=args.fps)
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
