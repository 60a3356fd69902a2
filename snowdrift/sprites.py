"""
Sleigh Sprites - XPM decoding and the decorative sleigh flight.

XPM is a text pixmap format: a header ``"width height ncolors cpp"``, one
colour definition per palette entry, then one string per pixel row. Both
the C-array form (XPM3, quoted strings) and bare XPM2 text are accepted.
"""

import logging
import random
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .constants import Sleigh
from .exceptions import SpriteFormatError

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

NAMED_COLORS: Dict[str, RGB] = {
    'black': (0, 0, 0),
    'white': (255, 255, 255),
    'red': (255, 0, 0),
    'green': (0, 128, 0),
    'blue': (0, 0, 255),
    'yellow': (255, 255, 0),
    'brown': (165, 42, 42),
    'gray': (190, 190, 190),
    'grey': (190, 190, 190),
}

COLOR_CONTEXTS = ('c', 'g', 'g4', 'm', 's')
QUOTED = re.compile(r'"([^"]*)"')


@dataclass
class XPMImage:
    """Decoded pixmap; ``None`` pixels are transparent."""
    width: int
    height: int
    pixels: List[List[Optional[RGB]]]

    def opaque_count(self) -> int:
        return sum(1 for row in self.pixels for p in row if p is not None)


def parse_color(value: str) -> Optional[RGB]:
    """Decode an XPM colour value; None for transparent or unknown."""
    value = value.strip()
    if value.lower() == 'none':
        return None
    if value.startswith('#'):
        digits = value[1:]
        if len(digits) == 12:
            # 16 bits per channel, keep the high byte
            digits = digits[0:2] + digits[4:6] + digits[8:10]
        if len(digits) != 6:
            return None
        try:
            rgb = int(digits, 16)
        except ValueError:
            return None
        return (rgb >> 16) & 0xFF, (rgb >> 8) & 0xFF, rgb & 0xFF
    return NAMED_COLORS.get(value.lower())


def _data_lines(text: str) -> List[str]:
    if '"' in text:
        return QUOTED.findall(text)
    return [line for line in text.splitlines()
            if line.strip() and not line.startswith('!')]


def _color_value(spec: str) -> str:
    """Pick the colour visual out of ``c #fff s name`` style specs."""
    tokens = spec.split()
    values: Dict[str, str] = {}
    i = 0
    while i < len(tokens) - 1:
        if tokens[i] in COLOR_CONTEXTS:
            values[tokens[i]] = tokens[i + 1]
            i += 2
        else:
            i += 1
    if 'c' in values:
        return values['c']
    for context in ('g', 'g4', 'm'):
        if context in values:
            return values[context]
    return tokens[-1] if tokens else 'None'


def parse_xpm(text: str) -> XPMImage:
    """
    Decode XPM text.

    Raises:
        SpriteFormatError: missing or malformed header, truncated palette
    """
    lines = _data_lines(text)
    if len(lines) < 2:
        raise SpriteFormatError("XPM data has no header or pixel rows")

    header = lines[0].split()
    if len(header) < 4:
        raise SpriteFormatError(f"Malformed XPM header: {lines[0]!r}")
    try:
        width, height, ncolors, cpp = (int(v) for v in header[:4])
    except ValueError as e:
        raise SpriteFormatError(f"Malformed XPM header: {lines[0]!r}") from e
    if width <= 0 or height <= 0 or ncolors <= 0 or cpp <= 0:
        raise SpriteFormatError(f"XPM header values must be positive: {lines[0]!r}")
    if len(lines) < 1 + ncolors:
        raise SpriteFormatError(f"XPM palette truncated: expected {ncolors} colours")

    palette: Dict[str, Optional[RGB]] = {}
    for line in lines[1:1 + ncolors]:
        key, spec = line[:cpp], line[cpp:]
        palette[key] = parse_color(_color_value(spec))

    pixels: List[List[Optional[RGB]]] = []
    for line in lines[1 + ncolors:1 + ncolors + height]:
        row = [palette.get(line[i:i + cpp]) for i in range(0, width * cpp, cpp)]
        pixels.append(row)

    if len(pixels) < height:
        logger.debug(f"XPM has {len(pixels)} of {height} rows, padding with transparency")
        pixels.extend([[None] * width for _ in range(height - len(pixels))])

    return XPMImage(width=width, height=height, pixels=pixels)


def load_xpm(path: Union[str, Path]) -> Optional[XPMImage]:
    """Read and decode an XPM file; None (logged) if it does not exist."""
    path = Path(path)
    if not path.is_file():
        logger.warning(f"Sprite not found: {path}")
        return None
    return parse_xpm(path.read_text(encoding='utf-8', errors='replace'))


def find_sprite(directory: Path, name: str) -> Optional[Path]:
    for suffix in ('.xpm', '.XPM'):
        candidate = directory / f"{name}{suffix}"
        if candidate.is_file():
            return candidate
    return None


def load_frames(directory: Union[str, Path],
                names: Sequence[str] = Sleigh.FRAME_NAMES) -> List[XPMImage]:
    """Load the named animation frames, skipping missing ones."""
    directory = Path(directory)
    frames = []
    for name in names:
        path = find_sprite(directory, name)
        if path is None:
            logger.warning(f"Sleigh frame {name} not found in {directory}")
            continue
        image = load_xpm(path)
        if image is not None:
            frames.append(image)
    if not frames:
        logger.warning("No sleigh frames loaded; sleigh disabled")
    return frames


class SleighFlight:
    """One sleigh crossing the screen left to right."""

    def __init__(self, width: float, height: float,
                 frames: Optional[List[XPMImage]] = None,
                 rng: Optional[random.Random] = None):
        self.width = width
        self.height = height
        self.frames = frames or []
        self.rng = rng or random.Random()
        self.x = Sleigh.START_X
        self.y = height * 0.7
        self.speed = 3.0
        self.active = False
        self.current_frame = 0
        self._frame_counter = 0

    def start_flight(self):
        self.x = Sleigh.START_X
        self.y = self.rng.uniform(self.height * 0.3, self.height * 0.7)
        self.speed = self.rng.uniform(Sleigh.MIN_SPEED, Sleigh.MAX_SPEED)
        self.active = True
        logger.debug(f"Sleigh departing at y={self.y:.0f}, speed={self.speed:.1f}")

    def update(self):
        if not self.active:
            return
        self.x += self.speed

        self._frame_counter += 1
        if self._frame_counter >= Sleigh.FRAME_HOLD:
            self._frame_counter = 0
            self.current_frame = (self.current_frame + 1) % max(1, len(self.frames))

        if self.x > self.width + Sleigh.EXIT_MARGIN:
            self.active = False

    @property
    def frame(self) -> Optional[XPMImage]:
        if not self.frames:
            return None
        return self.frames[self.current_frame % len(self.frames)]


class SleighScheduler:
    """Launches a flight every MIN_INTERVAL..MAX_INTERVAL seconds."""

    def __init__(self, flight: SleighFlight, enabled: bool = True,
                 rng: Optional[random.Random] = None):
        self.flight = flight
        self.enabled = enabled
        self.rng = rng or flight.rng
        self._countdown = self._next_interval()

    def _next_interval(self) -> float:
        return self.rng.uniform(Sleigh.MIN_INTERVAL, Sleigh.MAX_INTERVAL)

    def set_enabled(self, enabled: bool):
        self.enabled = enabled
        if not enabled:
            self.flight.active = False

    def trigger(self):
        """Start a flight now."""
        self.flight.start_flight()
        self._countdown = self._next_interval()

    def advance(self, delta_time: float):
        """Count down and update the flight; called once per frame."""
        if not self.enabled:
            return
        if not self.flight.active:
            self._countdown -= delta_time
            if self._countdown <= 0:
                self.trigger()
        self.flight.update()
