"""
Window Directory - visible foreign windows, their geometry and stacking.

The simulation only consumes ``WindowDirectory.get_visible_windows()``.
Backends report raw ``WindowRecord`` entries front-to-back;
``CachedWindowDirectory`` rate-limits the backend, filters out windows the
simulation must ignore and assigns stack ranks.

Usage:
    from snowdrift.windows import CachedWindowDirectory, X11WindowDirectory

    directory = CachedWindowDirectory(X11WindowDirectory())
    windows = directory.get_visible_windows()
"""

import logging
import os
import re
import shutil
import subprocess
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, List, Optional, Sequence, Set

import psutil

from .constants import Geometry, Timing
from .exceptions import WindowDirectoryUnavailable
from .models import Rect, WindowSnapshot

logger = logging.getLogger(__name__)

NORMAL_LAYER = 0


@dataclass(frozen=True)
class WindowRecord:
    """A window as reported by a backend, before filtering."""
    window_id: Hashable
    rect: Rect
    layer: int = NORMAL_LAYER
    pid: Optional[int] = None
    title: str = ""


class WindowDirectory(ABC):
    """
    Abstract source of the current window snapshot.

    Implementations may be slow; callers go through CachedWindowDirectory.
    """

    @abstractmethod
    def get_visible_windows(self) -> List[WindowSnapshot]:
        """
        Visible windows, front to back.

        Raises:
            WindowDirectoryUnavailable: geometry cannot be obtained right now
        """
        pass


class WindowSource(ABC):
    """Backend that lists raw window records, frontmost first."""

    @abstractmethod
    def list_windows(self) -> List[WindowRecord]:
        pass


class StaticWindowDirectory(WindowDirectory, WindowSource):
    """Fixed, replaceable window list for tests and demos."""

    def __init__(self, windows: Optional[Sequence[WindowSnapshot]] = None):
        self._windows: List[WindowSnapshot] = list(windows or [])

    def set_windows(self, windows: Sequence[WindowSnapshot]):
        self._windows = list(windows)

    def get_visible_windows(self) -> List[WindowSnapshot]:
        return list(self._windows)

    def list_windows(self) -> List[WindowRecord]:
        ordered = sorted(self._windows, key=lambda w: w.stack_rank)
        return [WindowRecord(w.window_id, w.rect, title=w.title) for w in ordered]


def own_process_ids() -> Set[int]:
    """This process and all of its descendants."""
    try:
        me = psutil.Process(os.getpid())
        return {me.pid} | {child.pid for child in me.children(recursive=True)}
    except psutil.Error:
        return {os.getpid()}


class CachedWindowDirectory(WindowDirectory):
    """
    Rate-limited, filtered view over a WindowSource.

    The source is queried at most once per ``refresh_interval``; callers get
    the cached snapshot in between, so geometry may be up to one interval
    stale. A failing source is also remembered for one interval.
    """

    def __init__(self, source: WindowSource,
                 refresh_interval: float = Timing.WINDOW_REFRESH_INTERVAL,
                 min_size: float = Geometry.MIN_WINDOW_SIZE,
                 clock: Callable[[], float] = time.monotonic,
                 excluded_pids: Optional[Callable[[], Set[int]]] = None):
        self.source = source
        self.refresh_interval = refresh_interval
        self.min_size = min_size
        self._clock = clock
        self._excluded_pids = excluded_pids or own_process_ids
        self._cached: List[WindowSnapshot] = []
        self._last_refresh: Optional[float] = None
        self._last_error: Optional[WindowDirectoryUnavailable] = None
        self.refresh_count = 0

    def invalidate(self):
        """Force a refresh on the next query."""
        self._last_refresh = None

    def _accept(self, record: WindowRecord, excluded: Set[int]) -> bool:
        if record.layer != NORMAL_LAYER:
            return False
        if record.pid is not None and record.pid in excluded:
            return False
        return record.rect.width > self.min_size and record.rect.height > self.min_size

    def _refresh(self) -> List[WindowSnapshot]:
        records = self.source.list_windows()
        excluded = self._excluded_pids()
        accepted = [r for r in records if self._accept(r, excluded)]
        return [
            WindowSnapshot(r.window_id, r.rect, stack_rank=rank, title=r.title)
            for rank, r in enumerate(accepted)
        ]

    def get_visible_windows(self) -> List[WindowSnapshot]:
        now = self._clock()
        if self._last_refresh is not None and now - self._last_refresh < self.refresh_interval:
            if self._last_error is not None:
                raise self._last_error
            return list(self._cached)

        self._last_refresh = now
        self.refresh_count += 1
        try:
            self._cached = self._refresh()
        except WindowDirectoryUnavailable as e:
            self._cached = []
            self._last_error = e
            raise
        self._last_error = None
        logger.debug(f"Window directory refreshed: {len(self._cached)} windows")
        return list(self._cached)


class X11WindowDirectory(WindowSource):
    """
    X11 backend built on ``wmctrl`` and ``xprop``.

    Reports windows on the current desktop in front-to-back order, with y
    flipped to a bottom-left origin. Sticky windows (desktop -1: panels,
    docks) are reported on a non-normal layer so they are filtered out.
    Minimized windows are not detected.
    """

    WMCTRL_LINE = re.compile(
        r'^(?P<id>0x[0-9a-fA-F]+)\s+(?P<desktop>-?\d+)\s+(?P<pid>-?\d+)\s+'
        r'(?P<x>-?\d+)\s+(?P<y>-?\d+)\s+(?P<w>\d+)\s+(?P<h>\d+)\s+\S+\s?(?P<title>.*)$'
    )
    STACKING_IDS = re.compile(r'0x[0-9a-fA-F]+')
    ROOT_SIZE = re.compile(r'^\s*(Width|Height):\s*(\d+)', re.MULTILINE)

    def __init__(self, timeout: float = 1.0,
                 runner: Optional[Callable[[List[str], float], str]] = None):
        self.timeout = timeout
        self._run = runner or self._run_command
        self._screen_height: Optional[int] = None
        self._screen_width: Optional[int] = None

    @staticmethod
    def is_supported() -> bool:
        return bool(os.environ.get('DISPLAY')) and all(
            shutil.which(tool) for tool in ('wmctrl', 'xprop', 'xwininfo'))

    @staticmethod
    def _run_command(args: List[str], timeout: float) -> str:
        try:
            result = subprocess.run(args, capture_output=True, text=True,
                                    timeout=timeout, check=True)
        except (OSError, subprocess.SubprocessError) as e:
            raise WindowDirectoryUnavailable(f"{args[0]} failed: {e}") from e
        return result.stdout

    def screen_size(self):
        """(width, height) of the root window, queried once."""
        if self._screen_height is None:
            output = self._run(['xwininfo', '-root'], self.timeout)
            sizes = dict(self.ROOT_SIZE.findall(output))
            if 'Width' not in sizes or 'Height' not in sizes:
                raise WindowDirectoryUnavailable("Cannot determine root window size")
            self._screen_width = int(sizes['Width'])
            self._screen_height = int(sizes['Height'])
        return self._screen_width, self._screen_height

    def _current_desktop(self) -> Optional[int]:
        for line in self._run(['wmctrl', '-d'], self.timeout).splitlines():
            parts = line.split()
            if len(parts) > 1 and parts[1] == '*':
                return int(parts[0])
        return None

    def _stacking_order(self) -> List[int]:
        """Window ids bottom-to-top."""
        output = self._run(['xprop', '-root', '_NET_CLIENT_LIST_STACKING'], self.timeout)
        return [int(wid, 16) for wid in self.STACKING_IDS.findall(output)]

    def list_windows(self) -> List[WindowRecord]:
        _, screen_height = self.screen_size()
        desktop = self._current_desktop()

        records: Dict[int, WindowRecord] = {}
        for line in self._run(['wmctrl', '-lpG'], self.timeout).splitlines():
            match = self.WMCTRL_LINE.match(line.strip())
            if not match:
                continue
            window_desktop = int(match.group('desktop'))
            if desktop is not None and window_desktop not in (desktop, -1):
                continue
            x, y = int(match.group('x')), int(match.group('y'))
            w, h = int(match.group('w')), int(match.group('h'))
            pid = int(match.group('pid'))
            window_id = int(match.group('id'), 16)
            records[window_id] = WindowRecord(
                window_id=window_id,
                rect=Rect(x, screen_height - y - h, w, h),
                layer=NORMAL_LAYER if window_desktop >= 0 else 1,
                pid=pid if pid > 0 else None,
                title=match.group('title'),
            )

        ordered = [records[wid] for wid in reversed(self._stacking_order()) if wid in records]
        seen = {r.window_id for r in ordered}
        ordered.extend(r for wid, r in records.items() if wid not in seen)
        return ordered
