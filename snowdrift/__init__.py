"""
Snowdrift - falling snow that settles on top of your windows.

The settling core (height fields, accretion, avalanche redistribution,
decay, occlusion and collision) is driven by ``SettlingSimulation.tick``
from a caller-owned frame loop.
"""

__version__ = "1.0.0"

from .config import SettlingConfig, SnowIntensity, SnowSettings, load_settings, save_settings
from .exceptions import ConfigError, SnowdriftError, SpriteFormatError, WindowDirectoryUnavailable
from .models import Particle, Pile, PileView, Rect, SettleEvent, WindowSnapshot
from .simulation import SettlingSimulation, TickResult
from .windows import CachedWindowDirectory, StaticWindowDirectory, WindowDirectory

__all__ = [
    "CachedWindowDirectory",
    "ConfigError",
    "Particle",
    "Pile",
    "PileView",
    "Rect",
    "SettleEvent",
    "SettlingConfig",
    "SettlingSimulation",
    "SnowIntensity",
    "SnowSettings",
    "SnowdriftError",
    "SpriteFormatError",
    "StaticWindowDirectory",
    "TickResult",
    "WindowDirectory",
    "WindowSnapshot",
    "WindowDirectoryUnavailable",
    "load_settings",
    "save_settings",
]
