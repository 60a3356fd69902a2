"""
Configuration - user-facing snow settings and physics tunables.

Settings files are JSON with two optional sections:

    {
        "settings": {"intensity": "heavy", "wind_enabled": false},
        "physics": {"max_height": 60.0, "base_slope": 1.5}
    }

Anything omitted falls back to the defaults in ``snowdrift.constants``.
"""

import json
import logging
import math
import os
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from .constants import Decay, Fade, Geometry, ParticleCounts, Settling, Slope, Timing
from .exceptions import ConfigError

logger = logging.getLogger(__name__)

INTENSITY_ENV_VAR = "SNOWDRIFT_INTENSITY"


class SnowIntensity(Enum):
    """Snowfall intensity levels."""
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"

    @property
    def particle_count(self) -> int:
        return {
            SnowIntensity.LIGHT: ParticleCounts.LIGHT,
            SnowIntensity.MEDIUM: ParticleCounts.MEDIUM,
            SnowIntensity.HEAVY: ParticleCounts.HEAVY,
        }[self]

    @classmethod
    def from_name(cls, name: str) -> 'SnowIntensity':
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ConfigError(f"Unknown snow intensity {name!r} (expected one of: {valid})")


@dataclass
class SettlingConfig:
    """Physics tunables for the settling simulation."""
    # Geometry
    column_width: float = Geometry.COLUMN_WIDTH
    corner_radius: float = Geometry.CORNER_RADIUS
    collision_tolerance: float = Geometry.COLLISION_TOLERANCE

    # Accretion
    max_height: float = Settling.MAX_HEIGHT
    deposit_scale: float = Settling.DEPOSIT_SCALE
    min_height_epsilon: float = Settling.MIN_HEIGHT_EPSILON
    max_age: float = Settling.MAX_COLUMN_AGE

    # Decay
    idle_melt_threshold: float = Decay.IDLE_MELT_THRESHOLD
    melt_per_tick: float = Decay.MELT_PER_TICK
    settle_threshold: float = Decay.SETTLE_THRESHOLD
    compaction_per_tick: float = Decay.COMPACTION_PER_TICK
    compaction_floor: float = Decay.COMPACTION_FLOOR
    min_compacted_height: float = Decay.MIN_COMPACTED_HEIGHT

    # Redistribution
    base_slope: float = Slope.BASE_THRESHOLD
    aggressive_variation: float = Slope.AGGRESSIVE_VARIATION
    gentle_variation: float = Slope.GENTLE_VARIATION
    min_slope: float = Slope.MIN_THRESHOLD
    aggressive_rate: float = Slope.AGGRESSIVE_RATE
    gentle_rate: float = Slope.GENTLE_RATE
    transfer_jitter: float = Slope.TRANSFER_JITTER
    transfer_epsilon: float = Slope.TRANSFER_EPSILON
    aggressive_passes: int = Slope.AGGRESSIVE_PASSES
    gentle_passes: int = Slope.GENTLE_PASSES

    # Rendering
    fade_start_age: float = Fade.START_AGE

    def validate(self) -> 'SettlingConfig':
        """Check internal consistency; raises ConfigError."""
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
                raise ConfigError(f"{f.name} must be a finite number, got {value!r}")
            if value < 0:
                raise ConfigError(f"{f.name} must not be negative, got {value!r}")

        if self.column_width <= 0:
            raise ConfigError("column_width must be positive")
        if self.max_height <= self.min_height_epsilon:
            raise ConfigError("max_height must exceed min_height_epsilon")
        if self.min_slope <= 0:
            raise ConfigError("min_slope must be positive")
        if self.aggressive_rate > 0.5 or self.gentle_rate > 0.5:
            raise ConfigError("transfer rates above 0.5 overshoot the neighbour")
        if self.transfer_jitter >= 1.0:
            raise ConfigError("transfer_jitter must be below 1.0")
        if self.min_compacted_height > self.compaction_floor:
            raise ConfigError("min_compacted_height must not exceed compaction_floor")
        for name in ('aggressive_passes', 'gentle_passes'):
            if not isinstance(getattr(self, name), int):
                raise ConfigError(f"{name} must be a whole number, got {getattr(self, name)!r}")
        if self.aggressive_passes < 1 or self.gentle_passes < 1:
            raise ConfigError("redistribution needs at least one pass per mode")
        return self

    def deterministic(self) -> 'SettlingConfig':
        """Copy with all random jitter disabled."""
        return replace(self, aggressive_variation=0.0, gentle_variation=0.0, transfer_jitter=0.0)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SettlingConfig':
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown physics options: {', '.join(sorted(unknown))}")
        return cls(**data).validate()


@dataclass
class SnowSettings:
    """User-facing options, one per menu toggle."""
    intensity: SnowIntensity = SnowIntensity.MEDIUM
    wind_enabled: bool = True
    settling_enabled: bool = True
    sleigh_enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'intensity': self.intensity.value,
            'wind_enabled': self.wind_enabled,
            'settling_enabled': self.settling_enabled,
            'sleigh_enabled': self.sleigh_enabled,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SnowSettings':
        settings = cls()
        for key, value in data.items():
            if key == 'intensity':
                settings.intensity = SnowIntensity.from_name(value)
            elif key in ('wind_enabled', 'settling_enabled', 'sleigh_enabled'):
                if not isinstance(value, bool):
                    raise ConfigError(f"{key} must be true or false, got {value!r}")
                setattr(settings, key, value)
            else:
                raise ConfigError(f"Unknown setting: {key}")
        return settings


def load_settings(path: Union[str, Path, None]) -> Tuple[SnowSettings, SettlingConfig]:
    """
    Load settings and physics from a JSON file.

    A missing file yields defaults; an unreadable or invalid file raises
    ConfigError.
    """
    if path is None:
        return SnowSettings(), SettlingConfig()

    path = Path(path)
    if not path.exists():
        logger.info(f"No settings file at {path}, using defaults")
        return SnowSettings(), SettlingConfig()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read settings file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a JSON object")

    settings = SnowSettings.from_dict(data.get('settings') or {})
    physics = SettlingConfig.from_dict(data.get('physics') or {})
    logger.info(f"Loaded settings from {path}: intensity={settings.intensity.value}")
    return settings, physics


def save_settings(settings: SnowSettings, path: Union[str, Path],
                  physics: Optional[SettlingConfig] = None):
    """Write settings (and optionally physics) to a JSON file."""
    data: Dict[str, Any] = {'settings': settings.to_dict()}
    if physics is not None:
        data['physics'] = physics.to_dict()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, sort_keys=True)
    logger.debug(f"Saved settings to {path}")


def intensity_from_env(default: SnowIntensity = SnowIntensity.MEDIUM) -> SnowIntensity:
    """Intensity override from SNOWDRIFT_INTENSITY, if set."""
    value = os.environ.get(INTENSITY_ENV_VAR)
    if not value:
        return default
    return SnowIntensity.from_name(value)


def frame_interval(fps: float) -> float:
    """Seconds per frame for a requested rate, falling back to 60 Hz."""
    if not fps or not math.isfinite(fps) or fps <= 0:
        return Timing.FRAME_INTERVAL
    return 1.0 / fps
