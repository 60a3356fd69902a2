"""
Feature Detection for snowdrift

Works out once which optional capabilities this machine offers, so the CLI
can pick a front-end and a window directory backend without trial and error.

Usage:
    from snowdrift.features import FEATURES, log_feature_summary

    if FEATURES.X11:
        source = X11WindowDirectory()
"""

import logging
import os
import shutil
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform == 'win32'

X11_TOOLS = ['wmctrl', 'xprop', 'xwininfo']


@dataclass
class FeatureInfo:
    """Information about a feature's availability."""
    available: bool
    reason: str = ""
    dependencies: List[str] = field(default_factory=list)
    platform_notes: str = ""


def _check_import(module_path: str, items: Optional[List[str]] = None) -> Tuple[bool, str]:
    """
    Check if a module can be imported.

    Returns:
        Tuple of (available, reason)
    """
    try:
        if items:
            module = __import__(module_path, fromlist=items)
            for item in items:
                getattr(module, item)
        else:
            __import__(module_path)
        return True, "OK"
    except ImportError as e:
        return False, f"ImportError: {e}"
    except AttributeError as e:
        return False, f"Missing attribute: {e}"


def _check_tools(tools: List[str], env_var: Optional[str] = None) -> Tuple[bool, str]:
    """Check that external programs are on PATH (and a display is set)."""
    if env_var and not os.environ.get(env_var):
        return False, f"{env_var} is not set"
    missing = [tool for tool in tools if shutil.which(tool) is None]
    if missing:
        return False, f"Not on PATH: {', '.join(missing)}"
    return True, "OK"


class Features:
    """
    Feature availability, checked once at construction and cached.
    """

    def __init__(self):
        self._features: Dict[str, FeatureInfo] = {}
        self._detect_all()

    def _detect_all(self):
        self._detect_feature(
            "CURSES",
            "curses",
            ["initscr", "wrapper"],
            "Terminal front-end",
            dependencies=["windows-curses"] if IS_WINDOWS else [],
        )

        self._detect_feature(
            "PSUTIL",
            "psutil",
            ["Process"],
            "Own-process window filtering",
            dependencies=["psutil"],
        )

        available, reason = _check_tools(X11_TOOLS, env_var="DISPLAY")
        self._features["X11"] = FeatureInfo(
            available=available,
            reason="Live desktop windows via wmctrl/xprop" if available else reason,
            dependencies=X11_TOOLS,
            platform_notes="EWMH-compliant X11 window manager required",
        )

    def _detect_feature(
        self,
        name: str,
        module_path: str,
        items: List[str],
        description: str,
        dependencies: Optional[List[str]] = None,
        platform_notes: str = ""
    ):
        """Detect a single feature and store its info."""
        available, reason = _check_import(module_path, items)

        self._features[name] = FeatureInfo(
            available=available,
            reason=reason if not available else description,
            dependencies=dependencies or [],
            platform_notes=platform_notes
        )

    def __getattr__(self, name: str) -> bool:
        """Allow FEATURES.X11 style access."""
        if name.startswith('_'):
            raise AttributeError(name)
        if name in self._features:
            return self._features[name].available
        raise AttributeError(f"Unknown feature: {name}")

    def get_info(self, name: str) -> Optional[FeatureInfo]:
        return self._features.get(name)

    def get_all(self) -> Dict[str, FeatureInfo]:
        return self._features.copy()

    def get_available(self) -> List[str]:
        return [name for name, info in self._features.items() if info.available]

    def get_unavailable(self) -> List[str]:
        return [name for name, info in self._features.items() if not info.available]


# Singleton instance
FEATURES = Features()


def get_feature_status() -> Dict[str, dict]:
    """Feature name -> {available, reason, dependencies, platform_notes}."""
    return {
        name: {
            "available": info.available,
            "reason": info.reason,
            "dependencies": info.dependencies,
            "platform_notes": info.platform_notes
        }
        for name, info in FEATURES.get_all().items()
    }


def log_feature_summary(log_level: int = logging.INFO):
    """Log which features are available and why the others are not."""
    available = FEATURES.get_available()
    unavailable = FEATURES.get_unavailable()

    logger.log(log_level, f"Feature Summary: {len(available)} available, {len(unavailable)} unavailable")

    if available:
        logger.log(log_level, f"  Available: {', '.join(sorted(available))}")

    if unavailable:
        logger.log(log_level, f"  Unavailable: {', '.join(sorted(unavailable))}")
        for name in sorted(unavailable):
            info = FEATURES.get_info(name)
            if info:
                logger.debug(f"    {name}: {info.reason}")
