"""
Snowdrift TUI - curses front-end for the snow settling simulation.

Usage:
    snowdrift                   # Demo windows in the terminal
    snowdrift --x11             # Settle on real desktop windows
"""

from .app import DemoWindowDirectory, SnowApp, main
from .colors import Colors
from .renderer import SnowRenderer, Viewport

__all__ = [
    "Colors",
    "DemoWindowDirectory",
    "SnowApp",
    "SnowRenderer",
    "Viewport",
    "main",
]
