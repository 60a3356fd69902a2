"""
TUI Color Definitions - Curses color pair management.
"""

# Handle curses import for Windows compatibility
try:
    import curses
    CURSES_AVAILABLE = True
except ImportError:
    curses = None
    CURSES_AVAILABLE = False


class Colors:
    """Color pairs for curses."""
    NORMAL = 0
    STATUS = 1
    HEADER = 2
    WINDOW_FRAME = 3     # Outline of a tracked window
    WINDOW_TITLE = 4
    SNOW_BRIGHT = 5      # Fresh pile
    SNOW_DIM = 6         # Ageing pile
    SNOW_FADE = 7        # Nearly melted pile
    FLAKE = 8            # Falling particle
    SLEIGH_RED = 9
    SLEIGH_BROWN = 10
    SLEIGH_GOLD = 11
    WARNING = 12

    initialized = False

    @staticmethod
    def init_colors():
        """Initialize curses color pairs."""
        if not CURSES_AVAILABLE or curses is None:
            return
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(Colors.STATUS, curses.COLOR_BLACK, curses.COLOR_WHITE)
        curses.init_pair(Colors.HEADER, curses.COLOR_CYAN, -1)
        curses.init_pair(Colors.WINDOW_FRAME, curses.COLOR_BLUE, -1)
        curses.init_pair(Colors.WINDOW_TITLE, curses.COLOR_CYAN, -1)
        curses.init_pair(Colors.SNOW_BRIGHT, curses.COLOR_WHITE, -1)
        curses.init_pair(Colors.SNOW_DIM, curses.COLOR_WHITE, -1)
        curses.init_pair(Colors.SNOW_FADE, curses.COLOR_CYAN, -1)
        curses.init_pair(Colors.FLAKE, curses.COLOR_WHITE, -1)
        curses.init_pair(Colors.SLEIGH_RED, curses.COLOR_RED, -1)
        curses.init_pair(Colors.SLEIGH_BROWN, curses.COLOR_YELLOW, -1)
        curses.init_pair(Colors.SLEIGH_GOLD, curses.COLOR_YELLOW, -1)
        curses.init_pair(Colors.WARNING, curses.COLOR_YELLOW, -1)
        Colors.initialized = True

    @staticmethod
    def attr(pair: int, bold: bool = False, dim: bool = False) -> int:
        """Attribute for a pair; plain text until colors are initialized."""
        if not CURSES_AVAILABLE or curses is None:
            return 0
        value = curses.color_pair(pair) if Colors.initialized else 0
        if bold:
            value |= curses.A_BOLD
        if dim:
            value |= curses.A_DIM
        return value

    @staticmethod
    def for_opacity(opacity: float) -> int:
        """Snow pair for a pile opacity."""
        if opacity >= 0.8:
            return Colors.SNOW_BRIGHT
        if opacity >= 0.5:
            return Colors.SNOW_DIM
        return Colors.SNOW_FADE

    @staticmethod
    def for_rgb(rgb) -> int:
        """Closest sleigh pair for a sprite pixel colour."""
        r, g, b = rgb
        if r > 150 and g < 100 and b < 100:
            return Colors.SLEIGH_RED
        if r > 180 and g > 150 and b < 100:
            return Colors.SLEIGH_GOLD
        if r > 200 and g > 200 and b > 200:
            return Colors.SNOW_BRIGHT
        return Colors.SLEIGH_BROWN
