"""
Centralized tuning constants for the snow settling simulation.

Values are grouped by concern as class attributes so call sites read as
``Settling.MAX_HEIGHT`` and tests can assert relationships between them.
"""


class Geometry:
    """Spatial discretization of piles and window filtering."""
    COLUMN_WIDTH = 8.0          # Horizontal width of one pile column
    CORNER_RADIUS = 10.0        # Rounded window corners never collect snow
    MIN_WINDOW_SIZE = 50.0      # Windows this small or smaller are chrome
    COLLISION_TOLERANCE = 5.0   # Vertical band around a snow surface


class Settling:
    """Accretion limits."""
    MAX_HEIGHT = 80.0
    DEPOSIT_SCALE = 0.5         # Fraction of particle size added to a column
    MIN_HEIGHT_EPSILON = 0.1    # Columns at or below this are pruned
    MAX_COLUMN_AGE = 600.0      # Seconds


class Decay:
    """Melt and compaction model."""
    IDLE_MELT_THRESHOLD = 120.0     # Seconds without a deposit before melting
    MELT_PER_TICK = 0.005
    SETTLE_THRESHOLD = 2.0          # Seconds before compaction starts
    COMPACTION_PER_TICK = 0.002
    COMPACTION_FLOOR = 2.0          # Columns at or below this do not compact
    MIN_COMPACTED_HEIGHT = 2.0


class Slope:
    """Angle of repose and avalanche transfer."""
    BASE_THRESHOLD = 1.2
    AGGRESSIVE_VARIATION = 0.3
    GENTLE_VARIATION = 0.15
    MIN_THRESHOLD = 0.05
    AGGRESSIVE_RATE = 0.4
    GENTLE_RATE = 0.2
    TRANSFER_JITTER = 0.1       # Transfers scale by uniform(1 - j, 1 + j)
    TRANSFER_EPSILON = 0.001
    AGGRESSIVE_PASSES = 3
    GENTLE_PASSES = 2


class Timing:
    """Frame cadence and window directory refresh."""
    FRAME_RATE = 60.0
    FRAME_INTERVAL = 1.0 / 60.0
    WINDOW_REFRESH_INTERVAL = 0.5   # Directory queried at most at 2 Hz
    MAX_TICK_DELTA = 0.25           # Longer stalls are clamped by the host


class Fade:
    """Pile opacity derived from average column age."""
    START_AGE = 240.0
    MAX_OPACITY = 0.95
    MIN_OPACITY = 0.3


class ParticleCounts:
    """Falling particles per snowfall intensity."""
    LIGHT = 100
    MEDIUM = 250
    HEAVY = 500


class Sleigh:
    """Decorative sleigh flight."""
    START_X = -200.0
    EXIT_MARGIN = 200.0
    MIN_SPEED = 2.5
    MAX_SPEED = 4.5
    FRAME_HOLD = 8              # Updates per animation frame
    MIN_INTERVAL = 30.0         # Seconds between flights
    MAX_INTERVAL = 120.0
    FRAME_NAMES = (
        "RegularSantaRudolf1",
        "RegularSantaRudolf2",
        "RegularSantaRudolf3",
        "RegularSantaRudolf4",
    )
