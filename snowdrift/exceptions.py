"""Exception hierarchy for snowdrift."""


class SnowdriftError(Exception):
    """Base class for all snowdrift errors."""


class ConfigError(SnowdriftError):
    """Invalid or unreadable configuration."""


class WindowDirectoryUnavailable(SnowdriftError):
    """The windowing system could not supply window geometry."""


class SpriteFormatError(SnowdriftError):
    """Malformed XPM sprite data."""
