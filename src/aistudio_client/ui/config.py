"""UI configuration constants.

Centralizes magic numbers and configuration values for the UI module.
"""

import logging


class LogLevel:
    """Log level constants with numeric values for comparison.

    Values match the standard logging module, so records can be filtered
    with the same thresholds: DEBUG < INFO < WARNING < ERROR.
    """

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR

    _names = {
        DEBUG: "DEBUG",
        INFO: "INFO",
        WARNING: "WARNING",
        ERROR: "ERROR",
    }

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def name(cls, level: int) -> str:
        """Get the name for a log level."""
        return cls._names.get(level, "UNKNOWN")

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns DEBUG if invalid."""
        return cls._from_string.get(level_str.lower(), cls.DEBUG)

    @classmethod
    def normalize(cls, levelno: int) -> int:
        """Map any logging level number onto the nearest known level."""
        if levelno >= cls.ERROR:
            return cls.ERROR
        if levelno >= cls.WARNING:
            return cls.WARNING
        if levelno >= cls.INFO:
            return cls.INFO
        return cls.DEBUG


# Input history configuration
INPUT_HISTORY_MAX_SIZE = 100  # Maximum entries in input history

# Log panel configuration
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
LOG_MAX_MESSAGE_LENGTH = 500  # Characters before truncating log messages

# Chat display configuration
MESSAGE_TIMESTAMP_FORMAT = "%H:%M"

# Labels shown above each turn, keyed by TurnRole value
ROLE_LABELS = {
    "user": "You",
    "assistant": "AI",
    "system": "System",
}
