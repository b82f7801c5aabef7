"""
Console logging for the shipment intake service.

Every module calls ``get_logger(__name__)``; the level comes from
``settings.LOG_LEVEL`` unless a caller passes one explicitly.
"""

import logging
import sys
from typing import Optional

from shipchat.core.config import settings

DEFAULT_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'

# level name -> (ANSI colour, icon)
LEVEL_STYLES = {
    'DEBUG': ('\033[36m', '🔍'),
    'INFO': ('\033[32m', '✅'),
    'WARNING': ('\033[33m', '⚠️'),
    'ERROR': ('\033[31m', '❌'),
    'CRITICAL': ('\033[35m', '🚨'),
}
RESET = '\033[0m'
BOLD = '\033[1m'


class ColoredFormatter(logging.Formatter):
    """Colour and icon per level, bold logger name."""

    def format(self, record):
        # Work on a copy so other handlers see the plain record
        record = logging.makeLogRecord(record.__dict__)
        style = LEVEL_STYLES.get(record.levelname)
        if style:
            colour, icon = style
            record.levelname = f"{colour}{BOLD}{icon} {record.levelname}{RESET}"
        record.name = f"{BOLD}{record.name}{RESET}"
        return super().format(record)


def _resolve_level(level: Optional[int]) -> int:
    if level is not None:
        return level
    resolved = logging.getLevelName(settings.LOG_LEVEL.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(
    name: str,
    level: Optional[int] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Attach a stdout handler with ColoredFormatter to the named logger.

    Args:
        name: Logger name (typically __name__ of the module)
        level: Logging level (default: settings.LOG_LEVEL, INFO if unknown)
        format_string: Custom format string (optional)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = _resolve_level(level)
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(format_string or DEFAULT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    return setup_logger(name)


def log_separator(logger: logging.Logger, char: str = "=", length: int = 60):
    logger.info(char * length)
