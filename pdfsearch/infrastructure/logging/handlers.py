"""Logging handlers for console, rotating file and test output."""

import logging
import logging.handlers
import sys
from pathlib import Path

from .context import ContextFilter
from .formatters import get_formatter


class ColoredConsoleHandler(logging.StreamHandler):
    """Console handler colouring the level name when attached to a TTY."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, stream=None):
        super().__init__(stream or sys.stdout)
        self.use_colors = hasattr(self.stream, "isatty") and self.stream.isatty() and sys.platform != "win32"

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        color = self.COLORS.get(record.levelname)
        if self.use_colors and color:
            formatted = formatted.replace(record.levelname, f"{color}{record.levelname}{self.RESET}", 1)
        return formatted


class RotatingFileHandler(logging.handlers.RotatingFileHandler):
    """Rotating file handler that creates its parent directory."""

    def __init__(self, filename: str, max_bytes: int = 10485760, backup_count: int = 5, encoding: str = "utf-8"):
        Path(filename).parent.mkdir(parents=True, exist_ok=True)
        super().__init__(filename=filename, maxBytes=max_bytes, backupCount=backup_count, encoding=encoding)


def _prepare(handler: logging.Handler, format_type: str, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(get_formatter(format_type))
    handler.addFilter(ContextFilter())
    return handler


def create_console_handler(
    format_type: str = "detailed", level: int = logging.INFO, use_colors: bool = True
) -> logging.Handler:
    """Create a stdout handler, coloured when ``use_colors`` is set."""
    handler = ColoredConsoleHandler() if use_colors else logging.StreamHandler(sys.stdout)
    return _prepare(handler, format_type, level)


def create_file_handler(
    filepath: str,
    format_type: str = "structured",
    level: int = logging.DEBUG,
    max_bytes: int = 10485760,
    backup_count: int = 5,
) -> logging.Handler:
    """Create a size-rotated file handler.

    Args:
        filepath: Path to the log file
        format_type: Formatter name
        level: Minimum level for this handler
        max_bytes: Size at which the file rotates
        backup_count: Number of rotated files to keep
    """
    handler = RotatingFileHandler(filename=filepath, max_bytes=max_bytes, backup_count=backup_count)
    return _prepare(handler, format_type, level)


def create_null_handler() -> logging.Handler:
    """Create a handler discarding every record."""
    return logging.NullHandler()
