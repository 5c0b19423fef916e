# logging_config.py
# Version 01.00.00.00 dated 20261019
# Centralized logging configuration for EasyGallery

"""
Centralized logging setup.

Every module obtains its logger through get_logger(__name__). The application
entry point calls setup_logging() once, before any other module logs.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Root namespace for all EasyGallery loggers
ROOT_LOGGER_NAME = "easygallery"

_configured = False


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name with ANSI codes."""

    COLORS = {
        logging.DEBUG: "\033[36m",     # cyan
        logging.INFO: "\033[32m",      # green
        logging.WARNING: "\033[33m",   # yellow
        logging.ERROR: "\033[31m",     # red
        logging.CRITICAL: "\033[35m",  # magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno)
        if not color:
            return super().format(record)

        original = record.levelname
        record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def setup_logging(log_level: str = "INFO",
                  console: bool = True,
                  use_colors: bool = True,
                  log_file: Optional[str] = None,
                  max_bytes: int = 5 * 1024 * 1024,
                  backup_count: int = 3) -> logging.Logger:
    """
    Configure the application logger hierarchy.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR)
        console: Log to stderr
        use_colors: Colorize console output (ignored when stderr is not a TTY)
        log_file: Optional path of a rotating log file
        max_bytes: Rotation size for the log file
        backup_count: Number of rotated files to keep

    Returns:
        The configured root application logger
    """
    global _configured

    root = logging.getLogger(ROOT_LOGGER_NAME)
    level = getattr(logging, str(log_level).upper(), logging.INFO)
    root.setLevel(level)

    # Reconfiguring replaces the previous handlers
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if console:
        stream_handler = logging.StreamHandler(sys.stderr)
        if use_colors and sys.stderr.isatty():
            stream_handler.setFormatter(ColoredFormatter(LOG_FORMAT, DATE_FORMAT))
        else:
            stream_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root.addHandler(stream_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8"
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root.addHandler(file_handler)

    root.propagate = False
    _configured = True
    root.debug(f"Logging configured (level={logging.getLevelName(level)}, file={log_file})")
    return root


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger inside the application namespace.

    Args:
        name: Usually __name__ of the calling module, or a class name

    Returns:
        logging.Logger
    """
    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def disable_external_logging():
    """Reduce noise from third-party libraries (Pillow, Qt)."""
    for noisy in ("PIL", "PIL.PngImagePlugin", "PIL.TiffImagePlugin", "PySide6"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def is_configured() -> bool:
    return _configured
