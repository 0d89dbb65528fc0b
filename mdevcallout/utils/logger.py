"""
Logging Utilities for mdevcallout
=================================
Rich console logging with optional rotating file output.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


# Default log directory
DEFAULT_LOG_DIR = Path.home() / ".mdevcallout" / "logs"

# Log format strings
CONSOLE_FORMAT = "%(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEBUG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(funcName)s | %(message)s"


class LogConfig:
    """Logging configuration"""

    def __init__(
        self,
        level: int = logging.WARNING,
        log_dir: Optional[Path] = None,
        enable_file: bool = False,
        enable_console: bool = True,
        max_file_size: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
        debug_mode: bool = False
    ):
        self.level = level
        self.log_dir = log_dir or DEFAULT_LOG_DIR
        self.enable_file = enable_file
        self.enable_console = enable_console
        self.max_file_size = max_file_size
        self.backup_count = backup_count
        self.debug_mode = debug_mode


def setup_logging(
    name: str = "mdevcallout",
    config: Optional[LogConfig] = None,
    verbose: bool = False
) -> logging.Logger:
    """
    Set up logging for the application.

    Args:
        name: Logger name
        config: Logging configuration
        verbose: Enable verbose/debug output

    Returns:
        Configured logger
    """
    config = config or LogConfig()

    if verbose:
        config.level = logging.DEBUG
        config.debug_mode = True

    logger = logging.getLogger(name)
    logger.setLevel(config.level)
    logger.handlers.clear()

    # Console handler with Rich, on stderr so script output stays clean
    if config.enable_console:
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_time=config.debug_mode,
            show_path=config.debug_mode,
            rich_tracebacks=True,
            markup=False
        )
        console_handler.setLevel(config.level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    if config.enable_file:
        try:
            config.log_dir.mkdir(parents=True, exist_ok=True)

            file_handler = RotatingFileHandler(
                config.log_dir / f"{name}.log",
                maxBytes=config.max_file_size,
                backupCount=config.backup_count,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)

            file_format = DEBUG_FORMAT if config.debug_mode else FILE_FORMAT
            file_handler.setFormatter(logging.Formatter(file_format, datefmt="%Y-%m-%d %H:%M:%S"))

            logger.addHandler(file_handler)
        except OSError as e:
            # Can't log to file, just use console
            if config.enable_console:
                logger.warning(f"Failed to set up file logging: {e}")

    return logger


class SessionLogger:
    """
    Logger that prefixes every message with a session tag.

    Usage:
        log = SessionLogger(str(device.uuid))
        log.debug("looking for a callout script")
    """

    def __init__(self, session_id: str, base_logger: Optional[logging.Logger] = None):
        self.session_id = session_id
        self.logger = base_logger or logging.getLogger("mdevcallout")

    def _format_message(self, message: str) -> str:
        return f"[{self.session_id}] {message}"

    def debug(self, message: str, *args, **kwargs):
        self.logger.debug(self._format_message(message), *args, **kwargs)

    def info(self, message: str, *args, **kwargs):
        self.logger.info(self._format_message(message), *args, **kwargs)

    def warning(self, message: str, *args, **kwargs):
        self.logger.warning(self._format_message(message), *args, **kwargs)

    def error(self, message: str, *args, **kwargs):
        self.logger.error(self._format_message(message), *args, **kwargs)


__all__ = [
    'setup_logging',
    'LogConfig',
    'SessionLogger',
]
