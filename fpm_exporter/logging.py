"""
Logging configuration for Fpm Exporter.

Features:
- Console output with optional colors
- File output with rotation
"""

import logging
import logging.handlers
import sys
from dataclasses import dataclass
from pathlib import Path


ROOT_LOGGER = "fpm_exporter"


class Colors:
    """ANSI color codes."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"

    BRIGHT_RED = "\033[91m"


LEVEL_COLORS = {
    logging.DEBUG: Colors.DIM + Colors.CYAN,
    logging.INFO: Colors.GREEN,
    logging.WARNING: Colors.YELLOW,
    logging.ERROR: Colors.RED,
    logging.CRITICAL: Colors.BOLD + Colors.BRIGHT_RED,
}

# Matched as substrings of the logger name
COMPONENT_COLORS = {
    "config": Colors.MAGENTA,
    "collector": Colors.CYAN,
    "server": Colors.BLUE,
    "app": Colors.GREEN,
}


class ColoredFormatter(logging.Formatter):
    """
    Formatter that colors the level, the component name and
    warning/error messages.
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        use_colors: bool = True,
    ):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)

        saved = (record.levelname, record.name, record.msg)

        level_color = LEVEL_COLORS.get(record.levelno, "")
        record.levelname = f"{level_color}{record.levelname:8}{Colors.RESET}"

        for key, color in COMPONENT_COLORS.items():
            if key in record.name.lower():
                record.name = f"{color}{record.name}{Colors.RESET}"
                break

        if record.levelno >= logging.ERROR:
            record.msg = f"{Colors.RED}{record.msg}{Colors.RESET}"
        elif record.levelno >= logging.WARNING:
            record.msg = f"{Colors.YELLOW}{record.msg}{Colors.RESET}"

        try:
            return super().format(record)
        finally:
            record.levelname, record.name, record.msg = saved


class PlainFormatter(logging.Formatter):
    """Plain formatter without colors for file output."""

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        record.levelname = f"{record.levelname:8}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


@dataclass
class LogConfig:
    """Logging configuration."""

    # Console settings
    console_level: str = "info"
    console_colors: bool = True

    # File settings
    file_enabled: bool = False
    file_path: str = "/var/log/fpm-exporter/fpm-exporter.log"
    file_level: str = "debug"
    file_max_bytes: int = 10 * 1024 * 1024  # 10 MB
    file_backup_count: int = 5

    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"


def get_log_level(level_str: str) -> int:
    """Convert string log level to logging constant."""
    levels = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "warn": logging.WARNING,
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
    }
    return levels.get(str(level_str).lower(), logging.INFO)


def setup_logging(config: LogConfig | None = None) -> None:
    """
    Configure logging for the application.

    Safe to call more than once: handlers installed by a previous call
    are replaced.

    Args:
        config: Logging configuration (uses defaults if None)
    """
    if config is None:
        config = LogConfig()

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(logging.DEBUG)  # Capture all, filter at handlers

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(get_log_level(config.console_level))

    use_colors = config.console_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
    console_handler.setFormatter(
        ColoredFormatter(fmt=config.format, datefmt=config.date_format, use_colors=use_colors)
    )
    root_logger.addHandler(console_handler)

    if config.file_enabled:
        log_path = Path(config.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            config.file_path,
            maxBytes=config.file_max_bytes,
            backupCount=config.file_backup_count,
        )
        file_handler.setLevel(get_log_level(config.file_level))
        file_handler.setFormatter(PlainFormatter(fmt=config.format, datefmt=config.date_format))
        root_logger.addHandler(file_handler)

    # Connection pool chatter from requests
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a component.

    Args:
        name: Component name (will be prefixed with fpm_exporter)

    Returns:
        Logger instance
    """
    if name.startswith(ROOT_LOGGER):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
