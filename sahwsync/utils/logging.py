"""Logging configuration and setup utilities."""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from ..config.settings import SahwSyncSettings

# Custom log level between INFO(20) and DEBUG(10)
VERBOSE = 15
logging.addLevelName(VERBOSE, "VERBOSE")

THIRD_PARTY_LOGGERS = ("httpx", "httpcore", "aiosqlite", "asyncio")


def verbose(self: logging.Logger, message: Any, *args: Any, **kwargs: Any) -> None:
    """Log ``message`` at the VERBOSE level.

    Sits between INFO and DEBUG: enough to follow cache hits, probe results
    and prompt decisions without full debug output.

    Example:
        >>> logger = logging.getLogger(__name__)
        >>> logger.verbose("Cache hit for %s", "cached_qibla_direction")
    """
    if self.isEnabledFor(VERBOSE):
        self._log(VERBOSE, message, args, **kwargs)


logging.Logger.verbose = verbose  # type: ignore[attr-defined]


def get_log_level(level_name: str) -> int:
    """Get numeric log level from string name, including the custom VERBOSE level.

    Args:
        level_name: Log level name (DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL),
            case insensitive

    Returns:
        Numeric log level

    Raises:
        AttributeError: If the level name is not recognized
    """
    level_name = level_name.upper()
    if level_name == "VERBOSE":
        return VERBOSE
    level: int = getattr(logging, level_name)
    return level


class AutoColoredFormatter(logging.Formatter):
    """Formatter that auto-detects terminal color support."""

    COLORS = {
        "ERROR": {"truecolor": "\033[91m", "basic": "\033[31m", "none": ""},
        "INFO": {"truecolor": "\033[94m", "basic": "\033[34m", "none": ""},
        "VERBOSE": {"truecolor": "\033[92m", "basic": "\033[32m", "none": ""},
        "WARNING": {"truecolor": "\033[93m", "basic": "\033[33m", "none": ""},
        "DEBUG": {"truecolor": "\033[95m", "basic": "\033[35m", "none": ""},
        "CRITICAL": {"truecolor": "\033[91m\033[1m", "basic": "\033[31m\033[1m", "none": ""},
        "RESET": {"truecolor": "\033[0m", "basic": "\033[0m", "none": ""},
    }

    def __init__(self, *args: Any, enable_colors: bool = True, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.enable_colors = enable_colors
        self.color_mode = self._detect_color_support() if enable_colors else "none"

    def _detect_color_support(self) -> str:
        """Auto-detect terminal color capabilities."""
        if not hasattr(sys.stdout, "isatty") or not sys.stdout.isatty():
            return "none"

        term = os.environ.get("TERM", "").lower()
        colorterm = os.environ.get("COLORTERM", "").lower()

        if term == "dumb":
            return "none"
        if colorterm in ("truecolor", "24bit") or "256color" in term:
            return "truecolor"
        if term and "color" in term:
            return "basic"
        if os.name == "nt" and "WT_SESSION" in os.environ:
            return "truecolor"

        return "none"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors if supported."""
        formatted = super().format(record)

        if self.color_mode == "none":
            return formatted

        level_name = record.levelname
        if level_name in self.COLORS:
            color_start = self.COLORS[level_name][self.color_mode]
            color_end = self.COLORS["RESET"][self.color_mode]
            formatted = formatted.replace(level_name, f"{color_start}{level_name}{color_end}", 1)

        return formatted


class TimestampedFileHandler(logging.FileHandler):
    """Handler that creates timestamped log files per execution."""

    def __init__(
        self, log_dir: Union[str, Path], prefix: str = "sahwsync", max_files: int = 5
    ) -> None:
        self.log_dir = Path(log_dir)
        self.prefix = prefix
        self.max_files = max_files

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = self.log_dir / f"{prefix}_{timestamp}.log"

        self.log_dir.mkdir(parents=True, exist_ok=True)
        super().__init__(str(log_path), encoding="utf-8")

        self.cleanup_old_files()

    def cleanup_old_files(self) -> None:
        """Remove log files beyond max_files limit, keeping most recent."""
        log_files = list(self.log_dir.glob(f"{self.prefix}_*.log"))

        if len(log_files) > self.max_files:
            log_files.sort(key=lambda f: f.stat().st_mtime, reverse=True)

            for old_file in log_files[self.max_files :]:
                try:
                    old_file.unlink()
                except OSError:
                    pass  # Ignore cleanup errors


def setup_logging(settings: "SahwSyncSettings") -> logging.Logger:
    """Configure the ``sahwsync`` logger from settings.

    Adds a colored console handler and, when enabled, a timestamped file
    handler. Existing handlers on the package logger are replaced so repeated
    calls do not duplicate output.

    Args:
        settings: Application settings

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("sahwsync")
    logger.setLevel(logging.DEBUG)  # Handlers do the filtering
    logger.handlers.clear()
    logger.propagate = False

    if settings.logging.console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(get_log_level(settings.logging.console_level))
        console_handler.setFormatter(
            AutoColoredFormatter(
                "%(asctime)s - %(levelname)s - %(message)s",
                datefmt="%H:%M:%S",
                enable_colors=settings.logging.console_colors,
            )
        )
        logger.addHandler(console_handler)

    if settings.logging.file_enabled:
        if settings.logging.file_directory:
            log_dir = Path(settings.logging.file_directory)
        else:
            log_dir = settings.data_dir / "logs"

        file_handler = TimestampedFileHandler(
            log_dir=log_dir,
            prefix=settings.logging.file_prefix,
            max_files=settings.logging.max_log_files,
        )
        file_handler.setLevel(get_log_level(settings.logging.file_level))
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)
        logger.info(f"Logging to file: {file_handler.baseFilename}")

    third_party_level = get_log_level(settings.logging.third_party_level)
    for lib in THIRD_PARTY_LOGGERS:
        logging.getLogger(lib).setLevel(third_party_level)

    logger.debug(f"Logging initialized at {settings.logging.console_level} level")
    return logger


def apply_command_line_overrides(settings: "SahwSyncSettings", args: Any) -> "SahwSyncSettings":
    """Apply command-line argument overrides to logging settings.

    Priority: Command-line > Environment > YAML > Defaults. Modifies the
    settings object in place and returns it for convenience.

    Args:
        settings: Current settings object to modify
        args: Parsed command-line arguments from argparse

    Returns:
        Settings object with command-line overrides applied
    """
    if getattr(args, "log_level", None):
        settings.logging.console_level = args.log_level
        settings.logging.file_level = args.log_level

    if getattr(args, "verbose", False):
        settings.logging.console_level = "VERBOSE"
        settings.logging.file_level = "VERBOSE"

    if getattr(args, "quiet", False):
        settings.logging.console_level = "ERROR"

    if getattr(args, "no_log_colors", False):
        settings.logging.console_colors = False

    return settings
