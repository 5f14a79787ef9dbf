"""Unit tests for logging setup and command-line overrides."""

import argparse
import logging

import pytest

from sahwsync.config.settings import SahwSyncSettings
from sahwsync.utils.logging import (
    VERBOSE,
    AutoColoredFormatter,
    TimestampedFileHandler,
    apply_command_line_overrides,
    get_log_level,
    setup_logging,
)


@pytest.fixture
def settings(tmp_path):
    return SahwSyncSettings(data_dir=tmp_path, config_dir=tmp_path, _load_yaml=False)


@pytest.fixture
def package_logger():
    """Restore the package logger after setup_logging mutates it."""
    logger = logging.getLogger("sahwsync")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


class TestLogLevels:
    """Test level name resolution."""

    def test_verbose_level(self):
        assert get_log_level("verbose") == VERBOSE
        assert logging.getLevelName(VERBOSE) == "VERBOSE"

    def test_standard_level(self):
        assert get_log_level("warning") == logging.WARNING

    def test_unknown_level_raises(self):
        with pytest.raises(AttributeError):
            get_log_level("chatty")


class TestSetupLogging:
    """Test handler configuration."""

    def test_console_handler_only_by_default(self, settings, package_logger):
        logger = setup_logging(settings)

        assert logger is package_logger
        assert logger.propagate is False
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.INFO

    def test_repeated_setup_does_not_duplicate_handlers(self, settings, package_logger):
        setup_logging(settings)
        setup_logging(settings)

        assert len(package_logger.handlers) == 1

    def test_file_handler_in_data_dir(self, settings, package_logger, tmp_path):
        settings.logging.console_enabled = False
        settings.logging.file_enabled = True

        setup_logging(settings)

        handlers = package_logger.handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], TimestampedFileHandler)
        assert (tmp_path / "logs").is_dir()

    def test_third_party_loggers_quieted(self, settings, package_logger):
        settings.logging.third_party_level = "ERROR"

        setup_logging(settings)

        assert logging.getLogger("httpx").level == logging.ERROR


class TestTimestampedFileHandler:
    """Test log file rotation."""

    def test_old_files_removed(self, tmp_path):
        for i in range(4):
            (tmp_path / f"sahwsync_2026010{i}_000000.log").write_text("old")

        handler = TimestampedFileHandler(tmp_path, max_files=2)
        handler.close()

        assert len(list(tmp_path.glob("sahwsync_*.log"))) == 2


class TestFormatter:
    """Test colored formatting."""

    def test_colors_disabled(self):
        formatter = AutoColoredFormatter("%(levelname)s %(message)s", enable_colors=False)
        record = logging.LogRecord("sahwsync", logging.ERROR, __file__, 1, "boom", None, None)

        assert formatter.format(record) == "ERROR boom"


class TestCommandLineOverrides:
    """Test argparse overrides on logging settings."""

    def test_verbose_flag(self, settings):
        args = argparse.Namespace(log_level=None, verbose=True, quiet=False, no_log_colors=True)

        apply_command_line_overrides(settings, args)

        assert settings.logging.console_level == "VERBOSE"
        assert settings.logging.file_level == "VERBOSE"
        assert settings.logging.console_colors is False

    def test_quiet_wins_for_console(self, settings):
        args = argparse.Namespace(log_level="DEBUG", verbose=False, quiet=True, no_log_colors=False)

        apply_command_line_overrides(settings, args)

        assert settings.logging.console_level == "ERROR"
        assert settings.logging.file_level == "DEBUG"
