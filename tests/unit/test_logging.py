"""Unit tests for logging configuration."""

import json
import logging
import sys
from pathlib import Path

from design_catalog.catalog_logging import (
    LOGGER_NAME,
    JSONFormatter,
    LogCategory,
    debug_context,
    get_category_logger,
    get_logger,
    setup_logging,
)


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_file_logging(self, tmp_path: Path) -> None:
        """Test messages reach the log file when one is configured."""
        log_file = tmp_path / "logs" / "catalog.log"
        logger = setup_logging(log_file=log_file)

        logger.info("Snapshot written")

        assert "Snapshot written" in log_file.read_text()

    def test_json_format(self, tmp_path: Path) -> None:
        """Test JSON log format."""
        log_file = tmp_path / "json.log"
        setup_logging(log_file=log_file, log_format="json")

        get_category_logger(LogCategory.DIFF).info("Diff computed", extra={"duration_ms": 1.5})

        entry = json.loads(log_file.read_text().strip().split("\n")[-1])
        assert entry["message"] == "Diff computed"
        assert entry["logger"] == f"{LOGGER_NAME}.diff"
        assert entry["duration_ms"] == 1.5

    def test_quiet_and_verbose_levels(self) -> None:
        """Test quiet raises the console level and verbose lowers it."""
        quiet = setup_logging(quiet=True)
        assert quiet.handlers[0].level == logging.ERROR

        verbose = setup_logging(verbose=True)
        assert verbose.handlers[0].level == logging.DEBUG

    def test_category_loggers_are_children(self) -> None:
        """Test category loggers live under the package logger."""
        package_logger = get_logger()

        assert get_category_logger(LogCategory.ANALYSIS).parent is package_logger


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_exception_is_included(self) -> None:
        """Test exception info is serialized."""
        try:
            raise ValueError("bad token")
        except ValueError:
            record = logging.LogRecord(
                LOGGER_NAME, logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
            )

        entry = json.loads(JSONFormatter().format(record))

        assert entry["level"] == "ERROR"
        assert "bad token" in entry["exception"]


class TestDebugContext:
    """Tests for debug_context."""

    def test_restores_level(self) -> None:
        """Test the original level is restored on exit."""
        logger = logging.getLogger(f"{LOGGER_NAME}.scratch")
        logger.setLevel(logging.WARNING)

        with debug_context(logger) as active:
            assert active.level == logging.DEBUG

        assert logger.level == logging.WARNING
