"""
Unit tests for stagbc.utils.bc_logging module.

Tests include:
- Logger caching and handler setup
- Global configuration
- Boundary-condition summaries and timed operations
"""

from __future__ import annotations

import logging

import pytest

from stagbc.boundary.spc import ConstraintSet, SPCList
from stagbc.config import BCConfig
from stagbc.utils.bc_logging import (
    BCFormatter,
    LoggedOperation,
    configure_logging,
    get_logger,
    log_bc_summary,
    log_constraint_counts,
    summarize_settings,
)
from stagbc.utils.bc_logging.logger import BCLogger


@pytest.fixture
def plain_logger():
    """Propagating logger so caplog sees the records."""
    logger = logging.getLogger("test.plain")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def restore_settings():
    settings = summarize_settings()
    yield
    configure_logging(
        level=settings["level"],
        log_to_file=False,
        use_colors=settings["use_colors"],
        include_location=settings["include_location"],
    )


class TestLoggerCache:
    def setup_method(self):
        """Clean state before each test."""
        for name in [k for k in BCLogger._loggers if k.startswith("test.")]:
            del BCLogger._loggers[name]
            logging.getLogger(name).handlers.clear()

    def test_same_logger_returned(self):
        assert get_logger("test.cache") is get_logger("test.cache")

    def test_single_handler(self):
        logger = get_logger("test.handlers")
        get_logger("test.handlers")

        assert len(logger.handlers) == 1
        assert not logger.propagate

    def test_default_name_from_caller(self):
        assert get_logger().name == __name__


class TestConfiguration:
    def test_level(self, restore_settings):
        configure_logging(level="DEBUG")

        assert summarize_settings()["level"] == "DEBUG"
        assert get_logger("test.level").level == logging.DEBUG

    def test_log_file(self, temp_dir, restore_settings):
        path = temp_dir / "logs" / "run.log"
        configure_logging(log_to_file=True, log_file_path=path, use_colors=False)
        logger = get_logger("test.file")

        logger.warning("written to file")
        for handler in logger.handlers:
            handler.flush()

        assert "written to file" in path.read_text()

    def test_formatter_location(self):
        record = logging.LogRecord("x", logging.INFO, "rules.py", 12, "message", None, None)
        text = BCFormatter(include_location=True).format(record)

        assert "message" in text
        assert "[rules.py:12]" in text


class TestSummaries:
    def test_bc_summary(self, plain_logger, caplog):
        config = BCConfig(
            open_top=True,
            noslip=(False, False, False, False, True, False),
            window={"face": "Left", "bot": -2.0, "top": -1.0, "velin": 1.0},
            temperature={"top": 0.0},
        )

        with caplog.at_level(logging.INFO, logger="test.plain"):
            log_bc_summary(plain_logger, config)

        text = caplog.text
        assert "No-slip boundary mask [lt rt ft bk bm tp]: 0 0 0 0 1 0" in text
        assert "Open top boundary" in text
        assert "Boundary inflow/outflow face: Left" in text
        assert "Top boundary temperature: 0.0" in text
        assert "Open bottom" not in text

    def test_bc_summary_reports_logging_settings(self, plain_logger, caplog, restore_settings):
        configure_logging(level="DEBUG", log_to_file=False)

        with caplog.at_level(logging.DEBUG, logger="test.plain"):
            log_bc_summary(plain_logger, BCConfig())

        assert "Logging level DEBUG, log file: none" in caplog.text

    def test_constraint_counts(self, plain_logger, caplog):
        constraints = ConstraintSet(velocity=SPCList([0, 1], [0.0, 1.0]))

        with caplog.at_level(logging.DEBUG, logger="test.plain"):
            log_constraint_counts(plain_logger, constraints, 0.25)

        assert "velocity=2" in caplog.text
        assert "total=2" in caplog.text


class TestLoggedOperation:
    def test_success(self, plain_logger, caplog):
        with caplog.at_level(logging.INFO, logger="test.plain"), LoggedOperation(plain_logger, "assembly"):
            pass

        assert "Starting assembly" in caplog.text
        assert "Completed assembly" in caplog.text

    def test_failure_propagates(self, plain_logger, caplog):
        with caplog.at_level(logging.INFO, logger="test.plain"):
            with pytest.raises(RuntimeError, match="boom"), LoggedOperation(plain_logger, "assembly"):
                raise RuntimeError("boom")

        assert "Failed assembly" in caplog.text
