"""Tests for coilvision.log -- logging setup and formatters."""

from __future__ import annotations

import logging
import os

import pytest

from coilvision.log import _ConsoleFormatter, _FileFormatter, setup_logging


@pytest.fixture
def scratch_logger():
    """Name of a throwaway logger, restored after the test."""
    name = "coilvision.test_log"
    yield name
    logger = logging.getLogger(name)
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def _record(level=logging.INFO, msg="hello", name="coilvision.cv") -> logging.LogRecord:
    return logging.LogRecord(name, level, "", 0, msg, (), None)


# ===================================================================
# Formatters
# ===================================================================

class TestFormatters:
    @pytest.mark.parametrize("level,code", [
        (logging.DEBUG, "DBG"),
        (logging.INFO, "INF"),
        (logging.WARNING, "WAR"),
        (logging.ERROR, "ERR"),
        (logging.CRITICAL, "FAT"),
    ])
    def test_console_level_codes(self, level, code):
        assert _ConsoleFormatter().format(_record(level)) == f"{code} hello"

    def test_file_format(self):
        line = _FileFormatter().format(_record(logging.WARNING, "slow poll"))
        assert line.endswith(f"coilvision.cv[{os.getpid()}].WAR [slow poll]")

    def test_file_format_includes_traceback(self):
        try:
            raise RuntimeError("kaput")
        except RuntimeError:
            import sys
            rec = logging.LogRecord("coilvision", logging.ERROR, "", 0, "failed", (), sys.exc_info())
        line = _FileFormatter().format(rec)
        assert "RuntimeError: kaput" in line
        assert line.endswith("]")


# ===================================================================
# setup_logging
# ===================================================================

class TestSetupLogging:
    def test_console_handler_warning_by_default(self, scratch_logger):
        logger = setup_logging(name=scratch_logger)

        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.WARNING
        assert logger.propagate is False

    def test_verbose_lowers_console_level(self, scratch_logger):
        logger = setup_logging(verbose=True, name=scratch_logger)
        assert logger.handlers[0].level == logging.DEBUG

    def test_repeated_calls_do_not_stack(self, scratch_logger):
        setup_logging(name=scratch_logger)
        logger = setup_logging(name=scratch_logger)
        assert len(logger.handlers) == 1

    def test_log_file(self, scratch_logger, tmp_path):
        path = tmp_path / "run.log"
        logger = setup_logging(log_file=str(path), name=scratch_logger)

        assert len(logger.handlers) == 2
        logger.debug("Polling iteration %s", "i1")
        for h in logger.handlers:
            h.flush()

        text = path.read_text()
        assert ".DBG [Polling iteration i1]" in text
