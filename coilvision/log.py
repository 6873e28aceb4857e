"""
coilvision.log -- logging setup for the command-line tool.

    from coilvision.log import setup_logging
    setup_logging(verbose=True, log_file="coilvision.log")

Library modules only create named loggers (``coilvision``,
``coilvision.cv``, ``coilvision.train``); handlers are attached here.
"""
from __future__ import annotations

import datetime as _datetime
import logging
import logging.handlers
import os

__all__ = ["setup_logging"]

_LEVEL_CODES: dict[int, str] = {
    logging.DEBUG: "DBG",
    logging.INFO: "INF",
    logging.WARNING: "WAR",
    logging.ERROR: "ERR",
    logging.CRITICAL: "FAT",
}


class _FileFormatter(logging.Formatter):
    """``MM/DD/YY HH:MM:SS.ffffff name[pid].LVL [message]``"""

    def format(self, record: logging.LogRecord) -> str:
        ts = _datetime.datetime.fromtimestamp(record.created)
        code = _LEVEL_CODES.get(record.levelno, "INF")
        msg = record.getMessage()
        if record.exc_info:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"
        return (
            f"{ts.strftime('%x %H:%M:%S')}.{ts.microsecond:06d} "
            f"{record.name}[{os.getpid()}].{code} [{msg}]"
        )


class _ConsoleFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        code = _LEVEL_CODES.get(record.levelno, "INF")
        return f"{code} {record.getMessage()}"


def setup_logging(
    *,
    verbose: bool = False,
    log_file: str | None = None,
    name: str = "coilvision",
) -> logging.Logger:
    """Attach console (stderr) and optional file handlers to the *name* logger.

    Calling it again replaces the handlers instead of stacking them.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()

    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if verbose else logging.WARNING)
    ch.setFormatter(_ConsoleFormatter())
    logger.addHandler(ch)

    if log_file:
        fh = logging.handlers.WatchedFileHandler(log_file)
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(_FileFormatter())
        logger.addHandler(fh)

    return logger
