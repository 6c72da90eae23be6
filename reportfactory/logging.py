"""Console logging for reportfactory.

Progress lines (``>>> Compiling report: ...``) are INFO records and print
bare so they read like a build log. Anything louder carries a
``[reportfactory] LEVEL`` prefix.
"""

from __future__ import annotations

import logging
import os

_ROOT = "reportfactory"
_PREFIXED_FORMAT = "[reportfactory] %(levelname)s %(message)s"


class _ConsoleFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__(_PREFIXED_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno == logging.INFO:
            return record.getMessage()
        return super().format(record)


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(f"{_ROOT}.{name}" if name else _ROOT)


def warn_cleanup(logger: logging.Logger, path: str | os.PathLike[str], exc: OSError) -> None:
    """Report a leftover that could not be removed; compilation carries on."""
    logger.warning("CleanupWarning: could not remove %s: %s", os.fspath(path), exc)


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """Send reportfactory records to stderr; ``verbose`` adds engine output and moves."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_ROOT)
    logger.setLevel(level)
    logger.propagate = False

    # main() may run repeatedly in one process
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(_ConsoleFormatter())
    logger.addHandler(handler)
    return logger


__all__ = ["configure_logging", "get_logger", "warn_cleanup"]
