"""Logging setup and file-operation formatting for hopr."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_ROOT = "hopr"
_CONSOLE_FORMAT = "[hopr] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_OPERATION_SYMBOLS = {
    "create": "+",
    "delete": "-",
    "update": "~",
    "move": "~",
}


def get_logger(component: str | None = None) -> logging.Logger:
    """Return ``hopr.<component>``, or the ``hopr`` logger itself."""
    return logging.getLogger(f"{_ROOT}.{component}" if component else _ROOT)


def _level(verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def _attach(logger: logging.Logger, handler: logging.Handler, level: int, pattern: str) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(pattern))
    logger.addHandler(handler)


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route hopr logs to stderr and, when ``log_file`` is given, to that file.

    ``verbose`` wins over ``quiet``. The file sink always records DEBUG so a quiet
    console run still leaves a full trace of the migration. Calling this again
    replaces the handlers installed by the previous call.
    """
    console_level = _level(verbose, quiet)
    logger = get_logger()
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    _attach(logger, logging.StreamHandler(sys.stderr), console_level, _CONSOLE_FORMAT)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _attach(logger, logging.FileHandler(log_file, encoding="utf-8"), logging.DEBUG, _FILE_FORMAT)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(console_level)
    return logger


def format_operation(operation: str, target: str, destination: str | None = None) -> str:
    """Render one file operation as ``+ path``, ``- path`` or ``~ from → to``."""
    symbol = _OPERATION_SYMBOLS.get(operation, "?")
    if destination is not None:
        return f"{symbol} {target} → {destination}"
    return f"{symbol} {target}"


__all__ = ["configure_logging", "format_operation", "get_logger"]
