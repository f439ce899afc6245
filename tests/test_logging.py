"""Tests for hopr.logging."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from hopr.logging import configure_logging, format_operation, get_logger


@pytest.fixture
def hopr_logger() -> Iterator[logging.Logger]:
    yield get_logger()
    logger = get_logger()
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_format_operation_symbols() -> None:
    assert format_operation("create", "src/routes/index.tsx") == "+ src/routes/index.tsx"
    assert format_operation("delete", "next.config.ts") == "- next.config.ts"
    assert format_operation("update", "package.json") == "~ package.json"
    assert format_operation("move", "app/globals.css", "src/routes/globals.css") == (
        "~ app/globals.css → src/routes/globals.css"
    )
    assert format_operation("chmod", "x") == "? x"


def test_get_logger_nests_under_hopr() -> None:
    assert get_logger().name == "hopr"
    assert get_logger("materializer").name == "hopr.materializer"


def test_configure_logging_replaces_handlers(hopr_logger: logging.Logger) -> None:
    configure_logging(verbose=True)
    logger = configure_logging()

    assert logger is hopr_logger
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_quiet_console_keeps_debug_log_file(hopr_logger: logging.Logger, tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "hopr.log"

    logger = configure_logging(quiet=True, log_file=log_file)
    get_logger("tests").debug("planning moves")

    console, sink = logger.handlers
    assert console.level == logging.WARNING
    assert sink.level == logging.DEBUG
    sink.flush()
    text = log_file.read_text(encoding="utf-8")
    assert "planning moves" in text
    assert "hopr.tests" in text


def test_verbose_wins_over_quiet(hopr_logger: logging.Logger) -> None:
    logger = configure_logging(verbose=True, quiet=True)
    assert logger.level == logging.DEBUG
    assert logger.handlers[0].level == logging.DEBUG
