"""Tests for logging configuration."""

import logging

from petspot.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("petspot")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert not logger.propagate


def test_configure_logging_applies_level() -> None:
    logger = logging.getLogger("petspot")
    logger.handlers.clear()

    configure_logging(logging.DEBUG)
    configure_logging(logging.WARNING)

    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
    assert logging.getLogger("petspot.services.flow").getEffectiveLevel() == (
        logging.WARNING
    )
