"""Logging setup tests."""

import logging

from rich.logging import RichHandler

from shelfmark.logging_config import configure_logging


def test_configure_logging_replaces_handler() -> None:
    configure_logging("info")
    logger = configure_logging("debug")

    handlers = [handler for handler in logger.handlers if isinstance(handler, RichHandler)]
    assert len(handlers) == 1
    assert logger.level == logging.DEBUG

    assert configure_logging("nonsense").level == logging.WARNING
    assert configure_logging("error", verbose=True).level == logging.DEBUG
