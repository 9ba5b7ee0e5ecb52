"""Logging setup for the Shelfmark command line."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "shelfmark"


def configure_logging(level: str = "WARNING", *, verbose: bool = False) -> logging.Logger:
    """Attach a rich stderr handler to the package logger.

    Calling this more than once replaces the handler instead of stacking them.

    Args:
        level: Level name from configuration, such as ``"WARNING"``.
        verbose: Force debug output regardless of ``level``.

    Returns:
        logging.Logger: The configured package logger.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    resolved = logging.DEBUG if verbose else logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.WARNING

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(resolved)
    logger.propagate = False
    return logger


__all__ = ["PACKAGE_LOGGER", "configure_logging"]
