"""Logging setup for the command line.

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed here, by the CLI, on the ``release_link`` package logger.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "release_link"


def configure_logging(*, verbose: bool = False, stderr: bool = False) -> logging.Logger:
    """Install a rich handler on the package logger.

    Args:
        verbose: Log at DEBUG instead of INFO
        stderr: Write to stderr, keeping stdout free for JSON output

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()

    handler = RichHandler(
        console=Console(stderr=stderr),
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger
