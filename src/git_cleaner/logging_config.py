"""Logging configuration."""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "git_cleaner"


def setup_logging(verbose: bool = False) -> None:
    """Route package log records to stderr through rich.

    Warnings (such as unreadable config files) are always shown; debug output
    only with verbose.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    # Replace our own handler on repeated calls (tests invoke the app many times)
    for handler in list(logger.handlers):
        if getattr(handler, "_git_cleaner", False):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbose,
        show_path=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler._git_cleaner = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
