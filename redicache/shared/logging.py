"""Logging configuration for processes embedding redicache."""

import logging
import sys

from redicache.core.config import get_settings


def setup_logging(debug: bool | None = None) -> None:
    """Configure process-wide logging.

    Level is DEBUG when debug is True (or, when debug is None, when
    settings.debug is True), otherwise INFO. Output goes to stdout.
    Session diagnostics are emitted at DEBUG, so they only show up when
    both the session's debug flag and this level allow it.
    """
    if debug is None:
        debug = get_settings().debug
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Usually __name__ of the calling module.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
