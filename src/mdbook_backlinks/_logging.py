"""Logging configuration for mdbook-backlinks.

mdBook reads the processed book from stdout, so every log record goes to
stderr.

Usage in other modules:
    import logging
    log = logging.getLogger(__name__)

The log level can be configured via the MDBOOK_BACKLINKS_LOG_LEVEL
environment variable (DEBUG, INFO, WARNING, ERROR). Default is INFO.
"""

import logging
import os
import sys

from .config import LOG_LEVEL_ENV

PACKAGE_LOGGER = "mdbook_backlinks"


def configure_logging() -> None:
    """Configure logging for the mdbook_backlinks package.

    Call this once at application startup (cli.py does).
    Subsequent calls are no-ops.
    """
    root_logger = logging.getLogger(PACKAGE_LOGGER)

    if root_logger.handlers:
        return

    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    formatter = logging.Formatter(
        fmt="[%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    # Prevent propagation to root logger (avoids duplicate messages)
    root_logger.propagate = False


def set_quiet_mode(quiet: bool) -> None:
    """Only let errors through when quiet is set.

    Args:
        quiet: True to suppress warnings and info output.
    """
    root_logger = logging.getLogger(PACKAGE_LOGGER)
    level = logging.ERROR if quiet else logging.INFO
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)
