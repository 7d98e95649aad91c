# php_solid/logging.py
"""
Logging setup shared by every php_solid module.

Modules use:
    from php_solid.logging import get_logger
    logger = get_logger(__name__)

The CLI entrypoint calls configure_logging() once.
"""

import logging
import sys


DEFAULT_FORMAT = "[%(levelname)s] %(name)s — %(message)s"


def configure_logging(
    level: int = logging.INFO,
    fmt: str = DEFAULT_FORMAT,
    stream=sys.stderr,
):
    """
    Configure the root logging handler.

    Safe to call multiple times: a handler is only added once.
    """
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)

    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module; configuration lives in configure_logging()."""
    return logging.getLogger(name)
