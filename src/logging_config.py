"""
Logging configuration for the placeholder client.

Log records go to stderr through rich, so reports printed to stdout stay
clean.
"""

import logging
from typing import Literal

from rich.console import Console
from rich.logging import RichHandler

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

ROOT_LOGGER = "placeholder"

# Transport libraries that log every request at INFO/DEBUG
_HTTP_LOGGERS = ("httpx", "httpcore")


def setup_logging(level: LogLevel = "INFO", log_http: bool = False) -> logging.Logger:
    """
    Configure logging with rich handler.

    Pass ``log_http=True`` to keep request-level logs from httpx, which are
    otherwise limited to warnings.
    """
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
    )

    if not log_http:
        for name in _HTTP_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger(ROOT_LOGGER)


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
