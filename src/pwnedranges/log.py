"""
Logging helpers.

Every module asks for its own logger:

    from pwnedranges.log import get_logger

    logger = get_logger(__name__)
    logger.debug("retrying range", extra={"key": "ABCDE"})

`setup_logging()` is called once by the CLI. Records go to stderr through
rich, so stdout stays free for dataset output.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def setup_logging(level: str = "WARNING", console: Console | None = None) -> None:
    """Configure the root logger with a stderr RichHandler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        console: Console shared with any live progress display, so records
            are printed above the bar instead of through it
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    # one line per request at DEBUG is far too much
    for noisy in ("httpx", "httpcore", "hpack"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
