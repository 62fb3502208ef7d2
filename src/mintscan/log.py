from __future__ import annotations
import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "mintscan"


def configure_logging(level: int = logging.INFO, console: Console | None = None) -> logging.Logger:
    """Install a single RichHandler (stderr) on the package logger; safe to call repeatedly."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for h in list(logger.handlers):
        if isinstance(h, RichHandler):
            logger.removeHandler(h)
    handler = RichHandler(console=console or Console(stderr=True), show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    return logger
