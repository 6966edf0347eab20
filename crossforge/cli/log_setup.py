"""Logging setup for CLI runs: stdlib logging through Rich."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "INFO") -> None:
    """Route the ``crossforge`` loggers to stderr via ``RichHandler``."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    root = logging.getLogger("crossforge")
    root.handlers = [handler]
    root.setLevel(level.upper())
    root.propagate = False
