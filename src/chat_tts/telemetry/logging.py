"""Process-wide logging configuration."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "INFO") -> None:
    """Route ``chat_tts.*`` loggers through a rich handler on stderr."""
    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s %(message)s"))

    root = logging.getLogger("chat_tts")
    root.handlers[:] = [handler]
    root.setLevel(level.upper())
    root.propagate = False
