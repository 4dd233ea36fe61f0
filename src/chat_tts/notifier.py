"""Status lines shown to the user through the host's notification channel."""

from __future__ import annotations

from typing import Protocol

from rich.console import Console
from rich.text import Text

PREFIX = "TTS"


class StatusNotifier(Protocol):
    """Reports relay status and failures to the user."""

    def info(self, message: str) -> None:
        """Emit an informational status line."""

    def error(self, error: BaseException) -> None:
        """Emit an error line carrying the error kind and message."""


def format_error(error: BaseException) -> str:
    return f"{type(error).__name__} - {error}"


class RichStatusNotifier:
    """Prints ``TTS<TAB>...`` lines, yellow for info and red for errors."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True, highlight=False)

    def info(self, message: str) -> None:
        self._console.print(Text.assemble((PREFIX, "yellow"), "\t", message))

    def error(self, error: BaseException) -> None:
        self._console.print(Text.assemble((PREFIX, "red"), "\t", format_error(error)))
