"""Logging setup: stdlib logging rendered through rich."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def init_logging(verbose: bool = False, console: Console | None = None) -> None:
    """Route all log records to stderr via RichHandler.

    Args:
        verbose: Log at DEBUG instead of WARNING.
        console: Console to render to. Defaults to a stderr console.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root.addHandler(handler)
