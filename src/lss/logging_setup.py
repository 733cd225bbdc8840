"""Logging setup — route stdlib logging through a Rich stderr console."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: int = logging.WARNING, console: Console | None = None) -> None:
    """Install a RichHandler on the ``lss`` logger."""
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=level <= logging.DEBUG,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger("lss")
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
