from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def resolve_level(level: str | None = None) -> str:
    """
    Level resolution (first match wins):
      1) argument `level`
      2) env var `BINSHAPE_LOG_LEVEL`
      3) default = "INFO"
    """
    if level is None:
        level = os.environ.get("BINSHAPE_LOG_LEVEL", "INFO")

    level = str(level).upper().strip()
    return level if level in LEVELS else "INFO"


def setup_logging(level: str | None = None) -> None:
    """Console logging through RichHandler on stderr. Safe to call more than once."""

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    logging.basicConfig(
        level=resolve_level(level),
        format="%(message)s",
        datefmt="[%H:%M:%S]",
        handlers=[
            RichHandler(
                console=Console(stderr=True),
                rich_tracebacks=True,
                show_path=False,
                show_time=True,
            )
        ],
    )
