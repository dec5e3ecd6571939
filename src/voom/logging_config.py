"""Logging setup for the voom CLI.

Library modules only ever call ``logging.getLogger(__name__)``. The CLI
entry point calls ``setup_logging`` once with an explicit verbosity.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_LEVELS = {
    -1: logging.ERROR,
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}


def level_for(verbosity: int) -> int:
    """Map a ``-v``/``-q`` count to a logging level."""
    return _LEVELS[max(-1, min(2, verbosity))]


def setup_logging(verbosity: int = 0, console: Console | None = None) -> None:
    """Install a rich handler on the root logger.

    Args:
        verbosity: 0 for warnings, positive for more, negative for less.
        console: Console to log to (defaults to stderr).
    """
    root = logging.getLogger()
    root.setLevel(level_for(verbosity))
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=verbosity >= 2,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
