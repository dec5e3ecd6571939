"""Progress reporting over long-running sequences.

``report_progress`` wraps any sized sequence in a generator that calls a
callback at most once per ``interval`` seconds, plus once at the end, so a
scan over tens of thousands of commits reports steadily without flooding
the terminal. The callback never sees the items themselves.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator, Sequence
from typing import TypeVar

T = TypeVar("T")

ProgressCallback = Callable[[int, int], None]
"""Called as ``callback(done, total)``."""


def report_progress(
    items: Sequence[T],
    callback: ProgressCallback | None,
    interval: float = 0.5,
    clock: Callable[[], float] = time.monotonic,
) -> Iterator[T]:
    """Yield ``items`` while reporting progress through ``callback``.

    Args:
        items: The work items.
        callback: Receives ``(done, total)``; None disables reporting.
        interval: Minimum seconds between two reports.
        clock: Monotonic time source.
    """
    total = len(items)
    if callback is None:
        yield from items
        return

    last = clock()
    done = 0
    for item in items:
        yield item
        done += 1
        now = clock()
        if now - last >= interval and done < total:
            callback(done, total)
            last = now
    callback(done, total)
