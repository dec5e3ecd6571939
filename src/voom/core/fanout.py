"""Fan-out/fan-in over repositories.

One task per repository runs on a thread pool. The caller blocks until every
task has finished, even when some fail; the first failure (in input order)
is then re-raised. There is no partial-completion reporting.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, wait
from typing import TypeVar

from voom.git.base import Repository

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Repository)
T = TypeVar("T")


def fan_out(
    repos: Sequence[R],
    task: Callable[[R], T],
    max_workers: int = 4,
) -> list[T]:
    """Run ``task`` once per repository in parallel.

    Args:
        repos: Repositories to process.
        task: Work for one repository.
        max_workers: Thread pool size.

    Returns:
        Task results in the order of ``repos``.

    Raises:
        Exception: The first task failure, after all tasks have finished.
    """
    if not repos:
        return []
    workers = max(1, min(max_workers, len(repos)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="voom") as pool:
        futures = [pool.submit(task, repo) for repo in repos]
        wait(futures)

    failures = [(repo, f.exception()) for repo, f in zip(repos, futures) if f.exception()]
    for repo, exc in failures:
        logger.error("%s: %s", repo.location, exc)
    if failures:
        raise failures[0][1]
    return [f.result() for f in futures]
