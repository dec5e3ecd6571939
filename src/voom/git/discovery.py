"""Discovery of the repositories voom knows about.

Every directory ``<repos_home>/<name>`` that contains a ``.git`` directory is
one known repository.
"""

from __future__ import annotations

import logging
from pathlib import Path

from voom.git.command import DEFAULT_TIMEOUT
from voom.git.repository import GitRepository

logger = logging.getLogger(__name__)


def discover_repositories(
    repos_home: Path, timeout: float = DEFAULT_TIMEOUT
) -> list[GitRepository]:
    """Return a ``GitRepository`` for each checkout under ``repos_home``.

    A missing ``repos_home`` yields an empty list.
    """
    if not repos_home.is_dir():
        logger.warning("Repository home %s does not exist", repos_home)
        return []
    repos = [
        GitRepository(gitdir, timeout=timeout)
        for gitdir in sorted(repos_home.glob("*/.git"))
        if gitdir.is_dir()
    ]
    logger.debug("Found %d repositories under %s", len(repos), repos_home)
    return repos


def find_repository(path: Path, timeout: float = DEFAULT_TIMEOUT) -> GitRepository | None:
    """The checkout containing ``path``, found by walking up to a ``.git``
    directory, or None."""
    path = Path(path).resolve()
    for directory in (path, *path.parents):
        gitdir = directory / ".git"
        if gitdir.is_dir():
            return GitRepository(gitdir, timeout=timeout)
    return None
