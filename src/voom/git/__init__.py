"""Version-control boundary: the ``Repository`` port and its git implementation.

- ``base``: ``Repository`` abstract base class, ``CommitRecord``, ``PathChange``.
- ``log``: parser for ``git log`` output.
- ``command``: subprocess runner with timeouts and structured failures.
- ``repository``: ``GitRepository``, the git CLI implementation.
- ``discovery``: finds known repositories under the repositories home.
"""

from voom.git.base import CommitRecord, PathChange, Repository
from voom.git.discovery import discover_repositories, find_repository
from voom.git.repository import GitRepository

__all__ = [
    "CommitRecord",
    "GitRepository",
    "PathChange",
    "Repository",
    "discover_repositories",
    "find_repository",
]
