"""Base classes and data models for the version-control boundary.

Defines the ``Repository`` abstract base class that the core consumes (the
concrete ``GitRepository`` drives the git CLI; tests use an in-memory fake)
along with the ``CommitRecord`` and ``PathChange`` records produced by
reading the commit log.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

ChangeOp = Literal["A", "M", "D"]


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PathChange:
    """One path operation recorded by a commit.

    Attributes:
        op: ``A`` (added), ``M`` (modified) or ``D`` (deleted).
        path: Repository-relative path using ``/`` separators.
    """

    op: ChangeOp
    path: str


@dataclass(frozen=True)
class CommitRecord:
    """A commit as read from the log.

    Attributes:
        sha: Full commit sha.
        parents: Parent shas in order; empty only for root commits.
        ctime: Commit time (timezone-aware UTC).
        refs: Ref decorations present at read time.
        changes: Path operations, when the log was read with them.
    """

    sha: str
    parents: tuple[str, ...]
    ctime: datetime
    refs: frozenset[str] = field(default_factory=frozenset)
    changes: tuple[PathChange, ...] = ()

    @property
    def is_root(self) -> bool:
        return not self.parents


# ---------------------------------------------------------------------------
# Abstract repository
# ---------------------------------------------------------------------------


class Repository(ABC):
    """One on-disk repository checkout.

    The working tree is a single shared mutable resource: checkouts and tag
    writes go through ``mutation()``, which allows one mutation in flight at
    a time for this repository. Read-only calls need no coordination.
    """

    def __init__(self) -> None:
        self._mutation_lock = threading.RLock()

    @contextmanager
    def mutation(self) -> Iterator[None]:
        """Hold the per-repository mutation lock."""
        with self._mutation_lock:
            yield

    @property
    @abstractmethod
    def location(self) -> str:
        """Filesystem path of the working tree (stable identifier)."""

    @property
    @abstractmethod
    def origin_url(self) -> str | None:
        """URL of the ``origin`` remote, if any."""

    @property
    @abstractmethod
    def default_branch(self) -> str | None:
        """Branch the ``origin`` remote's HEAD points at, if known."""

    @abstractmethod
    def branches(self) -> dict[str, str]:
        """Upstream-tracked branches: branch name to tip sha."""

    @abstractmethod
    def tags(self) -> dict[str, str]:
        """All tags: tag name to target commit sha."""

    @abstractmethod
    def commit_log(self) -> list[CommitRecord]:
        """Every commit reachable from any ref, parents before children."""

    @abstractmethod
    def manifest_changes(
        self, tip: str, exclude: list[str], manifest_name: str
    ) -> list[CommitRecord]:
        """Commits reachable from ``tip`` but not from ``exclude``, oldest
        first, each carrying its operations on files named ``manifest_name``.
        """

    @abstractmethod
    def show_file(self, sha: str, path: str) -> str:
        """Content of ``path`` as of commit ``sha``."""

    @abstractmethod
    def write_tag(self, name: str, sha: str) -> None:
        """Create or move tag ``name`` to ``sha``."""

    @abstractmethod
    def fetch(self) -> None:
        """Update remote-tracking branches from ``origin``."""

    @abstractmethod
    def checkout(self, ref: str) -> None:
        """Check out ``ref`` into the working tree."""

    @abstractmethod
    def contains_commit(self, sha: str) -> bool:
        """True if ``sha`` names a commit in this repository."""

    @abstractmethod
    def list_files(self, name: str) -> list[str]:
        """Tracked files named ``name`` in the working tree, repo-relative."""

    @abstractmethod
    def last_change(self, path: str) -> CommitRecord:
        """Most recent commit touching ``path`` (repo-relative, "" = all)."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.location!r})"
