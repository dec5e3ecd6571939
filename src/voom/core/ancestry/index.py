"""Bitset ancestry index over an append-only commit DAG.

Every commit added to the index gets a position (its insertion order). For
each position the index stores an integer used as a bitset: bit ``i`` is set
when the commit at position ``i`` is an ancestor of this commit (a commit is
its own ancestor). Adding a commit costs one bitwise OR per parent::

    ancestors(c) = {c} | ancestors(p1) | ancestors(p2) | ...

Queries are bit tests and masked intersections:

- ``is_ancestor(x, y)``  -> bit ``pos(x)`` of ``ancestors(y)``
- ``ancestors_among(y, C)`` -> ``ancestors(y) & mask(C)``
- ``successors_among(x, C)`` -> ``descendants(x) & mask(C)``

Complexity
----------
Insertion is O(parents) big-int ORs. Space is O(N) bits per commit, so
O(N^2) bits overall in the worst case (roughly 300 MB for 50,000 commits of
fully linear history). This is an accepted limit for repositories of tens of
thousands of commits. Answers are exact; the index never approximates.

Descendant bitsets are derived lazily, one per queried commit, by scanning
the positions after it (children always have larger positions). They are
cached until the next insertion.

Parents must be added before children, so a cycle can never be formed: a
commit's ancestors are fixed when it is added and re-adding a commit with
different parents is rejected.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from voom.exceptions import UnknownCommitError, UnknownParentError

if TYPE_CHECKING:
    from voom.git.base import CommitRecord

logger = logging.getLogger(__name__)


def _iter_bits(bits: int) -> Iterator[int]:
    while bits:
        low = bits & -bits
        yield low.bit_length() - 1
        bits ^= low


class AncestryIndex:
    """Exact ancestor/descendant reachability over commit ids.

    The index is append-only: ``add`` extends it in place and returns it,
    and no query answer already handed out is ever invalidated. Query
    results are immutable (``bool`` or ``frozenset``).

    Thread safety: concurrent queries are safe once construction is
    finished. ``add`` must not run concurrently with anything else.
    """

    def __init__(self) -> None:
        self._positions: dict[str, int] = {}
        self._ids: list[str] = []
        self._parents: list[tuple[str, ...]] = []
        self._ancestors: list[int] = []
        self._descendants: dict[int, int] = {}

    # -- Construction -------------------------------------------------------

    def add(self, commit_id: str, *parent_ids: str) -> AncestryIndex:
        """Insert a commit whose parents are already present.

        Re-adding a known commit with the same parents is a no-op.

        Raises:
            UnknownParentError: If any parent has not been added yet.
            ValueError: If ``commit_id`` is empty, lists itself as a parent,
                or was already added with different parents.
        """
        if not commit_id:
            raise ValueError("commit id must be a non-empty string")
        parents = tuple(parent_ids)

        existing = self._positions.get(commit_id)
        if existing is not None:
            if self._parents[existing] != parents:
                raise ValueError(
                    f"commit {commit_id} already indexed with parents "
                    f"{self._parents[existing]!r}, not {parents!r}"
                )
            return self

        if commit_id in parents:
            raise ValueError(f"commit {commit_id} lists itself as a parent")

        missing = [p for p in parents if p not in self._positions]
        if missing:
            raise UnknownParentError(
                f"commit {commit_id} added before its parent(s) {', '.join(missing)}",
                commit=commit_id, missing_parents=missing, parents=list(parents),
            )

        position = len(self._ids)
        bits = 1 << position
        for parent in parents:
            bits |= self._ancestors[self._positions[parent]]

        self._positions[commit_id] = position
        self._ids.append(commit_id)
        self._parents.append(parents)
        self._ancestors.append(bits)
        self._descendants.clear()
        return self

    @classmethod
    def from_commits(cls, commits: Iterable[CommitRecord]) -> AncestryIndex:
        """Build an index from commit records in any order.

        Records are inserted parents-first (Kahn's algorithm over the
        supplied set, keeping the input order among ready commits).

        Raises:
            UnknownParentError: If a record names a parent that is not in
                the supplied records (e.g. a shallow clone) or the records
                contain a cycle.
        """
        records = list(commits)
        known = {r.sha for r in records}
        index = cls()
        pending: dict[str, int] = {}
        children: dict[str, list[int]] = {}
        ready: list[int] = []

        for i, record in enumerate(records):
            missing = [p for p in record.parents if p not in known]
            if missing:
                raise UnknownParentError(
                    f"commit {record.sha} has parent(s) outside the log: "
                    f"{', '.join(missing)}",
                    commit=record.sha, missing_parents=missing,
                )
            pending[record.sha] = len(set(record.parents))
            for parent in set(record.parents):
                children.setdefault(parent, []).append(i)
            if not record.parents:
                ready.append(i)

        ready.reverse()
        while ready:
            record = records[ready.pop()]
            if record.sha in index:
                continue
            index.add(record.sha, *record.parents)
            newly_ready = []
            for child in children.get(record.sha, ()):
                sha = records[child].sha
                pending[sha] -= 1
                if pending[sha] == 0:
                    newly_ready.append(child)
            ready.extend(reversed(newly_ready))

        if len(index) != len(known):
            stuck = sorted(sha for sha in known if sha not in index)
            raise UnknownParentError(
                f"{len(stuck)} commit(s) are part of a cycle or depend on one",
                commits=stuck[:20],
            )
        logger.debug("Indexed %d commits", len(index))
        return index

    # -- Introspection ------------------------------------------------------

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, commit_id: object) -> bool:
        return commit_id in self._positions

    def position(self, commit_id: str) -> int:
        """Insertion position of a commit (parents always precede children)."""
        try:
            return self._positions[commit_id]
        except KeyError:
            raise UnknownCommitError(
                f"commit {commit_id} is not in the ancestry index", commit=commit_id
            ) from None

    def parents(self, commit_id: str) -> tuple[str, ...]:
        """Parents of a commit, in their original order."""
        return self._parents[self.position(commit_id)]

    @property
    def commits(self) -> tuple[str, ...]:
        """All commit ids in insertion order."""
        return tuple(self._ids)

    # -- Queries ------------------------------------------------------------

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """True iff ``ancestor`` is reachable from ``descendant`` via parents.

        A commit is its own ancestor.
        """
        bit = self.position(ancestor)
        return bool((self._ancestors[self.position(descendant)] >> bit) & 1)

    def ancestors(self, commit_id: str) -> frozenset[str]:
        """Full ancestor set of a commit, including itself."""
        bits = self._ancestors[self.position(commit_id)]
        return frozenset(self._ids[i] for i in _iter_bits(bits))

    def ancestors_among(self, commit_id: str, candidates: Iterable[str]) -> frozenset[str]:
        """The members of ``candidates`` that are ancestors of ``commit_id``.

        Candidates unknown to the index are never ancestors and are ignored.
        """
        bits = self._ancestors[self.position(commit_id)] & self._mask(candidates)
        return frozenset(self._ids[i] for i in _iter_bits(bits))

    def successors_among(self, commit_id: str, candidates: Iterable[str]) -> frozenset[str]:
        """The members of ``candidates`` that have ``commit_id`` as ancestor."""
        bits = self._descendant_bits(self.position(commit_id)) & self._mask(candidates)
        return frozenset(self._ids[i] for i in _iter_bits(bits))

    # -- Internals ----------------------------------------------------------

    def _mask(self, candidates: Iterable[str]) -> int:
        mask = 0
        for candidate in candidates:
            position = self._positions.get(candidate)
            if position is not None:
                mask |= 1 << position
        return mask

    def _descendant_bits(self, position: int) -> int:
        cached = self._descendants.get(position)
        if cached is not None:
            return cached
        bits = 0
        for later in range(position, len(self._ids)):
            if (self._ancestors[later] >> position) & 1:
                bits |= 1 << later
        self._descendants[position] = bits
        return bits
