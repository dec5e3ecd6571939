"""Version resolver --- newest qualifying commit per (repository, branch, path).

For every repository snapshot and every selected branch:

1. Candidate tags are those for the requested coordinate that pass the
   path and version-prefix filters.
2. Candidates that are not ancestors of the branch tip are excluded. They
   live on sibling branches and must never leak into this branch's answer.
3. Candidates are grouped by manifest path. A path with no reachable
   candidate yields nothing.
4. The nearest candidate sits on the newest commit of the branch's
   first-parent line that carries one. A merge is tagged with its diff
   against the first parent, so a change merged in from a side branch
   lands on the line at the merge. Only when no line commit carries a
   candidate are tags merged in from side branches considered, newest
   merge first. Several tags at that one position are an
   ``AmbiguousTagSetError``.
5. From the nearest tag's commit the resolver walks forward along the
   first-parent line toward the tip and stops before the first commit
   that carries a newer manifest change at the same path: a tag for the
   same coordinate (any version) or a deletion. The last commit before
   that boundary, or the tip, is the answer.

``resolve`` returns every answer. Callers that need exactly one use
``resolve_unique``, which turns several answers into an
``AmbiguousResolutionError`` listing all of them.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable

from voom.core.resolver.models import ResolutionRequest, ResolvedVersion, RepositorySnapshot
from voom.core.tags.codec import encode_tag
from voom.core.tags.models import Tag
from voom.exceptions import (
    AmbiguousResolutionError,
    AmbiguousTagSetError,
    NoMatchingVersionError,
)

logger = logging.getLogger(__name__)


class VersionResolver:
    """Resolves coordinates against a fixed set of repository snapshots.

    Args:
        snapshots: One snapshot per known repository.
    """

    def __init__(self, snapshots: Iterable[RepositorySnapshot]) -> None:
        self.snapshots = list(snapshots)

    def resolve(self, request: ResolutionRequest) -> list[ResolvedVersion]:
        """Every (repository, branch, path) answer for ``request``.

        Raises:
            NoMatchingVersionError: If nothing matches.
            AmbiguousTagSetError: If a path has several nearest tags.
        """
        results: list[ResolvedVersion] = []
        for snapshot in self.snapshots:
            if not request.matches_repository(snapshot):
                continue
            for branch in request.select_branches(snapshot):
                results.extend(self._resolve_branch(snapshot, branch, request))

        if not results:
            raise NoMatchingVersionError(
                f"No version of {request.coordinate} matches",
                coordinate=str(request.coordinate),
                version_prefix=request.version_prefix,
                repo=request.repo,
                branch=request.branch,
                path=request.path,
                repositories=[s.location for s in self.snapshots],
            )
        return results

    def resolve_unique(self, request: ResolutionRequest) -> ResolvedVersion:
        """The single answer for ``request``.

        Raises:
            NoMatchingVersionError: If nothing matches.
            AmbiguousResolutionError: If more than one answer matches.
        """
        results = self.resolve(request)
        if len(results) > 1:
            raise AmbiguousResolutionError(
                f"{len(results)} candidates for {request.coordinate}",
                coordinate=str(request.coordinate),
                candidates=[
                    f"{r.location} {r.branch} {r.path or '.'} {r.version} {r.sha[:7]}"
                    for r in results
                ],
            )
        return results[0]

    # -- Per branch ---------------------------------------------------------

    def _resolve_branch(
        self, snapshot: RepositorySnapshot, branch: str, request: ResolutionRequest
    ) -> list[ResolvedVersion]:
        tip = snapshot.branches[branch]
        index = snapshot.index
        if tip not in index:
            logger.warning("%s %s: tip %s not in log", snapshot.location, branch, tip[:7])
            return []

        by_path: dict[str, list[Tag]] = defaultdict(list)
        for tag in snapshot.tags_for(request.coordinate):
            if request.matches_path(tag.path) and request.matches_version(tag.version):
                by_path[tag.path].append(tag)

        results = []
        for path in sorted(by_path):
            candidates = by_path[path]
            reachable = index.ancestors_among(tip, {t.sha for t in candidates})
            excluded = [t for t in candidates if t.sha not in reachable]
            if excluded:
                logger.debug(
                    "%s %s: excluding tags not on branch: %s", snapshot.location, branch,
                    ", ".join(encode_tag(t) for t in excluded),
                )
            live = [t for t in candidates if t.sha in reachable]
            if not live:
                continue

            nearest = self._nearest(snapshot, branch, tip, live)
            sha = self._walk(snapshot, branch, tip, nearest)
            results.append(
                ResolvedVersion(
                    location=snapshot.location,
                    branch=branch,
                    path=path,
                    version=nearest.version,
                    sha=sha,
                    ctime=snapshot.ctimes[sha],
                    coordinate=request.coordinate,
                )
            )
        return results

    def _nearest(
        self, snapshot: RepositorySnapshot, branch: str, tip: str, live: list[Tag]
    ) -> Tag:
        index = snapshot.index
        by_sha: dict[str, list[Tag]] = defaultdict(list)
        for tag in live:
            by_sha[tag.sha].append(tag)

        line = []
        commit: str | None = tip
        while commit is not None:
            line.append(commit)
            parents = index.parents(commit)
            commit = parents[0] if parents else None

        nearest = next((by_sha[c] for c in line if c in by_sha), None)
        if nearest is None:
            nearest = self._merged_in(snapshot, line, by_sha)

        if len(nearest) > 1:
            raise AmbiguousTagSetError(
                f"{len(nearest)} tags for {nearest[0].coordinate} are equally near "
                f"the tip of {branch} in {snapshot.location}",
                location=snapshot.location,
                branch=branch,
                path=nearest[0].path,
                tags=sorted(encode_tag(t) for t in nearest),
                considered=sorted(encode_tag(t) for t in live),
            )
        return nearest[0]

    @staticmethod
    def _merged_in(
        snapshot: RepositorySnapshot, line: list[str], by_sha: dict[str, list[Tag]]
    ) -> list[Tag]:
        """Newest tags that joined the first-parent ``line`` through a merge."""
        index = snapshot.index
        remaining = frozenset(by_sha)
        for below in line[1:] + [None]:
            older = index.ancestors_among(below, remaining) if below else frozenset()
            entered = remaining - older
            if entered:
                top = {s for s in entered if index.successors_among(s, entered) == {s}}
                return [t for s in sorted(top) for t in by_sha[s]]
            remaining = older
        return []

    def _walk(
        self, snapshot: RepositorySnapshot, branch: str, tip: str, start: Tag
    ) -> str:
        index = snapshot.index
        boundaries = {
            t.sha
            for t in snapshot.tags_for(start.coordinate) + snapshot.deletions()
            if t.path == start.path and t.sha != start.sha
        }

        line = []
        commit = tip
        while commit != start.sha and index.is_ancestor(start.sha, commit):
            line.append(commit)
            parents = index.parents(commit)
            if not parents:
                break
            commit = parents[0]
        line.reverse()

        resolved = start.sha
        for commit in line:
            if commit in boundaries:
                logger.debug(
                    "%s %s: %s stops at %s (newer change)", snapshot.location,
                    branch, start.version, commit[:7],
                )
                break
            resolved = commit
        logger.debug(
            "%s %s: %s walked %d commits from %s to %s", snapshot.location, branch,
            start.version, len(line), start.sha[:7], resolved[:7],
        )
        return resolved
