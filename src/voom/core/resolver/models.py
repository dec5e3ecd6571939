"""Resolver data models --- requests, results and repository snapshots."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from fnmatch import fnmatchcase
from pathlib import PurePosixPath

from voom.core.ancestry.index import AncestryIndex
from voom.core.tags.codec import decode_tag, is_voom_tag
from voom.core.tags.models import ProjectCoordinate, Tag
from voom.core.versions import qualify_version
from voom.exceptions import TagFormatError
from voom.git.base import Repository

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# ResolutionRequest: what the caller is looking for
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResolutionRequest:
    """A dependency coordinate plus optional constraints.

    Attributes:
        coordinate: The dependency to resolve.
        version_prefix: Keep only versions equal to this prefix or
            continuing it with ``.`` or ``-`` (``1.2`` matches ``1.2.5``
            and ``1.2-rc1`` but not ``1.20``).
        repo: Keep only repositories whose origin URL or checkout
            directory name equals this.
        branch: ``fnmatch`` pattern of branches to resolve against. When
            None each repository's default branch is used.
        path: Keep only manifests at this repository-relative directory.
    """

    coordinate: ProjectCoordinate
    version_prefix: str | None = None
    repo: str | None = None
    branch: str | None = None
    path: str | None = None

    def matches_version(self, version: str) -> bool:
        prefix = self.version_prefix
        if not prefix:
            return True
        return version == prefix or (
            version.startswith(prefix) and version[len(prefix)] in ".-"
        )

    def matches_path(self, path: str) -> bool:
        return self.path is None or path.strip("/") == self.path.strip("/")

    def matches_repository(self, snapshot: RepositorySnapshot) -> bool:
        if self.repo is None:
            return True
        return self.repo in (snapshot.origin_url, PurePosixPath(snapshot.location).name)

    def select_branches(self, snapshot: RepositorySnapshot) -> list[str]:
        """Branches of ``snapshot`` this request resolves against."""
        if self.branch is None:
            default = snapshot.default_branch
            return [default] if default in snapshot.branches else []
        return sorted(b for b in snapshot.branches if fnmatchcase(b, self.branch))


# ---------------------------------------------------------------------------
# ResolvedVersion: one answer
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResolvedVersion:
    """The newest commit at which a manifest still declared ``version``.

    Attributes:
        location: Repository checkout the answer came from.
        branch: Branch resolved against.
        path: Manifest directory within the repository.
        version: Version declared by the manifest (the baseline).
        sha: Resolved commit.
        ctime: Commit time of ``sha``.
        coordinate: The coordinate that was resolved.
    """

    location: str
    branch: str
    path: str
    version: str
    sha: str
    ctime: datetime
    coordinate: ProjectCoordinate | None = None

    def qualified(self, long_sha: bool = False) -> str:
        """The voom version naming this commit, e.g. ``1.2-20240101_120000-gabc1234``."""
        return qualify_version(self.version, self.ctime, self.sha, long_sha)

    def to_dict(self) -> dict[str, str]:
        return {
            "coordinate": str(self.coordinate) if self.coordinate else "",
            "location": self.location,
            "branch": self.branch,
            "path": self.path,
            "version": self.version,
            "sha": self.sha,
            "ctime": self.ctime.isoformat(),
            "qualified": self.qualified(),
        }


# ---------------------------------------------------------------------------
# RepositorySnapshot: immutable read of one repository
# ---------------------------------------------------------------------------


@dataclass
class RepositorySnapshot:
    """Everything the resolver reads from one repository, read once.

    Snapshots are never mutated after construction, so resolutions over
    different snapshots can run concurrently.
    """

    location: str
    origin_url: str | None
    default_branch: str | None
    branches: dict[str, str]
    tags: list[Tag]
    index: AncestryIndex
    ctimes: dict[str, datetime] = field(default_factory=dict)

    def tags_for(self, coordinate: ProjectCoordinate) -> list[Tag]:
        return [t for t in self.tags if t.coordinate == coordinate]

    def deletions(self) -> list[Tag]:
        return [t for t in self.tags if t.is_deletion]


def snapshot_repository(repo: Repository) -> RepositorySnapshot:
    """Read branches, voom tags and the full commit graph of ``repo``.

    Tags whose names do not decode, or whose target is outside the commit
    log, are ignored with a debug message.
    """
    log = repo.commit_log()
    index = AncestryIndex.from_commits(log)
    tags = []
    for name, target in sorted(repo.tags().items()):
        if not is_voom_tag(name):
            continue
        try:
            tag = decode_tag(name, target)
        except TagFormatError as exc:
            logger.debug("Ignoring tag %s in %s: %s", name, repo.location, exc.message)
            continue
        if tag.sha not in index:
            logger.debug("Ignoring tag %s in %s: target not in log", name, repo.location)
            continue
        tags.append(tag)

    return RepositorySnapshot(
        location=repo.location,
        origin_url=repo.origin_url,
        default_branch=repo.default_branch,
        branches=dict(repo.branches()),
        tags=tags,
        index=index,
        ctimes={record.sha: record.ctime for record in log},
    )
