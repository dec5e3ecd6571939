"""Tag scanner --- materialises a version tag for every manifest change.

For each upstream-tracked branch the scanner reads the commits added since
that branch's sentinel tag, looks at every operation on a manifest file,
reads the manifest as it was at that commit, and writes one tag per
operation. The sentinel is then moved to the branch tip, so a later scan
only sees new history.

A manifest that cannot be read (syntax error, executable top-level logic,
file missing at that commit) is skipped with a warning. One unreadable
historical manifest never blocks tagging of the rest of history.

Known limitation: a force-pushed branch leaves tags on commits that are no
longer part of its history. They are not removed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from voom.core.manifest.models import ManifestReader
from voom.core.scanner.progress import ProgressCallback, report_progress
from voom.core.tags.codec import encode_branch_marker, encode_tag
from voom.core.tags.models import Tag
from voom.exceptions import GitCommandError, ManifestParseError, TagFormatError
from voom.git.base import CommitRecord, PathChange, Repository

logger = logging.getLogger(__name__)


@dataclass
class Skipped:
    """A manifest operation that produced no tag."""

    sha: str
    path: str
    reason: str


@dataclass
class ScanReport:
    """What one repository scan did.

    Attributes:
        location: The repository scanned.
        branches: Branches that had new history.
        tags: Tags written (or confirmed) by this scan.
        skipped: Manifest operations that could not be tagged.
    """

    location: str
    branches: list[str] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)
    skipped: list[Skipped] = field(default_factory=list)


class TagScanner:
    """Writes version tags for manifest changes in a repository.

    Args:
        reader: Reads manifest text without evaluating it.
        manifest_name: File name of manifests to track.
        progress: Optional ``(done, total)`` callback, invoked per branch at
            a bounded cadence.
    """

    def __init__(
        self,
        reader: ManifestReader,
        manifest_name: str = "project.clj",
        progress: ProgressCallback | None = None,
    ) -> None:
        self.reader = reader
        self.manifest_name = manifest_name
        self.progress = progress

    def scan(self, repo: Repository) -> ScanReport:
        """Tag every manifest change on every branch of ``repo`` not yet
        covered by that branch's sentinel tag.

        Raises:
            GitCommandError: If reading the log or writing a tag fails.
        """
        report = ScanReport(location=repo.location)
        existing = repo.tags()

        for branch, tip in sorted(repo.branches().items()):
            marker = encode_branch_marker(branch)
            scanned = existing.get(marker)
            if scanned == tip:
                logger.debug("%s %s: already scanned to %s", repo.location, branch, tip[:7])
                continue

            exclude = [scanned] if scanned and repo.contains_commit(scanned) else []
            records = repo.manifest_changes(tip, exclude, self.manifest_name)
            logger.info(
                "%s %s: %d new manifest commits", repo.location, branch, len(records)
            )
            for record in report_progress(records, self.progress):
                for change in record.changes:
                    tag = self._tag_for(repo, record, change, report)
                    if tag is None:
                        continue
                    name = encode_tag(tag)
                    if existing.get(name) != record.sha:
                        repo.write_tag(name, record.sha)
                        existing[name] = record.sha
                    report.tags.append(tag)

            repo.write_tag(marker, tip)
            existing[marker] = tip
            report.branches.append(branch)

        return report

    def _tag_for(
        self,
        repo: Repository,
        record: CommitRecord,
        change: PathChange,
        report: ScanReport,
    ) -> Tag | None:
        directory = change.path.rpartition("/")[0]
        if change.op == "D":
            return Tag(
                coordinate=None, version="", path=directory, sha=record.sha,
                no_parent=record.is_root,
            )

        try:
            text = repo.show_file(record.sha, change.path)
            manifest = self.reader.read(text, change.path)
            tag = Tag(
                coordinate=manifest.coordinate,
                version=manifest.version,
                path=directory,
                sha=record.sha,
                no_parent=record.is_root,
            )
            encode_tag(tag)
        except (ManifestParseError, GitCommandError, TagFormatError) as exc:
            logger.warning(
                "Skipping unreadable %s at %s in %s: %s",
                change.path, record.sha[:7], repo.location, exc.message,
            )
            report.skipped.append(Skipped(record.sha, change.path, exc.kind))
            return None
        return tag
