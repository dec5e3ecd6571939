"""Tag data models --- ProjectCoordinate and Tag.

Pure data holders with no knowledge of the tag name wire format; see
``codec`` for the single place that format is assumed.
"""

from __future__ import annotations

from dataclasses import dataclass

TAG_PREFIX = "voom"
BRANCH_PREFIX = "voom-branch"
SHORT_SHA_LENGTH = 7


# ---------------------------------------------------------------------------
# ProjectCoordinate: (group, name) identity of a dependency
# ---------------------------------------------------------------------------


@dataclass(frozen=True, order=True)
class ProjectCoordinate:
    """The (group, name) identity of a logical dependency.

    Independent of version and of the repository or path hosting it.
    A bare name ``foo`` means group ``foo`` and name ``foo``.
    """

    group: str
    name: str

    @classmethod
    def parse(cls, text: str) -> ProjectCoordinate:
        """Parse ``group/name`` or a bare ``name``."""
        text = text.strip()
        if not text or text.count("/") > 1 or text.startswith("/") or text.endswith("/"):
            raise ValueError(f"Invalid project coordinate: {text!r}")
        group, _, name = text.partition("/")
        return cls(group=group, name=name or group)

    @property
    def short_name(self) -> str:
        """The form used in manifests: ``name`` when group equals name."""
        return self.name if self.group == self.name else f"{self.group}/{self.name}"

    def __str__(self) -> str:
        return f"{self.group}/{self.name}"


# ---------------------------------------------------------------------------
# Tag: a manifest change recorded against a commit
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Tag:
    """A sha-addressed marker for one manifest change.

    Attributes:
        coordinate: Project declared by the manifest, or None for a
            deletion (the coordinate is not derivable from a deleted file).
        version: Version declared by the manifest ("" for a deletion).
        path: Manifest directory within the repository ("" for the root).
        sha: Target commit. The encoded name carries only the short form;
            a decoded tag holds the full sha when the target is known.
        no_parent: True when the target is a root commit.
    """

    coordinate: ProjectCoordinate | None
    version: str
    path: str
    sha: str
    no_parent: bool = False

    @property
    def is_deletion(self) -> bool:
        return self.coordinate is None

    @property
    def short_sha(self) -> str:
        return self.sha[:SHORT_SHA_LENGTH]
