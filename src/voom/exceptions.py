"""voom exception hierarchy.

All public exceptions inherit from VoomError, giving callers a single base
class to catch when they want to handle any voom-specific failure without
swallowing unrelated errors.

Every error carries a ``kind`` (stable identifier used in reports) and a
``context`` dict holding the data a human needs to diagnose the failure
without re-running: the offending coordinate, the tags considered, the
commits walked, the git arguments and captured output, and so on.
"""

from __future__ import annotations

from typing import Any


class VoomError(Exception):
    """Base exception for all voom errors."""

    kind: str = "VoomError"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly report of this failure."""
        return {
            "kind": self.kind,
            "message": self.message,
            "context": {k: _plain(v) for k, v in self.context.items()},
        }


def _plain(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        items = [_plain(v) for v in value]
        return sorted(items, key=str) if isinstance(value, (set, frozenset)) else items
    return str(value)


# ---------------------------------------------------------------------------
# Ancestry
# ---------------------------------------------------------------------------


class UnknownParentError(VoomError):
    """Raised when a commit is added before one of its parents.

    Commits must be supplied parents-first. This indicates a data or
    programming error in whatever produced the commit sequence.
    """

    kind = "UnknownParent"


class UnknownCommitError(VoomError, KeyError):
    """Raised when an ancestry query names a commit that was never added."""

    kind = "UnknownCommit"

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Wire formats
# ---------------------------------------------------------------------------


class TagFormatError(VoomError):
    """Raised when a tag name does not follow the voom tag encoding."""

    kind = "TagFormat"


class VersionFormatError(VoomError):
    """Raised when a string is not a voom version."""

    kind = "VersionFormat"


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class ResolutionError(VoomError):
    """Base class for version resolution failures."""

    kind = "Resolution"


class NoMatchingVersionError(ResolutionError):
    """Raised when no (repository, branch, path) yields a version.

    Reported to the caller; not fatal to a batch of resolutions.
    """

    kind = "NoMatchingVersion"


class AmbiguousTagSetError(ResolutionError):
    """Raised when several tags share the nearest history position."""

    kind = "AmbiguousTagSet"


class AmbiguousResolutionError(ResolutionError):
    """Raised when a caller needs one resolution but several matched."""

    kind = "AmbiguousResolution"


# ---------------------------------------------------------------------------
# Manifests
# ---------------------------------------------------------------------------


class ManifestError(VoomError):
    """Base class for manifest reading and rewriting failures."""

    kind = "Manifest"


class ManifestParseError(ManifestError):
    """Raised when a manifest cannot be read without evaluating it.

    During tag scanning this is recovered locally: the manifest is treated
    as unreadable and the scan continues.
    """

    kind = "ParseFailure"


class NoMatchFoundError(ManifestError):
    """Raised when a dependency edit matches nothing in the manifest text."""

    kind = "NoMatchFound"


class AmbiguousMatchError(ManifestError):
    """Raised when a dependency edit matches more than once."""

    kind = "AmbiguousMatch"


class RewriteMisfireError(ManifestError):
    """Raised when the rewritten manifest does not re-read as intended.

    The scratch file is preserved and named in ``context["scratch_path"]``.
    """

    kind = "RewriteMisfire"


# ---------------------------------------------------------------------------
# External commands
# ---------------------------------------------------------------------------


class CollaboratorCommandFailure(VoomError):
    """Raised when an external command (git, lein) fails."""

    kind = "CollaboratorCommandFailure"


class GitCommandError(CollaboratorCommandFailure):
    """Raised when a git subcommand exits non-zero.

    Context carries ``args``, ``exit_code``, ``stdout`` and ``stderr``.
    """

    kind = "GitCommandFailure"

    @property
    def exit_code(self) -> int | None:
        return self.context.get("exit_code")


class CommandTimeoutError(CollaboratorCommandFailure):
    """Raised when an external command exceeds the configured timeout."""

    kind = "CommandTimeout"


class InstallError(CollaboratorCommandFailure):
    """Raised when installing a built artifact fails."""

    kind = "InstallFailure"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(VoomError):
    """Raised for unusable configuration files or environment values."""

    kind = "Configuration"
