"""Git-derived version qualifiers.

A voom version is a base version with any ``-SNAPSHOT`` suffix removed,
followed by the UTC commit time and the commit sha::

    1.2.3-20120219_223112-gabc123f

The parser accepts the forms produced by this and earlier releases,
including jar paths::

    1.2.3-20120219223112-abc123f
    1.2.3-20120219_223112-gabc123f
    foo-1.2.3-20120219223112-gabc123f
    /path/to/foo-1.2.3-20120219_223112-gabc123f19ea8d29b13.jar
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone

from voom.core.tags.models import SHORT_SHA_LENGTH
from voom.exceptions import VersionFormatError

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
SNAPSHOT_SUFFIX = "-SNAPSHOT"

_VERSION_RE = re.compile(
    r"^(?P<base>.*?)-?(?P<date>[0-9]{8})_?(?P<time>[0-9]{6})-g?(?P<sha>[a-f0-9]{4,40})(?:\.jar)?$"
)


@dataclass(frozen=True)
class VersionStamp:
    """The (commit time, sha) pair carried by a voom version.

    Attributes:
        ctime: Commit time, timezone-aware UTC.
        sha: Commit sha as written (short or full).
        base: Text preceding the timestamp, if any (for display only).
    """

    ctime: datetime
    sha: str
    base: str = ""


def _utc(ctime: datetime) -> datetime:
    if ctime.tzinfo is None:
        return ctime.replace(tzinfo=timezone.utc)
    return ctime.astimezone(timezone.utc)


def format_qualifier(ctime: datetime, sha: str, long_sha: bool = False) -> str:
    """Format the ``-<timestamp>-g<sha>`` qualifier.

    Naive datetimes are taken to be UTC.
    """
    shown = sha if long_sha else sha[:SHORT_SHA_LENGTH]
    return f"-{_utc(ctime).strftime(TIMESTAMP_FORMAT)}-g{shown}"


def qualify_version(base: str, ctime: datetime, sha: str, long_sha: bool = False) -> str:
    """Append the qualifier to ``base`` after stripping ``-SNAPSHOT``."""
    return base.replace(SNAPSHOT_SUFFIX, "") + format_qualifier(ctime, sha, long_sha)


def parse_version(text: str) -> VersionStamp | None:
    """Extract (ctime, sha) from a voom version or jar path.

    Returns None when ``text`` carries no voom qualifier.
    """
    match = _VERSION_RE.match(text.strip())
    if match is None:
        return None
    try:
        ctime = datetime.strptime(
            match.group("date") + match.group("time"), "%Y%m%d%H%M%S"
        ).replace(tzinfo=timezone.utc)
    except ValueError:
        return None
    return VersionStamp(ctime=ctime, sha=match.group("sha"), base=match.group("base"))


def require_version(text: str) -> VersionStamp:
    """Like ``parse_version`` but raise when ``text`` is not a voom version.

    Raises:
        VersionFormatError: If no qualifier is found.
    """
    stamp = parse_version(text)
    if stamp is None:
        raise VersionFormatError(f"Not parseable as voom-version: {text}", version=text)
    return stamp


def is_voom_version(text: str) -> bool:
    return parse_version(text) is not None
