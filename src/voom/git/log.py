"""Parsing of ``git log`` output into ``CommitRecord`` values.

The log is requested with ``LOG_FORMAT``: each commit starts with a record
separator (0x1e) and a header of unit-separated (0x1f) fields, optionally
followed by ``--name-status`` lines::

    \\x1e<sha>\\x1f<parents>\\x1f<unix ctime>\\x1f<decorations>
    M\\tproject.clj
    R087\\told/project.clj\\tnew/project.clj
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from voom.git.base import CommitRecord, PathChange

logger = logging.getLogger(__name__)

LOG_FORMAT = "--pretty=format:%x1e%H%x1f%P%x1f%ct%x1f%D"

_RECORD = "\x1e"
_UNIT = "\x1f"


def parse_decorations(text: str) -> frozenset[str]:
    """Turn ``%D`` output into ref names (``tag: `` and ``HEAD -> `` removed)."""
    refs = set()
    for item in text.split(","):
        item = item.strip()
        if not item:
            continue
        if item.startswith("tag: "):
            item = item[len("tag: "):]
        elif item.startswith("HEAD -> "):
            item = item[len("HEAD -> "):]
        refs.add(item)
    return frozenset(refs)


def parse_name_status(line: str) -> list[PathChange]:
    """Parse one ``--name-status`` line.

    Renames become a deletion of the old path and an addition of the new one;
    copies become an addition; type changes become a modification.
    """
    parts = line.split("\t")
    status = parts[0]
    if not status:
        return []
    code = status[0]
    if code in ("R", "C") and len(parts) == 3:
        old, new = parts[1], parts[2]
        if code == "R":
            return [PathChange("D", old), PathChange("A", new)]
        return [PathChange("A", new)]
    if len(parts) != 2:
        logger.debug("Ignoring unrecognised name-status line %r", line)
        return []
    if code in ("A", "M", "D"):
        return [PathChange(code, parts[1])]  # type: ignore[arg-type]
    logger.debug("Treating status %r for %s as a modification", status, parts[1])
    return [PathChange("M", parts[1])]


def parse_log(output: str) -> list[CommitRecord]:
    """Parse log output produced with ``LOG_FORMAT`` (in output order)."""
    records: list[CommitRecord] = []
    for chunk in output.split(_RECORD):
        if not chunk.strip():
            continue
        header, _, body = chunk.partition("\n")
        fields = header.split(_UNIT)
        if len(fields) != 4:
            raise ValueError(f"Malformed git log record header: {header!r}")
        sha, parents, ctime, decorations = fields
        changes: list[PathChange] = []
        for line in body.splitlines():
            if line.strip():
                changes.extend(parse_name_status(line))
        records.append(CommitRecord(
            sha=sha.strip(),
            parents=tuple(parents.split()),
            ctime=datetime.fromtimestamp(int(ctime), tz=timezone.utc),
            refs=parse_decorations(decorations),
            changes=tuple(changes),
        ))
    return records
