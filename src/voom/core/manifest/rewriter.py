"""Textual rewriting of dependency versions in a manifest.

Edits are applied to the manifest text rather than to a re-serialised form,
so formatting and comments survive. Each edit must match exactly once; the
whole batch is rejected otherwise. A rewritten file is staged beside the
original, re-read, and only moved into place when its dependency list is
exactly the one intended.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from collections.abc import Iterable
from pathlib import Path

from voom.core.manifest.models import Dependency, DependencyEdit, ManifestReader
from voom.exceptions import (
    AmbiguousMatchError,
    ManifestParseError,
    NoMatchFoundError,
    RewriteMisfireError,
)

logger = logging.getLogger(__name__)


def _edit_pattern(edit: DependencyEdit) -> re.Pattern[str]:
    name = re.escape(edit.coordinate.short_name)
    old = re.escape(f'"{edit.old_version}"')
    return re.compile(rf"(?<![\w./-]){name}(\s+){old}")


def rewrite_manifest_text(text: str, edits: Iterable[DependencyEdit]) -> str:
    """Apply ``edits`` to manifest ``text``.

    Each edit replaces ``<short-name><whitespace>"<old>"`` with the new
    version, keeping the whitespace. Nothing outside the matched spans
    changes.

    Raises:
        NoMatchFoundError: If an edit matches nothing.
        AmbiguousMatchError: If an edit matches more than once.
    """
    spans: list[tuple[int, int, str]] = []
    for edit in edits:
        matches = list(_edit_pattern(edit).finditer(text))
        if not matches:
            raise NoMatchFoundError(
                f'No {edit.coordinate.short_name} "{edit.old_version}" in manifest',
                coordinate=str(edit.coordinate), old_version=edit.old_version,
            )
        if len(matches) > 1:
            raise AmbiguousMatchError(
                f'{edit.coordinate.short_name} "{edit.old_version}" occurs '
                f"{len(matches)} times in manifest",
                coordinate=str(edit.coordinate), old_version=edit.old_version,
                offsets=[m.start() for m in matches],
            )
        match = matches[0]
        replacement = f'{edit.coordinate.short_name}{match.group(1)}"{edit.new_version}"'
        spans.append((match.start(), match.end(), replacement))

    spans.sort()
    for (_, end, _), (start, _, _) in zip(spans, spans[1:]):
        if start < end:
            raise AmbiguousMatchError("Dependency edits overlap", offsets=[s[0] for s in spans])

    for start, end, replacement in reversed(spans):
        text = text[:start] + replacement + text[end:]
    return text


def expected_dependencies(
    dependencies: Iterable[Dependency], edits: Iterable[DependencyEdit]
) -> list[Dependency]:
    """The dependency list that applying ``edits`` should produce."""
    changes = {(e.coordinate, e.old_version): e.new_version for e in edits}
    return [
        Dependency(d.coordinate, changes.get((d.coordinate, d.version), d.version))
        for d in dependencies
    ]


def rewrite_manifest_file(
    path: Path, edits: list[DependencyEdit], reader: ManifestReader
) -> None:
    """Rewrite the manifest at ``path`` in place.

    The new text is written to a scratch file in the same directory and
    re-read with ``reader``. It replaces ``path`` only when the re-read
    dependencies equal the intended ones. On a mismatch the scratch file is
    kept and ``path`` is untouched.

    Raises:
        NoMatchFoundError: If an edit matches nothing.
        AmbiguousMatchError: If an edit matches more than once.
        RewriteMisfireError: If the rewritten manifest does not re-read as
            intended. ``context["scratch_path"]`` names the scratch file.
    """
    path = Path(path)
    original = path.read_text(encoding="utf-8")
    before = reader.read(original, str(path))
    rewritten = rewrite_manifest_text(original, edits)
    wanted = expected_dependencies(before.dependencies, edits)

    fd, scratch_name = tempfile.mkstemp(
        prefix=".project-", suffix=path.suffix or ".tmp", dir=path.parent
    )
    scratch = Path(scratch_name)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(rewritten)

    try:
        after = list(reader.read(scratch.read_text(encoding="utf-8"), str(path)).dependencies)
    except ManifestParseError as exc:
        raise RewriteMisfireError(
            f"Rewritten manifest no longer reads: {exc}",
            manifest=str(path), scratch_path=str(scratch),
        ) from exc
    if after != wanted:
        raise RewriteMisfireError(
            "Rewritten manifest does not declare the intended dependencies",
            manifest=str(path), scratch_path=str(scratch),
            expected=[f"{d.coordinate} {d.version}" for d in wanted],
            actual=[f"{d.coordinate} {d.version}" for d in after],
        )

    os.replace(scratch, path)
    logger.info("Rewrote %d dependencies in %s", len(edits), path)
