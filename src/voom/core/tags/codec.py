"""Tag name encoding and decoding.

This is the only module that knows the layout of voom tag names::

    voom--<group>%<name>--<version>--<escaped-path>--<short-sha>[--no-parent]
    voom-branch--<branch-name>

Fields are joined with ``--``. A ``/`` inside the coordinate or the path is
written as ``%``. A deletion tag leaves the coordinate and version empty.
Because ``--`` separates fields, no field may contain ``--`` or start or end
with ``-``; ``%`` is reserved for escaping.
"""

from __future__ import annotations

import re

from voom.core.tags.models import (
    BRANCH_PREFIX,
    SHORT_SHA_LENGTH,
    TAG_PREFIX,
    ProjectCoordinate,
    Tag,
)
from voom.exceptions import TagFormatError

SEPARATOR = "--"
ESCAPE = "%"
NO_PARENT = "no-parent"

_SHA_RE = re.compile(r"^[0-9a-f]{4,40}$")
# Characters git refuses in ref names, plus whitespace.
_FORBIDDEN_RE = re.compile(r"[\s~^:?*\[\\]|\.\.|@\{")


def _check_field(label: str, value: str) -> None:
    if SEPARATOR in value or value.startswith("-") or value.endswith("-"):
        raise TagFormatError(
            f"Tag {label} {value!r} cannot contain '--' or start or end with '-'",
            field=label, value=value,
        )
    if ESCAPE in value:
        raise TagFormatError(
            f"Tag {label} {value!r} cannot contain {ESCAPE!r}", field=label, value=value
        )
    if _FORBIDDEN_RE.search(value):
        raise TagFormatError(
            f"Tag {label} {value!r} contains characters not allowed in git refs",
            field=label, value=value,
        )


def escape_path(path: str) -> str:
    return path.strip("/").replace("/", ESCAPE)


def unescape_path(field: str) -> str:
    return field.replace(ESCAPE, "/")


def encode_tag(tag: Tag) -> str:
    """Encode a ``Tag`` as a git tag name.

    Raises:
        TagFormatError: If a field cannot be represented unambiguously.
    """
    if not _SHA_RE.match(tag.sha):
        raise TagFormatError(f"Invalid tag sha {tag.sha!r}", field="sha", value=tag.sha)

    if tag.coordinate is None:
        if tag.version:
            raise TagFormatError(
                "A deletion tag cannot carry a version", field="version", value=tag.version
            )
        coordinate = ""
    else:
        _check_field("group", tag.coordinate.group)
        _check_field("name", tag.coordinate.name)
        if not tag.version:
            raise TagFormatError(
                f"Tag for {tag.coordinate} has an empty version", field="version", value=""
            )
        _check_field("version", tag.version)
        coordinate = f"{tag.coordinate.group}{ESCAPE}{tag.coordinate.name}"

    path = tag.path.strip("/")
    if path:
        _check_field("path", path)

    fields = [TAG_PREFIX, coordinate, tag.version, escape_path(path), tag.short_sha]
    if tag.no_parent:
        fields.append(NO_PARENT)
    return SEPARATOR.join(fields)


def is_voom_tag(name: str) -> bool:
    return name.startswith(TAG_PREFIX + SEPARATOR)


def decode_tag(name: str, target: str | None = None) -> Tag:
    """Decode a git tag name produced by ``encode_tag``.

    Args:
        name: The tag name.
        target: Full sha the tag points at. When it extends the short sha in
            the name, the decoded tag carries the full sha.

    Raises:
        TagFormatError: If ``name`` is not a voom tag.
    """
    if not is_voom_tag(name):
        raise TagFormatError(f"Not a voom tag: {name!r}", tag=name)

    parts = name.split(SEPARATOR)
    no_parent = False
    if len(parts) == 6 and parts[5] == NO_PARENT:
        no_parent = True
        parts = parts[:5]
    if len(parts) != 5:
        raise TagFormatError(
            f"Malformed voom tag {name!r}: expected 5 fields, found {len(parts)}",
            tag=name,
        )

    _, coordinate_field, version, path_field, short_sha = parts
    if not _SHA_RE.match(short_sha):
        raise TagFormatError(f"Malformed sha in voom tag {name!r}", tag=name)

    coordinate: ProjectCoordinate | None = None
    if coordinate_field:
        group, sep, project = coordinate_field.partition(ESCAPE)
        if not sep or not group or not project or not version:
            raise TagFormatError(f"Malformed coordinate in voom tag {name!r}", tag=name)
        coordinate = ProjectCoordinate(group=group, name=project)
    elif version:
        raise TagFormatError(f"Deletion tag {name!r} carries a version", tag=name)

    sha = short_sha
    if target and target.startswith(short_sha) and len(target) > len(short_sha):
        sha = target

    return Tag(
        coordinate=coordinate,
        version=version,
        path=unescape_path(path_field),
        sha=sha,
        no_parent=no_parent,
    )


def encode_branch_marker(branch: str) -> str:
    """Sentinel tag recording how far ``branch`` has been scanned."""
    if not branch:
        raise TagFormatError("Branch name cannot be empty", field="branch", value=branch)
    return f"{BRANCH_PREFIX}{SEPARATOR}{branch}"


def decode_branch_marker(name: str) -> str | None:
    """Branch name of a sentinel tag, or None if ``name`` is not one."""
    prefix = BRANCH_PREFIX + SEPARATOR
    if name.startswith(prefix) and len(name) > len(prefix):
        return name[len(prefix):]
    return None


__all__ = [
    "SHORT_SHA_LENGTH",
    "decode_branch_marker",
    "decode_tag",
    "encode_branch_marker",
    "encode_tag",
    "is_voom_tag",
]
