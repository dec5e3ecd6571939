"""Version tags --- coordinates, tag records and their git tag-name encoding.

- ``models``: ``ProjectCoordinate`` and ``Tag`` data classes.
- ``codec``: ``encode_tag``/``decode_tag`` and the per-branch scan sentinel
  ``encode_branch_marker``/``decode_branch_marker``.
"""

from voom.core.tags.codec import (
    decode_branch_marker,
    decode_tag,
    encode_branch_marker,
    encode_tag,
    is_voom_tag,
)
from voom.core.tags.models import (
    BRANCH_PREFIX,
    SHORT_SHA_LENGTH,
    TAG_PREFIX,
    ProjectCoordinate,
    Tag,
)

__all__ = [
    "BRANCH_PREFIX",
    "SHORT_SHA_LENGTH",
    "TAG_PREFIX",
    "ProjectCoordinate",
    "Tag",
    "decode_branch_marker",
    "decode_tag",
    "encode_branch_marker",
    "encode_tag",
    "is_voom_tag",
]
