"""Version resolution over tagged repository history.

- ``models``: ``ResolutionRequest``, ``ResolvedVersion``, ``RepositorySnapshot``.
- ``resolver``: ``VersionResolver``.
"""

from voom.core.resolver.models import (
    RepositorySnapshot,
    ResolutionRequest,
    ResolvedVersion,
    snapshot_repository,
)
from voom.core.resolver.resolver import VersionResolver

__all__ = [
    "RepositorySnapshot",
    "ResolutionRequest",
    "ResolvedVersion",
    "VersionResolver",
    "snapshot_repository",
]
