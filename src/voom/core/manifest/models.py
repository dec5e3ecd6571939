"""Manifest data models and the pluggable reader interface."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from voom.core.tags.models import ProjectCoordinate


@dataclass(frozen=True)
class Dependency:
    """One declared dependency: coordinate at a version."""

    coordinate: ProjectCoordinate
    version: str


@dataclass(frozen=True)
class Manifest:
    """What voom needs from a build descriptor.

    Attributes:
        coordinate: The project's own coordinate.
        version: The project's declared version.
        dependencies: Declared dependencies, in file order.
        path: Directory of the manifest relative to its repository
            ("" for the root).
    """

    coordinate: ProjectCoordinate
    version: str
    dependencies: tuple[Dependency, ...] = field(default_factory=tuple)
    path: str = ""


@dataclass(frozen=True)
class DependencyEdit:
    """Replace ``old_version`` of ``coordinate`` with ``new_version``."""

    coordinate: ProjectCoordinate
    old_version: str
    new_version: str


class ManifestReader(Protocol):
    """Reads manifest text without executing it.

    Implementations raise ``ManifestParseError`` for anything they cannot
    read; they never evaluate code found in the manifest.
    """

    def read(self, text: str, path: str = "") -> Manifest: ...
