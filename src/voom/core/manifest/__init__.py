"""Build manifests --- reading without evaluation and safe version rewriting.

- ``models``: ``Manifest``, ``Dependency``, ``DependencyEdit`` and the
  ``ManifestReader`` protocol.
- ``reader``: ``CljManifestReader`` for Leiningen ``project.clj`` files.
- ``rewriter``: exactly-one-match text edits with an atomic file swap.
"""

from voom.core.manifest.models import Dependency, DependencyEdit, Manifest, ManifestReader
from voom.core.manifest.reader import CljManifestReader
from voom.core.manifest.rewriter import (
    expected_dependencies,
    rewrite_manifest_file,
    rewrite_manifest_text,
)

__all__ = [
    "CljManifestReader",
    "Dependency",
    "DependencyEdit",
    "Manifest",
    "ManifestReader",
    "expected_dependencies",
    "rewrite_manifest_file",
    "rewrite_manifest_text",
]
