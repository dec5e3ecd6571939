"""Commit-ancestry index.

Answers "is X an ancestor of Y" and set-restricted ancestor/descendant
queries over an append-only commit DAG using per-commit bitsets.
"""

from voom.core.ancestry.index import AncestryIndex

__all__ = ["AncestryIndex"]
