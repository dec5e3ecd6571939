"""voom: dependency versions derived from git history instead of version files."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
