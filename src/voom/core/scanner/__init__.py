"""Tag scanning of repository history.

- ``scanner``: ``TagScanner`` writes a version tag per manifest change.
- ``progress``: ``report_progress`` bounded-cadence progress iterator.
"""

from voom.core.scanner.progress import ProgressCallback, report_progress
from voom.core.scanner.scanner import ScanReport, Skipped, TagScanner

__all__ = [
    "ProgressCallback",
    "ScanReport",
    "Skipped",
    "TagScanner",
    "report_progress",
]
