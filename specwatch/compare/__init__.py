"""Snapshot comparison.

Submodules:
    normalize  -- Example-timestamp normalisation and identity check.
    diff       -- Recursive structural diff producing DiffEntry lists.
    detect     -- Added / modified / deleted detection across unit maps.
"""

from specwatch.compare.detect import detect_changes
from specwatch.compare.diff import diff, format_diff, summarize
from specwatch.compare.normalize import identical_after_normalizing, normalize

__all__ = [
    "detect_changes",
    "diff",
    "format_diff",
    "identical_after_normalizing",
    "normalize",
    "summarize",
]
