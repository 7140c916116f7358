"""Lookup index construction."""

from stocksplits.index.builder import (
    INDEX_FORMAT_VERSION,
    IndexAccumulator,
    IndexBuilder,
    IndexBuildResult,
    IsinConflict,
    SkippedEntry,
    read_entry,
)

__all__ = [
    "INDEX_FORMAT_VERSION",
    "IndexAccumulator",
    "IndexBuildResult",
    "IndexBuilder",
    "IsinConflict",
    "SkippedEntry",
    "read_entry",
]
