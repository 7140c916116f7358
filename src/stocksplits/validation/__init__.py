"""Data integrity validation module."""

from stocksplits.validation.integrity import (
    DuplicateTracker,
    FileReport,
    Finding,
    FindingKind,
    IntegrityChecker,
    IntegrityReport,
    validate_index,
    validate_index_file,
)
from stocksplits.validation.reporter import ConsoleReporter

__all__ = [
    "ConsoleReporter",
    "DuplicateTracker",
    "FileReport",
    "Finding",
    "FindingKind",
    "IntegrityChecker",
    "IntegrityReport",
    "validate_index",
    "validate_index_file",
]
