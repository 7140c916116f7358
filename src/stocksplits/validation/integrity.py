"""
Dataset-wide integrity checks for year files and the generated index.

Some invariants span files (a split may appear only once in the whole
dataset), so the checker validates the dataset as a unit. Problems are
collected as findings; nothing is raised for bad records.
"""

import json
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from stocksplits.dataset import YearDocument, sort_documents
from stocksplits.schemas.validator import SchemaValidator, json_pointer
from stocksplits.utils.io import read_json
from stocksplits.utils.logging import get_logger, log_context

log = get_logger(__name__)

RATIO_PATTERN = re.compile(r"[0-9]+:[0-9]+")
ISIN_PATTERN = re.compile(r"[A-Z]{2}[A-Z0-9]{10}")
DATE_YEAR_PATTERN = re.compile(r"([0-9]{4})")

# Entry fields whose format is checked here with a dedicated finding kind.
# Pattern violations the schema reports for them would be duplicates.
_ENTRY_FORMAT_FIELDS = frozenset({"ratio", "isin"})


class FindingKind(str, Enum):
    """Classification of integrity findings."""

    MALFORMED_INPUT = "MalformedInput"
    SCHEMA_VIOLATION = "SchemaViolation"
    COUNT_MISMATCH = "CountMismatch"
    YEAR_MISMATCH = "YearMismatch"
    DATE_YEAR_MISMATCH = "DateYearMismatch"
    INVALID_RATIO_FORMAT = "InvalidRatioFormat"
    INVALID_ISIN_FORMAT = "InvalidIsinFormat"
    DUPLICATE_SPLIT = "DuplicateSplit"


@dataclass(frozen=True)
class Finding:
    """
    A single reported problem.

    Attributes:
        kind: Finding classification.
        location: JSON pointer inside the file.
        message: Human-readable description.
    """

    kind: FindingKind
    location: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class FileReport:
    """Findings for one file. A file is valid iff it has no findings."""

    file: str
    findings: list[Finding] = field(default_factory=list)
    path: Path | None = None

    @property
    def valid(self) -> bool:
        return not self.findings

    @property
    def errors(self) -> list[str]:
        """Finding messages in report order."""
        return [f.message for f in self.findings]

    def of_kind(self, kind: FindingKind) -> list[Finding]:
        """Findings of one kind."""
        return [f for f in self.findings if f.kind == kind]

    def add(self, kind: FindingKind, location: str, message: str) -> None:
        self.findings.append(Finding(kind=kind, location=location, message=message))


@dataclass
class IntegrityReport:
    """Complete report over all year files and, optionally, the index."""

    files: list[FileReport] = field(default_factory=list)
    index: FileReport | None = None

    @property
    def reports(self) -> list[FileReport]:
        """All file reports, index last."""
        return [*self.files, self.index] if self.index is not None else list(self.files)

    @property
    def has_errors(self) -> bool:
        return any(not r.valid for r in self.reports)

    @property
    def finding_count(self) -> int:
        return sum(len(r.findings) for r in self.reports)

    def get(self, file: str) -> FileReport:
        """
        Look up the report of one file.

        Raises:
            KeyError: If no report exists for the file.
        """
        for report in self.reports:
            if report.file == file:
                return report
        msg = f"No report for file '{file}'"
        raise KeyError(msg)


@dataclass
class DuplicateTracker:
    """
    Running map from ``(symbol, date)`` to the file that first declared it.

    Passed through the fold over files; first seen wins as the original.
    """

    seen: dict[tuple[str, str], str] = field(default_factory=dict)

    def observe(self, key: tuple[str, str], file: str) -> str | None:
        """
        Record a key.

        Returns:
            The file of the original declaration if ``key`` was seen before,
            otherwise None.
        """
        original = self.seen.get(key)
        if original is None:
            self.seen[key] = file
        return original


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _describe(value: Any) -> str:
    """Render a JSON value in messages the way it appears in the file."""
    if value is None:
        return "missing"
    if isinstance(value, str):
        return value
    return json.dumps(value)


class IntegrityChecker:
    """
    Validates a full set of year files.

    Checks per file: schema conformance, declared count, declared year.
    Checks per entry: date within the file's year, ratio and ISIN format.
    Checks across files: no ``(symbol, date)`` pair appears twice.
    """

    def __init__(self, validator: SchemaValidator | None = None) -> None:
        """
        Initialize integrity checker.

        Args:
            validator: Schema validator to use (default: bundled schemas).
        """
        self.validator = validator or SchemaValidator()

    def check(self, documents: Iterable[YearDocument]) -> IntegrityReport:
        """
        Check all documents as one dataset.

        Documents are processed in ascending name order regardless of input
        order, which determines which file is blamed for a duplicate.

        Args:
            documents: Year files to check.

        Returns:
            Report with one entry per document.
        """
        tracker = DuplicateTracker()
        report = IntegrityReport()
        for document in sort_documents(list(documents)):
            report.files.append(self.check_document(document, tracker))

        log.info(
            "Integrity check complete",
            files=len(report.files),
            invalid=sum(1 for r in report.files if not r.valid),
            findings=report.finding_count,
        )
        return report

    def check_document(
        self, document: YearDocument, tracker: DuplicateTracker
    ) -> FileReport:
        """
        Check one year file, recording its keys in the shared tracker.

        Args:
            document: Year file to check.
            tracker: Duplicate accumulator shared across the dataset.

        Returns:
            Findings for this file.
        """
        report = FileReport(file=document.name, path=document.path)

        with log_context(file=document.name):
            if document.malformed:
                report.add(FindingKind.MALFORMED_INPUT, "/", document.error or "Malformed")
                log.warning("Skipping checks for malformed file")
                return report

            data = document.content
            self._check_schema(data, report)

            if isinstance(data, dict):
                self._check_count(data, report)
                self._check_year(document, data, report)
                splits = data.get("splits")
                if isinstance(splits, list):
                    declared_year = data.get("year")
                    for i, entry in enumerate(splits):
                        if isinstance(entry, dict):
                            self._check_entry(
                                document.name, i, entry, declared_year, report, tracker
                            )

            if report.valid:
                log.debug("File passed integrity checks")
            else:
                log.info("File has findings", findings=len(report.findings))

        return report

    def _check_schema(self, data: Any, report: FileReport) -> None:
        result = self.validator.validate(data, "year_file")
        for finding in result.findings:
            path = finding.path
            if (
                finding.keyword == "pattern"
                and len(path) == 3
                and path[0] == "splits"
                and path[2] in _ENTRY_FORMAT_FIELDS
            ):
                continue
            report.add(FindingKind.SCHEMA_VIOLATION, finding.pointer, str(finding))

    def _check_count(self, data: dict[str, Any], report: FileReport) -> None:
        declared = data.get("count")
        splits = data.get("splits")
        actual = len(splits) if isinstance(splits, list) else 0
        if not (_is_int(declared) and declared == actual):
            report.add(
                FindingKind.COUNT_MISMATCH,
                "/count",
                f"Count mismatch: declared {_describe(declared)}, actual {actual}",
            )

    def _check_year(
        self, document: YearDocument, data: dict[str, Any], report: FileReport
    ) -> None:
        declared = data.get("year")
        if document.name_year is None:
            report.add(
                FindingKind.YEAR_MISMATCH,
                "/year",
                f"Year mismatch: filename {document.name} names no year, "
                f"data says {_describe(declared)}",
            )
        elif not (_is_int(declared) and declared == document.name_year):
            report.add(
                FindingKind.YEAR_MISMATCH,
                "/year",
                f"Year mismatch: filename says {document.name_year}, "
                f"data says {_describe(declared)}",
            )

    def _check_entry(
        self,
        file: str,
        index: int,
        entry: dict[str, Any],
        declared_year: Any,
        report: FileReport,
        tracker: DuplicateTracker,
    ) -> None:
        location = json_pointer(("splits", index))
        symbol = entry.get("symbol")
        label = _describe(symbol)
        date_value = entry.get("date")

        if isinstance(date_value, str) and _is_int(declared_year):
            match = DATE_YEAR_PATTERN.match(date_value)
            if match and int(match.group(1)) != declared_year:
                report.add(
                    FindingKind.DATE_YEAR_MISMATCH,
                    f"{location}/date",
                    f"Split {label} date {date_value} is not in year {declared_year}",
                )

        isin = entry.get("isin")
        if isinstance(isin, str) and not ISIN_PATTERN.fullmatch(isin):
            report.add(
                FindingKind.INVALID_ISIN_FORMAT,
                f"{location}/isin",
                f"Invalid ISIN format for {label}: {isin}",
            )

        ratio = entry.get("ratio")
        if isinstance(ratio, str) and not RATIO_PATTERN.fullmatch(ratio):
            report.add(
                FindingKind.INVALID_RATIO_FORMAT,
                f"{location}/ratio",
                f"Invalid ratio format for {label}: {ratio}",
            )

        if isinstance(symbol, str) and isinstance(date_value, str):
            original = tracker.observe((symbol, date_value), file)
            if original is not None:
                report.add(
                    FindingKind.DUPLICATE_SPLIT,
                    location,
                    f"Duplicate split: {symbol} on {date_value} also in {original}",
                )


def validate_index(
    content: Any,
    validator: SchemaValidator | None = None,
    file: str = "index.json",
) -> FileReport:
    """
    Validate a built index against the index schema.

    Args:
        content: Parsed index JSON.
        validator: Schema validator to use (default: bundled schemas).
        file: Name to report the findings under.

    Returns:
        Report for the index file.
    """
    validator = validator or SchemaValidator()
    report = FileReport(file=file)
    for finding in validator.validate(content, "index").findings:
        report.add(FindingKind.SCHEMA_VIOLATION, finding.pointer, str(finding))
    return report


def validate_index_file(
    path: Path, validator: SchemaValidator | None = None
) -> FileReport | None:
    """
    Validate an index file on disk.

    Returns:
        Report for the index, or None if the file does not exist yet.
    """
    if not path.exists():
        log.info("Index file not found", path=str(path))
        return None

    try:
        content = read_json(path)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        report = FileReport(file=path.name, path=path)
        report.add(FindingKind.MALFORMED_INPUT, "/", f"Invalid JSON: {e}")
        return report

    report = validate_index(content, validator, file=path.name)
    report.path = path
    return report
