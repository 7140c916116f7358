"""
End-to-end validate and build flows.

load year files -> integrity check -> build index -> index schema check ->
atomic write. The previous index stays in place whenever a step fails.
"""

from dataclasses import dataclass
from datetime import date
from pathlib import Path

from stocksplits.config.settings import StockSplitsConfig
from stocksplits.dataset import load_year_documents, write_index
from stocksplits.index.builder import IndexBuilder, IndexBuildResult
from stocksplits.schemas.registry import SchemaRegistry
from stocksplits.schemas.validator import SchemaValidator
from stocksplits.utils.logging import get_logger
from stocksplits.validation.integrity import (
    FileReport,
    IntegrityChecker,
    IntegrityReport,
    validate_index,
    validate_index_file,
)

log = get_logger(__name__)


@dataclass
class BuildOutcome:
    """
    Result of a build run.

    Attributes:
        integrity: Integrity report of the year files.
        build: Build result, or None if the build was not attempted.
        index_report: Schema check of the freshly built index.
        written: Path of the written index, or None if nothing was written.
    """

    integrity: IntegrityReport
    build: IndexBuildResult | None = None
    index_report: FileReport | None = None
    written: Path | None = None

    @property
    def succeeded(self) -> bool:
        return self.written is not None


def _schema_validator(config: StockSplitsConfig) -> SchemaValidator:
    return SchemaValidator(SchemaRegistry(config.data.schema_dir))


def run_validation(config: StockSplitsConfig, *, include_index: bool = True) -> IntegrityReport:
    """
    Check all year files and, if present, the index file.

    Args:
        config: Application configuration.
        include_index: Also validate the index file against its schema.

    Returns:
        Complete integrity report.
    """
    validator = _schema_validator(config)
    documents = load_year_documents(config.data_dir)
    report = IntegrityChecker(validator).check(documents)

    if include_index:
        report.index = validate_index_file(config.index_path, validator)

    return report


def run_build(
    config: StockSplitsConfig,
    *,
    force: bool = False,
    build_date: date | None = None,
) -> BuildOutcome:
    """
    Validate the year files, then build and write the index.

    Args:
        config: Application configuration.
        force: Build even when the year files have findings.
        build_date: Date stamped into the index (default: today).

    Returns:
        Outcome with the reports of every stage that ran.
    """
    validator = _schema_validator(config)
    documents = load_year_documents(config.data_dir)

    integrity = IntegrityChecker(validator).check(documents)
    outcome = BuildOutcome(integrity=integrity)

    if integrity.has_errors and not force:
        log.error("Year files have findings, not building index", findings=integrity.finding_count)
        return outcome
    if integrity.has_errors:
        log.warning("Building index despite findings", findings=integrity.finding_count)

    builder = IndexBuilder(
        version=config.index.version, policy=config.index.symbol_metadata
    )
    outcome.build = builder.build(documents, build_date=build_date)

    outcome.index_report = validate_index(
        outcome.build.index.to_json_dict(), validator, file=config.data.index_filename
    )
    if not outcome.index_report.valid:
        log.error(
            "Built index does not match its schema, keeping previous index",
            findings=len(outcome.index_report.findings),
        )
        return outcome

    write_index(config.index_path, outcome.build.index)
    outcome.written = config.index_path
    return outcome
