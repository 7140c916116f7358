"""
Merging of fetched candidate records into the year files.

Candidates arrive already materialized (the network fetch happens elsewhere)
in the shape of the upstream splits API: ticker, execution date and the
from/to share counts. Only splits not yet in the dataset are added.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from stocksplits.config.settings import StockSplitsConfig
from stocksplits.dataset import YearDocument, load_year_documents, save_year_file
from stocksplits.errors import IngestError
from stocksplits.models import SplitEntry, YearFile
from stocksplits.utils.io import read_json
from stocksplits.utils.logging import get_logger

log = get_logger(__name__)


class CandidateSplit(BaseModel):
    """A split as reported by the upstream API."""

    ticker: str
    execution_date: date
    split_from: float
    split_to: float

    @field_validator("ticker")
    @classmethod
    def validate_ticker(cls, v: str) -> str:
        """Strip whitespace and reject empty tickers."""
        v = v.strip()
        if not v:
            msg = "ticker must not be empty"
            raise ValueError(msg)
        return v

    @property
    def date_str(self) -> str:
        return self.execution_date.isoformat()

    @property
    def key(self) -> tuple[str, str]:
        return (self.ticker, self.date_str)


@dataclass
class IngestResult:
    """Summary of one merge."""

    received: int = 0
    added: dict[int, list[SplitEntry]] = field(default_factory=dict)
    written: list[Path] = field(default_factory=list)

    @property
    def added_count(self) -> int:
        return sum(len(entries) for entries in self.added.values())

    @property
    def skipped_count(self) -> int:
        return self.received - self.added_count


def _share_count(value: float) -> int:
    if value <= 0 or not float(value).is_integer():
        msg = f"Share counts must be positive whole numbers, got {value}"
        raise IngestError(msg)
    return int(value)


def convert_ratio(split_from: float, split_to: float) -> str:
    """
    Convert API share counts to a ``new:old`` ratio.

    Example:
        convert_ratio(1, 4) -> "4:1" (a 4-for-1 split)
    """
    return f"{_share_count(split_to)}:{_share_count(split_from)}"


def load_candidates(path: Path) -> list[CandidateSplit]:
    """
    Load candidate records from a JSON file.

    Accepts either a plain list of records or an API response object with a
    ``results`` list.

    Raises:
        IngestError: If the file shape or a record is invalid.
    """
    try:
        data: Any = read_json(path)
    except ValueError as e:
        msg = f"Candidate file {path} is not valid JSON: {e}"
        raise IngestError(msg) from e

    if isinstance(data, dict):
        status = data.get("status")
        if status is not None and status != "OK":
            msg = f"Candidate file {path} has API status {status!r}"
            raise IngestError(msg)
        data = data.get("results", [])

    if not isinstance(data, list):
        msg = f"Candidate file {path} must hold a list of records"
        raise IngestError(msg)

    try:
        candidates = [CandidateSplit.model_validate(record) for record in data]
    except ValidationError as e:
        msg = f"Invalid candidate record in {path}: {e}"
        raise IngestError(msg) from e

    log.info("Loaded candidates", path=str(path), candidates=len(candidates))
    return candidates


def existing_keys(documents: Iterable[YearDocument]) -> set[tuple[str, str]]:
    """Collect ``(symbol, date)`` of every entry already in the dataset."""
    keys: set[tuple[str, str]] = set()
    for document in documents:
        if document.malformed or not isinstance(document.content, dict):
            continue
        splits = document.content.get("splits")
        if not isinstance(splits, list):
            continue
        for entry in splits:
            if isinstance(entry, dict):
                symbol, split_date = entry.get("symbol"), entry.get("date")
                if isinstance(symbol, str) and isinstance(split_date, str):
                    keys.add((symbol, split_date))
    return keys


def filter_new(
    candidates: Iterable[CandidateSplit], existing: set[tuple[str, str]]
) -> list[CandidateSplit]:
    """
    Drop candidates already in the dataset or repeated within the batch.

    The first occurrence of a repeated candidate is kept.
    """
    seen = set(existing)
    fresh: list[CandidateSplit] = []
    for candidate in candidates:
        if candidate.key in seen:
            continue
        seen.add(candidate.key)
        fresh.append(candidate)
    return fresh


def group_by_year(candidates: Iterable[CandidateSplit]) -> dict[int, list[CandidateSplit]]:
    """Group candidates by the year of their execution date, years ascending."""
    by_year: dict[int, list[CandidateSplit]] = {}
    for candidate in candidates:
        by_year.setdefault(candidate.execution_date.year, []).append(candidate)
    return dict(sorted(by_year.items()))


def to_entry(candidate: CandidateSplit, config: StockSplitsConfig) -> SplitEntry:
    """Build a year-file entry. The name is a placeholder until reviewed."""
    return SplitEntry(
        symbol=candidate.ticker,
        name=candidate.ticker,
        date=candidate.date_str,
        ratio=convert_ratio(candidate.split_from, candidate.split_to),
        exchange=config.ingest.default_exchange,
        source=config.ingest.source,
    )


def _load_or_create(document: YearDocument | None, year: int, today: date) -> YearFile:
    if document is None:
        return YearFile(year=year, updated=today.isoformat())
    if document.malformed:
        msg = f"Refusing to merge into malformed {document.name}: {document.error}"
        raise IngestError(msg)
    try:
        year_file = YearFile.model_validate(document.content)
    except ValidationError as e:
        msg = f"Cannot read {document.name} as a year file: {e}"
        raise IngestError(msg) from e
    if year_file.year != year:
        msg = f"Refusing to merge into {document.name}: it declares year {year_file.year}"
        raise IngestError(msg)
    return year_file


def merge_candidates(
    config: StockSplitsConfig,
    candidates: Iterable[CandidateSplit],
    today: date | None = None,
) -> IngestResult:
    """
    Add new candidate splits to the year files.

    Each affected year file is loaded (or created), extended, re-sorted and
    written atomically with an updated ``count`` and ``updated`` date.

    Args:
        config: Application configuration.
        candidates: Records from the upstream API.
        today: Date stamped into ``updated`` (default: today).

    Returns:
        Summary of added entries and written files.
    """
    today = today or date.today()
    data_dir = config.data_dir
    data_dir.mkdir(parents=True, exist_ok=True)

    candidate_list = list(candidates)
    result = IngestResult(received=len(candidate_list))

    documents = load_year_documents(data_dir)
    by_name = {d.name: d for d in documents}
    fresh = filter_new(candidate_list, existing_keys(documents))
    log.info("Filtered candidates", received=len(candidate_list), new=len(fresh))

    if not fresh:
        return result

    # Prepare every file before writing any, so a bad record leaves all untouched
    pending: list[tuple[YearFile, list[SplitEntry]]] = []
    for year, batch in group_by_year(fresh).items():
        year_file = _load_or_create(by_name.get(f"{year:04d}.json"), year, today)
        pending.append((year_file, [to_entry(c, config) for c in batch]))

    for year_file, entries in pending:
        year = year_file.year
        year_file.splits.extend(entries)
        result.written.append(save_year_file(data_dir, year_file, today))
        result.added[year] = entries
        for entry in entries:
            log.info("Added split", symbol=entry.symbol, date=entry.date, ratio=entry.ratio)

    return result
