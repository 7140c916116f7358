"""
Aggregation of year files into the lookup index.

The index is regenerated from scratch on every build. Files are folded in
ascending name order into an explicit accumulator, so the result depends
only on the input files (and the build date stamped into ``updated``).
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from stocksplits.config.settings import SymbolMetadataPolicy
from stocksplits.dataset import YearDocument, sort_documents
from stocksplits.errors import IndexBuildError
from stocksplits.models import IndexFile, SplitEntry, SymbolData, SymbolSplit
from stocksplits.schemas.validator import json_pointer
from stocksplits.utils.logging import get_logger

log = get_logger(__name__)

INDEX_FORMAT_VERSION = "1.0.0"

# Without these a split cannot be placed in the index
_REQUIRED_ENTRY_FIELDS = ("symbol", "date", "ratio")
_OPTIONAL_TEXT_FIELDS = ("name", "isin", "exchange", "source", "notes")


@dataclass(frozen=True)
class IsinConflict:
    """An ISIN that moved from one symbol to another during the fold."""

    isin: str
    previous_symbol: str
    symbol: str
    file: str


@dataclass
class IndexAccumulator:
    """
    Running state of the index fold.

    Symbol metadata (name, isin, exchange) follows ``policy``; the ISIN to
    symbol mapping is always last-writer-wins in processing order.
    """

    policy: SymbolMetadataPolicy = SymbolMetadataPolicy.FIRST_SEEN
    years: list[int] = field(default_factory=list)
    by_symbol: dict[str, SymbolData] = field(default_factory=dict)
    by_isin: dict[str, str] = field(default_factory=dict)
    total_splits: int = 0
    isin_conflicts: list[IsinConflict] = field(default_factory=list)

    def add_year(self, year: int | None, entries: Iterable[SplitEntry], file: str) -> None:
        """Fold one year file into the accumulator."""
        if year is not None:
            self.years.append(year)
        for entry in entries:
            self.add_entry(entry, file)

    def add_entry(self, entry: SplitEntry, file: str) -> None:
        """Fold one split entry into the accumulator."""
        symbol_data = self.by_symbol.get(entry.symbol)
        if symbol_data is None:
            symbol_data = SymbolData(
                name=entry.name, isin=entry.isin, exchange=entry.exchange
            )
            self.by_symbol[entry.symbol] = symbol_data
        elif self.policy is SymbolMetadataPolicy.LAST_SEEN:
            if entry.name is not None:
                symbol_data.name = entry.name
            if entry.isin is not None:
                symbol_data.isin = entry.isin
            if entry.exchange is not None:
                symbol_data.exchange = entry.exchange

        symbol_data.splits.append(
            SymbolSplit(date=entry.date, ratio=entry.ratio, notes=entry.notes or None)
        )
        self.total_splits += 1

        if entry.isin:
            previous = self.by_isin.get(entry.isin)
            if previous is not None and previous != entry.symbol:
                self.isin_conflicts.append(
                    IsinConflict(
                        isin=entry.isin,
                        previous_symbol=previous,
                        symbol=entry.symbol,
                        file=file,
                    )
                )
                log.warning(
                    "ISIN reassigned to another symbol",
                    isin=entry.isin,
                    previous=previous,
                    symbol=entry.symbol,
                    file=file,
                )
            self.by_isin[entry.isin] = entry.symbol

    def finalize(self, version: str, build_date: date) -> IndexFile:
        """
        Produce the index.

        Each symbol's splits are ordered most recent first. The sort is
        stable, so splits sharing a date keep their processing order.
        """
        for symbol_data in self.by_symbol.values():
            symbol_data.splits = sorted(
                symbol_data.splits, key=lambda s: s.date, reverse=True
            )

        return IndexFile(
            version=version,
            updated=build_date.isoformat(),
            total_splits=self.total_splits,
            years=sorted(set(self.years)),
            by_symbol=self.by_symbol,
            by_isin=self.by_isin,
        )


@dataclass(frozen=True)
class SkippedEntry:
    """A split that could not be indexed because symbol, date or ratio is unusable."""

    file: str
    location: str


def read_entry(raw: Any) -> SplitEntry | None:
    """
    Read what the index needs from a raw split entry.

    Mistyped optional fields are treated as absent so that one bad value does
    not cost the whole entry.

    Returns:
        The entry, or None if symbol, date or ratio is missing or not a string.
    """
    if not isinstance(raw, dict):
        return None
    if not all(isinstance(raw.get(key), str) for key in _REQUIRED_ENTRY_FIELDS):
        return None

    fields = {key: raw[key] for key in _REQUIRED_ENTRY_FIELDS}
    fields.update(
        {key: raw[key] for key in _OPTIONAL_TEXT_FIELDS if isinstance(raw.get(key), str)}
    )
    if isinstance(raw.get("verified"), bool):
        fields["verified"] = raw["verified"]
    return SplitEntry(**fields)


@dataclass
class IndexBuildResult:
    """Built index plus statistics about the build."""

    index: IndexFile
    files_processed: list[str] = field(default_factory=list)
    files_skipped: list[str] = field(default_factory=list)
    entries_skipped: list[SkippedEntry] = field(default_factory=list)
    isin_conflicts: list[IsinConflict] = field(default_factory=list)

    @property
    def symbol_count(self) -> int:
        return len(self.index.by_symbol)


class IndexBuilder:
    """Folds year files into an IndexFile."""

    def __init__(
        self,
        version: str = INDEX_FORMAT_VERSION,
        policy: SymbolMetadataPolicy = SymbolMetadataPolicy.FIRST_SEEN,
    ) -> None:
        """
        Initialize index builder.

        Args:
            version: Index format version written to the index.
            policy: Which entry seeds a symbol's metadata.
        """
        self.version = version
        self.policy = policy

    def build(
        self, documents: Iterable[YearDocument], build_date: date | None = None
    ) -> IndexBuildResult:
        """
        Build the index from year files.

        Input is expected to have passed the integrity checks. Invalid content
        is carried into the index as far as it can be: malformed files are
        skipped, as are entries without a usable symbol, date or ratio.

        Args:
            documents: Year files, in any order.
            build_date: Date stamped into ``updated`` (default: today).

        Returns:
            The built index and build statistics.

        Raises:
            IndexBuildError: If a document is not an object with a splits list.
        """
        accumulator = IndexAccumulator(policy=self.policy)
        result_files: list[str] = []
        skipped: list[str] = []
        skipped_entries: list[SkippedEntry] = []

        for document in sort_documents(list(documents)):
            if document.malformed:
                log.warning("Skipping malformed year file", file=document.name)
                skipped.append(document.name)
                continue

            year, raw_splits = self._parse(document)
            entries: list[SplitEntry] = []
            for i, raw in enumerate(raw_splits):
                entry = read_entry(raw)
                if entry is None:
                    location = json_pointer(("splits", i))
                    log.warning(
                        "Skipping unusable split entry", file=document.name, location=location
                    )
                    skipped_entries.append(SkippedEntry(file=document.name, location=location))
                else:
                    entries.append(entry)

            accumulator.add_year(year, entries, document.name)
            result_files.append(document.name)
            log.info("Indexed year file", year=year, splits=len(entries))

        index = accumulator.finalize(self.version, build_date or date.today())

        log.info(
            "Built index",
            total_splits=index.total_splits,
            symbols=len(index.by_symbol),
            years=len(index.years),
        )
        return IndexBuildResult(
            index=index,
            files_processed=result_files,
            files_skipped=skipped,
            entries_skipped=skipped_entries,
            isin_conflicts=accumulator.isin_conflicts,
        )

    def _parse(self, document: YearDocument) -> tuple[int | None, list[Any]]:
        content = document.content
        if not isinstance(content, dict) or not isinstance(content.get("splits"), list):
            msg = f"Cannot read {document.name} as a year file: no splits list"
            raise IndexBuildError(msg)

        year = content.get("year")
        if not isinstance(year, int) or isinstance(year, bool):
            log.warning("Year file declares no usable year", file=document.name, year=year)
            year = None
        return year, content["splits"]
