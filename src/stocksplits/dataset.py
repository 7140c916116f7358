"""
Loading and saving of year files.

Year files are named ``<YYYY>.json``. Because names are zero-padded four-digit
years, lexicographic order is chronological order, and every component
processes files in that order.
"""

import json
import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from stocksplits.models import IndexFile, YearFile
from stocksplits.utils.io import read_json, write_json_atomic
from stocksplits.utils.logging import get_logger

log = get_logger(__name__)

YEAR_FILE_PATTERN = re.compile(r"^[0-9]{4}\.json$")


@dataclass(frozen=True)
class YearDocument:
    """
    Raw content of one year file.

    Attributes:
        name: File name, e.g. ``2024.json``.
        content: Parsed JSON, or None when the file is not valid JSON.
        path: Location on disk (None for in-memory documents).
        error: Parse error message when content could not be read.
    """

    name: str
    content: Any = None
    path: Path | None = None
    error: str | None = None

    @property
    def malformed(self) -> bool:
        return self.error is not None

    @property
    def name_year(self) -> int | None:
        """Year encoded in the file name, or None if it is not ``YYYY.json``."""
        if not is_year_file_name(self.name):
            return None
        return int(self.name[:4])


def is_year_file_name(name: str) -> bool:
    """Check whether a file name follows the ``YYYY.json`` convention."""
    return YEAR_FILE_PATTERN.match(name) is not None


def sort_documents(documents: list[YearDocument]) -> list[YearDocument]:
    """Return documents in processing order (ascending by name)."""
    return sorted(documents, key=lambda d: d.name)


def discover_year_files(data_dir: Path) -> list[Path]:
    """
    List year files in a data directory.

    Args:
        data_dir: Directory holding the dataset.

    Returns:
        Paths sorted by file name.

    Raises:
        FileNotFoundError: If the directory does not exist.
    """
    if not data_dir.is_dir():
        msg = f"Data directory not found: {data_dir}"
        raise FileNotFoundError(msg)
    return sorted(
        (p for p in data_dir.iterdir() if p.is_file() and is_year_file_name(p.name)),
        key=lambda p: p.name,
    )


def load_year_document(path: Path) -> YearDocument:
    """
    Read one year file.

    Unparseable JSON is captured on the document rather than raised, so that
    the remaining files can still be checked. I/O failures propagate.
    """
    try:
        content = read_json(path)
    except json.JSONDecodeError as e:
        log.warning("Year file is not valid JSON", file=path.name, error=str(e))
        return YearDocument(name=path.name, path=path, error=f"Invalid JSON: {e}")
    except UnicodeDecodeError as e:
        log.warning("Year file is not valid UTF-8", file=path.name, error=str(e))
        return YearDocument(name=path.name, path=path, error=f"Invalid encoding: {e}")

    return YearDocument(name=path.name, path=path, content=content)


def load_year_documents(data_dir: Path) -> list[YearDocument]:
    """Read every year file of a data directory in processing order."""
    paths = discover_year_files(data_dir)
    log.info("Loading year files", data_dir=str(data_dir), files=len(paths))
    return [load_year_document(p) for p in paths]


def sort_splits(year_file: YearFile) -> None:
    """Restore storage order: date ascending, then symbol."""
    year_file.splits.sort(key=lambda s: (s.date, s.symbol))


def save_year_file(data_dir: Path, year_file: YearFile, today: date | None = None) -> Path:
    """
    Write a year file, re-establishing its derived fields.

    Splits are re-sorted, ``count`` is set to the number of splits and
    ``updated`` to ``today``.

    Returns:
        Path of the written file.
    """
    sort_splits(year_file)
    year_file.count = len(year_file.splits)
    year_file.updated = (today or date.today()).isoformat()

    path = data_dir / f"{year_file.year:04d}.json"
    write_json_atomic(path, year_file.to_json_dict())
    log.info("Saved year file", file=path.name, splits=year_file.count)
    return path


def write_index(path: Path, index: IndexFile) -> None:
    """Atomically write the generated index."""
    write_json_atomic(path, index.to_json_dict())
    log.info(
        "Wrote index",
        path=str(path),
        total_splits=index.total_splits,
        symbols=len(index.by_symbol),
    )
