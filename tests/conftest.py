"""Pytest configuration and shared fixtures."""

import json
import tempfile
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from stocksplits.dataset import YearDocument


def _entry(
    symbol: str, split_date: str, ratio: str = "2:1", **extra: Any
) -> dict[str, Any]:
    return {"symbol": symbol, "name": f"{symbol} Inc.", "date": split_date, "ratio": ratio, **extra}


def _year(year: int, splits: list[dict[str, Any]], /, **overrides: Any) -> dict[str, Any]:
    content: dict[str, Any] = {
        "$schema": "../schema/year-file.schema.json",
        "year": year,
        "updated": f"{year}-12-31",
        "count": len(splits),
        "splits": splits,
    }
    content.update(overrides)
    return content


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def temp_data_dir() -> Iterator[Path]:
    """Create a temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_entry() -> Callable[..., dict[str, Any]]:
    """Factory for split entry dicts: make_entry(symbol, date, ratio="2:1", **extra)."""
    return _entry


@pytest.fixture
def make_year() -> Callable[..., dict[str, Any]]:
    """Factory for year file dicts with a matching count: make_year(year, splits, **overrides)."""
    return _year


@pytest.fixture
def make_doc() -> Callable[..., YearDocument]:
    """Factory for in-memory year documents named after their year."""

    def factory(year: int, splits: list[dict[str, Any]], /, **overrides: Any) -> YearDocument:
        return YearDocument(name=f"{year}.json", content=_year(year, splits, **overrides))

    return factory


@pytest.fixture
def write_json() -> Callable[[Path, Any], Path]:
    """Write a JSON document to disk and return its path."""

    def writer(path: Path, content: Any) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(content, indent=2) + "\n", encoding="utf-8")
        return path

    return writer


@pytest.fixture
def valid_dataset() -> dict[str, dict[str, Any]]:
    """A small, fully consistent dataset keyed by file name."""
    return {
        "2023.json": _year(
            2023,
            [
                _entry("NVDA", "2023-06-10", "4:1", isin="US67066G1040", exchange="NASDAQ"),
                _entry("XYZ", "2023-08-01", "3:1", notes="first split"),
            ],
        ),
        "2024.json": _year(
            2024,
            [
                _entry("AVGO", "2024-07-15", "10:1", isin="US11135F1012", exchange="NASDAQ"),
                _entry("NVDA", "2024-06-10", "10:1", isin="US67066G1040", exchange="NASDAQ"),
                _entry("XYZ", "2024-02-01", "1:5"),
            ],
        ),
    }


@pytest.fixture
def populated_data_dir(
    temp_data_dir: Path,
    valid_dataset: dict[str, dict[str, Any]],
    write_json: Callable[[Path, Any], Path],
) -> Path:
    """A data directory holding the valid dataset."""
    for name, content in valid_dataset.items():
        write_json(temp_data_dir / name, content)
    return temp_data_dir
