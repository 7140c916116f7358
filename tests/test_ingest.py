"""Tests for merging candidate records into the year files."""

import json
from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Any

import pytest

from stocksplits.config import DataConfig, IngestConfig, StockSplitsConfig
from stocksplits.errors import IngestError
from stocksplits.ingest import (
    CandidateSplit,
    convert_ratio,
    filter_new,
    group_by_year,
    load_candidates,
    merge_candidates,
    to_entry,
)
from stocksplits.pipeline import run_validation

TODAY = date(2025, 3, 1)


def _candidate(ticker: str, execution_date: str, split_from: float = 1, split_to: float = 2) -> CandidateSplit:
    return CandidateSplit(
        ticker=ticker,
        execution_date=date.fromisoformat(execution_date),
        split_from=split_from,
        split_to=split_to,
    )


def _config(data_dir: Path, **ingest: Any) -> StockSplitsConfig:
    return StockSplitsConfig(data=DataConfig(data_dir=data_dir), ingest=IngestConfig(**ingest))


class TestConvertRatio:
    """Tests for share count to ratio conversion."""

    def test_forward_split(self) -> None:
        assert convert_ratio(1, 4) == "4:1"

    def test_reverse_split(self) -> None:
        assert convert_ratio(10, 1) == "1:10"

    def test_whole_float_counts(self) -> None:
        """Test that API floats with no fraction are accepted."""
        assert convert_ratio(2.0, 3.0) == "3:2"

    @pytest.mark.parametrize(("split_from", "split_to"), [(0, 2), (1, -3), (1, 1.5)])
    def test_rejects_unusable_counts(self, split_from: float, split_to: float) -> None:
        with pytest.raises(IngestError, match="positive whole numbers"):
            convert_ratio(split_from, split_to)


class TestLoadCandidates:
    """Tests for reading candidate files."""

    def test_plain_list(
        self, temp_data_dir: Path, write_json: Callable[[Path, Any], Path]
    ) -> None:
        """Test a file holding a list of records."""
        path = write_json(
            temp_data_dir / "candidates.json",
            [{"ticker": " NVDA ", "execution_date": "2024-06-10", "split_from": 1, "split_to": 10}],
        )
        candidates = load_candidates(path)

        assert len(candidates) == 1
        assert candidates[0].key == ("NVDA", "2024-06-10")

    def test_api_response(
        self, temp_data_dir: Path, write_json: Callable[[Path, Any], Path]
    ) -> None:
        """Test a file holding an upstream API response."""
        path = write_json(
            temp_data_dir / "response.json",
            {
                "status": "OK",
                "results": [
                    {"ticker": "A", "execution_date": "2024-01-02", "split_from": 1, "split_to": 2},
                    {"ticker": "B", "execution_date": "2024-01-03", "split_from": 5, "split_to": 1},
                ],
            },
        )
        assert [c.ticker for c in load_candidates(path)] == ["A", "B"]

    def test_error_status(
        self, temp_data_dir: Path, write_json: Callable[[Path, Any], Path]
    ) -> None:
        """Test that a failed API response is refused."""
        path = write_json(temp_data_dir / "response.json", {"status": "ERROR", "results": []})
        with pytest.raises(IngestError, match="API status"):
            load_candidates(path)

    def test_invalid_record(
        self, temp_data_dir: Path, write_json: Callable[[Path, Any], Path]
    ) -> None:
        """Test that a record with an empty ticker is refused."""
        path = write_json(
            temp_data_dir / "candidates.json",
            [{"ticker": "  ", "execution_date": "2024-01-02", "split_from": 1, "split_to": 2}],
        )
        with pytest.raises(IngestError, match="Invalid candidate record"):
            load_candidates(path)

    def test_invalid_json(self, temp_data_dir: Path) -> None:
        path = temp_data_dir / "candidates.json"
        path.write_text("[", encoding="utf-8")
        with pytest.raises(IngestError, match="not valid JSON"):
            load_candidates(path)

    def test_wrong_shape(
        self, temp_data_dir: Path, write_json: Callable[[Path, Any], Path]
    ) -> None:
        path = write_json(temp_data_dir / "candidates.json", "nope")
        with pytest.raises(IngestError, match="list of records"):
            load_candidates(path)


class TestFiltering:
    """Tests for dedup and grouping."""

    def test_filter_new_drops_existing_and_repeats(self) -> None:
        """Test that known and repeated candidates are dropped, keeping the first."""
        candidates = [
            _candidate("A", "2024-01-01", 1, 2),
            _candidate("B", "2024-01-01"),
            _candidate("A", "2024-01-01", 1, 3),
            _candidate("C", "2023-05-05"),
        ]
        fresh = filter_new(candidates, {("B", "2024-01-01")})

        assert [c.key for c in fresh] == [("A", "2024-01-01"), ("C", "2023-05-05")]
        assert fresh[0].split_to == 2

    def test_group_by_year_sorted(self) -> None:
        groups = group_by_year(
            [_candidate("A", "2024-01-01"), _candidate("B", "2022-01-01"), _candidate("C", "2024-03-01")]
        )
        assert list(groups) == [2022, 2024]
        assert [c.ticker for c in groups[2024]] == ["A", "C"]

    def test_to_entry_uses_config(self, temp_data_dir: Path) -> None:
        """Test the placeholder name and configured provenance."""
        config = _config(temp_data_dir, source="feed", default_exchange="NYSE")
        entry = to_entry(_candidate("XYZ", "2024-02-01", 5, 1), config)

        assert entry.name == "XYZ"
        assert entry.ratio == "1:5"
        assert entry.source == "feed"
        assert entry.exchange == "NYSE"
        assert entry.isin is None


class TestMergeCandidates:
    """Tests for merging into the data directory."""

    def test_extends_existing_and_creates_new(self, populated_data_dir: Path) -> None:
        """Test adding to an existing year and creating a new one."""
        config = _config(populated_data_dir)
        candidates = [
            _candidate("NVDA", "2024-06-10", 1, 10),  # already present
            _candidate("ACME", "2024-01-15", 1, 3),
            _candidate("NEWCO", "2025-02-01", 1, 2),
        ]
        result = merge_candidates(config, candidates, today=TODAY)

        assert result.received == 3
        assert result.added_count == 2
        assert result.skipped_count == 1
        assert [p.name for p in result.written] == ["2024.json", "2025.json"]

        content_2024 = json.loads((populated_data_dir / "2024.json").read_text(encoding="utf-8"))
        assert content_2024["count"] == 4
        assert content_2024["updated"] == "2025-03-01"
        assert content_2024["splits"][0] == {
            "symbol": "ACME",
            "name": "ACME",
            "date": "2024-01-15",
            "ratio": "3:1",
            "source": "massive",
        }

        content_2025 = json.loads((populated_data_dir / "2025.json").read_text(encoding="utf-8"))
        assert content_2025["year"] == 2025
        assert content_2025["count"] == 1

    def test_merged_dataset_still_valid(self, populated_data_dir: Path) -> None:
        """Test that merged files pass every integrity check."""
        config = _config(populated_data_dir)
        merge_candidates(
            config,
            [_candidate("ACME", "2024-01-15", 1, 3), _candidate("OLD", "1999-12-31", 4, 1)],
            today=TODAY,
        )
        report = run_validation(config, include_index=False)
        assert not report.has_errors

    def test_nothing_new(self, populated_data_dir: Path) -> None:
        """Test that no file is touched when every candidate is known."""
        before = (populated_data_dir / "2023.json").read_text(encoding="utf-8")
        result = merge_candidates(
            _config(populated_data_dir), [_candidate("XYZ", "2023-08-01", 1, 3)], today=TODAY
        )

        assert result.added == {}
        assert result.written == []
        assert (populated_data_dir / "2023.json").read_text(encoding="utf-8") == before

    def test_creates_data_dir(self, temp_data_dir: Path) -> None:
        data_dir = temp_data_dir / "fresh"
        result = merge_candidates(_config(data_dir), [_candidate("A", "2020-01-01")], today=TODAY)
        assert [p.name for p in result.written] == ["2020.json"]

    def test_refuses_malformed_year_file(self, populated_data_dir: Path) -> None:
        """Test that no file is written when a target file is unreadable."""
        (populated_data_dir / "2022.json").write_text("{broken", encoding="utf-8")
        before = (populated_data_dir / "2024.json").read_text(encoding="utf-8")

        with pytest.raises(IngestError, match="malformed 2022.json"):
            merge_candidates(
                _config(populated_data_dir),
                [_candidate("A", "2022-03-01"), _candidate("B", "2024-03-01")],
                today=TODAY,
            )
        assert (populated_data_dir / "2024.json").read_text(encoding="utf-8") == before

    def test_refuses_misdeclared_year_file(
        self,
        populated_data_dir: Path,
        write_json: Callable[[Path, Any], Path],
        make_year: Any,
    ) -> None:
        write_json(populated_data_dir / "2022.json", make_year(2021, []))
        with pytest.raises(IngestError, match="declares year 2021"):
            merge_candidates(
                _config(populated_data_dir), [_candidate("A", "2022-03-01")], today=TODAY
            )
