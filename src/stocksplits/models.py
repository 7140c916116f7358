"""
Typed records for year files and the generated index.

Models carry structure only. A split needs just symbol, date and ratio to be
indexed; everything else, including the ratio pattern and the required
``name``, is enforced by the JSON Schemas and the integrity checks, so an
index built from bad input still reflects that input faithfully.
Optional fields are either present or absent: ``None`` is never serialized.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

YEAR_FILE_SCHEMA_REF = "../schema/year-file.schema.json"
INDEX_SCHEMA_REF = "../schema/index.schema.json"


class SplitEntry(BaseModel):
    """One corporate stock split event as stored in a year file."""

    model_config = ConfigDict(extra="allow")

    symbol: str
    name: str | None = None
    date: str
    ratio: str
    isin: str | None = None
    exchange: str | None = None
    source: str | None = None
    verified: bool | None = None
    notes: str | None = None


class YearFile(BaseModel):
    """All split events recorded for one calendar year."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    schema_ref: str | None = Field(default=YEAR_FILE_SCHEMA_REF, alias="$schema")
    year: int
    updated: str
    count: int = 0
    splits: list[SplitEntry] = Field(default_factory=list)

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with JSON field names, omitting absent optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SymbolSplit(BaseModel):
    """A split as listed under a symbol in the index."""

    date: str
    ratio: str
    notes: str | None = None


class SymbolData(BaseModel):
    """Index entry for one ticker symbol."""

    name: str | None = None
    isin: str | None = None
    exchange: str | None = None
    splits: list[SymbolSplit] = Field(default_factory=list)


class IndexFile(BaseModel):
    """Aggregated lookup index over all year files."""

    model_config = ConfigDict(populate_by_name=True)

    schema_ref: str = Field(default=INDEX_SCHEMA_REF, alias="$schema")
    version: str
    updated: str
    total_splits: int = Field(alias="totalSplits")
    years: list[int]
    by_symbol: dict[str, SymbolData] = Field(alias="bySymbol")
    by_isin: dict[str, str] = Field(alias="byIsin")

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with JSON field names, omitting absent optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
