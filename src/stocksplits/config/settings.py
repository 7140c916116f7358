"""
Typed configuration models using Pydantic.

All configuration is defined here with explicit typing and validation.
No hardcoded paths or policies in processing code.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SymbolMetadataPolicy(str, Enum):
    """Which entry seeds a symbol's name/isin/exchange in the index."""

    FIRST_SEEN = "first"  # Earliest processed file wins
    LAST_SEEN = "last"  # Latest processed file wins


class DataConfig(BaseModel):
    """Dataset location configuration.

    The data directory holds one ``<YYYY>.json`` file per year and the
    generated index. ``schema_dir`` overrides the JSON Schemas bundled with
    the package.
    """

    model_config = ConfigDict(frozen=True)

    data_dir: Path = Field(default=Path("./data"), description="Directory of year files")
    schema_dir: Path | None = Field(
        default=None, description="Directory with JSON Schema overrides"
    )
    index_filename: str = Field(default="index.json", description="Index file name")

    @field_validator("index_filename")
    @classmethod
    def validate_index_filename(cls, v: str) -> str:
        """Ensure the index cannot be mistaken for a year file."""
        if not v.endswith(".json") or v[:-5].isdigit():
            msg = f"index_filename must be a non-year .json name, got: {v!r}"
            raise ValueError(msg)
        return v

    @property
    def index_path(self) -> Path:
        """Full path of the generated index file."""
        return self.data_dir / self.index_filename


class IndexConfig(BaseModel):
    """Index build configuration."""

    model_config = ConfigDict(frozen=True)

    version: str = Field(
        default="1.0.0",
        pattern=r"^[0-9]+\.[0-9]+\.[0-9]+$",
        description="Semantic version of the index format",
    )
    symbol_metadata: SymbolMetadataPolicy = Field(
        default=SymbolMetadataPolicy.FIRST_SEEN,
        description="Policy for seeding symbol name/isin/exchange",
    )


class IngestConfig(BaseModel):
    """Configuration for merging fetched candidate records."""

    model_config = ConfigDict(frozen=True)

    source: str = Field(default="massive", description="Value written to the source field")
    default_exchange: str | None = Field(
        default=None, description="Exchange assigned to new entries, if any"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO")
    json_output: bool = Field(default=False)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Unknown log level: {v!r}"
            raise ValueError(msg)
        return level


class StockSplitsConfig(BaseModel):
    """Complete application configuration."""

    model_config = ConfigDict(frozen=True)

    data: DataConfig = Field(default_factory=DataConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
    ingest: IngestConfig = Field(default_factory=IngestConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def data_dir(self) -> Path:
        """Convenience accessor for the data directory."""
        return self.data.data_dir

    @property
    def index_path(self) -> Path:
        """Convenience accessor for the index file path."""
        return self.data.index_path
