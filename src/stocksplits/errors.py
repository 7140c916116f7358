"""Error types for the stock splits pipeline."""

from enum import Enum


class ErrorCode(Enum):
    """Error classification codes."""

    CONFIG_INVALID = "config_invalid"
    SCHEMA_NOT_FOUND = "schema_not_found"
    INDEX_BUILD_FAILED = "index_build_failed"
    INGEST_FAILED = "ingest_failed"
    IO_FAILED = "io_failed"


class StockSplitsError(Exception):
    """
    Base exception carrying a structured error code.

    Attributes:
        message: Human-readable error description.
        code: Structured error code for programmatic handling.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.IO_FAILED) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class ConfigError(StockSplitsError):
    """Configuration could not be loaded or is invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCode.CONFIG_INVALID)


class SchemaNotFoundError(StockSplitsError):
    """Requested schema is not registered or its file is missing."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCode.SCHEMA_NOT_FOUND)


class IndexBuildError(StockSplitsError):
    """A year file could not be folded into the index."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCode.INDEX_BUILD_FAILED)


class IngestError(StockSplitsError):
    """Candidate records could not be merged into the dataset."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCode.INGEST_FAILED)
