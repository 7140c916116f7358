"""
Configuration management with typed Pydantic models.

Provides YAML-based configuration loading with environment interpolation.
"""

from stocksplits.config.loader import load_config
from stocksplits.config.settings import (
    DataConfig,
    IndexConfig,
    IngestConfig,
    LoggingConfig,
    StockSplitsConfig,
    SymbolMetadataPolicy,
)

__all__ = [
    "DataConfig",
    "IndexConfig",
    "IngestConfig",
    "LoggingConfig",
    "StockSplitsConfig",
    "SymbolMetadataPolicy",
    "load_config",
]
