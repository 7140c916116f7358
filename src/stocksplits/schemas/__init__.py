"""
JSON Schema definitions and structural validation.

The schema files in this package are the data contracts for split entries,
year files and the generated index.
"""

from stocksplits.schemas.registry import DataRole, SchemaInfo, SchemaRegistry
from stocksplits.schemas.validator import (
    SchemaFinding,
    SchemaValidationResult,
    SchemaValidator,
    json_pointer,
)

__all__ = [
    "DataRole",
    "SchemaFinding",
    "SchemaInfo",
    "SchemaRegistry",
    "SchemaValidationResult",
    "SchemaValidator",
    "json_pointer",
]
