"""
Schema registry for versioning and discovery.

Provides centralized access to the JSON Schema documents that describe the
dataset. Schemas are data, not code: the bundled files live next to this
module and a configured directory can override them.
"""

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar

from jsonschema import Draft202012Validator
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

from stocksplits.errors import SchemaNotFoundError
from stocksplits.utils.logging import get_logger

log = get_logger(__name__)

BUNDLED_SCHEMA_DIR = Path(__file__).parent


class DataRole(Enum):
    """Classification of data products by their role in the dataset."""

    RECORD = "record"  # Single entry embedded in a file
    SOURCE = "source"  # Hand-maintained source of truth
    DERIVED = "derived"  # Regenerated artifact


@dataclass(frozen=True)
class SchemaInfo:
    """Metadata about a registered schema."""

    name: str
    filename: str
    version: str
    role: DataRole
    description: str


class SchemaRegistry:
    """
    Registry of the dataset's JSON Schemas.

    Schema metadata is static; schema contents are loaded from ``schema_dir``
    (falling back to the bundled copies) and wired into a ``referencing``
    registry so that ``$ref`` between files resolves.
    """

    _schemas: ClassVar[dict[str, SchemaInfo]] = {
        "split_entry": SchemaInfo(
            name="split_entry",
            filename="split-entry.schema.json",
            version="1.0.0",
            role=DataRole.RECORD,
            description="One corporate stock split event",
        ),
        "year_file": SchemaInfo(
            name="year_file",
            filename="year-file.schema.json",
            version="1.0.0",
            role=DataRole.SOURCE,
            description="All split events of one calendar year",
        ),
        "index": SchemaInfo(
            name="index",
            filename="index.schema.json",
            version="1.0.0",
            role=DataRole.DERIVED,
            description="Lookup index by symbol and ISIN",
        ),
    }

    def __init__(self, schema_dir: Path | None = None) -> None:
        """
        Initialize the registry.

        Args:
            schema_dir: Directory with schema files overriding the bundled ones.
        """
        self.schema_dir = schema_dir
        self._contents: dict[str, dict[str, Any]] = {}
        self._validators: dict[str, Draft202012Validator] = {}
        self._registry: Registry | None = None

    @classmethod
    def get_info(cls, name: str) -> SchemaInfo:
        """
        Get full schema info by name.

        Args:
            name: Schema identifier.

        Returns:
            SchemaInfo with metadata.

        Raises:
            SchemaNotFoundError: If schema not registered.
        """
        if name not in cls._schemas:
            available = ", ".join(cls._schemas.keys())
            msg = f"Unknown schema '{name}'. Available: {available}"
            raise SchemaNotFoundError(msg)
        return cls._schemas[name]

    @classmethod
    def list_schemas(cls) -> list[str]:
        """List all registered schema names."""
        return list(cls._schemas.keys())

    @classmethod
    def list_by_role(cls, role: DataRole) -> list[str]:
        """List schemas filtered by their data role."""
        return [name for name, info in cls._schemas.items() if info.role == role]

    def _resolve_file(self, info: SchemaInfo) -> Path:
        """Locate a schema file, preferring the override directory."""
        if self.schema_dir is not None:
            candidate = self.schema_dir / info.filename
            if candidate.exists():
                return candidate
        return BUNDLED_SCHEMA_DIR / info.filename

    def get(self, name: str) -> dict[str, Any]:
        """
        Get a schema document by name.

        Args:
            name: Schema identifier.

        Returns:
            The parsed JSON Schema.

        Raises:
            SchemaNotFoundError: If schema not registered or its file is missing.
        """
        if name in self._contents:
            return self._contents[name]

        info = self.get_info(name)
        path = self._resolve_file(info)
        if not path.exists():
            msg = f"Schema file for '{name}' not found: {path}"
            raise SchemaNotFoundError(msg)

        with path.open(encoding="utf-8") as f:
            schema = json.load(f)

        log.debug("Loaded schema", schema=name, path=str(path))
        self._contents[name] = schema
        return schema

    @property
    def referencing_registry(self) -> Registry:
        """Registry of all schemas, keyed by their file name."""
        if self._registry is None:
            registry = Registry()
            for name, info in self._schemas.items():
                resource = Resource.from_contents(
                    self.get(name), default_specification=DRAFT202012
                )
                registry = registry.with_resource(info.filename, resource)
                if resource.id() and resource.id() != info.filename:
                    registry = registry.with_resource(resource.id(), resource)
            self._registry = registry.crawl()
        return self._registry

    def validator(self, name: str) -> Draft202012Validator:
        """
        Get a compiled validator for a registered schema.

        Args:
            name: Schema identifier.

        Returns:
            Validator with format checking enabled.
        """
        if name not in self._validators:
            self._validators[name] = Draft202012Validator(
                self.get(name),
                registry=self.referencing_registry,
                format_checker=Draft202012Validator.FORMAT_CHECKER,
            )
        return self._validators[name]
