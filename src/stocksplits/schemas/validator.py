"""
Structural validation of records against registered JSON Schemas.

Collects every violation of a record in one pass instead of stopping at the
first one.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from jsonschema.exceptions import ValidationError

from stocksplits.schemas.registry import SchemaRegistry


def json_pointer(path: Iterable[Any]) -> str:
    """
    Render a sequence of keys/indices as a JSON pointer.

    Args:
        path: Keys and list indices from the document root.

    Returns:
        Pointer such as ``/splits/0/ratio``; the root is ``/``.
    """
    parts = [str(p).replace("~", "~0").replace("/", "~1") for p in path]
    return "/" + "/".join(parts)


@dataclass(frozen=True)
class SchemaFinding:
    """A single structural violation."""

    path: tuple[str | int, ...]
    message: str
    keyword: str

    @property
    def pointer(self) -> str:
        """JSON pointer of the offending value."""
        return json_pointer(self.path)

    def __str__(self) -> str:
        return f"{self.pointer} {self.message}"


@dataclass
class SchemaValidationResult:
    """Outcome of validating one instance against one schema."""

    schema_name: str
    findings: list[SchemaFinding] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.findings


def _sort_key(finding: SchemaFinding) -> tuple[Any, ...]:
    # List indices sort numerically so /splits/2 precedes /splits/10
    path_key = tuple((0, p, "") if isinstance(p, int) else (1, 0, p) for p in finding.path)
    return (path_key, finding.keyword, finding.message)


def _to_finding(error: ValidationError) -> SchemaFinding:
    return SchemaFinding(
        path=tuple(error.absolute_path),
        message=error.message,
        keyword=str(error.validator),
    )


class SchemaValidator:
    """Validates instances against the schemas of a SchemaRegistry."""

    def __init__(self, registry: SchemaRegistry | None = None) -> None:
        self.registry = registry or SchemaRegistry()

    def validate(self, instance: Any, schema_name: str) -> SchemaValidationResult:
        """
        Validate an instance against a registered schema.

        Args:
            instance: Parsed JSON value.
            schema_name: Name of schema to validate against.

        Returns:
            Result with all findings in deterministic order (empty if valid).
        """
        validator = self.registry.validator(schema_name)
        findings = sorted(
            (_to_finding(e) for e in validator.iter_errors(instance)),
            key=_sort_key,
        )
        return SchemaValidationResult(schema_name=schema_name, findings=findings)
