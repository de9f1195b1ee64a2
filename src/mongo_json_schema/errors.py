"""Exception hierarchy for mongo-json-schema.

Every exception raised on purpose by this package derives from
``MongoJsonSchemaError``.  Document validation failures carry the full,
ordered list of ``ValidationIssue`` records; they are never truncated.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mongo_json_schema.report import ValidationIssue

__all__ = [
    "ArgumentError",
    "DocumentValidationError",
    "MongoJsonSchemaError",
    "SchemaCompileError",
    "SchemaValidationError",
    "TimestampFormatError",
]


class MongoJsonSchemaError(Exception):
    """Base class for all errors raised by this package."""

    @property
    def kind(self) -> str:
        """Stable tag naming the error kind, e.g. ``"SchemaValidationError"``."""
        return type(self).__name__


class SchemaCompileError(MongoJsonSchemaError, ValueError):
    """A schema tree is malformed and cannot be compiled."""


class ArgumentError(MongoJsonSchemaError, ValueError):
    """A caller passed an argument the operation cannot work with."""


class DocumentValidationError(MongoJsonSchemaError):
    """A document was rejected.

    Attributes:
        errors:      Ordered ValidationIssue records, one per violation.
        schema_name: The ``name`` of the rejecting Schema, or None.
        summary:     One-line human-readable description.
    """

    summary_prefix = "Document validation error"

    def __init__(
        self, errors: Sequence[ValidationIssue], schema_name: str | None = None
    ) -> None:
        self.errors: list[ValidationIssue] = list(errors)
        self.schema_name = schema_name
        target = f"schema {schema_name!r}" if schema_name else "unnamed schema"
        self.summary = f"{self.summary_prefix} for {target}"
        lines = [self.summary]
        lines.extend(f"  {issue.path or '/'}: {issue.detail}" for issue in self.errors)
        super().__init__("\n".join(lines))


class SchemaValidationError(DocumentValidationError):
    """The JSON Schema validator reported one or more constraint violations."""

    summary_prefix = "JSON schema validation error"


class TimestampFormatError(DocumentValidationError):
    """A value at a timestamp path is not a well-formed ISO-8601 moment."""

    summary_prefix = "Timestamp format error"
