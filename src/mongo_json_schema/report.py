"""ValidationIssue records built from jsonschema errors.

The raw messages of a JSON Schema validator are terse ("'x' is not of type
'number'").  ``issue_from_error`` turns each error into a ``ValidationIssue``
with a JSON Pointer, a category and a detail string naming what was needed
and what was passed in.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from jsonschema.exceptions import ValidationError

from mongo_json_schema.paths import to_pointer

__all__ = ["IssueCategory", "ValidationIssue", "issue_from_error", "json_type_name"]

_MISSING = object()


class IssueCategory(StrEnum):
    """Which kind of constraint a document violated.

    - TYPE                  -> "type"                 : wrong JSON type
    - PATTERN               -> "pattern"              : string did not match pattern
    - REQUIRED              -> "required"             : required property missing
    - ADDITIONAL_PROPERTIES -> "additionalProperties" : undeclared property present
    - TIMESTAMP             -> "timestamp"            : unparseable timestamp value
    - OTHER                 -> "other"                : any other keyword
    """

    TYPE = "type"
    PATTERN = "pattern"
    REQUIRED = "required"
    ADDITIONAL_PROPERTIES = "additionalProperties"
    TIMESTAMP = "timestamp"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """One violation found in a document.

    Attributes:
        path:     JSON Pointer (RFC 6901) of the offending value; for a
                  missing required property, the pointer it would have had.
        category: The violated constraint (see IssueCategory).
        detail:   Clarifying text, e.g. "needed type number; got type string".
        message:  The underlying validator's own message.
    """

    path: str
    category: IssueCategory
    detail: str
    message: str


def json_type_name(value: Any) -> str:
    """Return the JSON type name of a Python value."""
    # bool MUST be checked before int: bool subclasses int
    if isinstance(value, bool):
        return "boolean"
    if value is None:
        return "null"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


def _lookup(document: Any, parts: list[Any]) -> Any:
    current = document
    for part in parts:
        try:
            current = current[part]
        except (KeyError, IndexError, TypeError):
            return _MISSING
    return current


def _describe_type(expected: Any) -> str:
    if isinstance(expected, (list, tuple)):
        return " or ".join(_describe_type(member) for member in expected)
    if isinstance(expected, Mapping):
        return str(expected.get("type", "any"))
    return str(expected)


def issue_from_error(error: ValidationError, document: Any) -> ValidationIssue:
    """Convert one jsonschema error into a ValidationIssue.

    Args:
        error:    An error yielded by ``Draft3Validator.iter_errors``.
        document: The exact document object that was validated.
    """
    parts = list(error.absolute_path)

    if error.validator == "type":
        # A union with inline schema members fails as a whole; surface the
        # member's own failure when it is more specific than a type mismatch.
        for sub_error in error.context or ():
            if sub_error.validator != "type":
                return issue_from_error(sub_error, document)
        detail = (
            f"needed type {_describe_type(error.validator_value)}; "
            f"got type {json_type_name(error.instance)}"
        )
        return ValidationIssue(to_pointer(parts), IssueCategory.TYPE, detail, error.message)

    if error.validator == "pattern":
        detail = f"needed pattern {error.validator_value}; got {error.instance}"
        return ValidationIssue(
            to_pointer(parts), IssueCategory.PATTERN, detail, error.message
        )

    if error.validator == "required":
        # Draft 3 reports a missing property against its container, with one
        # extra trailing segment ("required" or the property name, depending
        # on the jsonschema release).
        if parts and _lookup(document, parts) is not error.instance:
            parts.pop()
        schema_path = list(error.absolute_schema_path)
        name = str(schema_path[-2]) if len(schema_path) >= 2 else ""
        detail = f"missing required property {name}"
        return ValidationIssue(
            to_pointer([*parts, name]), IssueCategory.REQUIRED, detail, error.message
        )

    if error.validator == "additionalProperties":
        declared = error.schema.get("properties", {}) if isinstance(error.schema, Mapping) else {}
        extras = [key for key in error.instance if key not in declared]
        return ValidationIssue(
            to_pointer(parts),
            IssueCategory.ADDITIONAL_PROPERTIES,
            ", ".join(str(key) for key in extras),
            error.message,
        )

    return ValidationIssue(to_pointer(parts), IssueCategory.OTHER, error.message, error.message)
