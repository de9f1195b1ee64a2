"""Patterns and value conversions for the extended scalar kinds.

Identifiers travel as ``bson.ObjectId`` internally and as 24-character hex
strings externally.  Timestamps travel as ``datetime.datetime`` internally
and as ISO-8601 strings externally; naive datetimes are taken to be UTC
and every datetime is rendered in UTC.

The string-parsing helpers raise ``ValueError``; callers decide whether that
becomes a collected per-path issue or an immediate failure.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

__all__ = [
    "OBJECTID_PATTERN",
    "TIMESTAMP_PATTERN",
    "identifier_to_string",
    "string_to_identifier",
    "string_to_timestamp",
    "timestamp_to_string",
]

OBJECTID_PATTERN = r"^[a-fA-F0-9]{24}$"

TIMESTAMP_PATTERN = (
    r"^(\d{4})(-)?(\d\d)(-)?(\d\d)(T)?(\d\d)(:)?(\d\d)(:)?(\d\d)(\.\d+)?"
    r"(Z|([+-])(\d\d)(:)?(\d\d))$"
)


def identifier_to_string(value: Any) -> Any:
    """Render an ObjectId as its hex string; leave every other value alone."""
    if isinstance(value, ObjectId):
        return str(value)
    return value


def string_to_identifier(value: Any) -> Any:
    """Parse a hex string into an ObjectId; leave every other value alone.

    Raises:
        ValueError: If ``value`` is a string but not a valid ObjectId.
    """
    if not isinstance(value, str):
        return value
    try:
        return ObjectId(value)
    except InvalidId as exc:
        msg = f"not a valid identifier: {value!r}"
        raise ValueError(msg) from exc


def _as_aware(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _parse(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        msg = f"got {value}"
        raise ValueError(msg) from exc


def timestamp_to_string(value: Any) -> Any:
    """Return the external form of a timestamp value.

    datetimes are rendered in UTC with ``isoformat()``; strings that parse as a
    moment are returned verbatim; ``None`` passes through.

    Raises:
        ValueError: For a string that does not parse, or a value of any
            other type.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _as_aware(value).astimezone(timezone.utc).isoformat()
    if isinstance(value, str):
        _parse(value)
        return value
    msg = f"got {value!r}"
    raise ValueError(msg)


def string_to_timestamp(value: Any) -> Any:
    """Return the internal (timezone-aware datetime) form of a timestamp value.

    Raises:
        ValueError: For a string that does not parse, or a value that is
            neither a string, a datetime nor None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _as_aware(value)
    if isinstance(value, str):
        return _as_aware(_parse(value))
    msg = f"got {value!r}"
    raise ValueError(msg)
