"""Assertion helpers for tests of code that stores documents.

Import these directly, or use the fixtures the bundled pytest plugin
exposes (``assert_documents_equal``, ``assert_schema_rejects``).
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime
from pprint import pformat
from typing import Any

__all__ = ["assert_documents_equal"]


def _truncate_datetimes(value: Any) -> Any:
    # Storage round-trips lose sub-millisecond precision; compare to the second.
    if isinstance(value, datetime):
        return value.replace(microsecond=0)
    if isinstance(value, Mapping):
        return {key: _truncate_datetimes(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_truncate_datetimes(item) for item in value]
    return value


def _sort_key(item: Any) -> str:
    return json.dumps(item, sort_keys=True, default=str)


def assert_documents_equal(actual: Any, expected: Any, *, unordered: bool = False) -> None:
    """Assert two documents are equal, ignoring datetime microseconds.

    Args:
        actual:    The document produced by the code under test.
        expected:  The reference document.
        unordered: When True both documents must be lists, and their
                   elements are compared regardless of order.

    Raises:
        AssertionError: With both documents pretty-printed when they differ.
    """
    left = _truncate_datetimes(actual)
    right = _truncate_datetimes(expected)
    if unordered:
        if not isinstance(left, list) or not isinstance(right, list):
            raise TypeError("unordered comparison needs two lists")
        left = sorted(left, key=_sort_key)
        right = sorted(right, key=_sort_key)
    if left != right:
        raise AssertionError(
            "documents are not equal\n"
            f"  actual:\n{pformat(left)}\n"
            f"  expected:\n{pformat(right)}"
        )
