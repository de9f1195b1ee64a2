"""pytest plugin for mongo-json-schema.

Auto-discovered by pytest via the pytest11 entry point declared in pyproject.toml.
When the package is installed (even in editable mode), pytest discovers this plugin
automatically -- no conftest.py changes are needed.

Source: https://docs.pytest.org/en/stable/how-to/writing_plugins.html
"""

from __future__ import annotations

from typing import Any

import pytest

from mongo_json_schema.errors import DocumentValidationError
from mongo_json_schema.report import IssueCategory
from mongo_json_schema.schema import Schema
from mongo_json_schema.testing import assert_documents_equal as _assert_documents_equal


@pytest.fixture(scope="session")
def assert_documents_equal() -> Any:
    """Fixture returning ``mongo_json_schema.testing.assert_documents_equal``.

    Usage in tests::

        def test_round_trip(assert_documents_equal):
            assert_documents_equal(stored, {"_id": oid, "at": when})
    """
    return _assert_documents_equal


@pytest.fixture(scope="session")
def assert_schema_rejects() -> Any:
    """Fixture that returns a callable asserting a document is rejected.

    Usage in tests::

        def test_count_is_number(assert_schema_rejects):
            assert_schema_rejects(schema, {"count": "x"}, "type", "/count")

    Returns:
        A callable ``_assert(schema, document, category, path, *, partial=False)``
        that returns the raised error, or raises ``AssertionError`` when the
        document validates or no issue matches ``category`` at ``path``.
    """

    def _assert(
        schema: Schema,
        document: Any,
        category: IssueCategory | str,
        path: str,
        *,
        partial: bool = False,
    ) -> DocumentValidationError:
        """Assert ``schema`` rejects ``document`` with ``category`` at ``path``.

        Args:
            schema:   The Schema under test.
            document: The document expected to fail.
            category: An IssueCategory (or its string value).
            path:     JSON Pointer of the expected issue.
            partial:  Use ``validate_partial`` instead of ``validate``.

        Raises:
            AssertionError: When no matching issue is reported.
        """
        validate = schema.validate_partial if partial else schema.validate
        try:
            validate(document)
        except DocumentValidationError as exc:
            wanted = IssueCategory(category)
            if any(
                issue.category == wanted and issue.path == path for issue in exc.errors
            ):
                return exc
            raise AssertionError(
                f"no {wanted} issue at {path!r}; got:\n"
                + "\n".join(f"  {i.path!r} {i.category}: {i.detail}" for i in exc.errors)
            ) from exc
        raise AssertionError(f"document was accepted by {schema!r}: {document!r}")

    return _assert
