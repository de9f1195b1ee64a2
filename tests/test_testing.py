"""Tests for mongo_json_schema.testing.assert_documents_equal."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from bson import ObjectId

from mongo_json_schema.testing import assert_documents_equal


class TestAssertDocumentsEqual:
    def test_equal_documents_pass(self) -> None:
        oid = ObjectId()
        assert_documents_equal({"_id": oid, "n": [1, 2]}, {"_id": oid, "n": [1, 2]})

    def test_microseconds_are_ignored(self) -> None:
        left = {"at": datetime(2014, 2, 4, 12, 30, 0, 999, tzinfo=timezone.utc)}
        right = {"at": datetime(2014, 2, 4, 12, 30, 0, 0, tzinfo=timezone.utc)}
        assert_documents_equal(left, right)

    def test_seconds_are_not_ignored(self) -> None:
        left = {"at": datetime(2014, 2, 4, 12, 30, 1)}
        right = {"at": datetime(2014, 2, 4, 12, 30, 0)}
        with pytest.raises(AssertionError):
            assert_documents_equal(left, right)

    def test_difference_message_shows_both_documents(self) -> None:
        with pytest.raises(AssertionError) as exc_info:
            assert_documents_equal({"a": 1}, {"a": 2})
        message = str(exc_info.value)
        assert "actual" in message
        assert "{'a': 1}" in message
        assert "{'a': 2}" in message

    def test_unordered_lists(self) -> None:
        assert_documents_equal([{"a": 2}, {"a": 1}], [{"a": 1}, {"a": 2}], unordered=True)

    def test_ordered_by_default(self) -> None:
        with pytest.raises(AssertionError):
            assert_documents_equal([1, 2], [2, 1])

    def test_unordered_needs_lists(self) -> None:
        with pytest.raises(TypeError):
            assert_documents_equal({"a": 1}, {"a": 1}, unordered=True)

    def test_caller_documents_are_not_mutated(self) -> None:
        moment = datetime(2014, 2, 4, 12, 30, 0, 999)
        doc = {"at": moment}
        assert_documents_equal(doc, {"at": moment})
        assert doc["at"].microsecond == 999
