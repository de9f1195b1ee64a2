"""Tests for the Schema document transformers and path accessors."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest
from bson import ObjectId

from mongo_json_schema import ArgumentError, Schema, TimestampFormatError
from mongo_json_schema.testing import assert_documents_equal

HEX = "52f044dee2896a8264d7ec2f"


@pytest.fixture
def schema() -> Schema:
    return Schema(
        {
            "nested": {"type": "object", "properties": {"sub": {"type": "objectid"}}},
            "count": {"type": "number", "required": True},
            "participants": {"type": "array", "items": {"type": "objectid"}},
            "grid": {
                "type": "array",
                "items": {"type": "array", "items": {"type": "objectid"}},
            },
            "date": {"type": "date"},
        }
    )


@pytest.fixture
def document() -> dict[str, Any]:
    return {
        "_id": ObjectId(HEX),
        "count": 1,
        "nested": {"sub": ObjectId()},
        "participants": [ObjectId(), ObjectId()],
        "grid": [[ObjectId(), ObjectId()], [], [ObjectId()]],
        "date": datetime(2014, 2, 4, 12, 30, tzinfo=timezone.utc),
    }


# ---------------------------------------------------------------------------
# Path accessors
# ---------------------------------------------------------------------------


class TestPathAccessors:
    def test_identifier_paths(self, schema: Schema) -> None:
        assert schema.resolve_identifier_paths() == [
            ("nested", "sub"),
            ("participants", "*"),
            ("grid", "*", "*"),
            ("_id",),
        ]

    def test_timestamp_paths(self, schema: Schema) -> None:
        assert schema.resolve_timestamp_paths() == [("date",)]

    def test_explicit_id_is_not_replaced(self) -> None:
        schema = Schema({"_id": {"type": "objectid", "required": True}, "a": {"type": "objectid"}})
        assert schema.resolve_identifier_paths() == [("_id",), ("a",)]
        assert schema.get_standard_schema()["properties"]["_id"]["required"] is True


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------


class TestIdentifiers:
    def test_identifiers_to_strings(self, schema: Schema, document: dict[str, Any]) -> None:
        result = schema.identifiers_to_strings(document)
        assert result["_id"] == HEX
        assert result["nested"]["sub"] == str(document["nested"]["sub"])
        assert result["participants"] == [str(oid) for oid in document["participants"]]
        assert result["grid"] == [[str(oid) for oid in row] for row in document["grid"]]
        assert result["count"] == 1
        assert result["date"] == document["date"]

    def test_identifiers_to_strings_is_idempotent(
        self, schema: Schema, document: dict[str, Any]
    ) -> None:
        once = schema.identifiers_to_strings(document)
        assert schema.identifiers_to_strings(once) == once

    def test_round_trip(self, schema: Schema, document: dict[str, Any]) -> None:
        strings = schema.identifiers_to_strings(document)
        assert schema.strings_to_identifiers(strings) == document

    def test_object_ids_are_left_untouched(self, schema: Schema) -> None:
        oid = ObjectId()
        assert schema.strings_to_identifiers({"_id": oid})["_id"] is oid

    def test_absent_and_none_values_pass_through(self, schema: Schema) -> None:
        doc = {"nested": None, "participants": [None, HEX]}
        assert schema.strings_to_identifiers(doc) == {
            "nested": None,
            "participants": [None, ObjectId(HEX)],
        }

    def test_invalid_identifier_string(self, schema: Schema) -> None:
        with pytest.raises(ArgumentError, match="/participants/1"):
            schema.strings_to_identifiers({"participants": [HEX, "bad"]})

    def test_input_is_not_mutated(self, schema: Schema, document: dict[str, Any]) -> None:
        before = {key: value for key, value in document.items()}
        schema.identifiers_to_strings(document)
        assert document == before
        assert isinstance(document["grid"][0][0], ObjectId)


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------


class TestTimestamps:
    def test_timestamps_to_strings(self, schema: Schema, document: dict[str, Any]) -> None:
        result = schema.timestamps_to_strings(document)
        assert result["date"] == "2014-02-04T12:30:00+00:00"
        assert result["_id"] == document["_id"]

    def test_strings_to_timestamps(self, schema: Schema) -> None:
        result = schema.strings_to_timestamps({"date": "2014-02-04T12:30:00Z"})
        assert result == {"date": datetime(2014, 2, 4, 12, 30, tzinfo=timezone.utc)}

    def test_timestamp_round_trip(self, schema: Schema, document: dict[str, Any]) -> None:
        strings = schema.timestamps_to_strings(document)
        assert_documents_equal(schema.strings_to_timestamps(strings), document)

    def test_bad_timestamp_raises(self, schema: Schema) -> None:
        with pytest.raises(TimestampFormatError) as exc_info:
            schema.strings_to_timestamps({"date": "yesterday"})
        (issue,) = exc_info.value.errors
        assert issue.path == "/date"
        assert "yesterday" in issue.detail


# ---------------------------------------------------------------------------
# Root-level kinds
# ---------------------------------------------------------------------------


class TestRootLevelKinds:
    def test_bare_identifier_schema(self) -> None:
        schema = Schema.from_node({"type": "objectid"})
        assert schema.resolve_identifier_paths() == [()]
        assert schema.identifiers_to_strings(ObjectId(HEX)) == HEX
        assert schema.strings_to_identifiers(HEX) == ObjectId(HEX)

    def test_array_of_timestamps(self) -> None:
        schema = Schema.from_node({"type": "array", "items": {"type": "date"}})
        result = schema.strings_to_timestamps(["2014-02-04T12:30:00Z"])
        assert result == [datetime(2014, 2, 4, 12, 30, tzinfo=timezone.utc)]
