"""Tests for building a Schema: wrapping, _id injection, options, from_node."""

from __future__ import annotations

import pytest

from mongo_json_schema import (
    ArgumentError,
    Schema,
    SchemaCompileError,
    SchemaOptions,
)
from mongo_json_schema.conversions import OBJECTID_PATTERN, TIMESTAMP_PATTERN
from mongo_json_schema.nodes import ObjectNode


class TestWrapping:
    def test_standard_schema(self) -> None:
        schema = Schema({"count": {"type": "number", "required": True}, "at": {"type": "date"}})
        assert schema.get_standard_schema() == {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "count": {"type": "number", "required": True},
                "at": {"type": "string", "pattern": TIMESTAMP_PATTERN},
                "_id": {"type": "string", "pattern": OBJECTID_PATTERN},
            },
        }

    def test_partial_schema(self) -> None:
        schema = Schema({"count": {"type": "number", "required": True}})
        assert schema.get_partial_schema() == {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "count": {"type": "number"},
                "_id": {"type": "string", "pattern": OBJECTID_PATTERN},
            },
        }

    def test_root_keeps_extended_tags(self) -> None:
        schema = Schema({"owner": {"type": "objectid"}})
        assert isinstance(schema.root, ObjectNode)
        assert schema.root.properties is not None
        assert schema.root.properties["owner"].kind == "objectid"

    def test_declared_id_of_another_type_is_replaced(self) -> None:
        schema = Schema({"_id": {"type": "string"}})
        assert schema.get_standard_schema()["properties"]["_id"] == {
            "type": "string",
            "pattern": OBJECTID_PATTERN,
        }
        assert schema.resolve_identifier_paths() == [("_id",)]

    def test_declared_identifier_id_is_kept(self) -> None:
        schema = Schema({"_id": {"type": "objectid", "required": True}})
        assert schema.get_standard_schema()["properties"]["_id"] == {
            "type": "string",
            "pattern": OBJECTID_PATTERN,
            "required": True,
        }

    def test_input_mapping_is_not_mutated(self) -> None:
        properties = {"count": {"type": "number"}}
        Schema(properties)
        assert properties == {"count": {"type": "number"}}

    def test_accessors_return_copies(self) -> None:
        schema = Schema({"count": {"type": "number"}})
        schema.get_standard_schema()["properties"].clear()
        schema.get_partial_schema()["properties"].clear()
        assert "count" in schema.get_standard_schema()["properties"]
        assert "count" in schema.get_partial_schema()["properties"]


class TestOptions:
    def test_defaults(self) -> None:
        schema = Schema({})
        assert schema.name is None
        assert schema.options == SchemaOptions()

    def test_keyword_overrides(self) -> None:
        schema = Schema({}, name="users", additional_properties=True)
        assert schema.name == "users"
        assert schema.get_standard_schema()["additionalProperties"] is True

    def test_options_object_with_override(self) -> None:
        schema = Schema({}, SchemaOptions(name="users"), additional_properties=True)
        assert schema.options == SchemaOptions(name="users", additional_properties=True)

    def test_unknown_option(self) -> None:
        with pytest.raises(ArgumentError, match="unknown schema option"):
            Schema({}, colour="blue")

    def test_repr(self) -> None:
        assert repr(Schema({}, name="users")) == "Schema(name='users')"


class TestFromNode:
    def test_node_is_used_as_is(self) -> None:
        node = {"type": "object", "properties": {"a": {"type": "string"}}}
        schema = Schema.from_node(node)
        assert schema.get_standard_schema() == node
        assert schema.resolve_identifier_paths() == []

    def test_name_option(self) -> None:
        assert Schema.from_node({"type": "string"}, name="plain").name == "plain"


class TestCompileErrors:
    def test_properties_must_be_a_mapping(self) -> None:
        with pytest.raises(SchemaCompileError):
            Schema(["count"])  # type: ignore[arg-type]

    def test_malformed_property(self) -> None:
        with pytest.raises(SchemaCompileError, match="#/properties/count"):
            Schema({"count": "number"})

    def test_metaschema_violation(self) -> None:
        with pytest.raises(SchemaCompileError, match="not valid JSON Schema"):
            Schema({"count": {"type": "number", "minimum": "zero"}})
