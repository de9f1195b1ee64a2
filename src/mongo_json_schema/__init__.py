"""mongo-json-schema - JSON Schema with MongoDB identifiers and timestamps."""

from __future__ import annotations

from mongo_json_schema.compiler import compile_partial, compile_standard
from mongo_json_schema.config import SchemaOptions
from mongo_json_schema.errors import (
    ArgumentError,
    DocumentValidationError,
    MongoJsonSchemaError,
    SchemaCompileError,
    SchemaValidationError,
    TimestampFormatError,
)
from mongo_json_schema.nodes import ExtendedKind, dump_node, parse_node
from mongo_json_schema.paths import (
    WILDCARD,
    apply_at_path,
    apply_at_paths,
    resolve_paths,
)
from mongo_json_schema.report import IssueCategory, ValidationIssue
from mongo_json_schema.schema import Schema

__version__: str = "0.1.0"
__all__: list[str] = [
    "WILDCARD",
    "ArgumentError",
    "DocumentValidationError",
    "ExtendedKind",
    "IssueCategory",
    "MongoJsonSchemaError",
    "Schema",
    "SchemaCompileError",
    "SchemaOptions",
    "SchemaValidationError",
    "TimestampFormatError",
    "ValidationIssue",
    "apply_at_path",
    "apply_at_paths",
    "compile_partial",
    "compile_standard",
    "dump_node",
    "parse_node",
    "resolve_paths",
]
