"""Schema: the validating facade over compiler, resolver and applier.

A Schema is built once from a hand-written tree that may use the extended
``objectid`` and ``date`` kinds.  Construction compiles the standard and
partial JSON Schemas and one ``jsonschema.Draft3Validator`` for each; these
are cached for the lifetime of the object.  Access paths are resolved again
on every call.

Validation never touches the caller's document: it works on a converted
copy in which identifiers and timestamps are in their external string form.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import replace
from typing import Any

from jsonschema import Draft3Validator
from jsonschema.exceptions import SchemaError

from mongo_json_schema.compiler import compile_partial, compile_standard
from mongo_json_schema.config import SchemaOptions
from mongo_json_schema.conversions import (
    identifier_to_string,
    string_to_identifier,
    string_to_timestamp,
    timestamp_to_string,
)
from mongo_json_schema.errors import (
    ArgumentError,
    SchemaCompileError,
    SchemaValidationError,
    TimestampFormatError,
)
from mongo_json_schema.nodes import ExtendedKind, SchemaNode, dump_node, parse_node
from mongo_json_schema.paths import (
    AccessPath,
    Location,
    apply_at_paths,
    apply_at_paths_located,
    deep_copy,
    resolve_paths,
    to_pointer,
)
from mongo_json_schema.report import IssueCategory, ValidationIssue, issue_from_error

__all__ = ["Schema"]

logger = logging.getLogger(__name__)

# Every stored record carries a primary identifier.
ID_FIELD = "_id"


def _resolve_options(
    options: SchemaOptions | None, overrides: Mapping[str, Any]
) -> SchemaOptions:
    base = options if options is not None else SchemaOptions()
    try:
        return replace(base, **overrides)
    except TypeError as exc:
        msg = f"unknown schema option(s): {sorted(overrides)}"
        raise ArgumentError(msg) from exc


def _build_validator(schema: dict[str, Any]) -> Draft3Validator:
    try:
        Draft3Validator.check_schema(schema)
    except SchemaError as exc:
        msg = f"compiled schema is not valid JSON Schema: {exc.message}"
        raise SchemaCompileError(msg) from exc
    return Draft3Validator(schema)


class Schema:
    """A MongoDB-flavoured JSON Schema.

    Example::

        from mongo_json_schema import Schema

        users = Schema(
            {
                "name": {"type": "string", "required": True},
                "friends": {"type": "array", "items": {"type": "objectid"}},
                "joined": {"type": "date"},
            },
            name="users",
        )
        users.resolve_identifier_paths()   # [("friends", "*"), ("_id",)]
        users.validate({"name": "Ann", "friends": [ObjectId()]})
    """

    def __init__(
        self,
        properties: Mapping[str, Any],
        options: SchemaOptions | None = None,
        **overrides: Any,
    ) -> None:
        """Build a Schema from a mapping of property name to schema node.

        The properties are wrapped in a root ``object`` node, and an
        ``_id: objectid`` property is always present.  A caller-declared ``_id``
        is kept only when it is itself an ``objectid`` node (e.g. one that adds
        ``required``); any other ``_id`` declaration is replaced.

        Args:
            properties: Property name -> schema node mapping.  Not mutated.
            options:    Construction options.  Defaults to ``SchemaOptions()``.
            **overrides: Individual SchemaOptions fields (``name=``,
                ``additional_properties=``) applied on top of ``options``.

        Raises:
            SchemaCompileError: If the tree is malformed.
            ArgumentError: If an unknown option is passed.
        """
        if not isinstance(properties, Mapping):
            msg = f"properties must be a mapping, got {type(properties).__name__}"
            raise SchemaCompileError(msg)
        self._options = _resolve_options(options, overrides)

        declared = dict(properties)
        own_id = declared.get(ID_FIELD)
        if not (
            isinstance(own_id, Mapping) and own_id.get("type") == ExtendedKind.IDENTIFIER
        ):
            declared[ID_FIELD] = {"type": ExtendedKind.IDENTIFIER.value}
        root = parse_node(
            {
                "type": "object",
                "properties": declared,
                "additionalProperties": self._options.additional_properties,
            }
        )
        self._compile(root)

    @classmethod
    def from_node(
        cls,
        node: Mapping[str, Any],
        options: SchemaOptions | None = None,
        **overrides: Any,
    ) -> Schema:
        """Build a Schema from a complete schema node, used as-is.

        No ``_id`` is injected and no root object is wrapped around ``node``,
        so it may describe any value (an array, a bare identifier, ...).
        ``additional_properties`` is ignored; set ``additionalProperties``
        on the node instead.
        """
        schema = cls.__new__(cls)
        schema._options = _resolve_options(options, overrides)
        schema._compile(parse_node(node))
        return schema

    def _compile(self, root: SchemaNode) -> None:
        self._root = root
        standard = compile_standard(root)
        self._standard_schema = dump_node(standard)
        self._partial_schema = dump_node(compile_partial(standard))
        self._validator = _build_validator(self._standard_schema)
        self._partial_validator = _build_validator(self._partial_schema)
        logger.debug("built schema %s", self.name or "<unnamed>")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def name(self) -> str | None:
        """The optional schema name from the options."""
        return self._options.name

    @property
    def options(self) -> SchemaOptions:
        return self._options

    @property
    def root(self) -> SchemaNode:
        """The source tree, with extended kinds still tagged."""
        return self._root

    def get_standard_schema(self) -> dict[str, Any]:
        """Return a copy of the compiled standard JSON Schema."""
        return deep_copy(self._standard_schema)

    def get_partial_schema(self) -> dict[str, Any]:
        """Return a copy of the compiled schema with no ``required`` markers."""
        return deep_copy(self._partial_schema)

    def resolve_identifier_paths(self) -> list[AccessPath]:
        return resolve_paths(self._root, ExtendedKind.IDENTIFIER)

    def resolve_timestamp_paths(self) -> list[AccessPath]:
        return resolve_paths(self._root, ExtendedKind.TIMESTAMP)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, document: Any) -> Schema:
        """Validate ``document`` against the standard schema.

        Returns:
            ``self``, so calls can be chained.

        Raises:
            TimestampFormatError: If any timestamp value does not parse.
                Checked before the schema is evaluated.
            SchemaValidationError: With every violation the validator found.
        """
        return self._validate(document, self._validator)

    def validate_partial(self, document: Any) -> Schema:
        """Validate ``document`` as a partial update: nothing is required.

        ``additionalProperties`` and every other constraint still apply.
        """
        return self._validate(document, self._partial_validator)

    def _validate(self, document: Any, validator: Draft3Validator) -> Schema:
        candidate = self.timestamps_to_strings(document)
        candidate = self.identifiers_to_strings(candidate)
        issues = [
            issue_from_error(error, candidate) for error in validator.iter_errors(candidate)
        ]
        if issues:
            logger.debug(
                "schema %s rejected document with %d issue(s)",
                self.name or "<unnamed>",
                len(issues),
            )
            raise SchemaValidationError(issues, schema_name=self.name)
        return self

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def identifiers_to_strings(self, document: Any) -> Any:
        """Return a copy of ``document`` with every ObjectId rendered as hex."""
        return apply_at_paths(document, self.resolve_identifier_paths(), identifier_to_string)

    def strings_to_identifiers(self, document: Any) -> Any:
        """Return a copy of ``document`` with every identifier string parsed.

        Values already ObjectIds, and absent or None values, are left alone.

        Raises:
            ArgumentError: If a string at an identifier path is not valid hex.
        """

        def convert(value: Any, location: Location) -> Any:
            try:
                return string_to_identifier(value)
            except ValueError as exc:
                msg = f"{exc} at {to_pointer(location) or '/'}"
                raise ArgumentError(msg) from exc

        return apply_at_paths_located(
            document, self.resolve_identifier_paths(), convert
        )

    def timestamps_to_strings(self, document: Any) -> Any:
        """Return a copy of ``document`` with every timestamp as an ISO-8601 string.

        Raises:
            TimestampFormatError: Listing every value that does not parse.
        """
        return self._convert_timestamps(document, timestamp_to_string)

    def strings_to_timestamps(self, document: Any) -> Any:
        """Return a copy of ``document`` with every timestamp as an aware datetime.

        Raises:
            TimestampFormatError: Listing every value that does not parse.
        """
        return self._convert_timestamps(document, string_to_timestamp)

    def _convert_timestamps(self, document: Any, conversion: Callable[[Any], Any]) -> Any:
        issues: list[ValidationIssue] = []

        def convert(value: Any, location: Location) -> Any:
            try:
                return conversion(value)
            except ValueError as exc:
                pointer = to_pointer(location)
                issues.append(
                    ValidationIssue(
                        path=pointer,
                        category=IssueCategory.TIMESTAMP,
                        detail=f"incorrect timestamp format at {pointer or '/'}: {exc}",
                        message=str(exc),
                    )
                )
                return value

        converted = apply_at_paths_located(
            document, self.resolve_timestamp_paths(), convert
        )
        if issues:
            raise TimestampFormatError(issues, schema_name=self.name)
        return converted
