"""Schema node types and the ExtendedKind StrEnum.

A schema tree is a closed union of six frozen dataclasses.  ``parse_node``
builds one from a plain mapping (the shape users write by hand) and
``dump_node`` turns it back into a plain mapping that a JSON Schema
validator understands.

``properties`` and ``items`` are parsed into child nodes on objects, arrays,
unions and plain (or untyped) nodes alike.  Other keywords are structural noise to this package: they are kept verbatim in each node's ``extras``
mapping so that ``required``, ``additionalProperties``, ``enum``,
``minimum``, ``description`` and friends survive a parse/dump cycle.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any, ClassVar

from mongo_json_schema.errors import SchemaCompileError

__all__ = [
    "ArrayNode",
    "ExtendedKind",
    "IdentifierNode",
    "ObjectNode",
    "PrimitiveNode",
    "SchemaNode",
    "TimestampNode",
    "UnionNode",
    "dump_node",
    "parse_node",
]

# Keywords consumed by the node structure itself; everything else is an extra.
_STRUCTURAL_KEYS = frozenset({"type", "properties", "items"})


class ExtendedKind(StrEnum):
    """Scalar kinds that have no native JSON Schema representation.

    - IDENTIFIER -> "objectid" : 24-character hex identifier (bson.ObjectId)
    - TIMESTAMP  -> "date"     : ISO-8601 timestamp (datetime.datetime)
    """

    IDENTIFIER = "objectid"
    TIMESTAMP = "date"


def _frozen(mapping: Mapping[str, Any] | None) -> Mapping[str, Any] | None:
    if mapping is None:
        return None
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True, slots=True)
class _Node:
    extras: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extras", _frozen(self.extras))

    @property
    def required(self) -> bool:
        """True when the enclosing object must carry this property."""
        return bool(self.extras.get("required", False))


@dataclass(frozen=True, slots=True)
class ObjectNode(_Node):
    """An ``object`` node.  ``properties`` is None when left unconstrained."""

    properties: Mapping[str, SchemaNode] | None = None

    def __post_init__(self) -> None:
        super(ObjectNode, self).__post_init__()
        object.__setattr__(self, "properties", _frozen(self.properties))


@dataclass(frozen=True, slots=True)
class ArrayNode(_Node):
    """An ``array`` node.  ``items`` is None when element shape is unconstrained."""

    items: SchemaNode | None = None


@dataclass(frozen=True, slots=True)
class IdentifierNode(_Node):
    kind: ClassVar[ExtendedKind] = ExtendedKind.IDENTIFIER


@dataclass(frozen=True, slots=True)
class TimestampNode(_Node):
    kind: ClassVar[ExtendedKind] = ExtendedKind.TIMESTAMP


@dataclass(frozen=True, slots=True)
class _OpenNode(_Node):
    # A node whose type does not pin down its shape may still describe
    # object properties and array items, e.g. {"type": ["object", "null"]}.
    properties: Mapping[str, SchemaNode] | None = None
    items: SchemaNode | None = None

    def __post_init__(self) -> None:
        super(_OpenNode, self).__post_init__()
        object.__setattr__(self, "properties", _frozen(self.properties))


@dataclass(frozen=True, slots=True)
class PrimitiveNode(_OpenNode):
    """Any plain JSON Schema type (``string``, ``number``, ``boolean``, ...).

    ``name`` is None for a node that declares no ``type`` at all; such a node
    may still carry ``properties`` and ``items``.
    """

    name: str | None = None


@dataclass(frozen=True, slots=True)
class UnionNode(_OpenNode):
    """A multi-type union such as ``["objectid", "null"]``.

    Members are type names, or inline schema nodes (the draft-3 form a union
    takes once its extended members have been compiled).  ``properties`` and
    ``items`` apply when the value is an object or an array.
    """

    members: tuple[str | SchemaNode, ...] = ()

    def includes(self, kind: ExtendedKind) -> bool:
        """Return True if any member of the union is ``kind``."""
        for member in self.members:
            if member == kind.value:
                return True
            if isinstance(member, (IdentifierNode, TimestampNode)) and member.kind is kind:
                return True
        return False


SchemaNode = (
    ObjectNode | ArrayNode | IdentifierNode | TimestampNode | PrimitiveNode | UnionNode
)


def parse_node(raw: Any, location: str = "#") -> SchemaNode:
    """Convert a plain schema mapping into a typed SchemaNode tree.

    Args:
        raw:      A mapping with an optional ``type`` key, plus ``properties``
                  (objects) or ``items`` (arrays).
        location: Position of ``raw`` inside the whole tree, used in error
                  messages.  Defaults to ``"#"`` (root).

    Returns:
        The SchemaNode for ``raw``.

    Raises:
        SchemaCompileError: If ``raw`` is not node-shaped.
    """
    if not isinstance(raw, Mapping):
        msg = f"schema node at {location} must be a mapping, got {type(raw).__name__}"
        raise SchemaCompileError(msg)

    extras = {
        key: copy.deepcopy(value)
        for key, value in raw.items()
        if key not in _STRUCTURAL_KEYS
    }
    required = extras.get("required", False)
    if not isinstance(required, bool):
        msg = f"'required' at {location} must be a boolean, got {required!r}"
        raise SchemaCompileError(msg)

    type_tag = raw.get("type")

    if isinstance(type_tag, (list, tuple)):
        members = tuple(
            _parse_member(member, f"{location}/type/{idx}")
            for idx, member in enumerate(type_tag)
        )
        return UnionNode(
            extras=extras,
            properties=_parse_properties(raw, location),
            items=_parse_items(raw, location),
            members=members,
        )

    if type_tag is not None and not isinstance(type_tag, str):
        msg = f"'type' at {location} must be a string or a list, got {type_tag!r}"
        raise SchemaCompileError(msg)

    if type_tag == "object":
        _keep_unused(raw, extras, ("items",))
        return ObjectNode(extras=extras, properties=_parse_properties(raw, location))

    if type_tag == "array":
        _keep_unused(raw, extras, ("properties",))
        return ArrayNode(extras=extras, items=_parse_items(raw, location))

    if type_tag == ExtendedKind.IDENTIFIER:
        _keep_unused(raw, extras, ("properties", "items"))
        return IdentifierNode(extras=extras)
    if type_tag == ExtendedKind.TIMESTAMP:
        _keep_unused(raw, extras, ("properties", "items"))
        return TimestampNode(extras=extras)
    return PrimitiveNode(
        extras=extras,
        properties=_parse_properties(raw, location),
        items=_parse_items(raw, location),
        name=type_tag,
    )


def _parse_properties(
    raw: Mapping[str, Any], location: str
) -> dict[str, SchemaNode] | None:
    properties = raw.get("properties")
    if properties is None:
        return None
    if not isinstance(properties, Mapping):
        msg = f"'properties' at {location} must be a mapping"
        raise SchemaCompileError(msg)
    return {
        name: parse_node(child, f"{location}/properties/{name}")
        for name, child in properties.items()
    }


def _parse_items(raw: Mapping[str, Any], location: str) -> SchemaNode | None:
    items = raw.get("items")
    if items is None:
        return None
    if not isinstance(items, Mapping):
        # Tuple-typed arrays (a list of item schemas) are not supported.
        msg = f"'items' at {location} must be a single schema mapping"
        raise SchemaCompileError(msg)
    return parse_node(items, f"{location}/items")


def _parse_member(member: Any, location: str) -> str | SchemaNode:
    if isinstance(member, str):
        return member
    if isinstance(member, Mapping):
        return parse_node(member, location)
    msg = f"union member at {location} must be a type name or a schema mapping"
    raise SchemaCompileError(msg)


def _keep_unused(
    raw: Mapping[str, Any], extras: dict[str, Any], keys: tuple[str, ...]
) -> None:
    # properties/items on a node whose type does not use them pass through as-is
    for key in keys:
        if key in raw:
            extras[key] = copy.deepcopy(raw[key])


def dump_node(node: SchemaNode) -> dict[str, Any]:
    """Convert a SchemaNode tree back into a plain, independent mapping."""
    if isinstance(node, ObjectNode):
        out: dict[str, Any] = {"type": "object"}
        if node.properties is not None:
            out["properties"] = {
                name: dump_node(child) for name, child in node.properties.items()
            }
    elif isinstance(node, ArrayNode):
        out = {"type": "array"}
        if node.items is not None:
            out["items"] = dump_node(node.items)
    elif isinstance(node, (IdentifierNode, TimestampNode)):
        out = {"type": node.kind.value}
    elif isinstance(node, PrimitiveNode):
        out = {} if node.name is None else {"type": node.name}
    elif isinstance(node, UnionNode):
        out = {
            "type": [
                member if isinstance(member, str) else dump_node(member)
                for member in node.members
            ]
        }
    else:
        msg = f"not a schema node: {node!r}"
        raise SchemaCompileError(msg)

    if isinstance(node, _OpenNode):
        if node.properties is not None:
            out["properties"] = {
                name: dump_node(child) for name, child in node.properties.items()
            }
        if node.items is not None:
            out["items"] = dump_node(node.items)
    out.update(copy.deepcopy(dict(node.extras)))
    return out
