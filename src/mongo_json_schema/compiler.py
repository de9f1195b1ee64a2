"""Schema compiler: rewrite extended kinds into standard JSON Schema.

``compile_standard`` replaces every ``objectid`` and ``date`` node with a
``string`` node carrying a ``pattern``.  ``compile_partial`` strips every
``required`` marker from an already-standard tree, for validating patch
documents.  Both are pure: they build new nodes and leave their input alone.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from mongo_json_schema.conversions import OBJECTID_PATTERN, TIMESTAMP_PATTERN
from mongo_json_schema.errors import SchemaCompileError
from mongo_json_schema.nodes import (
    ArrayNode,
    ExtendedKind,
    IdentifierNode,
    ObjectNode,
    PrimitiveNode,
    SchemaNode,
    TimestampNode,
    UnionNode,
)

__all__ = ["compile_partial", "compile_standard"]

logger = logging.getLogger(__name__)

_PATTERNS: dict[ExtendedKind, str] = {
    ExtendedKind.IDENTIFIER: OBJECTID_PATTERN,
    ExtendedKind.TIMESTAMP: TIMESTAMP_PATTERN,
}


def compile_standard(root: SchemaNode) -> SchemaNode:
    """Return ``root`` with every extended kind rewritten to ``string`` + ``pattern``.

    Args:
        root: Any SchemaNode tree.

    Returns:
        A new tree that a draft-3 JSON Schema validator accepts.
    """
    standard = _standardize(root)
    logger.debug("compiled standard schema from %s", type(root).__name__)
    return standard


def _standardize(node: SchemaNode) -> SchemaNode:
    if isinstance(node, ObjectNode):
        if node.properties is None:
            return node
        return replace(
            node,
            properties={
                name: _standardize(child) for name, child in node.properties.items()
            },
        )
    if isinstance(node, ArrayNode):
        if node.items is None:
            return node
        return replace(node, items=_standardize(node.items))
    if isinstance(node, (IdentifierNode, TimestampNode)):
        return PrimitiveNode(
            extras={**node.extras, "pattern": _PATTERNS[node.kind]}, name="string"
        )
    if isinstance(node, UnionNode):
        return replace(
            node,
            members=tuple(_standardize_member(member) for member in node.members),
            **_children(node, _standardize),
        )
    if isinstance(node, PrimitiveNode):
        return replace(node, **_children(node, _standardize))
    msg = f"cannot compile {node!r}: not a schema node"
    raise SchemaCompileError(msg)


def _children(
    node: PrimitiveNode | UnionNode, visit: Callable[[SchemaNode], SchemaNode]
) -> dict[str, Any]:
    # properties/items of a union or plain node, rebuilt through ``visit``
    properties = None
    if node.properties is not None:
        properties = {name: visit(child) for name, child in node.properties.items()}
    items = None if node.items is None else visit(node.items)
    return {"properties": properties, "items": items}


def _standardize_member(member: str | SchemaNode) -> str | SchemaNode:
    if not isinstance(member, str):
        return _standardize(member)
    try:
        kind = ExtendedKind(member)
    except ValueError:
        return member
    # draft 3 lets a union member be an inline schema
    return PrimitiveNode(extras={"pattern": _PATTERNS[kind]}, name="string")


def compile_partial(standard: SchemaNode) -> SchemaNode:
    """Return ``standard`` with the ``required`` marker removed from every node.

    Args:
        standard: A tree already passed through ``compile_standard``.

    Returns:
        A new tree identical to ``standard`` except for ``required``.
    """
    return _strip_required(standard)


def _strip_required(node: SchemaNode) -> SchemaNode:
    extras = {key: value for key, value in node.extras.items() if key != "required"}

    if isinstance(node, ObjectNode):
        properties = None
        if node.properties is not None:
            properties = {
                name: _strip_required(child) for name, child in node.properties.items()
            }
        return replace(node, extras=extras, properties=properties)
    if isinstance(node, ArrayNode):
        items = None if node.items is None else _strip_required(node.items)
        return replace(node, extras=extras, items=items)
    if isinstance(node, UnionNode):
        members = tuple(
            member if isinstance(member, str) else _strip_required(member)
            for member in node.members
        )
        return replace(
            node, extras=extras, members=members, **_children(node, _strip_required)
        )
    if isinstance(node, PrimitiveNode):
        return replace(node, extras=extras, **_children(node, _strip_required))
    if isinstance(node, (IdentifierNode, TimestampNode)):
        return replace(node, extras=extras)
    msg = f"cannot compile {node!r}: not a schema node"
    raise SchemaCompileError(msg)
