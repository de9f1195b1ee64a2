"""Access-path resolution and path-guided document transformation.

An access path is a tuple of segments locating every position of one
extended kind inside documents that match a schema:

- a property name selects that key of a JSON object;
- ``WILDCARD`` (``"*"``) selects every element of a JSON array.

Example::

    schema = parse_node({
        "type": "object",
        "properties": {
            "owner": {"type": "objectid"},
            "grid": {"type": "array", "items": {"type": "array", "items": {"type": "objectid"}}},
        },
    })
    resolve_paths(schema, ExtendedKind.IDENTIFIER)
    # [("owner",), ("grid", "*", "*")]

Paths are immutable tuples and traversal walks them with an index cursor,
so one path can be applied any number of times.  A wildcard consumes exactly
one segment in both the resolver and the applier.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, Final

from jsonpointer import JsonPointer

from mongo_json_schema.errors import ArgumentError, SchemaCompileError
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

__all__ = [
    "WILDCARD",
    "AccessPath",
    "Location",
    "apply_at_path",
    "apply_at_paths",
    "apply_at_paths_located",
    "deep_copy",
    "resolve_paths",
    "to_pointer",
]

WILDCARD: Final = "*"

# Type alias for a schema-level path: property names and wildcards
AccessPath = tuple[str, ...]

# Type alias for a concrete position inside one document: keys and list indices
Location = tuple[str | int, ...]


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def resolve_paths(root: SchemaNode, kind: ExtendedKind) -> list[AccessPath]:
    """Return every access path at which ``kind`` occurs in the ``root`` schema.

    Paths follow the declared (insertion) order of object properties.  Each
    node is visited once; object nodes without ``properties`` and array nodes
    without ``items`` contribute nothing.

    Args:
        root: The schema tree, before ``compile_standard`` (it must still
              carry the extended-kind tags).
        kind: Which extended kind to look for.

    Returns:
        A fresh list of paths.  ``[()]`` when ``root`` itself is of ``kind``.
    """
    found: list[AccessPath] = []
    _collect(root, kind, (), found)
    return found


def _collect(
    node: SchemaNode, kind: ExtendedKind, prefix: AccessPath, found: list[AccessPath]
) -> None:
    if isinstance(node, ObjectNode):
        if node.properties is not None:
            for name, child in node.properties.items():
                _collect(child, kind, (*prefix, name), found)
    elif isinstance(node, ArrayNode):
        if node.items is not None:
            _collect(node.items, kind, (*prefix, WILDCARD), found)
    elif isinstance(node, (IdentifierNode, TimestampNode)):
        if node.kind is kind:
            found.append(prefix)
    elif isinstance(node, (UnionNode, PrimitiveNode)):
        if isinstance(node, UnionNode) and node.includes(kind):
            found.append(prefix)
        # a nullable object or array still describes its children
        if node.properties is not None:
            for name, child in node.properties.items():
                _collect(child, kind, (*prefix, name), found)
        if node.items is not None:
            _collect(node.items, kind, (*prefix, WILDCARD), found)
    else:
        msg = f"cannot resolve paths through {node!r}: not a schema node"
        raise SchemaCompileError(msg)


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


def deep_copy(value: Any) -> Any:
    """Structurally copy a JSON-compatible value.

    Mappings become dicts and sequences (lists, tuples) become lists; every
    other value (str, int, float, bool, None, ObjectId, datetime) is an
    immutable leaf and is shared.
    """
    if isinstance(value, Mapping):
        return {key: deep_copy(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [deep_copy(item) for item in value]
    return value


def _check_path(path: Any) -> AccessPath:
    if not isinstance(path, (list, tuple)) or not all(
        isinstance(segment, str) for segment in path
    ):
        msg = f"path must be a sequence of property names and wildcards, got {path!r}"
        raise ArgumentError(msg)
    return tuple(path)


def _apply(
    doc: Any,
    path: AccessPath,
    cursor: int,
    location: Location,
    fn: Callable[[Any, Location], Any],
) -> Any:
    if cursor == len(path):
        return fn(doc, location)
    if doc is None:
        msg = f"cannot descend into None at {to_pointer(location) or '/'}"
        raise ArgumentError(msg)

    segment = path[cursor]
    last = cursor + 1 == len(path)

    if segment == WILDCARD:
        if not isinstance(doc, (list, tuple)):
            return doc
        return [
            item
            if item is None and not last
            else _apply(item, path, cursor + 1, (*location, idx), fn)
            for idx, item in enumerate(doc)
        ]

    if not isinstance(doc, Mapping):
        return doc
    child = doc.get(segment)
    if child is None:
        return doc
    return {**doc, segment: _apply(child, path, cursor + 1, (*location, segment), fn)}


def apply_at_path(
    doc: Any, path: Sequence[str], transform: Callable[[Any], Any]
) -> Any:
    """Apply ``transform`` to every value ``path`` selects inside ``doc``.

    Missing keys, ``None`` values and wildcards over non-arrays are skipped:
    schemas describe optional structure, so absence is not an error.  Only
    the containers along the path are rebuilt; ``doc`` is never mutated.

    Args:
        doc:       Any JSON-compatible value.
        path:      Property names and ``WILDCARD`` segments.
        transform: Called with each selected value; its result replaces it.

    Returns:
        The transformed document.  ``transform(doc)`` for an empty path,
        even when ``doc`` is None.

    Raises:
        ArgumentError: If ``doc`` is None and ``path`` is non-empty, or if
            ``path`` is not a list/tuple of strings.
    """
    checked = _check_path(path)
    return _apply(doc, checked, 0, (), lambda value, _location: transform(value))


def apply_at_paths(
    doc: Any, paths: Iterable[Sequence[str]], transform: Callable[[Any], Any]
) -> Any:
    """Deep-copy ``doc`` then fold ``apply_at_path`` over each of ``paths``.

    Each distinct path must be supplied once; overlapping paths would apply
    ``transform`` twice to the same value.
    """
    result = deep_copy(doc)
    for path in paths:
        result = apply_at_path(result, path, transform)
    return result


def apply_at_paths_located(
    doc: Any,
    paths: Iterable[Sequence[str]],
    transform: Callable[[Any, Location], Any],
) -> Any:
    """Like ``apply_at_paths`` but ``transform`` also receives each value's Location.

    The Location is concrete: wildcards are replaced by the list index of the
    element being visited, e.g. ``("grid", 0, 2)``.
    """
    result = deep_copy(doc)
    for path in paths:
        result = _apply(result, _check_path(path), 0, (), transform)
    return result


def to_pointer(location: Iterable[str | int]) -> str:
    """Render a Location as an RFC 6901 JSON Pointer (``""`` for the root)."""
    return JsonPointer.from_parts(list(location)).path
