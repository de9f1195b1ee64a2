"""SchemaOptions: immutable construction options for a Schema."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SchemaOptions:
    """Immutable options for building a Schema.

    Attributes:
        name: Optional schema name, quoted in error summaries.
        additional_properties: Whether documents may carry top-level
            properties the schema does not declare.  Default False.  Ignored
            by ``Schema.from_node``, which takes the node as-is.
    """

    name: str | None = None
    additional_properties: bool = False

    def __post_init__(self) -> None:
        if self.name is not None and (not isinstance(self.name, str) or not self.name):
            msg = f"name must be a non-empty string or None, got {self.name!r}"
            raise ValueError(msg)
        if not isinstance(self.additional_properties, bool):
            msg = (
                "additional_properties must be a bool, "
                f"got {self.additional_properties!r}"
            )
            raise ValueError(msg)
