"""Integrations subpackage for mongo-json-schema.

Contains integration adapters for external frameworks:
- pytest plugin (auto-discovered via pytest11 entry point)
"""

from __future__ import annotations

__all__: list[str] = []
