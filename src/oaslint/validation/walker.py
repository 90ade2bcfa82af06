"""Recursive schema traversal shared by all schema-level rules."""

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Visitor = Callable[[dict[str, Any], str], None]

GENERIC_ITEM_SEGMENT = "items"


def item_segment(items: dict[str, Any]) -> str:
    """Path segment used for an array's item schema.

    The item schema's own ``type`` names the segment, falling back to its
    ``title`` and finally to a generic ``items`` marker.
    """
    for key in ("type", "title"):
        value = items.get(key)
        if isinstance(value, str) and value:
            return value
    return GENERIC_ITEM_SEGMENT


class SchemaWalker:
    """Pre-order walker over ``properties`` and ``items`` of a schema tree.

    A node that is already one of its own ancestors (a cycle left by a
    resolver) is not entered again, and nodes deeper than ``max_depth`` are
    not visited. A node shared by sibling branches is visited at each path.
    """

    def __init__(self, max_depth: int | None = None):
        self.max_depth = max_depth

    def walk(self, schema: Any, path: str, visit: Visitor) -> None:
        """Visit schema and every nested property and item schema.

        Args:
            schema: Schema node to start from
            path: Field path of the starting node
            visit: Callback invoked as ``visit(node, path)`` before children
        """
        self._walk(schema, path, visit, ancestors=set(), depth=0)

    def _walk(self, schema: Any, path: str, visit: Visitor, ancestors: set[int], depth: int) -> None:
        if not isinstance(schema, dict):
            return
        if id(schema) in ancestors:
            logger.debug(f"Schema at {path} contains itself, skipping")
            return
        if self.max_depth is not None and depth > self.max_depth:
            logger.debug(f"Maximum schema depth {self.max_depth} reached at {path}")
            return

        visit(schema, path)

        ancestors.add(id(schema))
        properties = schema.get("properties")
        if isinstance(properties, dict):
            for name, subschema in properties.items():
                self._walk(subschema, f"{path}/{name}", visit, ancestors, depth + 1)

        items = schema.get("items")
        if isinstance(items, dict):
            self._walk(items, f"{path}/{item_segment(items)}", visit, ancestors, depth + 1)
        ancestors.discard(id(schema))
