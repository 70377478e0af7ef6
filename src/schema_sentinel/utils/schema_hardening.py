"""
Schema Hardening
=================
Merges the per-sample schema nodes of one endpoint into a single baseline.

Every sample tree is walked once, collecting per structural path:

  presence        how many samples had a node at this path
  type_counts     how often each type tag was seen (including "null")
  format          the most recently seen format hint (last write wins)
  enum_values     union of the one-value enums seen on string nodes
  property_names  every child field seen on an object at this path, in
                  first-seen order, so a field absent from the first sample
                  but present later is still modeled

The merged tree is then built top-down from those statistics:

  - null is orthogonal to type. A field seen as null in some samples and as
    a real type in others becomes ``{"type": <real>, "nullable": true}``.
    Only a field that was *always* null resolves to ``{"type": "null"}``.
  - The dominant non-null type wins. Ties between equally frequent types
    are broken by type name, alphabetically (``integer`` before ``number``,
    ``number`` before ``string``).
  - A child is ``required`` when it was present in at least
    ``additive_threshold`` of the samples in which its parent was an object;
    rarer fields stay optional. For top-level fields that is every sample.
    A nullable object's fields are judged only against the samples where
    the object was not null.
  - Enums are only declared when EnumCandidateDetector agrees, judged
    against the total sample count.
  - Untyped nodes (``{}`` items of empty arrays, ``oneOf`` items of mixed
    arrays) carry no statistics of their own and are kept as observed.
"""

import copy
from typing import Any, Dict, List, Optional, Tuple

from schema_sentinel.utils.detectors import EnumCandidateDetector

# Path segment marking "the items of the array at this path". Field names are
# always strings, so this can never collide with a property called "[]".
_ITEMS = None

Path = Tuple[Optional[str], ...]


class PathStats:
    """Everything observed at one structural path across all samples."""

    __slots__ = ("presence", "type_counts", "format", "enum_values", "property_names", "untyped")

    def __init__(self):
        self.presence: int = 0
        self.type_counts: Dict[str, int] = {}
        self.format: Optional[str] = None
        self.enum_values: List[str] = []
        self.property_names: List[str] = []
        self.untyped: Optional[Dict[str, Any]] = None

    def observe(self, node: Dict[str, Any]) -> Optional[str]:
        """Record one node; returns its type tag (None for untyped nodes)."""
        self.presence += 1

        type_name = node.get("type")
        if type_name is None:
            # Prefer a descriptive node (oneOf) over the bare {} of an empty array
            if self.untyped is None or (not self.untyped and node):
                self.untyped = node
            return None

        self.type_counts[type_name] = self.type_counts.get(type_name, 0) + 1

        if "format" in node:
            self.format = node["format"]

        if type_name == "string":
            for value in node.get("enum", ()):
                if value not in self.enum_values:
                    self.enum_values.append(value)
        elif type_name == "object":
            for name in node.get("properties", {}):
                if name not in self.property_names:
                    self.property_names.append(name)

        return type_name


def resolve_dominant_type(type_counts: Dict[str, int]) -> Tuple[str, bool]:
    """
    Pick the dominant type for a path from its type counts.

    Returns (type, nullable). null never wins against a real type; it only
    sets the nullable flag.
    """
    null_count = type_counts.get("null", 0)
    real_counts = {t: n for t, n in type_counts.items() if t != "null"}

    if not real_counts:
        return "null", False

    dominant = min(real_counts, key=lambda t: (-real_counts[t], t))
    return dominant, null_count > 0


class SchemaMerger:
    """Merges N single-sample schema nodes into one hardened node."""

    def __init__(self, additive_threshold: float = 0.95, enum_detector: Optional[EnumCandidateDetector] = None):
        self.additive_threshold = additive_threshold
        self.enum_detector = enum_detector or EnumCandidateDetector()

    def merge(self, schemas: List[Dict[str, Any]]) -> Dict[str, Any]:
        if not schemas:
            return {"type": "object", "properties": {}}

        stats: Dict[Path, PathStats] = {}
        for schema in schemas:
            self._walk(schema, (), stats)

        return self._build((), stats, len(schemas))

    # ── Pass 1: collect statistics ───────────────────────────────────────────

    def _walk(self, node: Dict[str, Any], path: Path, stats: Dict[Path, PathStats]) -> None:
        entry = stats.get(path)
        if entry is None:
            entry = stats[path] = PathStats()

        type_name = entry.observe(node)

        if type_name == "object":
            for key, child in node.get("properties", {}).items():
                if isinstance(child, dict):
                    self._walk(child, path + (key,), stats)
        elif type_name == "array":
            items = node.get("items")
            if isinstance(items, dict):
                self._walk(items, path + (_ITEMS,), stats)

    # ── Pass 2: build the merged tree ────────────────────────────────────────

    def _build(self, path: Path, stats: Dict[Path, PathStats], total: int) -> Dict[str, Any]:
        entry = stats[path]

        if not entry.type_counts:
            return copy.deepcopy(entry.untyped) if entry.untyped is not None else {}

        type_name, nullable = resolve_dominant_type(entry.type_counts)
        node: Dict[str, Any] = {"type": type_name}

        if nullable:
            node["nullable"] = True

        if type_name == "string":
            if entry.format is not None:
                node["format"] = entry.format
            if entry.enum_values:
                candidates = self.enum_detector.detect(entry.enum_values, total)
                if candidates is not None:
                    node["enum"] = candidates

        elif type_name == "object":
            properties: Dict[str, Any] = {}
            required: List[str] = []
            parent_count = entry.type_counts[type_name]

            for key in entry.property_names:
                child_path = path + (key,)
                child_entry = stats.get(child_path)
                if child_entry is None:
                    continue

                properties[key] = self._build(child_path, stats, total)
                if child_entry.presence / parent_count >= self.additive_threshold:
                    required.append(key)

            node["properties"] = properties
            if required:
                node["required"] = required

        elif type_name == "array":
            items_path = path + (_ITEMS,)
            node["items"] = self._build(items_path, stats, total) if items_path in stats else {}

        return node
