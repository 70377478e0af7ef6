"""
Inference Engine
=================
Converts one decoded JSON payload into one schema node.

Schema nodes are plain dicts using a small JSON Schema subset:

    {"type": "object", "properties": {...}, "required": [...]}
    {"type": "array",  "items": {...}}
    {"type": "string", "format": "uuid", "enum": ["..."]}
    {"type": "integer"} / {"type": "number"} / {"type": "boolean"} / {"type": "null"}

A single payload says nothing about optionality or enums, so:
  - every key seen in an object is listed in ``required``; the hardening
    merge decides real optionality across samples.
  - every string carries a one-value ``enum`` holding the literal it saw;
    the merge unions these and only keeps an enum when it is justified.
"""

from typing import Any, Dict, List

from schema_sentinel.utils.detectors import FormatHintDetector, resolve_type


class InferenceEngine:

    def infer(self, payload: Any) -> Dict[str, Any]:
        """Infer the schema node for a whole payload."""
        return self._walk(payload)

    def _walk(self, value: Any) -> Dict[str, Any]:
        type_name = resolve_type(value)

        if type_name == "null":
            return {"type": "null"}

        if type_name == "object":
            properties = {str(key): self._walk(child) for key, child in value.items()}
            node: Dict[str, Any] = {"type": "object", "properties": properties}
            if properties:
                node["required"] = list(properties)
            return node

        if type_name == "array":
            if not value:
                return {"type": "array", "items": {}}
            return {
                "type": "array",
                "items": self._collapse_items([self._walk(item) for item in value]),
            }

        node = {"type": type_name}
        if type_name == "string":
            # Non-JSON scalars (datetime, custom objects) are profiled by their text
            text = value if isinstance(value, str) else str(value)
            fmt = FormatHintDetector.detect(text)
            if fmt is not None:
                node["format"] = fmt
            node["enum"] = [text]
        return node

    @staticmethod
    def _collapse_items(item_schemas: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        One schema per distinct item type, first occurrence wins as the
        template. A single type collapses to that schema; mixed types become
        ``oneOf``.
        """
        by_type: Dict[str, Dict[str, Any]] = {}
        for schema in item_schemas:
            by_type.setdefault(schema.get("type", "unknown"), schema)

        if not by_type:
            return {}
        if len(by_type) == 1:
            return next(iter(by_type.values()))
        return {"oneOf": list(by_type.values())}
