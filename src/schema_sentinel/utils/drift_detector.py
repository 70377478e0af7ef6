"""
Contract Drift Detection Engine
================================
Diffs a hardened schema (old) against the schema inferred from one fresh
response (new) and classifies every structural change.

Per node pair the rules are, in order:
  1. Different type        -> TypeChanged, and the subtree is not inspected further.
  2. Object                -> removed fields, now-null fields, enum deltas and a
                              recursive diff per surviving field; then added fields;
                              then required/optional transitions.
  3. Array                 -> items are diffed when both sides have typed items.
  4. String                -> FormatChanged when both sides carry a different format.

A field missing from the new payload produces a single FieldRemoved. It is
never reported a second time as RequiredNowOptional.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from schema_sentinel.core.schema import StoredSchema, content_hash
from schema_sentinel.utils.changes import (
    Change,
    EnumValueAdded,
    EnumValueRemoved,
    FieldAdded,
    FieldRemoved,
    FormatChanged,
    NowNullable,
    OptionalNowRequired,
    RequiredNowOptional,
    Severity,
    TypeChanged,
    highest_severity,
)

ROOT_PATH = "$root"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SchemaDrift:
    endpoint: str
    severity: Severity
    changes: Tuple[Change, ...]
    previous_schema_version: str
    new_schema_version: str
    detected_at: datetime = field(default_factory=_now)

    @property
    def breaking_changes(self) -> List[Change]:
        return [c for c in self.changes if c.severity is Severity.BREAKING]

    @property
    def is_breaking(self) -> bool:
        return self.severity is Severity.BREAKING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "endpoint":              self.endpoint,
            "detectedAt":            self.detected_at.isoformat(),
            "severity":              self.severity.value,
            "changes":               [c.to_dict() for c in self.changes],
            "previousSchemaVersion": self.previous_schema_version,
            "newSchemaVersion":      self.new_schema_version,
        }


def check_schema_node(node: Any, path: str = "") -> None:
    """
    Raise ValueError unless ``node`` has the shape the detector walks.

    Schemas built by inference and hardening always do; this guards schemas
    supplied from outside (files, request bodies).
    """
    where = path or ROOT_PATH
    if not isinstance(node, dict):
        raise ValueError(f"schema node at {where} must be an object, got {type(node).__name__}")

    properties = node.get("properties")
    if properties is not None:
        if not isinstance(properties, dict):
            raise ValueError(f"'properties' at {where} must be an object")
        for name, child in properties.items():
            check_schema_node(child, _child_path(path, name))

    items = node.get("items")
    if items is not None:
        check_schema_node(items, path + "[]")

    for key in ("required", "enum"):
        if key in node and not isinstance(node[key], list):
            raise ValueError(f"'{key}' at {where} must be an array")


def _child_path(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def _type_label(node: Dict[str, Any]) -> str:
    """Readable type for change payloads; untyped nodes report as 'unknown'."""
    type_name = node.get("type", "unknown")
    if isinstance(type_name, list):
        return "|".join(str(t) for t in type_name)
    return str(type_name)


def _is_now_null(old: Dict[str, Any], new: Dict[str, Any]) -> bool:
    old_type = old.get("type")
    new_type = new.get("type")

    if old_type == "null" or isinstance(old_type, list):
        return False
    if isinstance(new_type, list):
        return "null" in new_type
    return new_type == "null"


class DriftDetector:

    def detect(self, endpoint_key: str, hardened: StoredSchema, inferred: Dict[str, Any]) -> Optional[SchemaDrift]:
        """
        Compare a freshly inferred schema against the endpoint's baseline.
        Returns None when nothing changed.
        """
        changes = self.diff(hardened.json_schema, inferred)
        if not changes:
            return None

        return SchemaDrift(
            endpoint=endpoint_key,
            severity=highest_severity(changes),
            changes=tuple(changes),
            previous_schema_version=hardened.version,
            new_schema_version=content_hash(inferred),
        )

    def diff(self, old: Dict[str, Any], new: Dict[str, Any], path: str = "") -> List[Change]:
        """Ordered list of changes between two schema nodes."""
        changes: List[Change] = []
        self._compare(old, new, path, changes)
        return changes

    # ── Recursive comparison ─────────────────────────────────────────────────

    def _compare(self, old: Dict[str, Any], new: Dict[str, Any], path: str, changes: List[Change]) -> None:
        old_type = old.get("type")
        new_type = new.get("type")

        if old_type != new_type:
            changes.append(TypeChanged(path or ROOT_PATH, _type_label(old), _type_label(new)))
            return

        if old_type == "object":
            self._compare_object(old, new, path, changes)
        elif old_type == "array":
            old_items = old.get("items") or {}
            new_items = new.get("items") or {}
            if old_items and new_items:
                self._compare(old_items, new_items, path + "[]", changes)
        elif old_type == "string":
            old_format = old.get("format")
            new_format = new.get("format")
            if old_format and new_format and old_format != new_format:
                changes.append(FormatChanged(path or ROOT_PATH, old_format, new_format))

    def _compare_object(self, old: Dict[str, Any], new: Dict[str, Any], path: str, changes: List[Change]) -> None:
        old_props: Dict[str, Any] = old.get("properties") or {}
        new_props: Dict[str, Any] = new.get("properties") or {}

        for name, old_field in old_props.items():
            child_path = _child_path(path, name)

            if name not in new_props:
                changes.append(FieldRemoved(child_path, _type_label(old_field)))
                continue

            new_field = new_props[name]

            if _is_now_null(old_field, new_field):
                if not old_field.get("nullable", False):
                    changes.append(NowNullable(child_path))
                continue

            if "enum" in old_field and "enum" in new_field:
                old_enum = list(old_field["enum"])
                new_enum = list(new_field["enum"])
                for value in old_enum:
                    if value not in new_enum:
                        changes.append(EnumValueRemoved(child_path, value))
                for value in new_enum:
                    if value not in old_enum:
                        changes.append(EnumValueAdded(child_path, value))

            self._compare(old_field, new_field, child_path, changes)

        for name, new_field in new_props.items():
            if name not in old_props:
                changes.append(FieldAdded(_child_path(path, name), _type_label(new_field)))

        old_required = list(old.get("required") or [])
        new_required = list(new.get("required") or [])

        for name in old_required:
            # An absent field was already reported as FieldRemoved
            if name not in new_required and name in new_props:
                changes.append(RequiredNowOptional(_child_path(path, name)))

        for name in new_required:
            if name not in old_required:
                changes.append(OptionalNowRequired(_child_path(path, name)))
