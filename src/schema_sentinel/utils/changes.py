"""
Change Taxonomy
================
The nine structural changes the drift detector can emit, each with a fixed
severity.

  BREAKING:  FieldRemoved, TypeChanged, NowNullable, RequiredNowOptional,
             EnumValueRemoved
  ADDITIVE:  FieldAdded, EnumValueAdded
  ADVISORY:  FormatChanged, OptionalNowRequired

Paths use dot notation for object fields and ``[]`` for array items, e.g.
``data.items[].price``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable


class Severity(str, Enum):
    BREAKING = "BREAKING"   # Existing consumers will break
    ADDITIVE = "ADDITIVE"   # New surface, existing consumers unaffected
    ADVISORY = "ADVISORY"   # Worth knowing, rarely actionable

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.ADVISORY: 0,
    Severity.ADDITIVE: 1,
    Severity.BREAKING: 2,
}


class ChangeType:
    FIELD_ADDED           = "field_added"
    FIELD_REMOVED         = "field_removed"
    TYPE_CHANGED          = "type_changed"
    FORMAT_CHANGED        = "format_changed"
    NOW_NULLABLE          = "now_nullable"
    REQUIRED_NOW_OPTIONAL = "required_now_optional"
    OPTIONAL_NOW_REQUIRED = "optional_now_required"
    ENUM_VALUE_ADDED      = "enum_value_added"
    ENUM_VALUE_REMOVED    = "enum_value_removed"


@dataclass(frozen=True)
class Change:
    """Base for every detected change. Subclasses pin change_type and severity."""

    path: str

    change_type = "unknown"
    severity = Severity.ADVISORY

    @property
    def description(self) -> str:
        return self.change_type.replace("_", " ")

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "change_type": self.change_type,
            "severity":    self.severity.value,
            "path":        self.path,
            "description": self.description,
        }
        for key, value in self.__dict__.items():
            if key != "path":
                data[key] = value
        return data


@dataclass(frozen=True)
class FieldAdded(Change):
    field_type: str = "unknown"

    change_type = ChangeType.FIELD_ADDED
    severity = Severity.ADDITIVE

    @property
    def description(self) -> str:
        return f"New field added (type: {self.field_type})"


@dataclass(frozen=True)
class FieldRemoved(Change):
    field_type: str = "unknown"

    change_type = ChangeType.FIELD_REMOVED
    severity = Severity.BREAKING

    @property
    def description(self) -> str:
        return f"Field removed (was: {self.field_type})"


@dataclass(frozen=True)
class TypeChanged(Change):
    old_type: str = "unknown"
    new_type: str = "unknown"

    change_type = ChangeType.TYPE_CHANGED
    severity = Severity.BREAKING

    @property
    def description(self) -> str:
        return f"Type changed ({self.old_type} -> {self.new_type})"


@dataclass(frozen=True)
class FormatChanged(Change):
    old_format: str = ""
    new_format: str = ""

    change_type = ChangeType.FORMAT_CHANGED
    severity = Severity.ADVISORY

    @property
    def description(self) -> str:
        return f"Format changed ({self.old_format} -> {self.new_format})"


@dataclass(frozen=True)
class NowNullable(Change):
    change_type = ChangeType.NOW_NULLABLE
    severity = Severity.BREAKING

    @property
    def description(self) -> str:
        return "Field was never null before but now returned null"


@dataclass(frozen=True)
class RequiredNowOptional(Change):
    change_type = ChangeType.REQUIRED_NOW_OPTIONAL
    severity = Severity.BREAKING

    @property
    def description(self) -> str:
        return "Field is no longer reliably present"


@dataclass(frozen=True)
class OptionalNowRequired(Change):
    change_type = ChangeType.OPTIONAL_NOW_REQUIRED
    severity = Severity.ADVISORY

    @property
    def description(self) -> str:
        return "Optional field is now always present"


@dataclass(frozen=True)
class EnumValueAdded(Change):
    value: str = ""

    change_type = ChangeType.ENUM_VALUE_ADDED
    severity = Severity.ADDITIVE

    @property
    def description(self) -> str:
        return f"New enum value '{self.value}' observed"


@dataclass(frozen=True)
class EnumValueRemoved(Change):
    value: str = ""

    change_type = ChangeType.ENUM_VALUE_REMOVED
    severity = Severity.BREAKING

    @property
    def description(self) -> str:
        return f"Enum value '{self.value}' no longer observed"


def highest_severity(changes: Iterable[Change]) -> Severity:
    """BREAKING beats ADDITIVE beats ADVISORY. An empty list is ADVISORY."""
    highest = Severity.ADVISORY
    for change in changes:
        if change.severity is Severity.BREAKING:
            return Severity.BREAKING
        if change.severity is Severity.ADDITIVE:
            highest = Severity.ADDITIVE
    return highest
