"""
Value Detectors
================
Small pure classifiers used by the inference engine and the hardening merge:

  resolve_type()          JSON value -> base JSON Schema type tag
  FormatHintDetector      string -> uuid | date-time | date | None
  EnumCandidateDetector   observed strings + sample count -> enum values | None
"""

import numbers
import re
from typing import Any, Iterable, List, Optional


def resolve_type(value: Any) -> str:
    """
    Return the JSON Schema type name for a decoded JSON value.

    Mappings are objects (even when empty) and sequences are arrays, so the
    list/map decision is made from the container kind rather than its keys.
    """
    if isinstance(value, dict):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    if value is None:
        return "null"
    # bool before the numeric checks, it is an int subclass
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, numbers.Integral):
        return "integer"
    # Number rather than Real so Decimal (json parse_float=Decimal) counts too
    if isinstance(value, numbers.Number):
        return "number"
    return "string"


class FormatHintDetector:
    """
    Classifies a string into a known format hint. Checked in priority order,
    first match wins.
    """

    _PATTERNS = (
        ("uuid", re.compile(
            r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
            re.IGNORECASE,
        )),
        ("date-time", re.compile(
            r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})"
        )),
        ("date", re.compile(r"\d{4}-\d{2}-\d{2}")),
    )

    @classmethod
    def detect(cls, value: str) -> Optional[str]:
        if not isinstance(value, str):
            return None
        for name, pattern in cls._PATTERNS:
            if pattern.fullmatch(value):
                return name
        return None


class EnumCandidateDetector:
    """
    Decides whether a string field is a bounded enumeration.

    A field qualifies once at least ``min_samples`` responses have been seen
    and it carried between 1 and ``max_distinct`` distinct non-null values.
    """

    MIN_SAMPLES_REQUIRED = 30
    MAX_DISTINCT_VALUES = 8

    def __init__(self, min_samples: int = MIN_SAMPLES_REQUIRED, max_distinct: int = MAX_DISTINCT_VALUES):
        self.min_samples = min_samples
        self.max_distinct = max_distinct

    def detect(self, observed_values: Iterable[Optional[str]], total_samples: int) -> Optional[List[str]]:
        if total_samples < self.min_samples:
            return None

        distinct = sorted({v for v in observed_values if isinstance(v, str)})

        if 0 < len(distinct) <= self.max_distinct:
            return distinct
        return None
