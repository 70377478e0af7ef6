"""
Stored Schema
==============
The hardened baseline persisted per endpoint, and the content hash used as
its version.

Persisted document shape (identical across every store backend):

    {
        "version":     "sha256:<64 hex chars>",
        "jsonSchema":  { ...schema node... },
        "sampleCount": 20,
        "hardenedAt":  "2024-01-01T12:00:00+00:00"
    }
"""

import copy
import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict

logger = logging.getLogger("schema_sentinel")

VERSION_PREFIX = "sha256:"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def content_hash(node: Any) -> str:
    """
    Version string for a schema node: sha256 over its canonical JSON form.
    Unencodable input hashes as the empty string instead of failing.
    """
    try:
        canonical = json.dumps(node, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        logger.warning(f"⚠️ Could not encode schema for hashing, using empty digest: {e}")
        canonical = ""
    return VERSION_PREFIX + hashlib.sha256(canonical.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class StoredSchema:
    version: str
    json_schema: Dict[str, Any]
    sample_count: int
    hardened_at: datetime = field(default_factory=_now)

    @classmethod
    def create(cls, json_schema: Dict[str, Any], sample_count: int) -> "StoredSchema":
        """Build a freshly hardened schema, versioned by its content."""
        return cls(
            version=content_hash(json_schema),
            json_schema=json_schema,
            sample_count=sample_count,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version":     self.version,
            "jsonSchema":  copy.deepcopy(self.json_schema),
            "sampleCount": self.sample_count,
            "hardenedAt":  self.hardened_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoredSchema":
        json_schema = data.get("jsonSchema")
        hardened_at = datetime.fromisoformat(str(data["hardenedAt"]))
        if hardened_at.tzinfo is None:
            hardened_at = hardened_at.replace(tzinfo=timezone.utc)
        return cls(
            version=str(data["version"]),
            json_schema=json_schema if isinstance(json_schema, dict) else {},
            sample_count=int(data.get("sampleCount", 0)),
            hardened_at=hardened_at,
        )

    @staticmethod
    def is_document(data: Any) -> bool:
        """True when ``data`` looks like a persisted document rather than a bare node."""
        return isinstance(data, dict) and "jsonSchema" in data and "version" in data
