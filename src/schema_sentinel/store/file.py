"""
File Schema Store
==================
One directory, plain JSON files, readable by humans and by every other
backend's import tooling:

    <dir>/<key>.json                 active schema (persisted schema document)
    <dir>/<key>.samples.json         pending samples, oldest first
    <dir>/archive/<key>/<n>.json     archived schemas, n = 1, 2, 3 ...

``<key>`` is the endpoint key in unpadded base64url so any key is a safe
file name. Writes go through a temp file + rename so a crash never leaves a
half-written document behind.
"""

import base64
import binascii
import json
import logging
import os
from typing import Any, List, Optional

from schema_sentinel.core.schema import StoredSchema
from schema_sentinel.store.base import DEFAULT_MAX_STORED_SAMPLES, SchemaStore

logger = logging.getLogger("schema_sentinel")

_SCHEMA_SUFFIX = ".json"
_SAMPLES_SUFFIX = ".samples.json"
_ARCHIVE_DIR = "archive"


def encode_key(key: str) -> str:
    return base64.urlsafe_b64encode(key.encode("utf-8")).decode("ascii").rstrip("=")


def decode_key(safe_key: str) -> str:
    padded = safe_key + "=" * (-len(safe_key) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")


class FileSchemaStore(SchemaStore):

    def __init__(self, directory: str, max_stored_samples: int = DEFAULT_MAX_STORED_SAMPLES):
        super().__init__(max_stored_samples)
        self.directory = directory
        os.makedirs(self.directory, exist_ok=True)

    # ── Paths ────────────────────────────────────────────────────────────────

    def _schema_path(self, key: str) -> str:
        return os.path.join(self.directory, encode_key(key) + _SCHEMA_SUFFIX)

    def _samples_path(self, key: str) -> str:
        return os.path.join(self.directory, encode_key(key) + _SAMPLES_SUFFIX)

    def _archive_dir(self, key: str) -> str:
        return os.path.join(self.directory, _ARCHIVE_DIR, encode_key(key))

    # ── JSON I/O ─────────────────────────────────────────────────────────────

    @staticmethod
    def _read_json(path: str) -> Optional[Any]:
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ FileSchemaStore: could not read {path}: {e}")
            return None

    @staticmethod
    def _write_json(path: str, data: Any) -> None:
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)

    @staticmethod
    def _remove(path: str) -> None:
        if os.path.exists(path):
            os.remove(path)

    def _load_document(self, path: str) -> Optional[StoredSchema]:
        data = self._read_json(path)
        if not StoredSchema.is_document(data):
            if data is not None:
                logger.warning(f"⚠️ FileSchemaStore: {path} is not a schema document, ignoring")
            return None
        try:
            return StoredSchema.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"⚠️ FileSchemaStore: corrupt schema document {path}: {e}")
            return None

    # ── Hardened schemas ─────────────────────────────────────────────────────

    def has(self, key: str) -> bool:
        return os.path.exists(self._schema_path(key))

    def get(self, key: str) -> Optional[StoredSchema]:
        return self._load_document(self._schema_path(key))

    def put(self, key: str, schema: StoredSchema) -> None:
        self._write_json(self._schema_path(key), schema.to_dict())

    def all(self) -> List[str]:
        keys = []
        for filename in sorted(os.listdir(self.directory)):
            if not filename.endswith(_SCHEMA_SUFFIX) or filename.endswith(_SAMPLES_SUFFIX):
                continue
            safe_key = filename[: -len(_SCHEMA_SUFFIX)]
            try:
                keys.append(decode_key(safe_key))
            except (binascii.Error, UnicodeDecodeError, ValueError):
                logger.warning(f"⚠️ FileSchemaStore: skipping foreign file {filename}")
        return keys

    # ── Samples ──────────────────────────────────────────────────────────────

    def add_sample(self, key: str, payload: Any) -> None:
        samples = self.get_samples(key)
        samples.append(payload)
        self._write_json(self._samples_path(key), samples[-self.max_stored_samples:])

    def get_samples(self, key: str) -> List[Any]:
        data = self._read_json(self._samples_path(key))
        return data if isinstance(data, list) else []

    def clear_samples(self, key: str) -> None:
        self._remove(self._samples_path(key))

    # ── History ──────────────────────────────────────────────────────────────

    def _archive_numbers(self, key: str) -> List[int]:
        archive_dir = self._archive_dir(key)
        if not os.path.isdir(archive_dir):
            return []
        numbers = []
        for filename in os.listdir(archive_dir):
            stem, ext = os.path.splitext(filename)
            if ext == ".json" and stem.isdigit():
                numbers.append(int(stem))
        return sorted(numbers)

    def archive(self, key: str, schema: StoredSchema) -> None:
        archive_dir = self._archive_dir(key)
        os.makedirs(archive_dir, exist_ok=True)

        numbers = self._archive_numbers(key)
        next_number = numbers[-1] + 1 if numbers else 1
        self._write_json(os.path.join(archive_dir, f"{next_number}.json"), schema.to_dict())

        self.clear_samples(key)
        self._remove(self._schema_path(key))

    def archives(self, key: str) -> List[StoredSchema]:
        archive_dir = self._archive_dir(key)
        history = []
        for number in self._archive_numbers(key):
            schema = self._load_document(os.path.join(archive_dir, f"{number}.json"))
            if schema is not None:
                history.append(schema)
        return history
