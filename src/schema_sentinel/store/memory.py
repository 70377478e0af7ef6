import copy
from typing import Any, Dict, List, Optional

from schema_sentinel.core.schema import StoredSchema
from schema_sentinel.store.base import DEFAULT_MAX_STORED_SAMPLES, SchemaStore


class InMemorySchemaStore(SchemaStore):
    """Dict-backed store. Nothing survives the process; used for tests and short-lived runs."""

    def __init__(self, max_stored_samples: int = DEFAULT_MAX_STORED_SAMPLES):
        super().__init__(max_stored_samples)
        self._schemas: Dict[str, StoredSchema] = {}
        self._samples: Dict[str, List[Any]] = {}
        self._history: Dict[str, List[StoredSchema]] = {}

    def has(self, key: str) -> bool:
        return key in self._schemas

    def get(self, key: str) -> Optional[StoredSchema]:
        return self._schemas.get(key)

    def put(self, key: str, schema: StoredSchema) -> None:
        self._schemas[key] = schema

    def all(self) -> List[str]:
        return list(self._schemas)

    def add_sample(self, key: str, payload: Any) -> None:
        samples = self._samples.setdefault(key, [])
        samples.append(copy.deepcopy(payload))
        if len(samples) > self.max_stored_samples:
            del samples[:-self.max_stored_samples]

    def get_samples(self, key: str) -> List[Any]:
        return list(self._samples.get(key, []))

    def clear_samples(self, key: str) -> None:
        self._samples.pop(key, None)

    def archive(self, key: str, schema: StoredSchema) -> None:
        self._history.setdefault(key, []).append(schema)
        self._schemas.pop(key, None)
        self._samples.pop(key, None)

    def archives(self, key: str) -> List[StoredSchema]:
        return list(self._history.get(key, []))

    def reset(self) -> None:
        """Forget everything."""
        self._schemas.clear()
        self._samples.clear()
        self._history.clear()
