"""
Schema Store Contract
======================
Every persistence backend implements the same small interface. The sentinel
only ever talks to this interface, so backends are interchangeable.

Per-key atomicity
-----------------
"add a sample, count, maybe harden" and "load baseline, diff, maybe archive"
are read-then-act sequences. The sentinel wraps each of them in
``store.lock(key)``. Locks are re-entrant and held per endpoint key, so
different endpoints never wait on each other. They are process-local:
several processes sharing one file directory or database need an external
single-writer arrangement.
"""

import threading
import weakref
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from schema_sentinel.core.schema import StoredSchema

DEFAULT_MAX_STORED_SAMPLES = 50


class SchemaStore(ABC):

    def __init__(self, max_stored_samples: int = DEFAULT_MAX_STORED_SAMPLES):
        self.max_stored_samples = max_stored_samples
        # Entries live only while some caller holds the lock, so one-off keys
        # do not accumulate
        self._locks: "weakref.WeakValueDictionary[str, Any]" = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    # ── Locking ──────────────────────────────────────────────────────────────

    @contextmanager
    def lock(self, key: str) -> Iterator[None]:
        """Hold the mutex for ``key`` for the duration of the block."""
        with self._locks_guard:
            key_lock = self._locks.get(key)
            if key_lock is None:
                key_lock = self._locks[key] = threading.RLock()
        with key_lock:
            yield

    # ── Hardened schemas ─────────────────────────────────────────────────────

    @abstractmethod
    def has(self, key: str) -> bool:
        """True when a hardened schema is active for ``key``."""

    @abstractmethod
    def get(self, key: str) -> Optional[StoredSchema]:
        ...

    @abstractmethod
    def put(self, key: str, schema: StoredSchema) -> None:
        ...

    @abstractmethod
    def all(self) -> List[str]:
        """Keys with an active hardened schema. Archived-only keys are excluded."""

    # ── Samples ──────────────────────────────────────────────────────────────

    @abstractmethod
    def add_sample(self, key: str, payload: Any) -> None:
        """Append a payload, keeping only the newest ``max_stored_samples``."""

    @abstractmethod
    def get_samples(self, key: str) -> List[Any]:
        """Pending samples for ``key``, oldest first."""

    @abstractmethod
    def clear_samples(self, key: str) -> None:
        ...

    # ── History ──────────────────────────────────────────────────────────────

    @abstractmethod
    def archive(self, key: str, schema: StoredSchema) -> None:
        """
        Move ``schema`` into the history for ``key``, remove the active
        schema and clear pending samples, as one operation.
        """

    @abstractmethod
    def archives(self, key: str) -> List[StoredSchema]:
        """Archived schemas for ``key``, oldest first."""
