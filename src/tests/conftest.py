"""Shared fixtures for the sentinel test suite."""
import pytest

from schema_sentinel.core.config import SentinelConfig
from schema_sentinel.services.sentinel import Sentinel
from schema_sentinel.store.file import FileSchemaStore
from schema_sentinel.store.memory import InMemorySchemaStore
from schema_sentinel.store.sql import SqlSchemaStore


class RecordingSink:
    """Event sink that keeps every event it receives."""

    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)

    def of_type(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def store():
    return InMemorySchemaStore()


@pytest.fixture
def make_sentinel():
    """Factory: make_sentinel(store=None, sink=None, **config_overrides)."""

    def _make(store=None, sink=None, **overrides):
        overrides.setdefault("store_driver", "memory")
        config = SentinelConfig(**overrides)
        if store is None:
            store = InMemorySchemaStore(config.max_stored_samples)
        return Sentinel(config, store, sink)

    return _make


@pytest.fixture
def sentinel(make_sentinel, store, sink):
    return make_sentinel(store, sink, sample_threshold=3)


@pytest.fixture(params=["memory", "file", "sql"])
def make_any_store(request, tmp_path):
    """Factory over every backend: make_any_store(max_stored_samples)."""

    def _make(max_stored_samples):
        if request.param == "memory":
            return InMemorySchemaStore(max_stored_samples)
        if request.param == "file":
            return FileSchemaStore(str(tmp_path / "schemas"), max_stored_samples)
        return SqlSchemaStore(f"sqlite:///{tmp_path / 'sentinel.db'}", max_stored_samples)

    return _make
