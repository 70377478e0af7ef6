"""Contract tests run against every store backend."""
import json
import os
from concurrent.futures import ThreadPoolExecutor

import pytest

from schema_sentinel.core.schema import StoredSchema
from schema_sentinel.store.file import FileSchemaStore, decode_key, encode_key
from schema_sentinel.store.sql import SqlSchemaStore

KEY = "GET /orders/{id}"


def make_schema(n=1):
    return StoredSchema.create({"type": "object", "properties": {"n": {"type": "integer"}}, "x": n}, 20)


@pytest.fixture
def any_store(make_any_store):
    return make_any_store(max_stored_samples=5)


# ============================================================================
# Shared contract
# ============================================================================

class TestStoreContract:

    def test_empty_store(self, any_store):
        assert any_store.has(KEY) is False
        assert any_store.get(KEY) is None
        assert any_store.all() == []
        assert any_store.get_samples(KEY) == []
        assert any_store.archives(KEY) == []

    def test_put_and_get(self, any_store):
        schema = make_schema()
        any_store.put(KEY, schema)

        assert any_store.has(KEY)
        loaded = any_store.get(KEY)
        assert loaded.version == schema.version
        assert loaded.json_schema == schema.json_schema
        assert loaded.sample_count == 20
        assert loaded.hardened_at == schema.hardened_at
        assert any_store.all() == [KEY]

    def test_put_replaces(self, any_store):
        any_store.put(KEY, make_schema(1))
        second = make_schema(2)
        any_store.put(KEY, second)

        assert any_store.get(KEY).version == second.version
        assert any_store.all() == [KEY]

    def test_samples_keep_order(self, any_store):
        for i in range(3):
            any_store.add_sample(KEY, {"i": i})
        assert any_store.get_samples(KEY) == [{"i": 0}, {"i": 1}, {"i": 2}]

    def test_list_payloads(self, any_store):
        any_store.add_sample(KEY, [1, 2])
        assert any_store.get_samples(KEY) == [[1, 2]]

    def test_samples_are_capped_to_the_newest(self, any_store):
        for i in range(8):
            any_store.add_sample(KEY, {"i": i})
        assert [s["i"] for s in any_store.get_samples(KEY)] == [3, 4, 5, 6, 7]

    def test_clear_samples(self, any_store):
        any_store.add_sample(KEY, {"i": 1})
        any_store.add_sample("GET /other", {"i": 2})
        any_store.clear_samples(KEY)

        assert any_store.get_samples(KEY) == []
        assert any_store.get_samples("GET /other") == [{"i": 2}]

    def test_archive_moves_schema_and_clears_samples(self, any_store):
        schema = make_schema()
        any_store.put(KEY, schema)
        any_store.add_sample(KEY, {"i": 1})

        any_store.archive(KEY, schema)

        assert any_store.has(KEY) is False
        assert any_store.get(KEY) is None
        assert any_store.get_samples(KEY) == []
        assert KEY not in any_store.all()
        assert [s.version for s in any_store.archives(KEY)] == [schema.version]

    def test_archives_are_oldest_first(self, any_store):
        first, second = make_schema(1), make_schema(2)
        any_store.put(KEY, first)
        any_store.archive(KEY, first)
        any_store.put(KEY, second)
        any_store.archive(KEY, second)

        assert [s.version for s in any_store.archives(KEY)] == [first.version, second.version]

    def test_keys_are_independent(self, any_store):
        any_store.put("GET /a", make_schema(1))
        any_store.put("GET /b", make_schema(2))
        any_store.archive("GET /a", any_store.get("GET /a"))

        assert any_store.all() == ["GET /b"]
        assert any_store.archives("GET /b") == []


# ============================================================================
# Locking
# ============================================================================

class TestKeyLocks:

    def test_lock_is_reentrant(self, store):
        with store.lock(KEY):
            with store.lock(KEY):
                store.add_sample(KEY, {"i": 1})
        assert store.get_samples(KEY) == [{"i": 1}]

    def test_released_locks_are_dropped(self, store):
        for i in range(100):
            with store.lock(f"GET /one-off/{i}"):
                pass
        assert len(store._locks) == 0

    def test_held_lock_is_shared(self, store):
        acquired = []

        def contend():
            acquired.append(store._locks[KEY].acquire(blocking=False))

        with store.lock(KEY):
            with ThreadPoolExecutor(max_workers=1) as pool:
                pool.submit(contend).result()
            assert len(store._locks) == 1

        assert acquired == [False]

    def test_locked_read_modify_write_loses_nothing(self, make_any_store):
        store = make_any_store(max_stored_samples=1000)
        counter = {"value": 0}

        def bump(_):
            with store.lock(KEY):
                current = counter["value"]
                store.add_sample(KEY, {"seen": current})
                counter["value"] = current + 1

        with ThreadPoolExecutor(max_workers=16) as pool:
            list(pool.map(bump, range(120)))

        assert counter["value"] == 120
        assert [s["seen"] for s in store.get_samples(KEY)] == list(range(120))


# ============================================================================
# File backend specifics
# ============================================================================

class TestFileSchemaStore:

    def test_key_encoding_round_trips(self):
        key = "GET /orders/{id}?x=ü"
        assert decode_key(encode_key(key)) == key
        assert "/" not in encode_key(key)

    def test_document_layout(self, tmp_path):
        store = FileSchemaStore(str(tmp_path))
        schema = make_schema()
        store.put(KEY, schema)
        store.add_sample(KEY, {"i": 1})

        with open(tmp_path / f"{encode_key(KEY)}.json", encoding="utf-8") as f:
            assert json.load(f) == schema.to_dict()
        assert (tmp_path / f"{encode_key(KEY)}.samples.json").exists()

        store.archive(KEY, schema)
        assert (tmp_path / "archive" / encode_key(KEY) / "1.json").exists()

    def test_corrupt_schema_file_reads_as_absent(self, tmp_path):
        store = FileSchemaStore(str(tmp_path))
        (tmp_path / f"{encode_key(KEY)}.json").write_text("{not json", encoding="utf-8")

        assert store.has(KEY) is True
        assert store.get(KEY) is None

    def test_survives_reopen(self, tmp_path):
        FileSchemaStore(str(tmp_path)).put(KEY, make_schema())
        assert FileSchemaStore(str(tmp_path)).all() == [KEY]

    def test_foreign_files_are_ignored(self, tmp_path):
        store = FileSchemaStore(str(tmp_path))
        (tmp_path / "notes.txt").write_text("hi", encoding="utf-8")
        os.makedirs(tmp_path / "archive", exist_ok=True)
        assert store.all() == []


# ============================================================================
# SQL backend specifics
# ============================================================================

class TestSqlSchemaStore:

    def test_in_memory_database(self):
        store = SqlSchemaStore("sqlite://")
        store.put(KEY, make_schema())
        assert store.all() == [KEY]

    def test_survives_reopen(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'db' / 'sentinel.db'}"
        SqlSchemaStore(url).put(KEY, make_schema())
        assert SqlSchemaStore(url).get(KEY).json_schema["x"] == 1


class TestInMemorySchemaStore:

    def test_samples_are_copied(self, store):
        payload = {"i": 1}
        store.add_sample(KEY, payload)
        payload["i"] = 2
        assert store.get_samples(KEY) == [{"i": 1}]

    def test_reset(self, store):
        schema = make_schema()
        store.put(KEY, schema)
        store.add_sample(KEY, {"i": 1})
        store.archive("GET /old", schema)

        store.reset()

        assert store.all() == []
        assert store.get_samples(KEY) == []
        assert store.archives("GET /old") == []
