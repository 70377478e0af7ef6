"""The Alembic migration must produce the tables the SQL store maps."""
import os

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from schema_sentinel.core.schema import StoredSchema
from schema_sentinel.store.sql import SqlSchemaStore

ALEMBIC_DIR = os.path.join(os.path.dirname(__file__), "..", "..", "alembic")


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'migrated.db'}"


@pytest.fixture
def alembic_config(database_url):
    config = Config()
    config.set_main_option("script_location", os.path.abspath(ALEMBIC_DIR))
    config.set_main_option("sqlalchemy.url", database_url)
    return config


class TestMigrations:

    def test_upgrade_creates_tables(self, alembic_config, database_url):
        command.upgrade(alembic_config, "head")

        inspector = inspect(create_engine(database_url))
        assert {"sentinel_schemas", "sentinel_samples", "sentinel_schema_history"} <= set(inspector.get_table_names())
        indexes = {i["name"]: i for i in inspector.get_indexes("sentinel_schemas")}
        assert indexes["ix_sentinel_schemas_endpoint_key"]["unique"]

    def test_store_runs_on_migrated_database(self, alembic_config, database_url):
        command.upgrade(alembic_config, "head")

        store = SqlSchemaStore(database_url)
        schema = StoredSchema.create({"type": "object", "properties": {}}, 20)
        store.put("GET /x", schema)
        store.add_sample("GET /x", {"a": 1})
        store.archive("GET /x", schema)

        assert [s.version for s in store.archives("GET /x")] == [schema.version]

    def test_downgrade_drops_tables(self, alembic_config, database_url):
        command.upgrade(alembic_config, "head")
        command.downgrade(alembic_config, "base")

        tables = set(inspect(create_engine(database_url)).get_table_names())
        assert not tables & {"sentinel_schemas", "sentinel_samples", "sentinel_schema_history"}
