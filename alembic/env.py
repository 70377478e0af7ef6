"""
Alembic Environment
====================
Migrations for the SQL schema store tables (sentinel_schemas,
sentinel_samples, sentinel_schema_history).

The database URL is taken from, in order:
  - the ``sqlalchemy.url`` main option (set programmatically, e.g. by tests)
  - SentinelConfig.from_env()  →  DATABASE_URL, or the local SQLite default

Run migrations:
  alembic upgrade head
"""

import os
import sys
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy import engine_from_config

from alembic import context

# ── Make src/ modules importable ─────────────────────────────────────────────
# Alembic runs from the project root; an uninstalled checkout still resolves
# "schema_sentinel" from src/.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from schema_sentinel.core.config import SentinelConfig, normalize_database_url  # noqa: E402
from schema_sentinel.core.models import Base  # noqa: E402

# ── Alembic config ────────────────────────────────────────────────────────────
config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _get_url() -> str:
    url = config.get_main_option("sqlalchemy.url")
    if url:
        return normalize_database_url(url)
    return SentinelConfig.from_env().database_url


# ── Offline mode (generate SQL without connecting) ────────────────────────────
def run_migrations_offline() -> None:
    context.configure(
        url=_get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


# ── Online mode (connect and run) ─────────────────────────────────────────────
def run_migrations_online() -> None:
    cfg_section = config.get_section(config.config_ini_section, {})
    cfg_section["sqlalchemy.url"] = _get_url()

    connectable = engine_from_config(
        cfg_section,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()

    connectable.dispose()


# ── Entry point ───────────────────────────────────────────────────────────────
if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
