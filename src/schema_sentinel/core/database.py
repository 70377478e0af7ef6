"""
Database Setup
==============
Engine and session factory for the SQL schema store. Supports:

  • PostgreSQL (production / team): pass a ``postgresql://`` URL. The legacy
    ``postgres://`` scheme some hosts still emit is rewritten automatically.

  • SQLite (local development, tests): a file URL, or ``sqlite://`` for an
    in-memory database shared by every thread of the process.
"""

import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from schema_sentinel.core.config import normalize_database_url
from schema_sentinel.core.models import Base

logger = logging.getLogger("schema_sentinel")


def create_db_engine(url: str) -> Engine:
    url = normalize_database_url(url)
    parsed = make_url(url)

    engine_kwargs: dict = {"echo": False}

    if parsed.get_backend_name() == "sqlite":
        # Connections are handed between threads by the store's callers
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if parsed.database in (None, "", ":memory:"):
            # One shared connection, otherwise every session sees an empty database
            engine_kwargs["poolclass"] = StaticPool
        logger.info(f"🗄️  Database backend: SQLite → {parsed.database or ':memory:'}")
    else:
        engine_kwargs.update({
            "pool_size": 5,
            "max_overflow": 10,
            "pool_pre_ping": True,   # detect stale connections before handing them out
        })
        logger.info(f"🐘 Database backend: {parsed.get_backend_name()}")

    return create_engine(url, **engine_kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """
    Create all tables (safe no-op if they already exist). For SQLite files
    the parent directory is created first.
    """
    if engine.url.get_backend_name() == "sqlite" and engine.url.database not in (None, "", ":memory:"):
        data_dir = os.path.dirname(os.path.abspath(engine.url.database))
        os.makedirs(data_dir, exist_ok=True)

    Base.metadata.create_all(engine)
    logger.info("✅ Database tables verified / created.")
