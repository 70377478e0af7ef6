"""
ORM Models
==========
Tables used by the SQL schema store.

Column notes:
  - JSON columns are stored as JSON on Postgres and as TEXT on SQLite.
  - Timestamps are written as UTC. SQLite drops the timezone, so readers
    re-attach UTC when it comes back naive.
  - Samples are ordered by their autoincrement id, which is stable even
    when several inserts share a timestamp.
"""

import datetime

from sqlalchemy import Column, DateTime, Integer, JSON, String, func
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class SchemaRecord(Base):
    __tablename__ = "sentinel_schemas"

    id             = Column(Integer, primary_key=True)
    endpoint_key   = Column(String, nullable=False, unique=True, index=True)
    schema_version = Column(String, nullable=False)
    json_schema    = Column(JSON, nullable=False)
    sample_count   = Column(Integer, nullable=False, default=0)
    hardened_at    = Column(DateTime(timezone=True), nullable=False)


class SampleRecord(Base):
    __tablename__ = "sentinel_samples"

    id           = Column(Integer, primary_key=True, autoincrement=True)
    endpoint_key = Column(String, nullable=False, index=True)
    payload      = Column(JSON, nullable=False)
    created_at   = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())


class SchemaHistoryRecord(Base):
    __tablename__ = "sentinel_schema_history"

    id             = Column(Integer, primary_key=True, autoincrement=True)
    endpoint_key   = Column(String, nullable=False, index=True)
    schema_version = Column(String, nullable=False)
    json_schema    = Column(JSON, nullable=False)
    sample_count   = Column(Integer, nullable=False, default=0)
    hardened_at    = Column(DateTime(timezone=True), nullable=False)
    archived_at    = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())
