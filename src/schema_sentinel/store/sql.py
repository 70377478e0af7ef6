"""
SQL Schema Store
=================
SQLAlchemy-backed store over three tables:

  sentinel_schemas         one active schema per endpoint key
  sentinel_samples         pending samples, ordered by insertion id
  sentinel_schema_history  archived schemas

``put``, ``add_sample`` and ``archive`` each run in a single transaction.
Database errors are not caught here; they propagate to the caller.
"""

import datetime
from typing import Any, List, Optional, Union

from sqlalchemy import delete, select
from sqlalchemy.engine import Engine

from schema_sentinel.core.database import create_db_engine, create_session_factory, init_db
from schema_sentinel.core.models import SampleRecord, SchemaHistoryRecord, SchemaRecord
from schema_sentinel.core.schema import StoredSchema
from schema_sentinel.store.base import DEFAULT_MAX_STORED_SAMPLES, SchemaStore


def _as_utc(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value


def _to_stored_schema(record) -> StoredSchema:
    return StoredSchema(
        version=record.schema_version,
        json_schema=record.json_schema,
        sample_count=record.sample_count,
        hardened_at=_as_utc(record.hardened_at),
    )


class SqlSchemaStore(SchemaStore):

    def __init__(self, database: Union[str, Engine], max_stored_samples: int = DEFAULT_MAX_STORED_SAMPLES):
        super().__init__(max_stored_samples)
        self.engine = create_db_engine(database) if isinstance(database, str) else database
        self._sessions = create_session_factory(self.engine)
        init_db(self.engine)

    # ── Hardened schemas ─────────────────────────────────────────────────────

    def has(self, key: str) -> bool:
        with self._sessions() as session:
            found = session.execute(
                select(SchemaRecord.id).where(SchemaRecord.endpoint_key == key)
            ).first()
            return found is not None

    def get(self, key: str) -> Optional[StoredSchema]:
        with self._sessions() as session:
            record = session.execute(
                select(SchemaRecord).where(SchemaRecord.endpoint_key == key)
            ).scalar_one_or_none()
            return _to_stored_schema(record) if record is not None else None

    def put(self, key: str, schema: StoredSchema) -> None:
        with self._sessions.begin() as session:
            session.execute(delete(SchemaRecord).where(SchemaRecord.endpoint_key == key))
            session.add(SchemaRecord(
                endpoint_key=key,
                schema_version=schema.version,
                json_schema=schema.json_schema,
                sample_count=schema.sample_count,
                hardened_at=schema.hardened_at,
            ))

    def all(self) -> List[str]:
        with self._sessions() as session:
            return list(session.execute(
                select(SchemaRecord.endpoint_key).order_by(SchemaRecord.id)
            ).scalars())

    # ── Samples ──────────────────────────────────────────────────────────────

    def add_sample(self, key: str, payload: Any) -> None:
        with self._sessions.begin() as session:
            session.add(SampleRecord(endpoint_key=key, payload=payload))
            session.flush()

            stale_ids = list(session.execute(
                select(SampleRecord.id)
                .where(SampleRecord.endpoint_key == key)
                .order_by(SampleRecord.id.desc())
                .offset(self.max_stored_samples)
            ).scalars())
            if stale_ids:
                session.execute(delete(SampleRecord).where(SampleRecord.id.in_(stale_ids)))

    def get_samples(self, key: str) -> List[Any]:
        with self._sessions() as session:
            return list(session.execute(
                select(SampleRecord.payload)
                .where(SampleRecord.endpoint_key == key)
                .order_by(SampleRecord.id)
            ).scalars())

    def clear_samples(self, key: str) -> None:
        with self._sessions.begin() as session:
            session.execute(delete(SampleRecord).where(SampleRecord.endpoint_key == key))

    # ── History ──────────────────────────────────────────────────────────────

    def archive(self, key: str, schema: StoredSchema) -> None:
        with self._sessions.begin() as session:
            session.add(SchemaHistoryRecord(
                endpoint_key=key,
                schema_version=schema.version,
                json_schema=schema.json_schema,
                sample_count=schema.sample_count,
                hardened_at=schema.hardened_at,
            ))
            session.execute(delete(SchemaRecord).where(SchemaRecord.endpoint_key == key))
            session.execute(delete(SampleRecord).where(SampleRecord.endpoint_key == key))

    def archives(self, key: str) -> List[StoredSchema]:
        with self._sessions() as session:
            records = session.execute(
                select(SchemaHistoryRecord)
                .where(SchemaHistoryRecord.endpoint_key == key)
                .order_by(SchemaHistoryRecord.id)
            ).scalars().all()
            return [_to_stored_schema(r) for r in records]
