"""
SQLAlchemy-backed KeyStore.

Each operation runs in its own transaction:
  • insert — IntegrityError on the unique id becomes DuplicateId.
  • update / delete / increment_usage — SELECT … FOR UPDATE locks the
    row for the read-modify-write, serializing writers per id
    (SQLite ignores FOR UPDATE but serializes all writers anyway).
  • get / list — plain reads; they see committed state only.

list() orders by the autoincrement seq column, so insertion order holds
even when keys share a created_at timestamp.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from keyforge.keys.errors import DuplicateId, NotFound
from keyforge.models.api_key import APIKey
from keyforge.services.key_store import (
    UNSET,
    KeyRecord,
    KeyStore,
    check_usage_amount,
    check_update_args,
    Unset,
)

logger = logging.getLogger(__name__)


def _as_utc(value: datetime.datetime) -> datetime.datetime:
    """SQLite drops tzinfo on the way back; timestamps are always stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value


def _to_record(row: APIKey) -> KeyRecord:
    return KeyRecord(
        id=row.id,
        name=row.name,
        secret=row.secret,
        created_at=_as_utc(row.created_at),
        usage=row.usage,
        limit=row.limit,
    )


async def _fetch(session: AsyncSession, key_id: str, *, lock: bool = False) -> APIKey:
    """Load one row by public id, optionally row-locked. Raises NotFound."""
    stmt = select(APIKey).where(APIKey.id == key_id)
    if lock:
        stmt = stmt.with_for_update()
    row = (await session.execute(stmt)).scalar_one_or_none()
    if row is None:
        raise NotFound(key_id)
    return row


class SqlKeyStore(KeyStore):
    """KeyStore over any async SQLAlchemy engine (Postgres in production)."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def insert(self, record: KeyRecord) -> None:
        row = APIKey(
            id=record.id,
            name=record.name,
            secret=record.secret,
            created_at=record.created_at,
            usage=record.usage,
            limit=record.limit,
        )
        try:
            async with self._session_factory() as session, session.begin():
                stmt = select(APIKey.seq).where(APIKey.id == record.id)
                existing = await session.execute(stmt)
                if existing.first() is not None:
                    raise DuplicateId(record.id)
                session.add(row)
        except IntegrityError as exc:
            # Lost a race on the id (or, impossibly, on the secret)
            logger.warning("Insert of API key %s hit an integrity error", record.id)
            raise DuplicateId(record.id) from exc

    async def get(self, key_id: str) -> KeyRecord:
        async with self._session_factory() as session:
            row = await _fetch(session, key_id)
            return _to_record(row)

    async def list(self) -> Sequence[KeyRecord]:
        stmt = select(APIKey).order_by(APIKey.seq.asc())
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_to_record(row) for row in result.scalars().all()]

    async def update(
        self,
        key_id: str,
        *,
        name: str | Unset = UNSET,
        limit: int | None | Unset = UNSET,
    ) -> KeyRecord:
        check_update_args(name, limit)

        async with self._session_factory() as session, session.begin():
            row = await _fetch(session, key_id, lock=True)
            if name is not UNSET:
                row.name = name
            if limit is not UNSET:
                row.limit = limit
            await session.flush()
            return _to_record(row)

    async def delete(self, key_id: str) -> None:
        async with self._session_factory() as session, session.begin():
            row = await _fetch(session, key_id, lock=True)
            await session.delete(row)

    async def increment_usage(self, key_id: str, amount: int = 1) -> KeyRecord:
        check_usage_amount(amount)

        async with self._session_factory() as session, session.begin():
            row = await _fetch(session, key_id, lock=True)
            row.usage = row.usage + amount
            await session.flush()
            return _to_record(row)
