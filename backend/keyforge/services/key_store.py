"""
Key record store — the single owner of KeyRecord state.

Contract (KeyStore):
  • insert / get / list / update / delete, plus increment_usage for the
    external metering collaborator.
  • Mutations are atomic: readers see the record before or after a
    change, never in between.
  • list() returns records in insertion order.

InMemoryKeyStore keeps frozen records in an insertion-ordered dict.
Updates build a new record with dataclasses.replace() and swap it in
under the lock, so a reader holding the old record never sees it change.
"""

from __future__ import annotations

import abc
import dataclasses
import datetime
import enum
import logging
import threading
from collections.abc import Sequence

from keyforge.keys.errors import DuplicateId, InvalidArgument, NotFound
from keyforge.services.validation import validate_limit, validate_name

logger = logging.getLogger(__name__)


class Unset(enum.Enum):
    UNSET = "UNSET"


# Marks "field not supplied" for partial updates (None is a valid limit).
UNSET = Unset.UNSET


@dataclasses.dataclass(frozen=True, slots=True)
class KeyRecord:
    """One issued API key.

    Attributes:
        id:         Opaque unique identifier, immutable.
        name:       Human-readable label, never blank.
        secret:     Full credential string, fixed at creation.
        created_at: Creation timestamp (UTC), immutable.
        usage:      Request counter owned by the metering collaborator.
        limit:      Monthly quota; None means unlimited.
    """

    id: str
    name: str
    secret: str
    created_at: datetime.datetime
    usage: int = 0
    limit: int | None = None

    def __repr__(self) -> str:
        # Never render the secret
        return (
            f"<KeyRecord id={self.id!s:.8} name={self.name!r} "
            f"usage={self.usage} limit={self.limit}>"
        )


class KeyStore(abc.ABC):
    """Abstract store for KeyRecords. Implementations must be atomic."""

    @abc.abstractmethod
    async def insert(self, record: KeyRecord) -> None:
        """Add record. Raises DuplicateId if record.id is already present."""

    @abc.abstractmethod
    async def get(self, key_id: str) -> KeyRecord:
        """Raises NotFound if absent."""

    @abc.abstractmethod
    async def list(self) -> Sequence[KeyRecord]:
        """All live records in insertion order."""

    @abc.abstractmethod
    async def update(
        self,
        key_id: str,
        *,
        name: str | Unset = UNSET,
        limit: int | None | Unset = UNSET,
    ) -> KeyRecord:
        """Replace name and/or limit in place; returns the new record."""

    @abc.abstractmethod
    async def delete(self, key_id: str) -> None:
        """Remove permanently. Raises NotFound if absent."""

    @abc.abstractmethod
    async def increment_usage(self, key_id: str, amount: int = 1) -> KeyRecord:
        """Add amount to the usage counter (metering collaborator only)."""


def check_update_args(name: object, limit: object) -> None:
    if name is not UNSET:
        validate_name(name)
    if limit is not UNSET:
        validate_limit(limit)


def check_usage_amount(amount: object) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidArgument("usage increment must be a positive integer")


class InMemoryKeyStore(KeyStore):
    """Process-local store. One instance per process, injected at startup."""

    def __init__(self) -> None:
        self._records: dict[str, KeyRecord] = {}
        # Critical sections never await, so a thread lock covers tasks and threads
        self._lock = threading.Lock()

    async def insert(self, record: KeyRecord) -> None:
        with self._lock:
            if record.id in self._records:
                raise DuplicateId(record.id)
            self._records[record.id] = record

    async def get(self, key_id: str) -> KeyRecord:
        with self._lock:
            try:
                return self._records[key_id]
            except KeyError:
                raise NotFound(key_id) from None

    async def list(self) -> Sequence[KeyRecord]:
        with self._lock:
            return list(self._records.values())

    async def update(
        self,
        key_id: str,
        *,
        name: str | Unset = UNSET,
        limit: int | None | Unset = UNSET,
    ) -> KeyRecord:
        check_update_args(name, limit)

        changes: dict[str, object] = {}
        if name is not UNSET:
            changes["name"] = name
        if limit is not UNSET:
            changes["limit"] = limit

        with self._lock:
            current = self._records.get(key_id)
            if current is None:
                raise NotFound(key_id)
            updated = dataclasses.replace(current, **changes)
            # dict assignment keeps the original insertion position
            self._records[key_id] = updated
            return updated

    async def delete(self, key_id: str) -> None:
        with self._lock:
            if self._records.pop(key_id, None) is None:
                raise NotFound(key_id)

    async def increment_usage(self, key_id: str, amount: int = 1) -> KeyRecord:
        check_usage_amount(amount)
        with self._lock:
            current = self._records.get(key_id)
            if current is None:
                raise NotFound(key_id)
            updated = dataclasses.replace(current, usage=current.usage + amount)
            self._records[key_id] = updated
            return updated
