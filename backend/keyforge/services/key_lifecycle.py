"""
API key lifecycle service — the operation surface the HTTP router binds to.

Flow for every operation:
  1. Validate input. Nothing touches the store on bad input.
  2. Read/write the injected KeyStore.
  3. Project the result through the masking policy.

Secret exposure:
  • create_key  → full view (the caller has no other way to learn it)
  • reveal_key  → full view (the only path after creation)
  • list_keys / update_key → always masked

Secrets are NEVER logged.
"""

from __future__ import annotations

import datetime
import logging
import uuid
from collections.abc import Callable

from keyforge.keys.errors import DuplicateId
from keyforge.keys.generator import KEY_BYTES, KEY_PREFIX, generate_secret
from keyforge.schemas.api_key import ApiKeyView
from keyforge.services.key_store import KeyRecord, KeyStore
from keyforge.services.masking import mask, reveal
from keyforge.services.quota import QuotaStatus
from keyforge.services.validation import validate_limit, validate_name

logger = logging.getLogger(__name__)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class KeyLifecycleService:
    """
    Create / list / reveal / update / delete API keys.

    Args:
        store:     The KeyStore owning all records (constructed once at startup).
        prefix:    Credential family prefix for new secrets.
        nbytes:    Random bytes per secret body.
        clock:     Returns the creation timestamp; injectable for tests.
        id_factory: Returns a fresh record id; injectable for tests.
    """

    def __init__(
        self,
        store: KeyStore,
        *,
        prefix: str = KEY_PREFIX,
        nbytes: int = KEY_BYTES,
        clock: Callable[[], datetime.datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._store = store
        self._prefix = prefix
        self._nbytes = nbytes
        self._clock = clock
        self._id_factory = id_factory

    @property
    def store(self) -> KeyStore:
        return self._store

    async def create_key(self, name: str, limit: int | None = None) -> ApiKeyView:
        """Issue a new key and return it unmasked."""
        validate_name(name)
        validate_limit(limit)

        record = KeyRecord(
            id=self._id_factory(),
            name=name,
            secret=generate_secret(self._prefix, self._nbytes),
            created_at=self._clock(),
            usage=0,
            limit=limit,
        )
        try:
            await self._store.insert(record)
        except DuplicateId:
            logger.critical("Generated API key id %s collided with a live key", record.id)
            raise

        logger.info("Created API key %s (%r)", record.id, record.name)
        return reveal(record)

    async def list_keys(self) -> list[ApiKeyView]:
        """Every live key, masked, in creation order."""
        records = await self._store.list()
        return [mask(record, self._prefix) for record in records]

    async def reveal_key(self, key_id: str) -> ApiKeyView:
        """Return one key with its original secret. Raises NotFound."""
        record = await self._store.get(key_id)
        logger.info("Revealed API key %s", key_id)
        return reveal(record)

    async def update_key(
        self,
        key_id: str,
        name: str,
        limit: int | None = None,
    ) -> ApiKeyView:
        """
        Replace name and limit (None clears the limit). Returns masked.

        Raises InvalidArgument before touching the store, NotFound if absent.
        """
        validate_name(name)
        validate_limit(limit)

        record = await self._store.update(key_id, name=name, limit=limit)
        logger.info("Updated API key %s (%r, limit=%s)", key_id, name, limit)
        return mask(record, self._prefix)

    async def delete_key(self, key_id: str) -> None:
        """Remove permanently. A second delete of the same id raises NotFound."""
        await self._store.delete(key_id)
        logger.info("Deleted API key %s", key_id)

    async def quota_status(self, key_id: str) -> QuotaStatus:
        """Usage vs. limit for admission control. No enforcement happens here."""
        record = await self._store.get(key_id)
        return QuotaStatus.for_record(record)
