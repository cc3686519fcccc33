"""
Monthly quota status — an extension point, not an enforcer.

This service records `limit` but never rejects traffic. An external
admission-control collaborator asks for a QuotaStatus through the
QuotaProvider protocol and decides what to do with it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from keyforge.services.key_store import KeyRecord


@dataclass(frozen=True, slots=True)
class QuotaStatus:
    """Snapshot of one key's usage against its monthly limit.

    Attributes:
        key_id:    The key this snapshot belongs to.
        usage:     Current counter value.
        limit:     Monthly quota, or None for unlimited.
        remaining: limit - usage floored at 0, or None for unlimited.
        exceeded:  True once usage has reached the limit.
    """

    key_id: str
    usage: int
    limit: int | None
    remaining: int | None
    exceeded: bool

    @classmethod
    def for_record(cls, record: KeyRecord) -> QuotaStatus:
        if record.limit is None:
            return cls(
                key_id=record.id,
                usage=record.usage,
                limit=None,
                remaining=None,
                exceeded=False,
            )
        return cls(
            key_id=record.id,
            usage=record.usage,
            limit=record.limit,
            remaining=max(record.limit - record.usage, 0),
            exceeded=record.usage >= record.limit,
        )


@runtime_checkable
class QuotaProvider(Protocol):
    """Capability queried by admission control. Raises NotFound for unknown ids."""

    async def quota_status(self, key_id: str) -> QuotaStatus: ...
