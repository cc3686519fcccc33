"""
API key model — durable backing for KeyRecord.

One row per key id. `seq` is an autoincrement surrogate that records
insertion order; list() sorts on it. Unlike a hashed-credential
table, `secret` is stored verbatim because the reveal operation must
return the exact value issued at creation.
"""

import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column

from keyforge.core.database import Base


class APIKey(Base):
    """Issued API key with its usage counter and optional monthly limit."""

    __tablename__ = "api_keys"
    __table_args__ = (
        UniqueConstraint("id", name="uq_api_keys_id"),
        UniqueConstraint("secret", name="uq_api_keys_secret"),
        CheckConstraint("usage >= 0", name="ck_api_keys_usage_non_negative"),
        CheckConstraint(
            "monthly_limit IS NULL OR monthly_limit > 0",
            name="ck_api_keys_limit_positive",
        ),
    )

    # INTEGER PRIMARY KEY so SQLite aliases it to rowid and autoincrements
    seq: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    secret: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    usage: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
    )
    # "limit" is a reserved word in SQL
    limit: Mapped[int | None] = mapped_column(
        "monthly_limit",
        Integer,
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<APIKey id={self.id!s:.8} name={self.name!r} "
            f"usage={self.usage} limit={self.limit}>"
        )
