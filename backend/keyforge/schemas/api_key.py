"""
Pydantic v2 schemas for API key management.

Separation:
  • ApiKeyCreate / ApiKeyUpdate — what the CLIENT sends.
  • ApiKeyView                 — what the SERVER returns, in either the
                                  masked or the full projection (see
                                  keyforge.services.masking).
  • QuotaStatusOut             — usage vs. limit for one key.

Field names on the wire follow the dashboard contract (createdAt).
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


# ── Request schemas ─────────────────────────────────────────
class ApiKeyCreate(BaseModel):
    """
    Payload accepted by POST /api/keys.

    extra="forbid" rejects unknown fields (e.g. a client-chosen key)
    instead of silently ignoring them. Strict types keep JSON true,
    "10" and 5.0 out of limit, matching the service-side checks.
    """

    model_config = ConfigDict(extra="forbid")

    name: StrictStr = Field(
        ...,
        min_length=1,
        examples=["default"],
        description="Human-readable label for the key.",
    )
    limit: StrictInt | None = Field(
        default=None,
        gt=0,
        examples=[1000],
        description="Optional monthly request quota. Omit for unlimited.",
    )


class ApiKeyUpdate(ApiKeyCreate):
    """
    Payload accepted by PUT /api/keys/{id}.

    Full replacement of the mutable fields: omitting limit clears it.
    """


# ── Response schemas ────────────────────────────────────────
class ApiKeyView(BaseModel):
    """One API key as returned to clients. `key` is masked unless revealed."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str
    key: str
    created_at: datetime.datetime = Field(alias="createdAt")
    usage: int
    limit: int | None = None


class QuotaStatusOut(BaseModel):
    """Usage vs. monthly limit for one key. remaining is None when unlimited."""

    model_config = ConfigDict(from_attributes=True)

    key_id: str
    usage: int
    limit: int | None
    remaining: int | None
    exceeded: bool


class ErrorOut(BaseModel):
    """Error body for every failed request."""

    error: str
    message: str
