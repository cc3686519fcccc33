"""
Masking policy — the only place that decides what a response may contain.

  • mask(record)   → ApiKeyView with the secret body replaced by '*'.
                     Same prefix, same length as the real key.
  • reveal(record) → ApiKeyView with the verbatim secret. Used only by
                     create and the single-key reveal path.
"""

from keyforge.keys.generator import HEX_DIGITS, KEY_PREFIX
from keyforge.schemas.api_key import ApiKeyView
from keyforge.services.key_store import KeyRecord

MASK_CHAR = "*"


def issued_prefix(secret: str, prefix: str = KEY_PREFIX) -> str:
    """
    The family prefix a secret was issued with.

    Normally the configured prefix. Keys issued under an earlier
    KEY_PREFIX still carry theirs: everything before the trailing hex body.
    """
    if secret.startswith(prefix):
        return prefix
    body_start = len(secret)
    while body_start > 0 and secret[body_start - 1] in HEX_DIGITS:
        body_start -= 1
    return secret[:body_start]


def mask_secret(secret: str, prefix: str = KEY_PREFIX) -> str:
    """Replace everything after the issued prefix with MASK_CHAR, keeping the length."""
    issued = issued_prefix(secret, prefix)
    if len(issued) >= len(secret):
        # No body to hide behind: mask the whole string
        issued = ""
    return issued + MASK_CHAR * (len(secret) - len(issued))


def _view(record: KeyRecord, key: str) -> ApiKeyView:
    return ApiKeyView(
        id=record.id,
        name=record.name,
        key=key,
        created_at=record.created_at,
        usage=record.usage,
        limit=record.limit,
    )


def mask(record: KeyRecord, prefix: str = KEY_PREFIX) -> ApiKeyView:
    """Public projection of a record. Never contains the secret."""
    return _view(record, mask_secret(record.secret, prefix))


def reveal(record: KeyRecord) -> ApiKeyView:
    """Full projection of a record, secret included."""
    return _view(record, record.secret)
