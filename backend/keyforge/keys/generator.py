"""
API key secret generation.

Security notes:
  • Secrets come from the `secrets` module (OS CSPRNG). If the entropy
    source fails the exception propagates; there is no fallback.
  • The tvly- prefix marks the credential family (convention, not security).
  • The body is lowercase hex; 16 bytes gives 32 chars = 128 bits.
"""

import secrets

KEY_PREFIX = "tvly-"
KEY_BYTES = 16
MIN_KEY_BYTES = 16

HEX_DIGITS = frozenset("0123456789abcdef")


def generate_secret(prefix: str = KEY_PREFIX, nbytes: int = KEY_BYTES) -> str:
    """
    Generate a new API key secret.

    Returns:
        prefix + 2*nbytes hex characters.
    """
    if nbytes < MIN_KEY_BYTES:
        raise ValueError(f"nbytes must be at least {MIN_KEY_BYTES} (got {nbytes})")
    return f"{prefix}{secrets.token_hex(nbytes)}"


def is_well_formed(secret: str, prefix: str = KEY_PREFIX, nbytes: int = KEY_BYTES) -> bool:
    """True if secret has the family prefix and a hex body of the expected length."""
    if not secret.startswith(prefix):
        return False
    body = secret[len(prefix):]
    return len(body) == nbytes * 2 and set(body) <= HEX_DIGITS
