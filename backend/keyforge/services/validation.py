"""Input checks shared by the lifecycle service and the key stores."""

from __future__ import annotations

from keyforge.keys.errors import InvalidArgument


def validate_name(name: object) -> str:
    """Return the name unchanged, or raise InvalidArgument if it is blank."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgument("name must be a non-empty string")
    return name


def validate_limit(limit: object) -> int | None:
    """
    None means unlimited. Anything else must be a positive int.

    bool is rejected explicitly (it is an int subclass).
    """
    if limit is None:
        return None
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidArgument("limit must be a positive integer")
    if limit <= 0:
        raise InvalidArgument("limit must be a positive integer")
    return limit
