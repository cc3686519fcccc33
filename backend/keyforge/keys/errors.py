"""
Key service errors.

Every failure carries a stable `kind` (what clients branch on) and a
human-readable message. `status_code` is the HTTP binding used by the
exception handlers in keyforge.main.
"""

from fastapi import status


class KeyServiceError(Exception):
    """Base class for all API key lifecycle failures."""

    kind = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgument(KeyServiceError):
    """Malformed or rejected input (empty name, non-positive limit)."""

    kind = "invalid_argument"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(KeyServiceError):
    """The operation addressed an id that is not in the store."""

    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, key_id: str) -> None:
        super().__init__("API key not found")
        self.key_id = key_id


class DuplicateId(KeyServiceError):
    """Insert collided with a live id.

    Should be unreachable with generated ids. If it happens the
    uniqueness guarantee is broken, so it is reported as internal.
    """

    kind = "duplicate_id"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, key_id: str) -> None:
        super().__init__(f"API key id {key_id} already exists")
        self.key_id = key_id
