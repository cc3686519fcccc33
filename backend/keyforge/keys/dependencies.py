"""
FastAPI dependency for the key lifecycle service.

The service (and the store it owns) is built once in the app lifespan
and parked on app.state; routes receive it through Depends so nothing
reaches for module-level state.

Usage in routers:
    KeyService = Annotated[KeyLifecycleService, Depends(get_key_service)]
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from keyforge.services.key_lifecycle import KeyLifecycleService


def get_key_service(request: Request) -> KeyLifecycleService:
    """Return the process-wide KeyLifecycleService."""
    return request.app.state.key_service


KeyService = Annotated[KeyLifecycleService, Depends(get_key_service)]
