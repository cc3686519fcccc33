"""
Dev bootstrap script — issue an API key in the configured database.

Usage:
    KEY_STORE=database DATABASE_URL=... python -m scripts.bootstrap_dev [name]

This will:
  1. Connect to DATABASE_URL (tables must exist — run `alembic upgrade head`)
  2. Create a key named "default" (or the name given on the command line)
  3. Print the full key

The key can be revealed again later through GET /api/keys/{id}.
"""

import asyncio
import sys

# Ensure the project root is on the path
sys.path.insert(0, ".")

from keyforge.core.config import settings
from keyforge.core.database import build_engine, build_session_factory
from keyforge.services.key_lifecycle import KeyLifecycleService
from keyforge.services.sql_key_store import SqlKeyStore


async def main(name: str) -> None:
    if not settings.DATABASE_URL:
        raise SystemExit("DATABASE_URL is not set")

    engine = build_engine(settings.DATABASE_URL)
    try:
        service = KeyLifecycleService(
            SqlKeyStore(build_session_factory(engine)),
            prefix=settings.KEY_PREFIX,
            nbytes=settings.KEY_BYTES,
        )
        created = await service.create_key(name)
    finally:
        await engine.dispose()

    # ── Print results ───────────────────────────────────────
    print()
    print("=" * 60)
    print("  Dev Bootstrap Complete")
    print("=" * 60)
    print()
    print(f"  Key name:   {created.name}")
    print(f"  Key ID:     {created.id}")
    print()
    print(f"  API Key:    {created.key}")
    print()
    print("  ⚠  Treat this key like a password.")
    print("=" * 60)
    print()


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "default"))
