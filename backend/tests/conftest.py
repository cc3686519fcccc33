"""
Shared fixtures.

  • store   — parametrized over InMemoryKeyStore and SqlKeyStore (aiosqlite
              file database, schema created from Base.metadata)
  • service — KeyLifecycleService over `store`
  • client  — TestClient over an app built with the in-memory store
"""

import datetime
import itertools

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from keyforge.core.config import Settings
from keyforge.core.database import Base, build_engine, build_session_factory
from keyforge.main import create_app
from keyforge.services.key_lifecycle import KeyLifecycleService
from keyforge.services.key_store import InMemoryKeyStore, KeyRecord
from keyforge.services.sql_key_store import SqlKeyStore

import keyforge.models.api_key  # noqa: F401

EPOCH = datetime.datetime(2026, 1, 1, tzinfo=datetime.timezone.utc)


class TickingClock:
    """Deterministic clock: each call is one second after the previous one."""

    def __init__(self, start: datetime.datetime = EPOCH) -> None:
        self._ticks = itertools.count()
        self._start = start

    def __call__(self) -> datetime.datetime:
        return self._start + datetime.timedelta(seconds=next(self._ticks))


def make_record(key_id: str = "key-1", **overrides) -> KeyRecord:
    fields = {
        "id": key_id,
        "name": "default",
        "secret": "tvly-" + "ab" * 16,
        "created_at": EPOCH,
        "usage": 0,
        "limit": None,
    }
    fields.update(overrides)
    return KeyRecord(**fields)


@pytest_asyncio.fixture(params=["memory", "sql"])
async def store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryKeyStore()
        return

    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'keys.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield SqlKeyStore(build_session_factory(engine))
    finally:
        await engine.dispose()


@pytest.fixture
def service(store):
    return KeyLifecycleService(store, clock=TickingClock())


@pytest.fixture
def app_settings():
    return Settings(KEY_STORE="memory", SEED_DEFAULT_KEY=False, _env_file=None)


@pytest.fixture
def client(app_settings):
    with TestClient(create_app(app_settings)) as test_client:
        yield test_client
