"""
Lifecycle service tests: validation, secrecy of every projection, and
the create → list → reveal → update → delete walk-through.
"""

import asyncio
import concurrent.futures

import pytest

from keyforge.keys.errors import DuplicateId, InvalidArgument, NotFound
from keyforge.keys.generator import is_well_formed
from keyforge.services.key_lifecycle import KeyLifecycleService
from keyforge.services.key_store import InMemoryKeyStore

from conftest import EPOCH, TickingClock


@pytest.mark.asyncio
async def test_full_walkthrough(service):
    created = await service.create_key("default")
    assert created.key.startswith("tvly-")
    assert len(created.key) - len("tvly-") >= 32
    assert created.usage == 0
    assert created.limit is None
    secret = created.key

    listed = await service.list_keys()
    assert len(listed) == 1
    assert listed[0].id == created.id
    assert listed[0].key == "tvly-" + "*" * 32

    revealed = await service.reveal_key(created.id)
    assert revealed.key == secret

    updated = await service.update_key(created.id, "prod", 500)
    assert updated.name == "prod"
    assert updated.limit == 500
    assert updated.key == "tvly-" + "*" * 32

    await service.delete_key(created.id)
    with pytest.raises(NotFound):
        await service.reveal_key(created.id)


@pytest.mark.asyncio
async def test_created_secret_is_well_formed(service):
    created = await service.create_key("ci", limit=1000)
    assert is_well_formed(created.key)
    assert created.limit == 1000
    assert created.created_at == EPOCH


@pytest.mark.asyncio
async def test_ids_are_pairwise_distinct(service):
    ids = [(await service.create_key(f"key-{i}")).id for i in range(25)]
    assert len(set(ids)) == 25


@pytest.mark.asyncio
async def test_list_and_update_never_leak_secrets(service):
    created = [await service.create_key(f"key-{i}") for i in range(5)]
    secrets_ = {view.key for view in created}

    for view in await service.list_keys():
        assert view.key not in secrets_

    updated = await service.update_key(created[2].id, "renamed")
    assert updated.key not in secrets_


@pytest.mark.asyncio
async def test_reveal_is_stable_for_record_lifetime(service):
    created = await service.create_key("default")
    await service.update_key(created.id, "renamed", 10)
    await service.update_key(created.id, "again")
    await service.store.increment_usage(created.id, 3)

    for _ in range(3):
        assert (await service.reveal_key(created.id)).key == created.key


@pytest.mark.asyncio
async def test_update_isolates_fields(service):
    created = await service.create_key("default")
    await service.store.increment_usage(created.id, 7)
    before = await service.reveal_key(created.id)

    await service.update_key(created.id, "prod", 500)
    after = await service.reveal_key(created.id)

    assert (after.id, after.key, after.created_at, after.usage) == (
        before.id,
        before.key,
        before.created_at,
        before.usage,
    )
    assert (after.name, after.limit) == ("prod", 500)


@pytest.mark.asyncio
async def test_update_without_limit_clears_it(service):
    created = await service.create_key("default", limit=100)
    updated = await service.update_key(created.id, "default")
    assert updated.limit is None


@pytest.mark.asyncio
async def test_list_is_in_creation_order(service):
    names = ["a", "b", "c", "d"]
    for name in names:
        await service.create_key(name)
    assert [view.name for view in await service.list_keys()] == names


@pytest.mark.asyncio
async def test_list_order_with_frozen_clock(store):
    service = KeyLifecycleService(store, clock=lambda: EPOCH)
    created = [await service.create_key(f"k{i}") for i in range(8)]
    listed = await service.list_keys()
    assert [view.id for view in listed] == [view.id for view in created]
    assert [view.name for view in listed] == [f"k{i}" for i in range(8)]


@pytest.mark.asyncio
async def test_list_empty(service):
    assert await service.list_keys() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_name", ["", " ", "\t\n"])
async def test_create_rejects_blank_name(service, bad_name):
    with pytest.raises(InvalidArgument):
        await service.create_key(bad_name)
    assert await service.list_keys() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_limit", [0, -1, 2.5, "10", False])
async def test_create_rejects_bad_limit(service, bad_limit):
    with pytest.raises(InvalidArgument):
        await service.create_key("default", limit=bad_limit)
    assert await service.list_keys() == []


@pytest.mark.asyncio
async def test_update_validates_before_lookup(service):
    # Bad input wins over a missing id: nothing reaches the store
    with pytest.raises(InvalidArgument):
        await service.update_key("missing", "", None)
    with pytest.raises(InvalidArgument):
        await service.update_key("missing", "ok", 0)


@pytest.mark.asyncio
async def test_unknown_ids_raise_not_found(service):
    with pytest.raises(NotFound):
        await service.reveal_key("missing")
    with pytest.raises(NotFound):
        await service.update_key("missing", "name")
    with pytest.raises(NotFound):
        await service.delete_key("missing")


@pytest.mark.asyncio
async def test_delete_twice(service):
    created = await service.create_key("default")
    await service.delete_key(created.id)
    with pytest.raises(NotFound):
        await service.delete_key(created.id)


@pytest.mark.asyncio
async def test_duplicate_id_propagates(store, caplog):
    service = KeyLifecycleService(store, id_factory=lambda: "fixed-id")
    await service.create_key("first")
    with pytest.raises(DuplicateId):
        await service.create_key("second")
    assert "collided" in caplog.text
    assert [view.name for view in await service.list_keys()] == ["first"]


@pytest.mark.asyncio
async def test_secrets_are_not_logged(service, caplog):
    caplog.set_level("DEBUG", logger="keyforge")
    created = await service.create_key("default")
    await service.reveal_key(created.id)
    await service.update_key(created.id, "prod", 5)
    await service.delete_key(created.id)
    assert created.key not in caplog.text


@pytest.mark.asyncio
async def test_custom_prefix_and_length():
    service = KeyLifecycleService(InMemoryKeyStore(), prefix="sk_", nbytes=32)
    created = await service.create_key("default")
    assert is_well_formed(created.key, prefix="sk_", nbytes=32)
    [listed] = await service.list_keys()
    assert listed.key == "sk_" + "*" * 64


# ── Concurrency (in-memory store) ───────────────────────────
@pytest.mark.asyncio
async def test_concurrent_creates_are_all_kept():
    service = KeyLifecycleService(InMemoryKeyStore(), clock=TickingClock())
    created = await asyncio.gather(*(service.create_key(f"k{i}") for i in range(100)))
    assert len({view.id for view in created}) == 100
    assert len(await service.list_keys()) == 100


def test_threaded_updates_and_deletes_stay_consistent():
    store = InMemoryKeyStore()
    service = KeyLifecycleService(store)
    created = asyncio.run(service.create_key("default"))

    def update(i: int) -> None:
        try:
            asyncio.run(service.update_key(created.id, f"name-{i}", i + 1))
        except NotFound:
            pass

    def usage() -> None:
        try:
            asyncio.run(store.increment_usage(created.id))
        except NotFound:
            pass

    with concurrent.futures.ThreadPoolExecutor(max_workers=8) as pool:
        futures = [pool.submit(update, i) for i in range(50)]
        futures += [pool.submit(usage) for _ in range(50)]
        concurrent.futures.wait(futures)

    record = asyncio.run(store.get(created.id))
    assert record.usage == 50
    assert record.secret == created.key
    assert record.limit == int(record.name.split("-")[1]) + 1

    asyncio.run(service.delete_key(created.id))
    with pytest.raises(NotFound):
        asyncio.run(service.reveal_key(created.id))


@pytest.mark.asyncio
async def test_prefix_change_keeps_old_keys_masked_with_their_prefix(store):
    old_service = KeyLifecycleService(store, clock=TickingClock())
    old = await old_service.create_key("legacy")

    new_service = KeyLifecycleService(store, prefix="sk_", clock=TickingClock())
    [listed] = await new_service.list_keys()
    assert listed.key == "tvly-" + "*" * 32
    assert len(listed.key) == len(old.key)

    updated = await new_service.update_key(old.id, "legacy-renamed")
    assert updated.key == listed.key
    assert (await new_service.reveal_key(old.id)).key == old.key
