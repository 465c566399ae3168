from __future__ import annotations

import asyncio

import pytest

from persistence.errors import InvalidStateError
from persistence.registry import StoreRegistry, create_store
from persistence.repositories import AsyncDocumentStore, open_collections
from persistence.results import Deleted, Found, NotFound


def test_async_document_store_basic_flow(store):
    async def _run():
        repo = AsyncDocumentStore(store)

        fern = await repo.save({"name": "fern", "userId": 1})
        moss = await repo.save({"name": "moss", "userId": 2})
        assert [fern["id"], moss["id"]] == [1, 2]

        assert await repo.find(1) == Found(fern)
        assert await repo.find_one_by({"userId": 2}) == Found(moss)
        assert await repo.find_by({"$or": [{"userId": 1}, {"name": "moss"}]}) == [fern, moss]

        fern["name"] = "big fern"
        assert (await repo.save(fern))["name"] == "big fern"

        assert await repo.delete(2) == Deleted(2)
        assert await repo.find(2) == NotFound(2)
        assert await repo.find_all() == [{"id": 1, "name": "big fern", "userId": 1}]

    asyncio.run(_run())


def test_concurrent_async_saves_get_distinct_ids(store):
    async def _run():
        repo = AsyncDocumentStore(store)
        saved = await asyncio.gather(*(repo.save({"n": i}) for i in range(30)))
        return [s["id"] for s in saved]

    ids = asyncio.run(_run())

    assert sorted(ids) == list(range(1, 31))


def test_registry_shares_one_store_per_path(data_dir):
    registry = StoreRegistry()

    a = create_store(data_dir / "pots.json", registry=registry)
    b = create_store(data_dir / "." / "pots.json", registry=registry)
    other = create_store(data_dir / "plants.json", registry=registry)

    assert a is b
    assert a is not other

    a.save({"code": "P-1"})
    assert b.find_all() == [{"id": 1, "code": "P-1"}]
    assert other.find_all() == []


def test_registry_forget_reloads_from_disk(data_dir):
    registry = StoreRegistry()
    path = data_dir / "users.json"
    first = create_store(path, registry=registry)
    first.save({"email": "a@example.com"})

    registry.forget(path)
    second = create_store(path, registry=registry)

    assert second is not first
    assert second.find_all() == first.find_all()


def test_open_collections_creates_three_independent_files(data_dir):
    cols = open_collections(data_dir, registry=StoreRegistry())

    async def _run():
        await cols.users.save({"email": "a@example.com"})
        await cols.pots.save({"code": "P-1"})
        return await cols.plants.find_all()

    assert asyncio.run(_run()) == []
    assert sorted(p.name for p in data_dir.glob("*.json")) == ["plants.json", "pots.json", "users.json"]
    assert cols.users.store.find(1)
    assert cols.pots.store.find(1)


def test_open_collections_rejects_corrupt_file(data_dir):
    (data_dir / "pots.json").write_text("[{]", encoding="utf-8")

    with pytest.raises(InvalidStateError):
        open_collections(data_dir, registry=StoreRegistry())
