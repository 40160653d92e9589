from __future__ import annotations

import asyncio

import pytest

from persistence import AsyncStore, CollectionNotFound, ItemNotFound, ListQuery


def test_async_store_crud_flow(store, recorder):
    async def _run():
        repo = AsyncStore(store)

        created = await repo.post("posts", {"title": "second"})
        assert isinstance(created["id"], str)

        got = await repo.get("posts", created["id"])
        assert got == created

        patched = await repo.patch("posts", created["id"], {"draft": True})
        assert patched["draft"] is True
        assert patched["title"] == "second"

        replaced = await repo.put("posts", created["id"], {"title": "third"})
        assert replaced == {"id": created["id"], "title": "third"}

        await repo.delete("posts", created["id"])
        with pytest.raises(ItemNotFound):
            await repo.get("posts", created["id"])

        # post, patch, put, delete
        assert len(recorder.snapshots) == 4

    asyncio.run(_run())


def test_async_store_query_and_sizes(store):
    async def _run():
        repo = AsyncStore(store)

        page = await repo.query("users", ListQuery(page=0, limit=2))
        assert [d["id"] for d in page] == ["a", "b"]

        sizes = await repo.collection_sizes()
        assert sizes == {"empty": 0, "posts": 1, "users": 4}

        with pytest.raises(CollectionNotFound):
            await repo.query("nope", ListQuery())

    asyncio.run(_run())


def test_async_store_concurrent_posts_get_distinct_ids(store):
    async def _run():
        repo = AsyncStore(store)
        created = await asyncio.gather(*(repo.post("empty", {"n": i}) for i in range(25)))
        ids = {doc["id"] for doc in created}
        assert len(ids) == 25
        assert len(await repo.query("empty", ListQuery())) == 25

    asyncio.run(_run())
