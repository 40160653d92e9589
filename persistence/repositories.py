from __future__ import annotations

import asyncio
from typing import Any

from .query import ListQuery
from .store import Store
from .values import Document


class AsyncStore:
    """
    Async wrapper around the locked, synchronous Store.
    Uses asyncio.to_thread so lock waits never block the event loop.
    """

    def __init__(self, store: Store) -> None:
        self._store = store

    @property
    def store(self) -> Store:
        return self._store

    @property
    def id_key(self) -> str:
        return self._store.id_key

    async def collection_sizes(self) -> dict[str, int]:
        return await asyncio.to_thread(self._store.collection_sizes)

    async def query(self, collection: str, query: ListQuery) -> list[Document]:
        return await asyncio.to_thread(self._store.run, collection, query)

    async def get(self, collection: str, item_id: str) -> Document:
        return await asyncio.to_thread(self._store.get, collection, item_id)

    async def delete(self, collection: str, item_id: str) -> None:
        await asyncio.to_thread(self._store.delete, collection, item_id)

    async def put(self, collection: str, item_id: str, body: Any) -> Document:
        return await asyncio.to_thread(self._store.put, collection, item_id, body)

    async def patch(self, collection: str, item_id: str, body: Any) -> Document:
        return await asyncio.to_thread(self._store.patch, collection, item_id, body)

    async def post(self, collection: str, body: Any) -> Document:
        return await asyncio.to_thread(self._store.post, collection, body)
