from __future__ import annotations

import copy
import logging
import threading
import uuid
from typing import Any, Mapping

from pydantic import ValidationError

from .collection import Collection
from .errors import CollectionNotFound, DuplicateId, InvalidBody, InvalidQuery, ItemNotFound, StructuralLoadError
from .flusher import NullFlusher
from .interfaces import DocumentSource, Flusher, Snapshot
from .query import ListQuery, run_query
from .values import Document, validate_body

logger = logging.getLogger(__name__)

DEFAULT_ID_KEY = "id"


class Store:
    """
    All collections of the backing file plus the shared identifier key.

    Every operation runs under one exclusive lock covering lookup, compare
    and mutate. Stored documents are never mutated in place: each write
    swaps in a new document object, so a snapshot taken under the lock can
    be serialized later without holding it. Snapshots are handed to the
    flusher before the lock is released, so they queue in mutation order.
    Callers always receive copies.
    """

    def __init__(
        self,
        collections: Mapping[str, Collection] | None = None,
        *,
        id_key: str = DEFAULT_ID_KEY,
        flusher: Flusher | None = None,
    ):
        self._id_key = id_key
        self._collections: dict[str, Collection] = dict(collections or {})
        self._flusher: Flusher = flusher if flusher is not None else NullFlusher()
        self._lock = threading.Lock()

    @classmethod
    def from_tree(cls, tree: Any, *, id_key: str = DEFAULT_ID_KEY, flusher: Flusher | None = None) -> "Store":
        """
        Build from a parsed backing file: { "<collection>": [ {<id_key>: "...", ...}, ... ] }.
        """
        if not isinstance(tree, dict):
            raise StructuralLoadError("Error: invalid file content")
        collections: dict[str, Collection] = {}
        for name, items in tree.items():
            if not isinstance(items, list):
                raise StructuralLoadError("Error: invalid file content")
            collections[name] = Collection.from_documents(id_key, copy.deepcopy(items))
        logger.info(
            "STORE LOAD: %d collection(s), %d document(s), id key %r",
            len(collections),
            sum(len(c) for c in collections.values()),
            id_key,
        )
        return cls(collections, id_key=id_key, flusher=flusher)

    @classmethod
    def from_source(
        cls, source: DocumentSource, *, id_key: str = DEFAULT_ID_KEY, flusher: Flusher | None = None
    ) -> "Store":
        return cls.from_tree(source.load(), id_key=id_key, flusher=flusher)

    @property
    def id_key(self) -> str:
        return self._id_key

    @property
    def flusher(self) -> Flusher:
        return self._flusher

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def collection_names(self) -> list[str]:
        with self._lock:
            return sorted(self._collections)

    def collection_sizes(self) -> dict[str, int]:
        with self._lock:
            return {name: len(self._collections[name]) for name in sorted(self._collections)}

    def query(
        self,
        collection: str,
        page: int | None = None,
        limit: int | None = None,
        filters: Mapping[str, Any] | None = None,
    ) -> list[Document]:
        try:
            q = ListQuery(
                page=page,
                limit=limit,
                filters={
                    path: {values} if isinstance(values, str) else set(values)
                    for path, values in (filters or {}).items()
                },
            )
        except ValidationError as e:
            raise InvalidQuery(f"invalid query: {e.error_count()} error(s)") from e
        return self.run(collection, q)

    def run(self, collection: str, query: ListQuery) -> list[Document]:
        with self._lock:
            col = self._collection(collection)
            return copy.deepcopy(run_query(col, query))

    def get(self, collection: str, item_id: str) -> Document:
        with self._lock:
            col = self._collection(collection)
            return copy.deepcopy(self._item(col, collection, item_id))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def delete(self, collection: str, item_id: str) -> None:
        with self._lock:
            col = self._collection(collection)
            if col.remove(item_id) is None:
                raise ItemNotFound(collection, item_id)
            self._flusher.submit(self._snapshot())
        logger.debug("STORE DELETE: %s/%s", collection, item_id)

    def put(self, collection: str, item_id: str, body: Any) -> Document:
        """Replace every field; the identifier stays pinned to `item_id`."""
        with self._lock:
            col = self._collection(collection)
            self._item(col, collection, item_id)
            fields = validate_body(body)
            fields.pop(self._id_key, None)
            doc: Document = {self._id_key: item_id, **fields}
            col.insert(item_id, doc)
            result = copy.deepcopy(doc)
            self._flusher.submit(self._snapshot())
        logger.debug("STORE PUT: %s/%s", collection, item_id)
        return result

    def patch(self, collection: str, item_id: str, body: Any) -> Document:
        """
        Shallow merge: named fields overwrite or get added, others are kept.
        Changing the identifier through a patch is rejected.
        """
        with self._lock:
            col = self._collection(collection)
            current = self._item(col, collection, item_id)
            fields = validate_body(body)
            if self._id_key in fields and fields[self._id_key] != item_id:
                raise InvalidBody(f"field '{self._id_key}' cannot be changed by a patch")
            doc: Document = {**current, **fields}
            col.insert(item_id, doc)
            result = copy.deepcopy(doc)
            self._flusher.submit(self._snapshot())
        logger.debug("STORE PATCH: %s/%s", collection, item_id)
        return result

    def post(self, collection: str, body: Any) -> Document:
        """
        Insert a new document. A string identifier in the body is kept,
        otherwise a random uuid4 is assigned.
        """
        with self._lock:
            col = self._collection(collection)
            doc = validate_body(body)
            if self._id_key in doc:
                item_id = doc[self._id_key]
                if not isinstance(item_id, str):
                    raise InvalidBody(f"field '{self._id_key}' must be a string")
                if item_id in col:
                    raise DuplicateId(item_id)
            else:
                item_id = str(uuid.uuid4())
                while item_id in col:
                    item_id = str(uuid.uuid4())
                doc[self._id_key] = item_id
            col.insert(item_id, doc)
            result = copy.deepcopy(doc)
            self._flusher.submit(self._snapshot())
        logger.debug("STORE POST: %s/%s", collection, item_id)
        return result

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def serialize_all(self) -> Snapshot:
        """Every collection, names and documents in ascending order."""
        with self._lock:
            return copy.deepcopy(self._snapshot())

    def close(self) -> None:
        self._flusher.stop()

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _collection(self, name: str) -> Collection:
        col = self._collections.get(name)
        if col is None:
            raise CollectionNotFound(name)
        return col

    def _item(self, col: Collection, name: str, item_id: str) -> Document:
        doc = col.get(item_id)
        if doc is None:
            raise ItemNotFound(name, item_id)
        return doc

    def _snapshot(self) -> Snapshot:
        # Shallow: documents are replaced, never edited, once stored.
        return {name: list(self._collections[name].documents()) for name in sorted(self._collections)}
