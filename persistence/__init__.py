from __future__ import annotations

from .collection import Collection
from .errors import (
    CollectionNotFound,
    DuplicateId,
    InvalidBody,
    InvalidQuery,
    ItemNotFound,
    MissingIdentifierField,
    StoreError,
    StructuralLoadError,
)
from .flusher import NullFlusher, SnapshotFlusher
from .query import ListQuery, run_query
from .repositories import AsyncStore
from .source import JsonFileSource
from .store import Store

__all__ = [
    "Collection",
    "Store",
    "AsyncStore",
    "ListQuery",
    "run_query",
    "JsonFileSource",
    "SnapshotFlusher",
    "NullFlusher",
    "StoreError",
    "StructuralLoadError",
    "MissingIdentifierField",
    "CollectionNotFound",
    "ItemNotFound",
    "DuplicateId",
    "InvalidBody",
    "InvalidQuery",
]
