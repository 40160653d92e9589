from __future__ import annotations

from typing import Any, Iterable, Iterator

from .errors import MissingIdentifierField, StructuralLoadError
from .values import Document, is_bag


class Collection:
    """
    One named group of documents keyed by their identifier value.

    Raw storage only: get / insert / remove. Ordering for presentation is
    always ascending identifier order, never insertion order.
    """

    def __init__(self, id_key: str):
        self._id_key = id_key
        self._docs: dict[str, Document] = {}

    @classmethod
    def from_documents(cls, id_key: str, items: Iterable[Any]) -> "Collection":
        col = cls(id_key)
        for item in items:
            if not is_bag(item):
                raise StructuralLoadError("Error: invalid file content")
            key = item.get(id_key)
            if not isinstance(key, str):
                raise MissingIdentifierField(id_key)
            # last write wins for repeated identifiers
            col._docs[key] = item
        return col

    @property
    def id_key(self) -> str:
        return self._id_key

    def __len__(self) -> int:
        return len(self._docs)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._docs

    def get(self, item_id: str) -> Document | None:
        return self._docs.get(item_id)

    def insert(self, item_id: str, doc: Document) -> None:
        if doc.get(self._id_key) != item_id:
            raise ValueError(f"document {self._id_key!r} does not match key {item_id!r}")
        self._docs[item_id] = doc

    def remove(self, item_id: str) -> Document | None:
        return self._docs.pop(item_id, None)

    def sorted_ids(self) -> list[str]:
        return sorted(self._docs)

    def documents(self) -> Iterator[Document]:
        for item_id in self.sorted_ids():
            yield self._docs[item_id]
