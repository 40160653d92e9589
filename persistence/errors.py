from __future__ import annotations


class StoreError(Exception):
    """Base class for every error raised by the document store."""


class StructuralLoadError(StoreError):
    """The backing file is not an object of arrays of documents. Fatal at startup."""


class MissingIdentifierField(StructuralLoadError):
    def __init__(self, id_key: str):
        super().__init__(f"No field named: '{id_key}'")
        self.id_key = id_key


class CollectionNotFound(StoreError, LookupError):
    def __init__(self, collection: str):
        super().__init__(f"collection {collection} not found")
        self.collection = collection


class ItemNotFound(StoreError, LookupError):
    def __init__(self, collection: str, item_id: str):
        super().__init__(f"item {collection}/{item_id} not found")
        self.collection = collection
        self.item_id = item_id


class DuplicateId(StoreError, ValueError):
    def __init__(self, item_id: str):
        super().__init__(f"duplicate id: {item_id}")
        self.item_id = item_id


class InvalidBody(StoreError, ValueError):
    def __init__(self, reason: str = "invalid request body"):
        super().__init__(reason)


class InvalidQuery(StoreError, ValueError):
    pass
