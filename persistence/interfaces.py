from __future__ import annotations

from typing import Any, Protocol

Snapshot = dict[str, list[dict[str, Any]]]


class DocumentSource(Protocol):
    """
    Where the store's state comes from and goes back to: one JSON document
    of collection name -> array of documents.
    """

    def load(self) -> Any:
        """Parse and return the full document tree."""
        ...

    def write_all(self, snapshot: Snapshot) -> None:
        """Replace the persisted document with `snapshot`."""
        ...


class Flusher(Protocol):
    """Receives a snapshot after every successful mutation."""

    def submit(self, snapshot: Snapshot) -> None:
        ...

    def stop(self) -> None:
        ...
