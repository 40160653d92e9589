from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any

from json_store import atomic_write_json, read_json

from .errors import StructuralLoadError
from .interfaces import DocumentSource, Snapshot

logger = logging.getLogger(__name__)


class JsonFileSource(DocumentSource):
    """
    The backing JSON file.

    - load() raises StructuralLoadError when the file is missing or not JSON.
    - write_all() writes atomically; concurrent writers serialize on a lock.
    """

    def __init__(self, path: Path):
        self._path = path
        self._write_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Any:
        try:
            return read_json(self._path)
        except OSError as e:
            raise StructuralLoadError(f"Error: cannot read {self._path}: {e.strerror or e}") from e
        except json.JSONDecodeError as e:
            raise StructuralLoadError(f"Error: invalid JSON in {self._path}: {e.msg} (line {e.lineno})") from e

    def write_all(self, snapshot: Snapshot) -> None:
        with self._write_lock:
            atomic_write_json(self._path, snapshot)
        logger.debug("SOURCE WRITE: %s (%d collections)", self._path, len(snapshot))
