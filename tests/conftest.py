from __future__ import annotations

import json
from pathlib import Path
import sys
from typing import Any


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for imports like `import persistence...` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


SAMPLE_DB: dict[str, Any] = {
    "users": [
        {"id": "c", "name": "Carol", "status": "active", "age": 41, "address": {"city": "Lyon"}},
        {"id": "a", "name": "Alice", "status": "active", "age": 30, "address": {"city": "Paris"}},
        {"id": "d", "name": "Dave", "status": "active", "age": 30, "admin": True},
        {"id": "b", "name": "Bob", "status": "inactive", "age": 25, "address": {"city": "Paris"}},
    ],
    "posts": [
        {"id": "p1", "title": "hello", "tags": ["intro"]},
    ],
    "empty": [],
}


class RecordingFlusher:
    """Keeps every submitted snapshot in memory."""

    def __init__(self) -> None:
        self.snapshots: list[dict[str, Any]] = []
        self.stopped = False

    def submit(self, snapshot: dict[str, Any]) -> None:
        self.snapshots.append(snapshot)

    def stop(self) -> None:
        self.stopped = True


@pytest.fixture
def sample_tree() -> dict[str, Any]:
    return json.loads(json.dumps(SAMPLE_DB))


@pytest.fixture
def db_file(tmp_path: Path, sample_tree: dict[str, Any]) -> Path:
    """
    Write the sample database to a temp file so tests never touch a real db.json.
    """
    path = tmp_path / "db.json"
    path.write_text(json.dumps(sample_tree, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def recorder() -> RecordingFlusher:
    return RecordingFlusher()


@pytest.fixture
def store(sample_tree: dict[str, Any], recorder: RecordingFlusher):
    from persistence import Store

    return Store.from_tree(sample_tree, flusher=recorder)


@pytest.fixture
def settings(db_file: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("JSML_SOURCE", str(db_file))
    monkeypatch.setenv("PERSIST_TO_DISK", "1")
    monkeypatch.setenv("DEBUG_LOG_REQUESTS", "1")
    monkeypatch.delenv("JSML_ID_KEY", raising=False)

    from settings import get_settings

    return get_settings()


@pytest.fixture
def client(settings):
    from fastapi.testclient import TestClient

    import app as app_module

    with TestClient(app_module.create_app(settings)) as c:
        yield c
