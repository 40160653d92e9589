from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

import pytest

from persistence import JsonFileSource, SnapshotFlusher, Store, StructuralLoadError


def test_load_parses_file(db_file: Path, sample_tree):
    assert JsonFileSource(db_file).load() == sample_tree


def test_load_missing_file(tmp_path: Path):
    with pytest.raises(StructuralLoadError):
        JsonFileSource(tmp_path / "absent.json").load()


def test_load_invalid_json(tmp_path: Path):
    path = tmp_path / "db.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StructuralLoadError) as exc:
        JsonFileSource(path).load()
    assert "invalid JSON" in str(exc.value)


def test_write_all_round_trips_byte_for_byte(db_file: Path):
    source = JsonFileSource(db_file)
    store = Store.from_source(source)

    source.write_all(store.serialize_all())
    first = db_file.read_bytes()

    reloaded = Store.from_source(source)
    source.write_all(reloaded.serialize_all())
    assert db_file.read_bytes() == first
    assert first.endswith(b"\n")
    assert not db_file.with_suffix(".json.tmp").exists()


def test_flusher_writes_latest_snapshot(db_file: Path):
    source = JsonFileSource(db_file)
    flusher = SnapshotFlusher(source)
    store = Store.from_source(source, flusher=flusher)
    try:
        store.post("posts", {"id": "p2", "title": "two"})
        store.patch("posts", "p2", {"title": "deux"})
        store.delete("users", "a")
        flusher.wait_idle()
    finally:
        store.close()

    on_disk = json.loads(db_file.read_text(encoding="utf-8"))
    assert on_disk == store.serialize_all()
    assert {"id": "p2", "title": "deux"} in on_disk["posts"]
    assert "a" not in [d["id"] for d in on_disk["users"]]


class _FailingSource:
    def load(self):
        return {}

    def write_all(self, snapshot):
        raise OSError("disk full")


def test_flusher_logs_and_drops_write_failures(caplog: pytest.LogCaptureFixture):
    flusher = SnapshotFlusher(_FailingSource())
    with caplog.at_level(logging.WARNING, logger="persistence.flusher"):
        flusher.submit({"users": []})
        flusher.wait_idle()
    flusher.stop()
    assert "failed to write snapshot" in caplog.text


class _SlowSource:
    def __init__(self) -> None:
        self.gate = threading.Event()
        self.writes: list[dict] = []

    def load(self):
        return {}

    def write_all(self, snapshot):
        self.gate.wait(timeout=5)
        self.writes.append(snapshot)


def test_flusher_coalesces_queued_snapshots():
    source = _SlowSource()
    flusher = SnapshotFlusher(source)
    flusher.submit({"n": [{"id": "1"}]})
    # the writer is stuck on the first write while these queue up
    flusher.submit({"n": [{"id": "2"}]})
    flusher.submit({"n": [{"id": "3"}]})
    source.gate.set()
    flusher.wait_idle()
    flusher.stop()

    assert source.writes[-1] == {"n": [{"id": "3"}]}
    assert len(source.writes) <= 3


def test_stop_drains_then_drops_later_submits(db_file: Path):
    source = JsonFileSource(db_file)
    flusher = SnapshotFlusher(source)
    flusher.submit({"only": []})
    flusher.stop()
    assert json.loads(db_file.read_text(encoding="utf-8")) == {"only": []}

    flusher.submit({"late": []})
    assert json.loads(db_file.read_text(encoding="utf-8")) == {"only": []}
    flusher.stop()


class _StallingSnapshotFlusher(SnapshotFlusher):
    def __init__(self, source):
        super().__init__(source)
        self.first_entered = threading.Event()
        self.second_submitted = threading.Event()

    def submit(self, snapshot):
        if not self.first_entered.is_set():
            self.first_entered.set()
            self.second_submitted.wait(timeout=0.5)
        else:
            self.second_submitted.set()
        super().submit(snapshot)


def test_concurrent_writes_leave_newest_state_on_disk(db_file: Path):
    source = JsonFileSource(db_file)
    flusher = _StallingSnapshotFlusher(source)
    store = Store.from_source(source, flusher=flusher)

    first = threading.Thread(target=store.post, args=("empty", {"id": "A"}))
    first.start()
    assert flusher.first_entered.wait(timeout=5)
    second = threading.Thread(target=store.post, args=("empty", {"id": "B"}))
    second.start()
    first.join()
    second.join()
    store.close()

    on_disk = json.loads(db_file.read_text(encoding="utf-8"))
    assert [d["id"] for d in on_disk["empty"]] == ["A", "B"]
    assert on_disk == store.serialize_all()
