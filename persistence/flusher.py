from __future__ import annotations

import logging
import queue
import threading

from .interfaces import DocumentSource, Flusher, Snapshot

logger = logging.getLogger(__name__)

_STOP = object()


class SnapshotFlusher(Flusher):
    """
    Fire-and-forget persistence: one writer thread owns the backing file.

    Request threads submit() a snapshot and return immediately. The writer
    drains the queue, writes only the newest snapshot of each batch, and
    logs write failures instead of raising them. A crash before the writer
    runs loses the queued mutations.
    """

    def __init__(self, source: DocumentSource, *, name: str = "jsml-flusher"):
        self._source = source
        self._queue: queue.Queue[object] = queue.Queue()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._started = False
        self._stopped = False
        self._guard = threading.Lock()

    def submit(self, snapshot: Snapshot) -> None:
        with self._guard:
            if self._stopped:
                logger.warning("FLUSH: flusher stopped, dropping snapshot (%d collections)", len(snapshot))
                return
            self._ensure_started()
            self._queue.put(snapshot)

    def wait_idle(self) -> None:
        """Block until every submitted snapshot has been handled."""
        self._queue.join()

    def stop(self) -> None:
        """Write whatever is still queued, then end the writer thread."""
        with self._guard:
            if self._stopped:
                return
            self._stopped = True
            if not self._started:
                return
            self._queue.put(_STOP)
        self._thread.join()

    def _ensure_started(self) -> None:
        if not self._started:
            self._thread.start()
            self._started = True

    def _run(self) -> None:
        while True:
            batch = [self._queue.get()]
            while True:
                try:
                    batch.append(self._queue.get_nowait())
                except queue.Empty:
                    break

            snapshots = [item for item in batch if item is not _STOP]
            try:
                if snapshots:
                    self._write(snapshots[-1])  # type: ignore[arg-type]
            finally:
                for _ in batch:
                    self._queue.task_done()

            if len(snapshots) != len(batch):
                return

    def _write(self, snapshot: Snapshot) -> None:
        try:
            self._source.write_all(snapshot)
        except Exception as e:
            logger.warning("FLUSH: failed to write snapshot: %r", e)


class NullFlusher(Flusher):
    """Discards snapshots (PERSIST_TO_DISK=0)."""

    def submit(self, snapshot: Snapshot) -> None:
        logger.debug("FLUSH: persistence disabled, skipping write")

    def stop(self) -> None:
        return None
