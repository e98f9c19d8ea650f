import threading

from app.dedup.exceptions import IndexStoreError
from app.dedup.index import DuplicateIndex
from app.dedup.store_base import BaseDuplicateIndexStore
from app.logging.logger import Log


class IndexCheckpointer:
    """Flushes the index to its store every *every* inserts and on demand.

    Checkpointing is best-effort: a failed flush is logged and retried at the
    next trigger, it never fails the submission that triggered it. The store
    write runs outside the counter lock, and an insert that comes due while
    another flush is writing leaves its count pending for the next trigger.
    """

    def __init__(
        self,
        index: DuplicateIndex,
        store: BaseDuplicateIndexStore | None,
        every: int,
    ) -> None:
        self._index = index
        self._store = store
        self._every = every
        self._pending = 0
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()

    def record_insert(self) -> None:
        with self._lock:
            self._pending += 1
            due = self._pending >= self._every
        if due:
            self.flush(wait=False)

    def flush(self, wait: bool = True) -> bool:
        """Write the full index snapshot. Returns True on success.

        With ``wait=False`` the call returns False at once when another flush
        is already writing.
        """
        if self._store is None:
            return True
        if not self._write_lock.acquire(blocking=wait):
            return False
        try:
            with self._lock:
                flushed = self._pending
            entries = self._index.entries()
            try:
                self._store.checkpoint(entries)
            except IndexStoreError as exc:
                Log.warning(f"Duplicate index checkpoint failed, will retry: {exc}")
                return False
            with self._lock:
                self._pending = max(0, self._pending - flushed)
        finally:
            self._write_lock.release()
        Log.info(f"Duplicate index checkpointed {len(entries)} entries")
        return True
