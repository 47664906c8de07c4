"""Per-book "resume reading" positions with debounced persistence.

Positions live in a single JSON blob under one storage key::

    {"<book id>": {"page": 7, "lastRead": "2024-05-01T10:00:00.000Z"}}

Every write loads the whole blob, changes one entry and writes the blob
back, so two processes sharing a store race at blob granularity and the
last writer wins.
"""
import json
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from bunko.services.progress_storage import KeyValueStorage
from bunko.services.timers import ThreadingScheduler


logger = logging.getLogger(__name__)

STORAGE_KEY = "kirokumd-reading-progress"
DEFAULT_PAGE = 1
DEFAULT_DELAY = 0.5


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ReadingPosition:
    book_id: str
    page: int
    last_read: str

    def to_dict(self) -> Dict[str, object]:
        return {"page": self.page, "lastRead": self.last_read}


@dataclass(frozen=True)
class StorageResult:
    ok: bool
    error: Optional[str] = None

    @classmethod
    def success(cls) -> "StorageResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: str) -> "StorageResult":
        return cls(ok=False, error=error)


class _Pending:
    __slots__ = ("handle", "page")

    def __init__(self, page: int):
        self.page = page
        self.handle = None


def _valid_page(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


class ReadingPositionTracker:
    def __init__(
        self,
        storage: KeyValueStorage,
        scheduler=None,
        delay: float = DEFAULT_DELAY,
        storage_key: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.storage = storage
        self.scheduler = scheduler or ThreadingScheduler()
        self.delay = delay
        self.storage_key = storage_key or STORAGE_KEY
        self.clock = clock or _utc_now
        self._lock = threading.RLock()
        self._pending: Dict[str, _Pending] = {}
        self._results: Dict[str, StorageResult] = {}

    def _load(self) -> dict:
        """Return the stored blob; raises on unreadable or corrupt storage."""
        if not self.storage.available:
            raise OSError("no storage medium available")
        raw = self.storage.get_item(self.storage_key)
        if not raw:
            return {}
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("reading progress blob is not a mapping")
        return data

    def _dump(self, data: dict) -> None:
        if not self.storage.available:
            raise OSError("no storage medium available")
        self.storage.set_item(self.storage_key, json.dumps(data))

    def get(self, book_id: str) -> int:
        try:
            entry = self._load().get(book_id)
        except Exception as exc:
            logger.debug("Reading progress unreadable, defaulting to page 1: %s", exc)
            return DEFAULT_PAGE
        if isinstance(entry, dict) and _valid_page(entry.get("page")):
            return entry["page"]
        return DEFAULT_PAGE

    def list_all(self) -> Dict[str, ReadingPosition]:
        try:
            data = self._load()
        except Exception as exc:
            logger.debug("Reading progress unreadable: %s", exc)
            return {}
        positions = {}
        for book_id, entry in data.items():
            if isinstance(entry, dict) and _valid_page(entry.get("page")):
                positions[book_id] = ReadingPosition(
                    book_id=book_id,
                    page=entry["page"],
                    last_read=str(entry.get("lastRead") or ""),
                )
        return positions

    def set(self, book_id: str, page: int) -> None:
        """Schedule a write of ``page`` for ``book_id`` after the debounce delay.

        A newer call for the same book before the delay elapses replaces the
        pending one. Pages are written as given; bounds are the caller's job.
        """
        pending = _Pending(page)
        with self._lock:
            previous = self._pending.get(book_id)
            if previous is not None and previous.handle is not None:
                previous.handle.cancel()
            self._pending[book_id] = pending
            pending.handle = self.scheduler.call_later(
                self.delay, lambda: self._fire(book_id, pending)
            )

    def _fire(self, book_id: str, pending: _Pending) -> None:
        with self._lock:
            # a superseded or cancelled timer may still get dispatched
            if self._pending.get(book_id) is not pending:
                return
            del self._pending[book_id]
            self._results[book_id] = self._write(book_id, pending.page)

    def _write(self, book_id: str, page: int) -> StorageResult:
        try:
            try:
                data = self._load()
            except ValueError:
                logger.warning("Discarding corrupt reading progress blob")
                data = {}
            data[book_id] = ReadingPosition(book_id, page, _iso(self.clock())).to_dict()
            self._dump(data)
        except Exception as exc:
            logger.error("Error saving reading progress for %s: %s", book_id, exc)
            return StorageResult.failure(str(exc))
        return StorageResult.success()

    def clear(self, book_id: str) -> StorageResult:
        with self._lock:
            try:
                data = self._load()
                if book_id not in data:
                    return StorageResult.success()
                del data[book_id]
                self._dump(data)
            except Exception as exc:
                logger.error("Error clearing reading progress for %s: %s", book_id, exc)
                return StorageResult.failure(str(exc))
        return StorageResult.success()

    def pending(self, book_id: str) -> bool:
        with self._lock:
            return book_id in self._pending

    def last_write_result(self, book_id: str) -> Optional[StorageResult]:
        with self._lock:
            return self._results.get(book_id)

    def close(self) -> None:
        """Cancel every pending write; unsaved positions are dropped."""
        with self._lock:
            for pending in self._pending.values():
                if pending.handle is not None:
                    pending.handle.cancel()
            self._pending.clear()


class ReaderTrackers:
    """Hands out one tracker per reader, all sharing storage and timers.

    Each reader's positions live in their own blob under
    ``"<storage key>:<reader id>"``, so one browser never resumes at
    another browser's page.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        scheduler=None,
        delay: float = DEFAULT_DELAY,
        storage_key: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.storage = storage
        self.scheduler = scheduler or ThreadingScheduler()
        self.delay = delay
        self.storage_key = storage_key or STORAGE_KEY
        self.clock = clock
        self._lock = threading.Lock()
        self._trackers: Dict[str, ReadingPositionTracker] = {}

    def for_reader(self, reader_id: str) -> ReadingPositionTracker:
        with self._lock:
            tracker = self._trackers.get(reader_id)
            if tracker is None:
                tracker = ReadingPositionTracker(
                    self.storage,
                    scheduler=self.scheduler,
                    delay=self.delay,
                    storage_key=f"{self.storage_key}:{reader_id}",
                    clock=self.clock,
                )
                self._trackers[reader_id] = tracker
            return tracker

    def close(self) -> None:
        with self._lock:
            trackers = list(self._trackers.values())
        for tracker in trackers:
            tracker.close()
