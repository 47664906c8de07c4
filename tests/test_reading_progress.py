from __future__ import annotations

import json
from datetime import datetime, timezone

from bunko.services.progress_storage import MemoryStorage, StorageQuotaExceeded
from bunko.services.reading_progress import STORAGE_KEY, ReaderTrackers, ReadingPositionTracker


class FailingStorage(MemoryStorage):
    def set_item(self, key, value):
        raise StorageQuotaExceeded("quota exceeded")


class NoStorage(MemoryStorage):
    available = False


def _blob(storage) -> dict:
    return json.loads(storage.get_item(STORAGE_KEY))


def _fixed_clock():
    return datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)


def test_unknown_book_starts_at_page_one(tracker) -> None:
    assert tracker.get("never-opened") == 1
    assert tracker.list_all() == {}


def test_set_persists_after_delay(tracker, storage, scheduler) -> None:
    tracker.set("book-42", 7)
    assert storage.get_item(STORAGE_KEY) is None
    assert tracker.pending("book-42")

    scheduler.advance(0.5)

    assert tracker.get("book-42") == 7
    assert not tracker.pending("book-42")
    assert tracker.last_write_result("book-42").ok


def test_rapid_calls_coalesce_into_latest_page(storage, scheduler) -> None:
    writes = []

    class CountingStorage(MemoryStorage):
        def set_item(self, key, value):
            writes.append(value)
            super().set_item(key, value)

    counting = CountingStorage()
    tracker = ReadingPositionTracker(counting, scheduler=scheduler, delay=0.5)
    tracker.set("book-1", 3)
    scheduler.advance(0.2)
    tracker.set("book-1", 5)
    scheduler.advance(0.2)
    tracker.set("book-1", 9)
    scheduler.advance(0.5)

    assert len(writes) == 1
    assert tracker.get("book-1") == 9
    assert scheduler.active == 0


def test_spaced_calls_each_write(tracker, scheduler) -> None:
    tracker.set("book-1", 2)
    scheduler.advance(0.6)
    assert tracker.get("book-1") == 2
    tracker.set("book-1", 3)
    scheduler.advance(0.6)
    assert tracker.get("book-1") == 3


def test_superseded_callback_never_flushes(tracker, scheduler) -> None:
    tracker.set("book-1", 3)
    stale = scheduler.handles[0]
    tracker.set("book-1", 9)
    # a timer that fires after being replaced must be ignored
    stale.callback()
    assert tracker.get("book-1") == 1
    scheduler.advance(0.5)
    assert tracker.get("book-1") == 9


def test_debounce_is_per_book(tracker, scheduler) -> None:
    tracker.set("book-a", 2)
    tracker.set("book-b", 4)
    scheduler.advance(0.5)
    assert tracker.get("book-a") == 2
    assert tracker.get("book-b") == 4


def test_write_preserves_other_books(storage, scheduler) -> None:
    storage.set_item(STORAGE_KEY, json.dumps({
        "book-a": {"page": 2, "lastRead": "2024-01-01T00:00:00.000Z"},
        "book-b": {"page": 4, "lastRead": "2024-01-01T00:00:00.000Z"},
    }))
    tracker = ReadingPositionTracker(storage, scheduler=scheduler, clock=_fixed_clock)

    tracker.set("book-a", 3)
    scheduler.advance(0.5)

    assert tracker.get("book-b") == 4
    assert _blob(storage) == {
        "book-a": {"page": 3, "lastRead": "2024-05-01T10:00:00.000Z"},
        "book-b": {"page": 4, "lastRead": "2024-01-01T00:00:00.000Z"},
    }


def test_clear_removes_only_that_book(tracker, scheduler) -> None:
    tracker.set("book-a", 2)
    tracker.set("book-b", 4)
    scheduler.advance(0.5)

    assert tracker.clear("book-a").ok
    assert tracker.get("book-a") == 1
    assert list(tracker.list_all()) == ["book-b"]
    assert tracker.clear("missing").ok


def test_get_is_idempotent(tracker, scheduler) -> None:
    tracker.set("book-1", 12)
    scheduler.advance(0.5)
    assert [tracker.get("book-1") for _ in range(3)] == [12, 12, 12]


def test_write_failure_is_recorded_not_raised(scheduler, caplog) -> None:
    tracker = ReadingPositionTracker(FailingStorage(), scheduler=scheduler)
    tracker.set("book-9", 5)
    scheduler.advance(0.5)

    result = tracker.last_write_result("book-9")
    assert result is not None and not result.ok
    assert "quota" in result.error
    assert tracker.get("book-9") == 1
    assert "Error saving reading progress" in caplog.text


def test_quota_bound_storage_fails_gracefully(scheduler) -> None:
    tracker = ReadingPositionTracker(MemoryStorage(quota=10), scheduler=scheduler)
    tracker.set("book-9", 5)
    scheduler.advance(0.5)
    assert not tracker.last_write_result("book-9").ok
    assert tracker.get("book-9") == 1


def test_missing_storage_medium_degrades_to_defaults(scheduler) -> None:
    tracker = ReadingPositionTracker(NoStorage(), scheduler=scheduler)
    assert tracker.get("book-1") == 1
    assert tracker.list_all() == {}
    tracker.set("book-1", 4)
    scheduler.advance(0.5)
    assert not tracker.last_write_result("book-1").ok
    assert not tracker.clear("book-1").ok


def test_corrupt_blob_reads_as_empty(storage, scheduler) -> None:
    storage.set_item(STORAGE_KEY, "{not json")
    tracker = ReadingPositionTracker(storage, scheduler=scheduler)
    assert tracker.get("book-1") == 1
    assert tracker.list_all() == {}

    tracker.set("book-1", 6)
    scheduler.advance(0.5)
    assert tracker.get("book-1") == 6


def test_malformed_entries_are_ignored(storage, scheduler) -> None:
    storage.set_item(STORAGE_KEY, json.dumps({
        "good": {"page": 3, "lastRead": "x"},
        "zero": {"page": 0},
        "text": {"page": "5"},
        "flat": 7,
    }))
    tracker = ReadingPositionTracker(storage, scheduler=scheduler)
    assert tracker.get("zero") == 1
    assert tracker.get("text") == 1
    assert tracker.get("flat") == 1
    assert list(tracker.list_all()) == ["good"]


def test_close_cancels_pending_writes(tracker, scheduler) -> None:
    tracker.set("book-1", 8)
    tracker.close()
    scheduler.advance(1)
    assert tracker.get("book-1") == 1
    assert not tracker.pending("book-1")


def test_list_all_returns_positions(tracker, scheduler) -> None:
    tracker.clock = _fixed_clock
    tracker.set("book-1", 8)
    scheduler.advance(0.5)
    position = tracker.list_all()["book-1"]
    assert position.page == 8
    assert position.last_read == "2024-05-01T10:00:00.000Z"
    assert position.to_dict() == {"page": 8, "lastRead": "2024-05-01T10:00:00.000Z"}


def test_threading_scheduler_writes_after_delay(storage) -> None:
    import time

    tracker = ReadingPositionTracker(storage, delay=0.05)
    tracker.set("book-1", 3)
    tracker.set("book-1", 4)
    deadline = time.monotonic() + 2
    while tracker.pending("book-1") and time.monotonic() < deadline:
        time.sleep(0.01)
    assert tracker.get("book-1") == 4


def test_readers_keep_separate_positions(storage, scheduler) -> None:
    trackers = ReaderTrackers(storage, scheduler=scheduler, delay=0.5)
    alice = trackers.for_reader("alice")
    assert trackers.for_reader("alice") is alice

    alice.set("b1", 7)
    trackers.for_reader("bob").set("b1", 2)
    scheduler.advance(0.5)

    assert alice.get("b1") == 7
    assert trackers.for_reader("bob").get("b1") == 2
    assert trackers.for_reader("carol").list_all() == {}
    assert storage.get_item(STORAGE_KEY) is None
    assert json.loads(storage.get_item(f"{STORAGE_KEY}:alice"))["b1"]["page"] == 7


def test_closing_readers_cancels_every_pending_write(storage, scheduler) -> None:
    trackers = ReaderTrackers(storage, scheduler=scheduler, delay=0.5)
    trackers.for_reader("alice").set("b1", 3)
    trackers.for_reader("bob").set("b1", 4)
    trackers.close()
    scheduler.advance(1)
    assert scheduler.active == 0
    assert trackers.for_reader("alice").get("b1") == 1
    assert trackers.for_reader("bob").get("b1") == 1
