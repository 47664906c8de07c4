from __future__ import annotations

import os

import pytest

from bunko.services.progress_storage import (
    FileStorage,
    MemoryStorage,
    StorageQuotaExceeded,
    create_storage,
)
from bunko.services.reading_progress import ReadingPositionTracker


def test_file_storage_round_trip(tmp_path) -> None:
    storage = FileStorage(str(tmp_path / "progress"))
    assert storage.get_item("kirokumd-reading-progress") is None

    storage.set_item("kirokumd-reading-progress", '{"a": {"page": 2}}')
    assert storage.get_item("kirokumd-reading-progress") == '{"a": {"page": 2}}'
    assert [p.name for p in (tmp_path / "progress").iterdir()] == ["kirokumd-reading-progress.json"]

    storage.remove_item("kirokumd-reading-progress")
    storage.remove_item("kirokumd-reading-progress")
    assert storage.get_item("kirokumd-reading-progress") is None


def test_file_storage_sanitizes_keys(tmp_path) -> None:
    storage = FileStorage(str(tmp_path))
    storage.set_item("../escape", "x")
    assert not (tmp_path.parent / "escape.json").exists()
    assert storage.get_item("../escape") == "x"


def test_positions_survive_a_new_tracker(tmp_path, scheduler) -> None:
    path = str(tmp_path / "progress")
    first = ReadingPositionTracker(create_storage(path), scheduler=scheduler)
    first.set("book-42", 7)
    scheduler.advance(0.5)

    second = ReadingPositionTracker(create_storage(path), scheduler=scheduler)
    assert second.get("book-42") == 7


def test_create_storage_without_path_is_in_memory() -> None:
    assert isinstance(create_storage(None), MemoryStorage)


def test_create_storage_falls_back_when_path_unusable(tmp_path, caplog) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    storage = create_storage(str(blocker / "progress"))
    assert isinstance(storage, MemoryStorage)
    assert "keeping positions in memory" in caplog.text


def test_create_storage_uses_directory(tmp_path) -> None:
    storage = create_storage(str(tmp_path / "progress"))
    assert isinstance(storage, FileStorage)
    assert os.path.isdir(tmp_path / "progress")


def test_memory_quota() -> None:
    storage = MemoryStorage(quota=8)
    storage.set_item("a", "1234")
    storage.set_item("a", "12345678")
    with pytest.raises(StorageQuotaExceeded):
        storage.set_item("b", "1")
