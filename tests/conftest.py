from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from bunko import create_app, db
from bunko.config import TestingConfig
from bunko.models.book import Book
from bunko.services.progress_storage import MemoryStorage
from bunko.services.reading_progress import ReaderTrackers, ReadingPositionTracker


class ManualHandle:
    def __init__(self, scheduler, due, callback):
        self.scheduler = scheduler
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """call_later() stand-in whose clock only moves when a test advances it."""

    def __init__(self):
        self.now = 0.0
        self.handles: list[ManualHandle] = []

    def call_later(self, delay, callback):
        handle = ManualHandle(self, self.now + delay, callback)
        self.handles.append(handle)
        return handle

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = [h for h in self.handles if h.due <= self.now and not h.cancelled]
        self.handles = [h for h in self.handles if h not in due and not h.cancelled]
        for handle in sorted(due, key=lambda h: h.due):
            handle.callback()

    @property
    def active(self) -> int:
        return sum(1 for h in self.handles if not h.cancelled)


FIXED_NOW = datetime(2024, 5, 1, 10, 0, 0)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def tracker(storage, scheduler):
    return ReadingPositionTracker(storage, scheduler=scheduler, delay=0.5)


@pytest.fixture
def app(scheduler):
    progress = ReaderTrackers(MemoryStorage(), scheduler=scheduler, delay=0.5)
    app = create_app(TestingConfig, progress=progress)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    response = client.post("/api/auth/login", json={"username": "admin", "password": "secret"})
    assert response.status_code == 200
    return client


@pytest.fixture
def make_book(app):
    created = []

    def _make(title="Night Train", **fields):
        book = Book(
            title=title,
            slug=fields.pop("slug", Book.slugify(title)),
            pdf_url=fields.pop("pdf_url", "https://example.com/book.pdf"),
            category=fields.pop("category", "Novels"),
            created_at=fields.pop("created_at", FIXED_NOW + timedelta(minutes=len(created))),
            **fields,
        )
        db.session.add(book)
        db.session.commit()
        created.append(book)
        return book

    return _make
