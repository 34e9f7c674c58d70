"""Shared fixtures: a fresh SQLite database per test and a frozen clock."""

from datetime import UTC, datetime, timedelta

import pytest

from playmatch.core.types import CandidateEvent
from playmatch.database import db_factory, init_db
from playmatch.database.events import upsert_event
from playmatch.eventstore.local import SqliteEventStore
from playmatch.services.notifications import EventBus

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)


class FrozenClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingBus(EventBus):
    """EventBus that also keeps every published event."""

    def __init__(self):
        super().__init__()
        self.published = []

    def publish(self, event):
        self.published.append(event)
        super().publish(event)

    def types(self) -> list[str]:
        return [e.type for e in self.published]


def make_event(event_id: str = "evt-1", **overrides) -> CandidateEvent:
    """Build an open football event starting a day after NOW."""
    fields = {
        "id": event_id,
        "sport": "football",
        "start_time": NOW + timedelta(days=1),
        "end_time": NOW + timedelta(days=1, hours=2),
        "title": "Five-a-side",
        "district": "75011",
        "skill_min": 2,
        "skill_max": 4,
        "looking_for_players": True,
        "created_by": "organizer",
        "max_participants": 10,
        "players_needed": None,
    }
    if "start_time" in overrides and "end_time" not in overrides:
        fields["end_time"] = overrides["start_time"] + timedelta(hours=2)
    fields.update(overrides)
    return CandidateEvent(**fields)


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "playmatch.db"
    init_db(path)
    return path


@pytest.fixture
def db(db_path):
    """Zero-argument database factory bound to the test database."""
    return db_factory(db_path)


@pytest.fixture
def bus():
    return RecordingBus()


@pytest.fixture
def event_store(db):
    return SqliteEventStore(db)


@pytest.fixture
def add_event(db):
    """Insert an event into the local events table and return it."""

    def _add(event_id: str = "evt-1", **overrides) -> CandidateEvent:
        event = make_event(event_id, **overrides)
        with db() as conn:
            upsert_event(conn, event)
        return event

    return _add
