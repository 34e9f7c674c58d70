"""Event store backed by the local events tables."""

import sqlite3
from collections.abc import Callable, Iterable
from contextlib import AbstractContextManager
from datetime import datetime

from playmatch.core.errors import ExternalStoreError
from playmatch.core.types import CandidateEvent
from playmatch.database import events as event_db


class SqliteEventStore:
    """EventSource and AttendanceStore over the local database.

    Implements both protocols from playmatch.core.interfaces.
    """

    def __init__(self, db_factory: Callable[[], AbstractContextManager[sqlite3.Connection]]):
        self._db_factory = db_factory

    def list_open_events(
        self,
        sport: str | None = None,
        district: str | None = None,
        start_after: datetime | None = None,
        start_before: datetime | None = None,
    ) -> list[CandidateEvent]:
        with self._db_factory() as conn:
            return event_db.list_open_events(conn, sport, district, start_after, start_before)

    def get_event(self, event_id: str) -> CandidateEvent | None:
        with self._db_factory() as conn:
            return event_db.get_event(conn, event_id)

    def attendance_counts(self, event_ids: Iterable[str]) -> dict[str, int]:
        with self._db_factory() as conn:
            return event_db.count_attending(conn, event_ids)

    def is_attending(self, event_id: str, player_id: str) -> bool:
        with self._db_factory() as conn:
            return event_db.is_attending(conn, event_id, player_id)

    def commit_attendance(self, event_id: str, player_id: str) -> None:
        try:
            with self._db_factory() as conn:
                event_db.commit_attendance(conn, event_id, player_id)
        except sqlite3.Error as e:
            raise ExternalStoreError(
                f"Attendance write failed for player={player_id} event={event_id}: {e}"
            ) from e
