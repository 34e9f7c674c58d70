"""Event store backed by a remote HTTP service."""

from collections.abc import Iterable
from datetime import datetime

from playmatch.core.types import CandidateEvent
from playmatch.eventstore.client import EventStoreClient


class RemoteEventStore:
    """EventSource and AttendanceStore over EventStoreClient.

    Store failures surface as ExternalStoreError from the client.
    """

    def __init__(self, client: EventStoreClient):
        self._client = client

    def list_open_events(
        self,
        sport: str | None = None,
        district: str | None = None,
        start_after: datetime | None = None,
        start_before: datetime | None = None,
    ) -> list[CandidateEvent]:
        rows = self._client.list_events(sport, district, start_after, start_before)
        events = [CandidateEvent.from_row(row) for row in rows]
        # Remote ordering is not guaranteed
        return sorted(
            (e for e in events if e.looking_for_players),
            key=lambda e: (e.start_time, e.id),
        )

    def get_event(self, event_id: str) -> CandidateEvent | None:
        row = self._client.get_event(event_id)
        return CandidateEvent.from_row(row) if row else None

    def attendance_counts(self, event_ids: Iterable[str]) -> dict[str, int]:
        return self._client.attendance_counts(event_ids)

    def is_attending(self, event_id: str, player_id: str) -> bool:
        row = self._client.get_attendance(event_id, player_id)
        return bool(row) and row.get("status") == "attending"

    def commit_attendance(self, event_id: str, player_id: str) -> None:
        self._client.put_attendance(event_id, player_id)

    def close(self) -> None:
        self._client.close()
