"""Boundary interfaces consumed by the matching core.

The event and attendance stores belong to the surrounding platform. The
core only depends on these protocols; implementations live in
`playmatch.eventstore`.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from playmatch.core.types import CandidateEvent


class EventSource(Protocol):
    """Read side of the external event store."""

    def list_open_events(
        self,
        sport: str | None = None,
        district: str | None = None,
        start_after: datetime | None = None,
        start_before: datetime | None = None,
    ) -> list[CandidateEvent]:
        """Events flagged as looking for players, ordered by start time."""
        ...

    def get_event(self, event_id: str) -> CandidateEvent | None:
        ...

    def attendance_counts(self, event_ids: Iterable[str]) -> dict[str, int]:
        """Number of attending players per event id."""
        ...

    def is_attending(self, event_id: str, player_id: str) -> bool:
        ...


class AttendanceStore(Protocol):
    """Write side of the external event store, used only by accept."""

    def commit_attendance(self, event_id: str, player_id: str) -> None:
        """Record a committed attendance for (event, player).

        Must be idempotent per (event, player). Raises ExternalStoreError
        when the store cannot confirm the write.
        """
        ...
