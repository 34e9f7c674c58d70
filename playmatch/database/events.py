"""Local event and attendance tables.

A projection of the platform's event store used when no remote store is
configured. The matching core reads events through the EventSource
protocol and writes attendance only from ProposalEngine.accept().
"""

import logging
from collections.abc import Iterable
from datetime import datetime
from sqlite3 import Connection

from playmatch.core.types import CandidateEvent
from playmatch.utilities.tz import to_iso

logger = logging.getLogger(__name__)


def upsert_event(conn: Connection, event: CandidateEvent) -> None:
    """Insert or replace an event projection (seeding and sync)."""
    conn.execute(
        """
        INSERT INTO events (
            id, title, sport, start_time, end_time, district,
            skill_min, skill_max, looking_for_players, created_by,
            max_participants, players_needed
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            title = excluded.title,
            sport = excluded.sport,
            start_time = excluded.start_time,
            end_time = excluded.end_time,
            district = excluded.district,
            skill_min = excluded.skill_min,
            skill_max = excluded.skill_max,
            looking_for_players = excluded.looking_for_players,
            created_by = excluded.created_by,
            max_participants = excluded.max_participants,
            players_needed = excluded.players_needed
        """,
        (
            event.id,
            event.title,
            event.sport,
            to_iso(event.start_time),
            to_iso(event.end_time),
            event.district,
            event.skill_min,
            event.skill_max,
            int(event.looking_for_players),
            event.created_by,
            event.max_participants,
            event.players_needed,
        ),
    )


def get_event(conn: Connection, event_id: str) -> CandidateEvent | None:
    cursor = conn.execute("SELECT * FROM events WHERE id = ?", (event_id,))
    row = cursor.fetchone()
    if not row:
        return None
    return CandidateEvent.from_row(dict(row))


def list_open_events(
    conn: Connection,
    sport: str | None = None,
    district: str | None = None,
    start_after: datetime | None = None,
    start_before: datetime | None = None,
) -> list[CandidateEvent]:
    """Get events looking for players, earliest start first.

    Args:
        conn: Database connection
        sport: Exact sport filter (case-insensitive)
        district: Exact district filter
        start_after: Inclusive lower bound on start_time
        start_before: Inclusive upper bound on start_time
    """
    clauses = ["looking_for_players = 1"]
    values: list = []

    if sport:
        clauses.append("LOWER(sport) = LOWER(?)")
        values.append(sport.strip())
    if district:
        clauses.append("district = ?")
        values.append(district)
    if start_after:
        clauses.append("start_time >= ?")
        values.append(to_iso(start_after))
    if start_before:
        clauses.append("start_time <= ?")
        values.append(to_iso(start_before))

    query = f"SELECT * FROM events WHERE {' AND '.join(clauses)} ORDER BY start_time, id"
    cursor = conn.execute(query, values)
    return [CandidateEvent.from_row(dict(row)) for row in cursor.fetchall()]


def count_attending(conn: Connection, event_ids: Iterable[str]) -> dict[str, int]:
    """Get number of attending players per event."""
    ids = list(event_ids)
    if not ids:
        return {}
    placeholders = ", ".join(["?"] * len(ids))
    cursor = conn.execute(
        f"""
        SELECT event_id, COUNT(*) AS attending
        FROM event_attendance
        WHERE status = 'attending' AND event_id IN ({placeholders})
        GROUP BY event_id
        """,
        ids,
    )
    counts = {event_id: 0 for event_id in ids}
    for row in cursor.fetchall():
        counts[row["event_id"]] = row["attending"]
    return counts


def is_attending(conn: Connection, event_id: str, player_id: str) -> bool:
    cursor = conn.execute(
        """
        SELECT 1 FROM event_attendance
        WHERE event_id = ? AND player_id = ? AND status = 'attending'
        """,
        (event_id, player_id),
    )
    return cursor.fetchone() is not None


def commit_attendance(conn: Connection, event_id: str, player_id: str) -> None:
    """Record a committed attendance, idempotent per (event, player).

    An existing row (e.g. a prior "maybe" RSVP) is switched to a committed
    "attending" row rather than duplicated.
    """
    conn.execute(
        """
        INSERT INTO event_attendance (event_id, player_id, status, is_committed)
        VALUES (?, ?, 'attending', 1)
        ON CONFLICT(event_id, player_id) DO UPDATE SET
            status = 'attending',
            is_committed = 1
        """,
        (event_id, player_id),
    )
    logger.info("[ATTENDANCE] Committed player=%s event=%s", player_id, event_id)
