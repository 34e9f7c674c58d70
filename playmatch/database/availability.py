"""Player availability storage.

One row per player in player_availability. Writes are upserts keyed on
player_id, so a second window for the same player replaces the first in a
single statement and two concurrent writers cannot both insert.
"""

import logging
from datetime import datetime
from sqlite3 import Connection

from playmatch.core.types import Availability
from playmatch.utilities.tz import to_iso

logger = logging.getLogger(__name__)


def upsert_availability(conn: Connection, availability: Availability) -> None:
    """Create or replace the player's availability window.

    Args:
        conn: Database connection
        availability: Window to store (created_at must be set)
    """
    conn.execute(
        """
        INSERT INTO player_availability (
            player_id, sport, available_from, available_until,
            district, skill_level, created_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(player_id) DO UPDATE SET
            sport = excluded.sport,
            available_from = excluded.available_from,
            available_until = excluded.available_until,
            district = excluded.district,
            skill_level = excluded.skill_level,
            created_at = excluded.created_at
        """,
        (
            availability.player_id,
            availability.sport,
            to_iso(availability.available_from),
            to_iso(availability.available_until),
            availability.district,
            availability.skill_level,
            to_iso(availability.created_at),
        ),
    )


def get_availability(conn: Connection, player_id: str) -> Availability | None:
    """Get the stored window for a player, expired or not.

    Expiry is the caller's concern; see AvailabilityRegistry.current().
    """
    cursor = conn.execute(
        "SELECT * FROM player_availability WHERE player_id = ?",
        (player_id,),
    )
    row = cursor.fetchone()
    if not row:
        return None
    return Availability.from_row(dict(row))


def delete_availability(conn: Connection, player_id: str) -> bool:
    """Delete the player's window.

    Returns:
        True if a row was deleted
    """
    cursor = conn.execute(
        "DELETE FROM player_availability WHERE player_id = ?",
        (player_id,),
    )
    return cursor.rowcount > 0


def list_active_availability(conn: Connection, now: datetime) -> list[Availability]:
    """Get all windows that have not expired at `now`, oldest first."""
    cursor = conn.execute(
        """
        SELECT * FROM player_availability
        WHERE available_until >= ?
        ORDER BY created_at
        """,
        (to_iso(now),),
    )
    return [Availability.from_row(dict(row)) for row in cursor.fetchall()]


def delete_expired_availability(conn: Connection, now: datetime) -> int:
    """Physically remove windows whose `until` has passed.

    Returns:
        Number of rows removed
    """
    cursor = conn.execute(
        "DELETE FROM player_availability WHERE available_until < ?",
        (to_iso(now),),
    )
    if cursor.rowcount:
        logger.info("[AVAILABILITY] Purged %d expired windows", cursor.rowcount)
    return cursor.rowcount
