"""In-app notification inbox.

Rows are written by NotificationStoreSink from domain events; delivery to
devices is handled outside this service.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from sqlite3 import Connection

from playmatch.utilities.tz import parse_datetime, to_iso


@dataclass
class Notification:
    """A stored in-app notification."""

    id: int
    player_id: str
    type: str
    title: str
    message: str
    link: str | None
    metadata: dict
    is_read: bool
    created_at: datetime

    @classmethod
    def from_row(cls, row: dict) -> "Notification":
        return cls(
            id=row["id"],
            player_id=row["player_id"],
            type=row["type"],
            title=row["title"],
            message=row["message"],
            link=row["link"],
            metadata=json.loads(row["metadata"]) if row["metadata"] else {},
            is_read=bool(row["is_read"]),
            created_at=parse_datetime(row["created_at"]),
        )


def insert_notification(
    conn: Connection,
    player_id: str,
    type: str,
    title: str,
    message: str,
    created_at: datetime,
    link: str | None = None,
    metadata: dict | None = None,
) -> int:
    """Create a notification row.

    Returns:
        ID of created record
    """
    cursor = conn.execute(
        """
        INSERT INTO notifications (player_id, type, title, message, link, metadata, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (
            player_id,
            type,
            title,
            message,
            link,
            json.dumps(metadata) if metadata else None,
            to_iso(created_at),
        ),
    )
    return cursor.lastrowid


def list_notifications(
    conn: Connection, player_id: str, unread_only: bool = False
) -> list[Notification]:
    """Get a player's notifications, newest first."""
    query = "SELECT * FROM notifications WHERE player_id = ?"
    if unread_only:
        query += " AND is_read = 0"
    query += " ORDER BY created_at DESC, id DESC"
    cursor = conn.execute(query, (player_id,))
    return [Notification.from_row(dict(row)) for row in cursor.fetchall()]


def mark_notification_read(conn: Connection, notification_id: int) -> bool:
    cursor = conn.execute(
        "UPDATE notifications SET is_read = 1 WHERE id = ?",
        (notification_id,),
    )
    return cursor.rowcount > 0
