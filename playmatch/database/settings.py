"""Database operations for application settings.

Provides read/update operations for the settings table (singleton row).
Settings are organized into logical groups for easier management.
"""

from dataclasses import dataclass, field
from sqlite3 import Connection

from playmatch.consumers.matching.constants import DEFAULT_PROPOSAL_MIN_SCORE


@dataclass
class MatchingSettings:
    """Background matching and discovery settings."""

    min_score: int = DEFAULT_PROPOSAL_MIN_SCORE
    lookahead_days: int = 30
    discovery_limit: int = 50


@dataclass
class SchedulerSettings:
    """Background scheduler settings."""

    enabled: bool = True
    interval_minutes: int = 15


@dataclass
class NotificationSettings:
    """Domain event delivery settings."""

    store_enabled: bool = True
    webhook_url: str | None = None
    webhook_timeout: float = 10.0
    webhook_retries: int = 3


@dataclass
class EventStoreSettings:
    """Remote event store settings. Local tables are used when url is None."""

    url: str | None = None
    token: str | None = None
    timeout: float = 10.0
    retries: int = 3


@dataclass
class AllSettings:
    """Complete application settings."""

    matching: MatchingSettings = field(default_factory=MatchingSettings)
    scheduler: SchedulerSettings = field(default_factory=SchedulerSettings)
    notifications: NotificationSettings = field(default_factory=NotificationSettings)
    event_store: EventStoreSettings = field(default_factory=EventStoreSettings)
    schema_version: int = 1


# =============================================================================
# READ OPERATIONS
# =============================================================================


def _get_row(conn: Connection):
    return conn.execute("SELECT * FROM settings WHERE id = 1").fetchone()


def _matching_from_row(row) -> MatchingSettings:
    return MatchingSettings(
        min_score=(
            row["matching_min_score"]
            if row["matching_min_score"] is not None
            else DEFAULT_PROPOSAL_MIN_SCORE
        ),
        lookahead_days=row["matching_lookahead_days"] or 30,
        discovery_limit=row["discovery_result_limit"] or 50,
    )


def _scheduler_from_row(row) -> SchedulerSettings:
    return SchedulerSettings(
        enabled=bool(row["scheduler_enabled"]),
        interval_minutes=row["scheduler_interval_minutes"] or 15,
    )


def _notifications_from_row(row) -> NotificationSettings:
    return NotificationSettings(
        store_enabled=bool(row["notifications_store_enabled"]),
        webhook_url=row["notifications_webhook_url"],
        webhook_timeout=row["notifications_webhook_timeout"] or 10.0,
        webhook_retries=(
            row["notifications_webhook_retries"]
            if row["notifications_webhook_retries"] is not None
            else 3
        ),
    )


def _event_store_from_row(row) -> EventStoreSettings:
    return EventStoreSettings(
        url=row["event_store_url"],
        token=row["event_store_token"],
        timeout=row["event_store_timeout"] or 10.0,
        retries=row["event_store_retries"] if row["event_store_retries"] is not None else 3,
    )


def get_all_settings(conn: Connection) -> AllSettings:
    """Get all application settings.

    Args:
        conn: Database connection

    Returns:
        AllSettings object with all configuration
    """
    row = _get_row(conn)
    if not row:
        return AllSettings()

    return AllSettings(
        matching=_matching_from_row(row),
        scheduler=_scheduler_from_row(row),
        notifications=_notifications_from_row(row),
        event_store=_event_store_from_row(row),
        schema_version=row["schema_version"] or 1,
    )


def get_matching_settings(conn: Connection) -> MatchingSettings:
    row = _get_row(conn)
    return _matching_from_row(row) if row else MatchingSettings()


def get_scheduler_settings(conn: Connection) -> SchedulerSettings:
    row = _get_row(conn)
    return _scheduler_from_row(row) if row else SchedulerSettings()


def get_notification_settings(conn: Connection) -> NotificationSettings:
    row = _get_row(conn)
    return _notifications_from_row(row) if row else NotificationSettings()


def get_event_store_settings(conn: Connection) -> EventStoreSettings:
    row = _get_row(conn)
    return _event_store_from_row(row) if row else EventStoreSettings()


# =============================================================================
# UPDATE OPERATIONS
# =============================================================================


def _apply_updates(conn: Connection, columns: dict[str, object]) -> bool:
    """Write the non-None entries of `columns` to the settings row."""
    updates = []
    values = []
    for column, value in columns.items():
        if value is None:
            continue
        updates.append(f"{column} = ?")
        values.append(int(value) if isinstance(value, bool) else value)

    if not updates:
        return False

    updates.append("updated_at = CURRENT_TIMESTAMP")
    query = f"UPDATE settings SET {', '.join(updates)} WHERE id = 1"
    cursor = conn.execute(query, values)
    return cursor.rowcount > 0


def update_matching_settings(
    conn: Connection,
    min_score: int | None = None,
    lookahead_days: int | None = None,
    discovery_limit: int | None = None,
) -> bool:
    """Update matching settings.

    Only updates fields that are explicitly provided (not None).

    Returns:
        True if updated
    """
    return _apply_updates(
        conn,
        {
            "matching_min_score": min_score,
            "matching_lookahead_days": lookahead_days,
            "discovery_result_limit": discovery_limit,
        },
    )


def update_scheduler_settings(
    conn: Connection,
    enabled: bool | None = None,
    interval_minutes: int | None = None,
) -> bool:
    """Update scheduler settings.

    Returns:
        True if updated
    """
    return _apply_updates(
        conn,
        {
            "scheduler_enabled": enabled,
            "scheduler_interval_minutes": interval_minutes,
        },
    )


def update_notification_settings(
    conn: Connection,
    store_enabled: bool | None = None,
    webhook_url: str | None = None,
    webhook_timeout: float | None = None,
    webhook_retries: int | None = None,
) -> bool:
    """Update notification settings.

    Pass webhook_url="" to disable webhook delivery.

    Returns:
        True if updated
    """
    return _apply_updates(
        conn,
        {
            "notifications_store_enabled": store_enabled,
            "notifications_webhook_url": webhook_url,
            "notifications_webhook_timeout": webhook_timeout,
            "notifications_webhook_retries": webhook_retries,
        },
    )


def update_event_store_settings(
    conn: Connection,
    url: str | None = None,
    token: str | None = None,
    timeout: float | None = None,
    retries: int | None = None,
) -> bool:
    """Update remote event store settings.

    Pass url="" to switch back to the local event tables.

    Returns:
        True if updated
    """
    return _apply_updates(
        conn,
        {
            "event_store_url": url,
            "event_store_token": token,
            "event_store_timeout": timeout,
            "event_store_retries": retries,
        },
    )
