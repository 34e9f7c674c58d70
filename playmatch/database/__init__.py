"""Database layer."""

from playmatch.database.connection import db_factory, get_connection, get_db, init_db, reset_db
from playmatch.database.settings import (
    AllSettings,
    EventStoreSettings,
    MatchingSettings,
    NotificationSettings,
    SchedulerSettings,
    get_all_settings,
    get_event_store_settings,
    get_matching_settings,
    get_notification_settings,
    get_scheduler_settings,
)

__all__ = [
    # Connection
    "db_factory",
    "get_connection",
    "get_db",
    "init_db",
    "reset_db",
    # Settings
    "AllSettings",
    "EventStoreSettings",
    "MatchingSettings",
    "NotificationSettings",
    "SchedulerSettings",
    "get_all_settings",
    "get_event_store_settings",
    "get_matching_settings",
    "get_notification_settings",
    "get_scheduler_settings",
]
