"""Event store implementations.

SqliteEventStore reads the local events tables; RemoteEventStore talks to
the platform's event service over HTTP. create_event_store() picks one from
EventStoreSettings.
"""

import logging

from playmatch.database.settings import get_event_store_settings
from playmatch.eventstore.client import EventStoreClient
from playmatch.eventstore.local import SqliteEventStore
from playmatch.eventstore.remote import RemoteEventStore

logger = logging.getLogger(__name__)


def create_event_store(db_factory) -> SqliteEventStore | RemoteEventStore:
    """Build the configured event store.

    Args:
        db_factory: Zero-argument factory returning a database context manager
    """
    with db_factory() as conn:
        settings = get_event_store_settings(conn)

    if settings.url:
        logger.info("[EVENT STORE] Using remote event store at %s", settings.url)
        client = EventStoreClient(
            settings.url,
            token=settings.token,
            timeout=settings.timeout,
            max_retries=settings.retries,
        )
        return RemoteEventStore(client)

    return SqliteEventStore(db_factory)


__all__ = [
    "EventStoreClient",
    "RemoteEventStore",
    "SqliteEventStore",
    "create_event_store",
]
