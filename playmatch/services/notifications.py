"""Domain events and notification sinks.

Services publish DomainEvents on an EventBus. Publishing is fire-and-forget:
a failing subscriber is logged and never affects the operation that
published the event.

Sinks:
- NotificationStoreSink: writes in-app notifications for proposal events
- WebhookSink: forwards every event to an external webhook
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock

from playmatch.database.notifications import insert_notification
from playmatch.utilities.tz import now_utc, to_iso
from playmatch.webhooks.client import WebhookClient

logger = logging.getLogger(__name__)

PROPOSAL_CREATED = "proposal.created"
PROPOSAL_ACCEPTED = "proposal.accepted"
PROPOSAL_DECLINED = "proposal.declined"
AVAILABILITY_OPENED = "availability.opened"
AVAILABILITY_CANCELLED = "availability.cancelled"


@dataclass(frozen=True)
class DomainEvent:
    """Something that happened in the matching core."""

    type: str
    player_id: str
    event_id: str | None = None
    proposal_id: str | None = None
    payload: dict = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=now_utc)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "type": self.type,
            "player_id": self.player_id,
            "event_id": self.event_id,
            "proposal_id": self.proposal_id,
            "payload": self.payload,
            "occurred_at": to_iso(self.occurred_at),
        }


Subscriber = Callable[[DomainEvent], None]


class EventBus:
    """In-process publish/subscribe for domain events.

    Subscribers run synchronously in the publisher's thread, in
    subscription order.
    """

    def __init__(self):
        self._subscribers: list[Subscriber] = []
        self._lock = Lock()

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register a subscriber.

        Returns:
            Function that removes the subscription
        """
        with self._lock:
            self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            with self._lock:
                if subscriber in self._subscribers:
                    self._subscribers.remove(subscriber)

        return unsubscribe

    def publish(self, event: DomainEvent) -> None:
        with self._lock:
            subscribers = list(self._subscribers)

        for subscriber in subscribers:
            try:
                subscriber(event)
            except Exception as e:
                logger.warning(
                    "[EVENTS] Subscriber %r failed for %s: %s",
                    getattr(subscriber, "__name__", subscriber),
                    event.type,
                    e,
                )


class NotificationStoreSink:
    """Write in-app notifications for proposal events."""

    MESSAGES = {
        PROPOSAL_CREATED: (
            "match_proposal",
            "Match Found!",
            'We found a match for you: "{title}"',
        ),
        PROPOSAL_ACCEPTED: (
            "match_accepted",
            "Match accepted!",
            'You\'re now committed to attend "{title}".',
        ),
        PROPOSAL_DECLINED: (
            "match_declined",
            "Proposal declined",
            "We'll keep looking for other matches.",
        ),
    }

    def __init__(self, db_factory):
        self._db_factory = db_factory

    def __call__(self, event: DomainEvent) -> None:
        entry = self.MESSAGES.get(event.type)
        if entry is None:
            return

        notification_type, title, template = entry
        event_title = event.payload.get("event_title") or "an open game"
        with self._db_factory() as conn:
            insert_notification(
                conn,
                player_id=event.player_id,
                type=notification_type,
                title=title,
                message=template.format(title=event_title),
                created_at=event.occurred_at,
                link=f"/events/{event.event_id}" if event.event_id else None,
                metadata={
                    "event_id": event.event_id,
                    "proposal_id": event.proposal_id,
                    "event_title": event.payload.get("event_title"),
                },
            )


class WebhookSink:
    """Forward domain events to an external webhook."""

    def __init__(self, client: WebhookClient):
        self._client = client

    def __call__(self, event: DomainEvent) -> None:
        if not self._client.send(event.to_dict()):
            logger.warning("[EVENTS] Webhook delivery failed for %s", event.type)
