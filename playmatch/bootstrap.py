"""Service wiring.

build_services() wires the registry, engine, discovery query and matching
runner around one database and one event store, reading their settings
from the settings table.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from playmatch.consumers.matching.runner import MatchingRunner
from playmatch.consumers.matching.scorer import MatchScorer
from playmatch.core.districts import DEFAULT_GRAPH, DistrictGraph
from playmatch.core.interfaces import AttendanceStore, EventSource
from playmatch.database.settings import AllSettings, get_all_settings
from playmatch.eventstore import create_event_store
from playmatch.services.availability import AvailabilityRegistry
from playmatch.services.discovery import GameDiscoveryQuery
from playmatch.services.notifications import (
    AVAILABILITY_OPENED,
    DomainEvent,
    EventBus,
    NotificationStoreSink,
    WebhookSink,
)
from playmatch.services.proposals import ProposalEngine
from playmatch.utilities.tz import now_utc
from playmatch.webhooks.client import WebhookClient

logger = logging.getLogger(__name__)


@dataclass
class MatchingServices:
    """Everything the API and scheduler need, sharing one bus and store."""

    db_factory: Callable
    settings: AllSettings
    bus: EventBus
    events: EventSource
    scorer: MatchScorer
    availability: AvailabilityRegistry
    proposals: ProposalEngine
    discovery: GameDiscoveryQuery
    runner: MatchingRunner


def build_services(
    db_factory,
    event_store: EventSource | None = None,
    graph: DistrictGraph = DEFAULT_GRAPH,
    clock: Callable[[], datetime] = now_utc,
    match_on_availability: bool = True,
) -> MatchingServices:
    """Build the service graph.

    Args:
        db_factory: Zero-argument factory returning a database context manager
        event_store: Event store implementing EventSource and AttendanceStore;
            built from settings when omitted
        graph: District graph for validation and scoring
        clock: Source of "now" shared by every service
        match_on_availability: Run matching for a player as soon as they
            open a window
    """
    with db_factory() as conn:
        settings = get_all_settings(conn)

    store = event_store or create_event_store(db_factory)
    attendance: AttendanceStore = store  # type: ignore[assignment]

    bus = EventBus()
    scorer = MatchScorer(graph)
    availability = AvailabilityRegistry(db_factory, bus=bus, graph=graph, clock=clock)
    proposals = ProposalEngine(
        db_factory,
        events=store,
        attendance=attendance,
        availability=availability,
        bus=bus,
        clock=clock,
    )
    discovery = GameDiscoveryQuery(
        store,
        availability=availability,
        scorer=scorer,
        clock=clock,
        limit=settings.matching.discovery_limit,
    )
    runner = MatchingRunner(
        store,
        availability,
        proposals,
        scorer=scorer,
        min_score=settings.matching.min_score,
        lookahead_days=settings.matching.lookahead_days,
        clock=clock,
    )

    if settings.notifications.store_enabled:
        bus.subscribe(NotificationStoreSink(db_factory))
    if settings.notifications.webhook_url:
        logger.info("[EVENTS] Forwarding domain events to %s", settings.notifications.webhook_url)
        bus.subscribe(
            WebhookSink(
                WebhookClient(
                    settings.notifications.webhook_url,
                    timeout=settings.notifications.webhook_timeout,
                    max_retries=settings.notifications.webhook_retries,
                )
            )
        )
    if match_on_availability:

        def match_new_window(event: DomainEvent) -> None:
            if event.type == AVAILABILITY_OPENED:
                runner.run_for_player(event.player_id)

        bus.subscribe(match_new_window)

    return MatchingServices(
        db_factory=db_factory,
        settings=settings,
        bus=bus,
        events=store,
        scorer=scorer,
        availability=availability,
        proposals=proposals,
        discovery=discovery,
        runner=runner,
    )

