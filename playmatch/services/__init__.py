"""Service layer.

Wiring of these services around one database lives in playmatch.bootstrap.
"""

from playmatch.services.availability import AvailabilityRegistry
from playmatch.services.discovery import DiscoveredGame, GameDiscoveryQuery, GameFilters
from playmatch.services.notifications import DomainEvent, EventBus
from playmatch.services.proposals import ProposalEngine

__all__ = [
    "AvailabilityRegistry",
    "DiscoveredGame",
    "DomainEvent",
    "EventBus",
    "GameDiscoveryQuery",
    "GameFilters",
    "ProposalEngine",
]
