"""Core types and interfaces."""

from playmatch.core.districts import DEFAULT_GRAPH, DistrictGraph
from playmatch.core.errors import (
    ExternalStoreError,
    InvalidTransitionError,
    NotFoundError,
    PlaymatchError,
    ValidationError,
)
from playmatch.core.interfaces import AttendanceStore, EventSource
from playmatch.core.types import (
    Availability,
    CandidateEvent,
    District,
    MatchProposal,
    MatchScore,
    ProposalStatus,
    Zone,
)

__all__ = [
    "AttendanceStore",
    "Availability",
    "CandidateEvent",
    "DEFAULT_GRAPH",
    "District",
    "DistrictGraph",
    "EventSource",
    "ExternalStoreError",
    "InvalidTransitionError",
    "MatchProposal",
    "MatchScore",
    "NotFoundError",
    "PlaymatchError",
    "ProposalStatus",
    "ValidationError",
    "Zone",
]
