"""Core data types for the matching subsystem.

Dataclasses shared by the database, services and API layers. Nothing here
touches storage; conversion from database rows happens in `from_row`.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from playmatch.utilities.tz import parse_datetime


class Zone(str, Enum):
    """Broad geographic grouping of districts."""

    CENTRE = "centre"
    RIVE_DROITE = "rive_droite"
    RIVE_GAUCHE = "rive_gauche"
    BANLIEUE = "banlieue"


@dataclass(frozen=True)
class District:
    """A named district (static reference data)."""

    id: str
    name: str
    name_fr: str
    zone: Zone
    neighborhoods: tuple[str, ...] = ()


@dataclass(frozen=True)
class Availability:
    """A player's single active "looking to play" window."""

    player_id: str
    sport: str
    available_from: datetime
    available_until: datetime
    district: str | None = None
    skill_level: int | None = None
    created_at: datetime | None = None

    @property
    def expires_at(self) -> datetime:
        return self.available_until

    def is_expired(self, now: datetime) -> bool:
        """A window is expired once `until` lies strictly in the past."""
        return self.available_until < now

    @classmethod
    def from_row(cls, row: dict) -> "Availability":
        return cls(
            player_id=row["player_id"],
            sport=row["sport"],
            available_from=parse_datetime(row["available_from"]),
            available_until=parse_datetime(row["available_until"]),
            district=row.get("district"),
            skill_level=row.get("skill_level"),
            created_at=parse_datetime(row.get("created_at")),
        )


@dataclass(frozen=True)
class CandidateEvent:
    """Read-only projection of an event from the event store."""

    id: str
    sport: str | None
    start_time: datetime
    end_time: datetime
    title: str = ""
    district: str | None = None
    skill_min: int | None = None
    skill_max: int | None = None
    looking_for_players: bool = True
    created_by: str | None = None
    max_participants: int | None = None
    players_needed: int | None = None

    @classmethod
    def from_row(cls, row: dict) -> "CandidateEvent":
        return cls(
            id=str(row["id"]),
            sport=row.get("sport"),
            start_time=parse_datetime(row["start_time"]),
            end_time=parse_datetime(row["end_time"]),
            title=row.get("title") or "",
            district=row.get("district"),
            skill_min=row.get("skill_min"),
            skill_max=row.get("skill_max"),
            looking_for_players=bool(row.get("looking_for_players", True)),
            created_by=row.get("created_by"),
            max_participants=row.get("max_participants"),
            players_needed=row.get("players_needed"),
        )


@dataclass(frozen=True)
class MatchScore:
    """Composite compatibility score between one window and one event.

    Transient: computed on demand, never persisted.
    """

    sport: int
    location: int
    time: int
    skill: int
    label: str

    @property
    def total(self) -> int:
        return self.sport + self.location + self.time + self.skill

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "total": self.total,
            "breakdown": {
                "sport": self.sport,
                "location": self.location,
                "time": self.time,
                "skill": self.skill,
            },
            "label": self.label,
        }


class ProposalStatus(str, Enum):
    """Proposal lifecycle states. Accepted and declined are terminal."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"

    @property
    def is_terminal(self) -> bool:
        return self is not ProposalStatus.PENDING


@dataclass(frozen=True)
class MatchProposal:
    """A candidate pairing of one player with one open event."""

    id: str
    event_id: str
    player_id: str
    status: ProposalStatus
    created_at: datetime
    responded_at: datetime | None = None
    commitment_acknowledged_at: datetime | None = None
    score: int | None = None

    @classmethod
    def from_row(cls, row: dict) -> "MatchProposal":
        return cls(
            id=row["id"],
            event_id=str(row["event_id"]),
            player_id=row["player_id"],
            status=ProposalStatus(row["status"]),
            created_at=parse_datetime(row["created_at"]),
            responded_at=parse_datetime(row.get("responded_at")),
            commitment_acknowledged_at=parse_datetime(row.get("commitment_acknowledged_at")),
            score=row.get("score"),
        )
