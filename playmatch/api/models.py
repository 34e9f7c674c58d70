"""Pydantic models for API requests and responses."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Districts
# =============================================================================


class DistrictResponse(BaseModel):
    """A district with its zone."""

    id: str
    name: str
    name_fr: str
    zone: str
    zone_label: str
    neighborhoods: list[str] = []


class DistrictDetailResponse(DistrictResponse):
    """A district with its (symmetric) neighbours."""

    adjacent: list[str] = []


# =============================================================================
# Availability
# =============================================================================


class AvailabilityOpen(BaseModel):
    """Request body for opening an availability window."""

    sport: str
    available_from: datetime
    available_until: datetime
    district: str | None = None
    skill_level: int | None = Field(default=None, ge=1, le=5)


class AvailabilityResponse(BaseModel):
    """Response body for an availability window."""

    model_config = ConfigDict(from_attributes=True)

    player_id: str
    sport: str
    available_from: datetime
    available_until: datetime
    expires_at: datetime
    district: str | None
    skill_level: int | None
    created_at: datetime | None


# =============================================================================
# Scores
# =============================================================================


class ScoreBreakdown(BaseModel):
    sport: int
    location: int
    time: int
    skill: int


class MatchScoreResponse(BaseModel):
    """Composite match score."""

    total: int
    breakdown: ScoreBreakdown
    label: str


# =============================================================================
# Proposals
# =============================================================================


class ProposalCreate(BaseModel):
    """Request body for proposing (expressing interest in) an event."""

    player_id: str
    event_id: str


class ProposalResponse(BaseModel):
    """Response body for a match proposal."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    event_id: str
    player_id: str
    status: str
    created_at: datetime
    responded_at: datetime | None = None
    commitment_acknowledged_at: datetime | None = None
    score: int | None = None


# =============================================================================
# Games
# =============================================================================


class GameResponse(BaseModel):
    """An open game in a discovery listing."""

    id: str
    title: str
    sport: str | None
    sport_name: str | None = None
    start_time: datetime
    end_time: datetime
    district: str | None
    skill_min: int | None
    skill_max: int | None
    created_by: str | None
    max_participants: int | None
    players_needed: int | None
    attending_count: int
    spots_left: int | None
    match_score: MatchScoreResponse | None = None


class GameListResponse(BaseModel):
    """Discovery result."""

    games: list[GameResponse]
    scored: bool
    total: int


# =============================================================================
# Matching
# =============================================================================


class MatchRunRequest(BaseModel):
    """Request body for triggering a matching run.

    With neither field set, every active window is matched.
    """

    event_id: str | None = None
    player_id: str | None = None


class MatchRunResponse(BaseModel):
    proposals_created: int
    proposals_existing: int
    pairs_evaluated: int
    skipped: dict[str, int]
    errors: list[str]


# =============================================================================
# Notifications
# =============================================================================


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    player_id: str
    type: str
    title: str
    message: str
    link: str | None
    metadata: dict
    is_read: bool
    created_at: datetime
