"""Match proposal endpoints.

A proposal is created pending, then resolved exactly once by the player:
accept commits attendance on the event, decline just closes it.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from playmatch.api.models import ProposalCreate, ProposalResponse
from playmatch.api.routes import get_services, to_http_error
from playmatch.bootstrap import MatchingServices
from playmatch.core.errors import PlaymatchError
from playmatch.core.types import MatchProposal, ProposalStatus

logger = logging.getLogger(__name__)

router = APIRouter()


def _proposal_to_response(proposal: MatchProposal) -> ProposalResponse:
    return ProposalResponse(
        id=proposal.id,
        event_id=proposal.event_id,
        player_id=proposal.player_id,
        status=proposal.status.value,
        created_at=proposal.created_at,
        responded_at=proposal.responded_at,
        commitment_acknowledged_at=proposal.commitment_acknowledged_at,
        score=proposal.score,
    )


@router.post("/proposals", response_model=ProposalResponse, status_code=status.HTTP_201_CREATED)
def create_proposal(
    body: ProposalCreate,
    response: Response,
    services: MatchingServices = Depends(get_services),
):
    """Propose an event to a player.

    Returns 201 for a new proposal, 200 when a pending one already existed.
    """
    try:
        proposal, created = services.proposals.propose_with_status(body.player_id, body.event_id)
    except PlaymatchError as e:
        raise to_http_error(e) from e

    if not created:
        response.status_code = status.HTTP_200_OK
    return _proposal_to_response(proposal)


@router.get("/proposals/{proposal_id}", response_model=ProposalResponse)
def get_proposal(proposal_id: str, services: MatchingServices = Depends(get_services)):
    try:
        proposal = services.proposals.get(proposal_id)
    except PlaymatchError as e:
        raise to_http_error(e) from e
    return _proposal_to_response(proposal)


@router.post("/proposals/{proposal_id}/accept", response_model=ProposalResponse)
def accept_proposal(proposal_id: str, services: MatchingServices = Depends(get_services)):
    """Accept a pending proposal and commit the player to the event."""
    try:
        proposal = services.proposals.accept(proposal_id)
    except PlaymatchError as e:
        raise to_http_error(e) from e
    return _proposal_to_response(proposal)


@router.post("/proposals/{proposal_id}/decline", response_model=ProposalResponse)
def decline_proposal(proposal_id: str, services: MatchingServices = Depends(get_services)):
    """Decline a pending proposal."""
    try:
        proposal = services.proposals.decline(proposal_id)
    except PlaymatchError as e:
        raise to_http_error(e) from e
    return _proposal_to_response(proposal)


@router.get("/players/{player_id}/proposals", response_model=list[ProposalResponse])
def list_player_proposals(
    player_id: str,
    status_filter: str | None = Query(
        "pending", alias="status", description="pending, accepted, declined or all"
    ),
    services: MatchingServices = Depends(get_services),
):
    """List a player's proposals, newest first."""
    if status_filter in (None, "", "all"):
        wanted = None
    else:
        try:
            wanted = ProposalStatus(status_filter)
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status: {status_filter}",
            ) from e

    return [
        _proposal_to_response(p)
        for p in services.proposals.list_for_player(player_id, status=wanted)
    ]
