"""Matching trigger endpoint."""

import logging

from fastapi import APIRouter, Depends

from playmatch.api.models import MatchRunRequest, MatchRunResponse
from playmatch.api.routes import get_services, to_http_error
from playmatch.bootstrap import MatchingServices
from playmatch.core.errors import PlaymatchError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/matching/run", response_model=MatchRunResponse)
def run_matching(
    body: MatchRunRequest | None = None,
    services: MatchingServices = Depends(get_services),
):
    """Run matching for one event, one player, or every active window."""
    body = body or MatchRunRequest()
    try:
        if body.event_id:
            result = services.runner.run_for_event(body.event_id)
        elif body.player_id:
            result = services.runner.run_for_player(body.player_id)
        else:
            result = services.runner.run_all()
    except PlaymatchError as e:
        raise to_http_error(e) from e

    logger.info(
        "[MATCH] Manual run: %d created, %d existing",
        result.proposals_created,
        result.proposals_existing,
    )
    return MatchRunResponse(**result.to_dict())
