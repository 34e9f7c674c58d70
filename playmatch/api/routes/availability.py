"""Player availability endpoints.

- PUT    /players/{player_id}/availability - open (replaces any prior window)
- GET    /players/{player_id}/availability - current window, 404 if none
- DELETE /players/{player_id}/availability - cancel, always 204
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from playmatch.api.models import AvailabilityOpen, AvailabilityResponse
from playmatch.api.routes import get_services, to_http_error
from playmatch.bootstrap import MatchingServices
from playmatch.core.errors import PlaymatchError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.put("/players/{player_id}/availability", response_model=AvailabilityResponse)
def open_availability(
    player_id: str,
    body: AvailabilityOpen,
    services: MatchingServices = Depends(get_services),
):
    """Open an availability window for a player."""
    try:
        availability = services.availability.open(
            player_id,
            sport=body.sport,
            available_from=body.available_from,
            available_until=body.available_until,
            district=body.district,
            skill_level=body.skill_level,
        )
    except PlaymatchError as e:
        raise to_http_error(e) from e
    return AvailabilityResponse.model_validate(availability)


@router.get("/players/{player_id}/availability", response_model=AvailabilityResponse)
def get_availability(player_id: str, services: MatchingServices = Depends(get_services)):
    """Get a player's active window."""
    availability = services.availability.current(player_id)
    if availability is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="No active availability"
        )
    return AvailabilityResponse.model_validate(availability)


@router.delete("/players/{player_id}/availability", status_code=status.HTTP_204_NO_CONTENT)
def cancel_availability(player_id: str, services: MatchingServices = Depends(get_services)):
    """Cancel a player's window. Nothing to cancel is not an error."""
    services.availability.cancel(player_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
