"""API route modules."""

from fastapi import HTTPException, Request, status

from playmatch.bootstrap import MatchingServices
from playmatch.core.errors import (
    ExternalStoreError,
    InvalidTransitionError,
    NotFoundError,
    PlaymatchError,
    ValidationError,
)

# Core error -> HTTP status
ERROR_STATUS: dict[type[PlaymatchError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    ExternalStoreError: status.HTTP_502_BAD_GATEWAY,
}


def get_services(request: Request) -> MatchingServices:
    """FastAPI dependency returning the app's service graph."""
    return request.app.state.services


def to_http_error(error: PlaymatchError) -> HTTPException:
    """Map a core error onto an HTTPException.

    Usage:
        try:
            proposal = services.proposals.accept(proposal_id)
        except PlaymatchError as e:
            raise to_http_error(e) from e
    """
    for error_type, code in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=code, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
