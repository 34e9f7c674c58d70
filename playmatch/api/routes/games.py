"""Open game discovery endpoint."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from playmatch.api.models import GameListResponse, GameResponse
from playmatch.api.routes import get_services
from playmatch.bootstrap import MatchingServices
from playmatch.core.sports import get_sport_display_name
from playmatch.services import DiscoveredGame, GameFilters

router = APIRouter()


def _game_to_response(game: DiscoveredGame) -> GameResponse:
    event = game.event
    return GameResponse(
        id=event.id,
        title=event.title,
        sport=event.sport,
        sport_name=get_sport_display_name(event.sport) or None,
        start_time=event.start_time,
        end_time=event.end_time,
        district=event.district,
        skill_min=event.skill_min,
        skill_max=event.skill_max,
        created_by=event.created_by,
        max_participants=event.max_participants,
        players_needed=event.players_needed,
        attending_count=game.attending_count,
        spots_left=game.spots_left,
        match_score=game.score.to_dict() if game.score else None,
    )


@router.get("/games", response_model=GameListResponse)
def list_games(
    sport: str | None = Query(None),
    district: str | None = Query(None),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
    skill_level: int | None = Query(None, ge=1, le=5),
    player_id: str | None = Query(None, description="Rank against this player's window"),
    limit: int | None = Query(None, ge=1, le=200),
    services: MatchingServices = Depends(get_services),
):
    """List open games looking for players.

    With a player_id whose window is active, games are ranked by match
    score; otherwise they are ordered by start time.
    """
    filters = GameFilters(
        sport=sport,
        district=district,
        date_from=date_from,
        date_to=date_to,
        skill_level=skill_level,
    )
    games, availability = services.discovery.list_for_player(player_id, filters, limit)
    return GameListResponse(
        games=[_game_to_response(g) for g in games],
        scored=availability is not None,
        total=len(games),
    )
