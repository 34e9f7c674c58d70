"""In-app notification inbox endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from playmatch.api.models import NotificationResponse
from playmatch.api.routes import get_services
from playmatch.bootstrap import MatchingServices
from playmatch.database.notifications import list_notifications, mark_notification_read

router = APIRouter()


@router.get("/players/{player_id}/notifications", response_model=list[NotificationResponse])
def get_notifications(
    player_id: str,
    unread_only: bool = Query(False),
    services: MatchingServices = Depends(get_services),
):
    with services.db_factory() as conn:
        notifications = list_notifications(conn, player_id, unread_only=unread_only)
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.post("/notifications/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
def read_notification(notification_id: int, services: MatchingServices = Depends(get_services)):
    with services.db_factory() as conn:
        found = mark_notification_read(conn, notification_id)
    if not found:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
