"""Availability registry.

Holds each player's single active "looking to play" window.

- open() replaces any prior window (no history is kept)
- cancel() is a no-op when there is nothing to cancel
- current() never returns an expired window, whether or not it has been
  purged yet

Uniqueness per player is enforced by the storage upsert, so concurrent
open() calls for one player leave exactly one window (the last writer's).
"""

import logging
from collections.abc import Callable
from datetime import datetime

from playmatch.core.districts import DEFAULT_GRAPH, DistrictGraph
from playmatch.core.errors import ValidationError
from playmatch.core.sports import normalize_sport
from playmatch.core.types import Availability
from playmatch.database import availability as availability_db
from playmatch.services.notifications import (
    AVAILABILITY_CANCELLED,
    AVAILABILITY_OPENED,
    DomainEvent,
    EventBus,
)
from playmatch.utilities.tz import now_utc, to_utc

logger = logging.getLogger(__name__)

SKILL_LEVELS = range(1, 6)


class AvailabilityRegistry:
    """Create, cancel and read player availability windows."""

    def __init__(
        self,
        db_factory,
        bus: EventBus | None = None,
        graph: DistrictGraph = DEFAULT_GRAPH,
        clock: Callable[[], datetime] = now_utc,
    ):
        """Initialize registry.

        Args:
            db_factory: Zero-argument factory returning a database context manager
            bus: Event bus for availability events (optional)
            graph: District graph used to validate district ids
            clock: Source of "now" for expiry checks
        """
        self._db_factory = db_factory
        self._bus = bus
        self._graph = graph
        self._clock = clock

    def open(
        self,
        player_id: str,
        sport: str,
        available_from: datetime,
        available_until: datetime,
        district: str | None = None,
        skill_level: int | None = None,
    ) -> Availability:
        """Open a window for a player, superseding any existing one.

        Raises:
            ValidationError: invalid window, sport, district or skill level
        """
        available_from = to_utc(available_from)
        available_until = to_utc(available_until)

        if not player_id:
            raise ValidationError("player_id is required")
        if available_from >= available_until:
            raise ValidationError("available_from must be before available_until")
        code = normalize_sport(sport)
        if not code:
            raise ValidationError("sport is required")
        if district is not None and self._graph.get(district) is None:
            raise ValidationError(f"Unknown district: {district}")
        if skill_level is not None and (
            not isinstance(skill_level, int)
            or isinstance(skill_level, bool)
            or skill_level not in SKILL_LEVELS
        ):
            raise ValidationError("skill_level must be between 1 and 5")

        availability = Availability(
            player_id=player_id,
            sport=code,
            available_from=available_from,
            available_until=available_until,
            district=district,
            skill_level=skill_level,
            created_at=self._clock(),
        )

        with self._db_factory() as conn:
            availability_db.upsert_availability(conn, availability)

        logger.info(
            "[AVAILABILITY] Opened player=%s sport=%s window=%s..%s district=%s",
            player_id,
            code,
            available_from.isoformat(),
            available_until.isoformat(),
            district,
        )
        self._publish(
            DomainEvent(
                type=AVAILABILITY_OPENED,
                player_id=player_id,
                payload={"sport": code, "district": district},
            )
        )
        return availability

    def cancel(self, player_id: str) -> bool:
        """Remove the player's window if present.

        Returns:
            True if a window was removed, False if there was none
        """
        with self._db_factory() as conn:
            removed = availability_db.delete_availability(conn, player_id)

        if removed:
            logger.info("[AVAILABILITY] Cancelled player=%s", player_id)
            self._publish(DomainEvent(type=AVAILABILITY_CANCELLED, player_id=player_id))
        return removed

    def current(self, player_id: str) -> Availability | None:
        """Get the player's active window, treating expired windows as absent."""
        with self._db_factory() as conn:
            availability = availability_db.get_availability(conn, player_id)

        if availability is None or availability.is_expired(self._clock()):
            return None
        return availability

    def list_active(self) -> list[Availability]:
        """Get every non-expired window."""
        with self._db_factory() as conn:
            return availability_db.list_active_availability(conn, self._clock())

    def purge_expired(self) -> int:
        """Physically delete expired windows.

        Returns:
            Number of windows removed
        """
        with self._db_factory() as conn:
            return availability_db.delete_expired_availability(conn, self._clock())

    def _publish(self, event: DomainEvent) -> None:
        if self._bus is not None:
            self._bus.publish(event)
