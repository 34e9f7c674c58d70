"""Open game discovery.

Lists events looking for players, optionally ranked against the
requester's availability window:

- with an active window: scored events first, by total score descending,
  ties broken by earliest start; unscored events (no sport) follow by start
- without one: no scores, earliest start first

Every call is a fresh query; there is no cursor state between calls.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from playmatch.consumers.matching.constants import SKILL_LEVEL_MAX, SKILL_LEVEL_MIN
from playmatch.consumers.matching.scorer import MatchScorer
from playmatch.core.interfaces import EventSource
from playmatch.core.types import Availability, CandidateEvent, MatchScore
from playmatch.services.availability import AvailabilityRegistry
from playmatch.utilities.tz import now_utc, to_utc

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50


@dataclass(frozen=True)
class GameFilters:
    """Filters applied before scoring."""

    sport: str | None = None
    district: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    skill_level: int | None = None


@dataclass(frozen=True)
class DiscoveredGame:
    """One open game in a discovery result."""

    event: CandidateEvent
    score: MatchScore | None
    attending_count: int
    spots_left: int | None


def spots_left(event: CandidateEvent, attending_count: int) -> int | None:
    """Remaining places: players_needed first, else max_participants."""
    capacity = event.players_needed or event.max_participants
    if not capacity:
        return None
    return max(0, capacity - attending_count)


def within_skill_reach(event: CandidateEvent, skill_level: int) -> bool:
    """Keep events whose range, widened by one level each way, holds the level."""
    min_level = event.skill_min or SKILL_LEVEL_MIN
    max_level = event.skill_max or SKILL_LEVEL_MAX
    return min_level - 1 <= skill_level <= max_level + 1


class GameDiscoveryQuery:
    """Read-side query over open games."""

    def __init__(
        self,
        events: EventSource,
        availability: AvailabilityRegistry | None = None,
        scorer: MatchScorer | None = None,
        clock: Callable[[], datetime] = now_utc,
        limit: int = DEFAULT_LIMIT,
    ):
        self._events = events
        self._availability = availability
        self._scorer = scorer or MatchScorer()
        self._clock = clock
        self._limit = limit

    def list_open_games(
        self,
        filters: GameFilters | None = None,
        requester_availability: Availability | None = None,
        limit: int | None = None,
    ) -> list[DiscoveredGame]:
        """List open games, ranked by match score when a window is given.

        Args:
            filters: Sport/district/date/skill filters
            requester_availability: Active window of the requesting player
            limit: Maximum number of results (defaults to the configured limit)
        """
        filters = filters or GameFilters()
        now = self._clock()
        start_after = max(now, to_utc(filters.date_from)) if filters.date_from else now
        start_before = to_utc(filters.date_to) if filters.date_to else None

        events = self._events.list_open_events(
            sport=filters.sport,
            district=filters.district,
            start_after=start_after,
            start_before=start_before,
        )

        if filters.skill_level:
            events = [e for e in events if within_skill_reach(e, filters.skill_level)]

        counts = self._events.attendance_counts(e.id for e in events)

        games = []
        for event in events:
            score = None
            if requester_availability is not None and event.sport:
                score = self._scorer.score(requester_availability, event)
            attending = counts.get(event.id, 0)
            games.append(
                DiscoveredGame(
                    event=event,
                    score=score,
                    attending_count=attending,
                    spots_left=spots_left(event, attending),
                )
            )

        if requester_availability is not None:
            games.sort(key=_ranked_order)
        else:
            games.sort(key=lambda g: (g.event.start_time, g.event.id))

        result = games[: limit or self._limit]
        logger.debug(
            "[DISCOVERY] %d open games (scored=%s) sport=%s district=%s",
            len(result),
            requester_availability is not None,
            filters.sport,
            filters.district,
        )
        return result

    def list_for_player(
        self,
        player_id: str | None,
        filters: GameFilters | None = None,
        limit: int | None = None,
    ) -> tuple[list[DiscoveredGame], Availability | None]:
        """Look up the player's active window, then list open games.

        Returns:
            Tuple of (games, the window used for scoring or None)
        """
        availability = None
        if player_id and self._availability is not None:
            availability = self._availability.current(player_id)
        return self.list_open_games(filters, availability, limit), availability


def _ranked_order(game: DiscoveredGame) -> tuple:
    if game.score is None:
        return (1, 0, game.event.start_time, game.event.id)
    return (0, -game.score.total, game.event.start_time, game.event.id)
