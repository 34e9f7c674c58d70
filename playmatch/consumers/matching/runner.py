"""Background matching runner.

Turns good availability/event pairs into proposals. Invoked when an event
is flagged as looking for players, when a player opens a window, and
periodically by the scheduler.

A pair becomes a proposal when:
- the player does not organize the event and is not already attending
- the player has not already accepted or declined a proposal for it
- the event has not started yet
- sports match and the event starts inside the window
- the total score reaches the configured minimum

This is single-pass scoring: each pair is judged on its own, with no
assignment across players or events.
"""

import logging
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from playmatch.consumers.matching.constants import DEFAULT_PROPOSAL_MIN_SCORE
from playmatch.consumers.matching.scorer import MatchScorer
from playmatch.core.errors import NotFoundError
from playmatch.core.interfaces import EventSource
from playmatch.core.types import Availability, CandidateEvent
from playmatch.services.availability import AvailabilityRegistry
from playmatch.services.proposals import ProposalEngine
from playmatch.utilities.tz import now_utc

logger = logging.getLogger(__name__)


@dataclass
class MatchRunResult:
    """Outcome of one matching run."""

    proposals_created: int = 0
    proposals_existing: int = 0
    pairs_evaluated: int = 0
    skipped: Counter = field(default_factory=Counter)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "proposals_created": self.proposals_created,
            "proposals_existing": self.proposals_existing,
            "pairs_evaluated": self.pairs_evaluated,
            "skipped": dict(self.skipped),
            "errors": list(self.errors),
        }


class MatchingRunner:
    """Match active availability windows against open events.

    Usage:
        runner = MatchingRunner(events, registry, engine, min_score=50)
        result = runner.run_for_event("evt-42")
        print(result.proposals_created)
    """

    def __init__(
        self,
        events: EventSource,
        availability: AvailabilityRegistry,
        proposals: ProposalEngine,
        scorer: MatchScorer | None = None,
        min_score: int = DEFAULT_PROPOSAL_MIN_SCORE,
        lookahead_days: int = 30,
        clock: Callable[[], datetime] = now_utc,
    ):
        """Initialize runner.

        Args:
            events: Event store read side
            availability: Registry supplying active windows
            proposals: Engine that creates the proposals
            scorer: Match scorer (default district graph if omitted)
            min_score: Minimum total score for a proposal
            lookahead_days: How far ahead run_all() looks for events
            clock: Source of "now"
        """
        self._events = events
        self._availability = availability
        self._proposals = proposals
        self._scorer = scorer or MatchScorer()
        self._min_score = min_score
        self._lookahead = timedelta(days=lookahead_days)
        self._clock = clock

    def run_for_event(self, event_id: str) -> MatchRunResult:
        """Match every active window against one event.

        Raises:
            NotFoundError: unknown event
        """
        event = self._events.get_event(event_id)
        if event is None:
            raise NotFoundError(f"Event not found: {event_id}")

        result = MatchRunResult()
        if not event.looking_for_players:
            logger.debug("[MATCHING] Event %s is not looking for players", event_id)
            return result

        now = self._clock()
        for availability in self._availability.list_active():
            self._evaluate(availability, event, now, result)

        self._log_result(f"event={event_id}", result)
        return result

    def run_for_player(self, player_id: str) -> MatchRunResult:
        """Match one player's active window against open events."""
        result = MatchRunResult()
        availability = self._availability.current(player_id)
        if availability is None:
            logger.debug("[MATCHING] No active window for player=%s", player_id)
            return result

        now = self._clock()
        # Only events starting inside the window can score on time
        events = self._events.list_open_events(
            sport=availability.sport,
            start_after=max(now, availability.available_from),
            start_before=availability.available_until,
        )
        for event in events:
            self._evaluate(availability, event, now, result)

        self._log_result(f"player={player_id}", result)
        return result

    def run_all(self) -> MatchRunResult:
        """Match every active window against every upcoming open event."""
        result = MatchRunResult()
        windows = self._availability.list_active()
        if not windows:
            return result

        now = self._clock()
        events = self._events.list_open_events(start_after=now, start_before=now + self._lookahead)
        for availability in windows:
            for event in events:
                self._evaluate(availability, event, now, result)

        self._log_result("all", result)
        return result

    # =========================================================================
    # PRIVATE METHODS
    # =========================================================================

    def _evaluate(
        self,
        availability: Availability,
        event: CandidateEvent,
        now: datetime,
        result: MatchRunResult,
    ) -> None:
        """Score one pair and propose it if it qualifies. Never raises."""
        result.pairs_evaluated += 1
        player_id = availability.player_id

        try:
            if event.created_by and event.created_by == player_id:
                result.skipped["own_event"] += 1
                return
            if event.start_time < now:
                result.skipped["started"] += 1
                return

            score = self._scorer.score(availability, event)
            if not score.sport:
                result.skipped["sport"] += 1
                return
            if not score.time:
                result.skipped["time"] += 1
                return
            if score.total < self._min_score:
                result.skipped["low_score"] += 1
                return
            if self._events.is_attending(event.id, player_id):
                result.skipped["attending"] += 1
                return
            if self._proposals.has_responded(player_id, event.id):
                result.skipped["responded"] += 1
                return

            _, created = self._proposals.propose_with_status(player_id, event.id, score.total)
            if created:
                result.proposals_created += 1
            else:
                result.proposals_existing += 1

        except Exception as e:
            # Per-pair error isolation
            logger.warning(
                "[MATCHING] Failed pair player=%s event=%s: %s", player_id, event.id, e
            )
            result.errors.append(f"{player_id}/{event.id}: {e}")

    def _log_result(self, scope: str, result: MatchRunResult) -> None:
        logger.info(
            "[MATCHING] Run %s: evaluated=%d created=%d existing=%d skipped=%d errors=%d",
            scope,
            result.pairs_evaluated,
            result.proposals_created,
            result.proposals_existing,
            sum(result.skipped.values()),
            len(result.errors),
        )
