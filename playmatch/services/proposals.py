"""Match proposal engine.

State machine:

    pending --accept--> accepted   (terminal, binding)
    pending --decline-> declined   (terminal)

Leaving a terminal state is an error, never a silent no-op. There is no
way back from `accepted`: a player who changes their mind goes through the
event's own attendance cancellation, outside this service.

propose() is idempotent per (player, event) while a pending proposal
exists. A decided proposal does not block a fresh one.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from playmatch.core.errors import (
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from playmatch.core.interfaces import AttendanceStore, EventSource
from playmatch.core.types import MatchProposal, ProposalStatus
from playmatch.database import proposals as proposal_db
from playmatch.services.availability import AvailabilityRegistry
from playmatch.services.notifications import (
    PROPOSAL_ACCEPTED,
    PROPOSAL_CREATED,
    PROPOSAL_DECLINED,
    DomainEvent,
    EventBus,
)
from playmatch.utilities.tz import now_utc

logger = logging.getLogger(__name__)


class ProposalEngine:
    """Create, track and resolve match proposals."""

    def __init__(
        self,
        db_factory,
        events: EventSource,
        attendance: AttendanceStore,
        availability: AvailabilityRegistry | None = None,
        bus: EventBus | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        """Initialize engine.

        Args:
            db_factory: Zero-argument factory returning a database context manager
            events: Event store read side
            attendance: Event store write side, used by accept()
            availability: Registry whose window is closed once a player commits
            bus: Event bus for proposal events (optional)
            clock: Source of "now" for timestamps
        """
        self._db_factory = db_factory
        self._events = events
        self._attendance = attendance
        self._availability = availability
        self._bus = bus
        self._clock = clock

    # =========================================================================
    # COMMANDS
    # =========================================================================

    def propose(self, player_id: str, event_id: str, score: int | None = None) -> MatchProposal:
        """Create a pending proposal, or return the existing pending one.

        Args:
            player_id: Targeted player
            event_id: Candidate event
            score: Optional total score snapshot stored with a new proposal

        Raises:
            NotFoundError: event does not exist
            ValidationError: player organizes the event
        """
        proposal, _ = self.propose_with_status(player_id, event_id, score)
        return proposal

    def propose_with_status(
        self, player_id: str, event_id: str, score: int | None = None
    ) -> tuple[MatchProposal, bool]:
        """Same as propose(), also reporting whether a new row was created."""
        event = self._events.get_event(event_id)
        if event is None:
            raise NotFoundError(f"Event not found: {event_id}")
        if event.created_by and event.created_by == player_id:
            raise ValidationError("Players cannot be proposed for their own event")

        with self._db_factory() as conn:
            proposal, created = proposal_db.insert_pending_proposal(
                conn, player_id, event_id, self._clock(), score
            )

        if created:
            self._publish(
                DomainEvent(
                    type=PROPOSAL_CREATED,
                    player_id=player_id,
                    event_id=event_id,
                    proposal_id=proposal.id,
                    payload={"event_title": event.title, "score": score},
                )
            )
        else:
            logger.debug(
                "[PROPOSAL] Returning existing pending proposal id=%s player=%s event=%s",
                proposal.id,
                player_id,
                event_id,
            )
        return proposal, created

    def accept(self, proposal_id: str) -> MatchProposal:
        """Accept a pending proposal. Binding and irreversible.

        The proposal is claimed first, which makes a concurrent decline
        fail instead of landing between the attendance write and the
        transition. The attendance write happens next; the proposal only
        becomes `accepted` once the event store has confirmed it. If the
        write fails the claim is released, the proposal stays `pending` and
        accept() can be retried, the attendance write being idempotent per
        (player, event).

        Raises:
            NotFoundError: unknown proposal
            InvalidTransitionError: proposal is not pending
            ExternalStoreError: attendance write not confirmed
        """
        proposal = self._require_pending(proposal_id, ProposalStatus.ACCEPTED)

        with self._db_factory() as conn:
            claim = proposal_db.claim_for_accept(conn, proposal_id)
            if claim is None:
                current = proposal_db.get_proposal(conn, proposal_id)
                raise InvalidTransitionError(
                    proposal_id, current.status.value, ProposalStatus.ACCEPTED.value
                )

        try:
            event = self._events.get_event(proposal.event_id)
            self._attendance.commit_attendance(proposal.event_id, proposal.player_id)
        except Exception:
            with self._db_factory() as conn:
                proposal_db.release_accept_claim(conn, proposal_id, claim)
            raise

        now = self._clock()
        with self._db_factory() as conn:
            if not proposal_db.transition_proposal(
                conn, proposal_id, ProposalStatus.ACCEPTED, now, commitment_acknowledged_at=now
            ):
                current = proposal_db.get_proposal(conn, proposal_id)
                raise InvalidTransitionError(
                    proposal_id, current.status.value, ProposalStatus.ACCEPTED.value
                )
            accepted = proposal_db.get_proposal(conn, proposal_id)

        logger.info(
            "[PROPOSAL] Accepted id=%s player=%s event=%s",
            proposal_id,
            proposal.player_id,
            proposal.event_id,
        )

        # Committed players are no longer looking to play
        if self._availability is not None:
            self._availability.cancel(proposal.player_id)

        self._publish(
            DomainEvent(
                type=PROPOSAL_ACCEPTED,
                player_id=proposal.player_id,
                event_id=proposal.event_id,
                proposal_id=proposal_id,
                payload={"event_title": event.title if event else None},
            )
        )
        return accepted

    def decline(self, proposal_id: str) -> MatchProposal:
        """Decline a pending proposal.

        Raises:
            NotFoundError: unknown proposal
            InvalidTransitionError: proposal is not pending, or an accept is
                in progress
        """
        proposal = self._require_pending(proposal_id, ProposalStatus.DECLINED)

        with self._db_factory() as conn:
            if not proposal_db.transition_proposal(
                conn, proposal_id, ProposalStatus.DECLINED, self._clock()
            ):
                current = proposal_db.get_proposal(conn, proposal_id)
                # Still pending means an accept holds the claim
                state = current.status.value if current.status.is_terminal else "being accepted"
                raise InvalidTransitionError(proposal_id, state, ProposalStatus.DECLINED.value)
            declined = proposal_db.get_proposal(conn, proposal_id)

        logger.info(
            "[PROPOSAL] Declined id=%s player=%s event=%s",
            proposal_id,
            proposal.player_id,
            proposal.event_id,
        )
        self._publish(
            DomainEvent(
                type=PROPOSAL_DECLINED,
                player_id=proposal.player_id,
                event_id=proposal.event_id,
                proposal_id=proposal_id,
            )
        )
        return declined

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get(self, proposal_id: str) -> MatchProposal:
        """Get a proposal by ID.

        Raises:
            NotFoundError: unknown proposal
        """
        with self._db_factory() as conn:
            proposal = proposal_db.get_proposal(conn, proposal_id)
        if proposal is None:
            raise NotFoundError(f"Proposal not found: {proposal_id}")
        return proposal

    def list_for_player(
        self,
        player_id: str,
        status: ProposalStatus | None = ProposalStatus.PENDING,
    ) -> list[MatchProposal]:
        """Get a player's proposals (pending by default), newest first."""
        with self._db_factory() as conn:
            return proposal_db.list_proposals_for_player(conn, player_id, status)

    def list_for_event(self, event_id: str) -> list[MatchProposal]:
        with self._db_factory() as conn:
            return proposal_db.list_proposals_for_event(conn, event_id)

    def has_responded(self, player_id: str, event_id: str) -> bool:
        """Check whether the player already accepted or declined this event."""
        with self._db_factory() as conn:
            return proposal_db.has_responded_proposal(conn, player_id, event_id)

    # =========================================================================
    # PRIVATE METHODS
    # =========================================================================

    def _require_pending(self, proposal_id: str, target: ProposalStatus) -> MatchProposal:
        proposal = self.get(proposal_id)
        if proposal.status.is_terminal:
            logger.warning(
                "[PROPOSAL] Rejected %s -> %s for id=%s",
                proposal.status.value,
                target.value,
                proposal_id,
            )
            raise InvalidTransitionError(proposal_id, proposal.status.value, target.value)
        return proposal

    def _publish(self, event: DomainEvent) -> None:
        if self._bus is not None:
            self._bus.publish(event)
