"""Tests for the proposal engine state machine."""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from conftest import NOW
from playmatch.core.errors import (
    ExternalStoreError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from playmatch.core.types import ProposalStatus
from playmatch.database.events import is_attending
from playmatch.database.notifications import list_notifications
from playmatch.services.availability import AvailabilityRegistry
from playmatch.services.notifications import (
    AVAILABILITY_CANCELLED,
    PROPOSAL_ACCEPTED,
    PROPOSAL_CREATED,
    PROPOSAL_DECLINED,
    NotificationStoreSink,
)
from playmatch.services.proposals import ProposalEngine


@pytest.fixture
def registry(db, bus, clock):
    return AvailabilityRegistry(db, bus=bus, clock=clock)


@pytest.fixture
def engine(db, event_store, registry, bus, clock):
    return ProposalEngine(
        db, events=event_store, attendance=event_store, availability=registry, bus=bus, clock=clock
    )


@pytest.fixture
def event(add_event):
    return add_event("evt-1")


class TestPropose:
    def test_creates_pending(self, engine, event, bus):
        proposal = engine.propose("player-1", event.id, score=88)

        assert proposal.status is ProposalStatus.PENDING
        assert proposal.player_id == "player-1"
        assert proposal.event_id == event.id
        assert proposal.score == 88
        assert proposal.created_at == NOW
        assert proposal.responded_at is None
        assert bus.types() == [PROPOSAL_CREATED]

    def test_idempotent_while_pending(self, engine, event, bus):
        first, created_first = engine.propose_with_status("player-1", event.id)
        second, created_second = engine.propose_with_status("player-1", event.id)

        assert created_first is True
        assert created_second is False
        assert first.id == second.id
        assert len(engine.list_for_player("player-1")) == 1
        assert bus.types() == [PROPOSAL_CREATED]

    def test_unknown_event(self, engine):
        with pytest.raises(NotFoundError):
            engine.propose("player-1", "missing")

    def test_organizer_cannot_be_proposed(self, engine, event):
        with pytest.raises(ValidationError):
            engine.propose(event.created_by, event.id)

    def test_decline_then_propose_creates_new(self, engine, event):
        first = engine.propose("player-1", event.id)
        engine.decline(first.id)

        second = engine.propose("player-1", event.id)

        assert second.id != first.id
        assert second.status is ProposalStatus.PENDING
        assert engine.get(first.id).status is ProposalStatus.DECLINED


class TestAccept:
    def test_accept_commits_attendance(self, engine, event, db, clock):
        proposal = engine.propose("player-1", event.id)
        clock.advance(minutes=5)

        accepted = engine.accept(proposal.id)

        assert accepted.status is ProposalStatus.ACCEPTED
        assert accepted.responded_at == NOW + timedelta(minutes=5)
        assert accepted.commitment_acknowledged_at == accepted.responded_at
        with db() as conn:
            assert is_attending(conn, event.id, "player-1")

    def test_accept_closes_availability(self, engine, registry, event, bus):
        registry.open("player-1", "football", NOW, NOW + timedelta(days=2))
        proposal = engine.propose("player-1", event.id)

        engine.accept(proposal.id)

        assert registry.current("player-1") is None
        assert bus.types()[-2:] == [AVAILABILITY_CANCELLED, PROPOSAL_ACCEPTED]

    def test_accept_twice_fails(self, engine, event):
        proposal = engine.propose("player-1", event.id)
        engine.accept(proposal.id)

        with pytest.raises(InvalidTransitionError) as exc_info:
            engine.accept(proposal.id)
        assert exc_info.value.current == "accepted"

    def test_decline_after_accept_fails(self, engine, event):
        proposal = engine.propose("player-1", event.id)
        engine.accept(proposal.id)

        with pytest.raises(InvalidTransitionError):
            engine.decline(proposal.id)
        assert engine.get(proposal.id).status is ProposalStatus.ACCEPTED

    def test_accept_after_decline_fails(self, engine, event, db):
        proposal = engine.propose("player-1", event.id)
        engine.decline(proposal.id)

        with pytest.raises(InvalidTransitionError):
            engine.accept(proposal.id)
        with db() as conn:
            assert not is_attending(conn, event.id, "player-1")

    def test_unknown_proposal(self, engine):
        with pytest.raises(NotFoundError):
            engine.accept("nope")

    def test_store_failure_leaves_pending(self, db, event_store, event, bus, clock):
        attendance = MagicMock()
        attendance.commit_attendance.side_effect = ExternalStoreError("store down")
        engine = ProposalEngine(db, events=event_store, attendance=attendance, bus=bus, clock=clock)
        proposal = engine.propose("player-1", event.id)

        with pytest.raises(ExternalStoreError):
            engine.accept(proposal.id)

        assert engine.get(proposal.id).status is ProposalStatus.PENDING
        assert PROPOSAL_ACCEPTED not in bus.types()

    def test_retry_after_store_failure(self, db, event_store, event, clock):
        attendance = MagicMock()
        attendance.commit_attendance.side_effect = [ExternalStoreError("store down"), None]
        engine = ProposalEngine(db, events=event_store, attendance=attendance, clock=clock)
        proposal = engine.propose("player-1", event.id)

        with pytest.raises(ExternalStoreError):
            engine.accept(proposal.id)
        assert engine.accept(proposal.id).status is ProposalStatus.ACCEPTED
        assert attendance.commit_attendance.call_count == 2

    def test_attendance_write_is_idempotent(self, engine, event_store, event, db):
        event_store.commit_attendance(event.id, "player-1")
        proposal = engine.propose("player-1", event.id)
        engine.accept(proposal.id)

        assert event_store.attendance_counts([event.id]) == {event.id: 1}


class TestDecline:
    def test_decline(self, engine, event, bus):
        proposal = engine.propose("player-1", event.id)
        declined = engine.decline(proposal.id)

        assert declined.status is ProposalStatus.DECLINED
        assert declined.responded_at == NOW
        assert declined.commitment_acknowledged_at is None
        assert bus.types() == [PROPOSAL_CREATED, PROPOSAL_DECLINED]

    def test_decline_twice_fails(self, engine, event):
        proposal = engine.propose("player-1", event.id)
        engine.decline(proposal.id)
        with pytest.raises(InvalidTransitionError):
            engine.decline(proposal.id)


class InterleavingStore:
    """Attendance store that runs a callback right after each write."""

    def __init__(self, inner, after_write):
        self._inner = inner
        self._after_write = after_write

    def commit_attendance(self, event_id: str, player_id: str) -> None:
        self._inner.commit_attendance(event_id, player_id)
        self._after_write()


class TestAcceptDeclineRace:
    def test_decline_during_accept_is_refused(self, db, event_store, event, clock):
        refused = []

        def decline_midway():
            try:
                engine.decline(proposal.id)
            except InvalidTransitionError as e:
                refused.append(e)

        engine = ProposalEngine(
            db,
            events=event_store,
            attendance=InterleavingStore(event_store, decline_midway),
            clock=clock,
        )
        proposal = engine.propose("player-1", event.id)

        accepted = engine.accept(proposal.id)

        assert accepted.status is ProposalStatus.ACCEPTED
        assert len(refused) == 1
        assert refused[0].current == "being accepted"
        with db() as conn:
            assert is_attending(conn, event.id, "player-1")

    def test_decline_from_another_thread_is_refused(self, db, event_store, event, clock):
        written = threading.Event()
        resume = threading.Event()

        def pause():
            written.set()
            resume.wait(5)

        engine = ProposalEngine(
            db, events=event_store, attendance=InterleavingStore(event_store, pause), clock=clock
        )
        proposal = engine.propose("player-1", event.id)

        with ThreadPoolExecutor(max_workers=1) as pool:
            future = pool.submit(engine.accept, proposal.id)
            assert written.wait(5)
            with pytest.raises(InvalidTransitionError):
                engine.decline(proposal.id)
            resume.set()
            accepted = future.result(timeout=5)

        assert accepted.status is ProposalStatus.ACCEPTED
        assert engine.get(proposal.id).status is ProposalStatus.ACCEPTED

    def test_failed_accept_releases_claim(self, db, event_store, event, clock):
        attendance = MagicMock()
        attendance.commit_attendance.side_effect = ExternalStoreError("store down")
        engine = ProposalEngine(db, events=event_store, attendance=attendance, clock=clock)
        proposal = engine.propose("player-1", event.id)

        with pytest.raises(ExternalStoreError):
            engine.accept(proposal.id)

        assert engine.decline(proposal.id).status is ProposalStatus.DECLINED


class TestConcurrentPropose:
    def test_one_pending_row_per_pair(self, engine, event, bus, db):
        workers = 8
        barrier = threading.Barrier(workers)

        def propose():
            barrier.wait(timeout=5)
            return engine.propose_with_status("player-1", event.id)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(propose) for _ in range(workers)]
            results = [f.result(timeout=30) for f in futures]

        assert len({proposal.id for proposal, _ in results}) == 1
        assert sum(created for _, created in results) == 1
        assert bus.types().count(PROPOSAL_CREATED) == 1
        with db() as conn:
            (count,) = conn.execute(
                "SELECT COUNT(*) FROM match_proposals WHERE player_id = ? AND event_id = ?",
                ("player-1", event.id),
            ).fetchone()
        assert count == 1


class TestQueries:
    def test_list_for_player_filters_and_orders(self, engine, add_event, clock):
        add_event("evt-a")
        add_event("evt-b")
        first = engine.propose("player-1", "evt-a")
        clock.advance(minutes=1)
        second = engine.propose("player-1", "evt-b")
        engine.decline(first.id)

        assert [p.id for p in engine.list_for_player("player-1")] == [second.id]
        assert [p.id for p in engine.list_for_player("player-1", status=None)] == [
            second.id,
            first.id,
        ]
        declined = engine.list_for_player("player-1", status=ProposalStatus.DECLINED)
        assert [p.id for p in declined] == [first.id]

    def test_list_for_event(self, engine, event):
        engine.propose("player-1", event.id)
        engine.propose("player-2", event.id)
        assert {p.player_id for p in engine.list_for_event(event.id)} == {"player-1", "player-2"}


class TestNotificationSink:
    def test_proposal_events_become_notifications(self, engine, event, bus, db):
        bus.subscribe(NotificationStoreSink(db))
        proposal = engine.propose("player-1", event.id)
        engine.accept(proposal.id)

        with db() as conn:
            notifications = list_notifications(conn, "player-1")

        assert {n.type for n in notifications} == {"match_proposal", "match_accepted"}
        for notification in notifications:
            assert notification.link == f"/events/{event.id}"
            assert notification.metadata["proposal_id"] == proposal.id
            assert not notification.is_read
