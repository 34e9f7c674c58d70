"""Tests for the settings table and service wiring."""

from datetime import timedelta

from conftest import NOW
from playmatch.bootstrap import build_services
from playmatch.database import get_all_settings, init_db, reset_db
from playmatch.database.settings import (
    update_event_store_settings,
    update_matching_settings,
    update_notification_settings,
    update_scheduler_settings,
)
from playmatch.eventstore import RemoteEventStore, SqliteEventStore, create_event_store


class TestSettings:
    def test_defaults(self, db):
        with db() as conn:
            settings = get_all_settings(conn)

        assert settings.matching.min_score == 50
        assert settings.matching.lookahead_days == 30
        assert settings.scheduler.enabled is True
        assert settings.scheduler.interval_minutes == 15
        assert settings.notifications.store_enabled is True
        assert settings.notifications.webhook_url is None
        assert settings.event_store.url is None

    def test_partial_update(self, db):
        with db() as conn:
            assert update_matching_settings(conn, min_score=70) is True
        with db() as conn:
            settings = get_all_settings(conn)

        assert settings.matching.min_score == 70
        assert settings.matching.lookahead_days == 30

    def test_update_nothing(self, db):
        with db() as conn:
            assert update_matching_settings(conn) is False

    def test_booleans(self, db):
        with db() as conn:
            update_scheduler_settings(conn, enabled=False, interval_minutes=5)
            update_notification_settings(conn, store_enabled=False)
        with db() as conn:
            settings = get_all_settings(conn)

        assert settings.scheduler.enabled is False
        assert settings.scheduler.interval_minutes == 5
        assert settings.notifications.store_enabled is False

    def test_init_is_idempotent(self, db, db_path):
        with db() as conn:
            update_matching_settings(conn, min_score=60)
        init_db(db_path)
        with db() as conn:
            assert get_all_settings(conn).matching.min_score == 60

    def test_reset_restores_defaults(self, db, db_path):
        with db() as conn:
            update_matching_settings(conn, min_score=60)
        reset_db(db_path)
        with db() as conn:
            assert get_all_settings(conn).matching.min_score == 50


class TestEventStoreSelection:
    def test_local_by_default(self, db):
        assert isinstance(create_event_store(db), SqliteEventStore)

    def test_remote_when_url_set(self, db):
        with db() as conn:
            update_event_store_settings(conn, url="http://store", token="t")
        assert isinstance(create_event_store(db), RemoteEventStore)

    def test_empty_url_switches_back(self, db):
        with db() as conn:
            update_event_store_settings(conn, url="http://store")
            update_event_store_settings(conn, url="")
        assert isinstance(create_event_store(db), SqliteEventStore)


class TestBuildServices:
    def test_opening_a_window_triggers_matching(self, db, clock, add_event):
        add_event("evt-1")
        services = build_services(db, clock=clock)

        services.availability.open("player-1", "football", NOW, NOW + timedelta(days=2), "75011", 3)

        (proposal,) = services.proposals.list_for_player("player-1")
        assert proposal.event_id == "evt-1"

    def test_matching_on_open_can_be_disabled(self, db, clock, add_event):
        add_event("evt-1")
        services = build_services(db, clock=clock, match_on_availability=False)

        services.availability.open("player-1", "football", NOW, NOW + timedelta(days=2))

        assert services.proposals.list_for_player("player-1") == []

    def test_settings_flow_into_services(self, db, clock, add_event):
        with db() as conn:
            update_matching_settings(conn, min_score=95)
        add_event("evt-1", district="75020")
        services = build_services(db, clock=clock)

        services.availability.open("player-1", "football", NOW, NOW + timedelta(days=2), "75011", 3)

        assert services.settings.matching.min_score == 95
        assert services.proposals.list_for_player("player-1") == []
