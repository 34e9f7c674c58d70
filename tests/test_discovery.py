"""Tests for open game discovery."""

from datetime import timedelta

import pytest

from conftest import NOW, make_event
from playmatch.core.types import Availability
from playmatch.services.availability import AvailabilityRegistry
from playmatch.services.discovery import (
    GameDiscoveryQuery,
    GameFilters,
    spots_left,
    within_skill_reach,
)


@pytest.fixture
def registry(db, clock):
    return AvailabilityRegistry(db, clock=clock)


@pytest.fixture
def discovery(event_store, registry, clock):
    return GameDiscoveryQuery(event_store, availability=registry, clock=clock)


def _window(**overrides) -> Availability:
    fields = {
        "player_id": "player-1",
        "sport": "football",
        "available_from": NOW,
        "available_until": NOW + timedelta(days=2),
        "district": "75011",
        "skill_level": 3,
    }
    fields.update(overrides)
    return Availability(**fields)


class TestUnscored:
    def test_earliest_first(self, discovery, add_event):
        add_event("late", start_time=NOW + timedelta(days=3), end_time=NOW + timedelta(days=3, hours=1))
        add_event("early", start_time=NOW + timedelta(hours=2), end_time=NOW + timedelta(hours=3))

        games = discovery.list_open_games()

        assert [g.event.id for g in games] == ["early", "late"]
        assert all(g.score is None for g in games)

    def test_excludes_started_and_closed_events(self, discovery, add_event):
        add_event("past", start_time=NOW - timedelta(hours=1), end_time=NOW + timedelta(hours=1))
        add_event("closed", looking_for_players=False)
        add_event("open")

        assert [g.event.id for g in discovery.list_open_games()] == ["open"]

    def test_sport_filter_is_case_insensitive(self, discovery, add_event):
        add_event("foot", sport="Football")
        add_event("basket", sport="basketball")

        games = discovery.list_open_games(GameFilters(sport="FOOTBALL"))
        assert [g.event.id for g in games] == ["foot"]

    def test_district_and_date_filters(self, discovery, add_event):
        add_event("a", district="75011", start_time=NOW + timedelta(days=1))
        add_event("b", district="75020", start_time=NOW + timedelta(days=1))
        add_event("c", district="75011", start_time=NOW + timedelta(days=5))

        games = discovery.list_open_games(
            GameFilters(district="75011", date_to=NOW + timedelta(days=2))
        )
        assert [g.event.id for g in games] == ["a"]

        games = discovery.list_open_games(GameFilters(date_from=NOW + timedelta(days=3)))
        assert [g.event.id for g in games] == ["c"]

    def test_skill_filter_widens_range(self, discovery, add_event):
        add_event("beginners", skill_min=1, skill_max=2)
        add_event("experts", skill_min=4, skill_max=5)

        games = discovery.list_open_games(GameFilters(skill_level=3))
        assert {g.event.id for g in games} == {"beginners", "experts"}

        games = discovery.list_open_games(GameFilters(skill_level=1))
        assert [g.event.id for g in games] == ["beginners"]

    def test_limit(self, discovery, add_event):
        for i in range(5):
            add_event(f"evt-{i}", start_time=NOW + timedelta(hours=i + 1))
        assert len(discovery.list_open_games(limit=3)) == 3

    def test_attendance_and_spots(self, discovery, add_event, event_store):
        add_event("evt-1", max_participants=10, players_needed=2)
        event_store.commit_attendance("evt-1", "someone")

        (game,) = discovery.list_open_games()
        assert game.attending_count == 1
        assert game.spots_left == 1


class TestScored:
    def test_ranked_by_score_then_start(self, discovery, add_event):
        add_event("far", district="75015", start_time=NOW + timedelta(hours=12))
        add_event("near", district="75011", start_time=NOW + timedelta(hours=20))
        add_event("near-later", district="75011", start_time=NOW + timedelta(hours=28))

        games = discovery.list_open_games(requester_availability=_window())

        assert [g.event.id for g in games][0] == "near"
        assert games[-1].event.id == "far"
        totals = [g.score.total for g in games]
        assert totals == sorted(totals, reverse=True)

    def test_equal_scores_earliest_first(self, discovery, add_event):
        # Symmetric around the window midpoint, so both score the same
        add_event("second", start_time=NOW + timedelta(days=1, hours=2), end_time=NOW + timedelta(days=1, hours=3))
        add_event("first", start_time=NOW + timedelta(hours=21), end_time=NOW + timedelta(hours=22))

        games = discovery.list_open_games(requester_availability=_window())

        assert games[0].score.total == games[1].score.total
        assert [g.event.id for g in games] == ["first", "second"]

    def test_events_without_sport_follow_scored(self, discovery, add_event):
        add_event("no-sport", sport=None, start_time=NOW + timedelta(hours=1))
        add_event("football", start_time=NOW + timedelta(days=1))

        games = discovery.list_open_games(requester_availability=_window())

        assert [g.event.id for g in games] == ["football", "no-sport"]
        assert games[1].score is None

    def test_list_for_player_uses_active_window(self, discovery, registry, add_event):
        add_event("evt-1")
        registry.open("player-1", "football", NOW, NOW + timedelta(days=2), district="75011")

        games, availability = discovery.list_for_player("player-1")

        assert availability is not None
        assert games[0].score is not None

    def test_list_for_player_without_window(self, discovery, add_event):
        add_event("evt-1")
        games, availability = discovery.list_for_player("player-1")
        assert availability is None
        assert games[0].score is None


class TestHelpers:
    def test_spots_left_prefers_players_needed(self):
        assert spots_left(make_event(players_needed=4, max_participants=10), 1) == 3
        assert spots_left(make_event(players_needed=None, max_participants=10), 4) == 6
        assert spots_left(make_event(players_needed=None, max_participants=None), 4) is None
        assert spots_left(make_event(players_needed=2), 5) == 0

    def test_within_skill_reach(self):
        event = make_event(skill_min=2, skill_max=3)
        assert within_skill_reach(event, 1)
        assert within_skill_reach(event, 4)
        assert not within_skill_reach(event, 5)
        assert within_skill_reach(make_event(skill_min=None, skill_max=None), 5)
