"""End-to-end tests for the HTTP API."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from conftest import NOW
from playmatch.app import create_app
from playmatch.core.errors import ExternalStoreError


@pytest.fixture
def client(db_path, clock):
    app = create_app(db_path, start_scheduler=False, clock=clock)
    with TestClient(app) as test_client:
        yield test_client


def _window_body(**overrides) -> dict:
    body = {
        "sport": "football",
        "available_from": NOW.isoformat(),
        "available_until": (NOW + timedelta(days=2)).isoformat(),
        "district": "75011",
        "skill_level": 3,
    }
    body.update(overrides)
    return body


class TestDistricts:
    def test_list(self, client):
        response = client.get("/api/v1/districts")
        assert response.status_code == 200
        assert len(response.json()) == 30

    def test_filter_by_zone(self, client):
        response = client.get("/api/v1/districts", params={"zone": "centre", "lang": "en"})
        data = response.json()
        assert {d["id"] for d in data} == {"75001", "75002", "75003", "75004"}
        assert data[0]["zone_label"] == "Paris Centre"

    def test_detail_has_symmetric_neighbors(self, client):
        data = client.get("/api/v1/districts/75020").json()
        assert "75011" in data["adjacent"]
        assert "montreuil" in data["adjacent"]

    def test_unknown(self, client):
        assert client.get("/api/v1/districts/99999").status_code == 404


class TestAvailabilityApi:
    def test_open_get_cancel(self, client):
        response = client.put("/api/v1/players/player-1/availability", json=_window_body())
        assert response.status_code == 200
        assert response.json()["sport"] == "football"

        current = client.get("/api/v1/players/player-1/availability").json()
        assert current["district"] == "75011"
        assert current["expires_at"] == current["available_until"]

        assert client.delete("/api/v1/players/player-1/availability").status_code == 204
        assert client.get("/api/v1/players/player-1/availability").status_code == 404

    def test_cancel_without_window(self, client):
        assert client.delete("/api/v1/players/nobody/availability").status_code == 204

    def test_invalid_window(self, client):
        body = _window_body(available_until=NOW.isoformat())
        response = client.put("/api/v1/players/player-1/availability", json=body)
        assert response.status_code == 400

    def test_unknown_district(self, client):
        body = _window_body(district="99999")
        assert client.put("/api/v1/players/player-1/availability", json=body).status_code == 400

    def test_skill_out_of_range(self, client):
        body = _window_body(skill_level=7)
        assert client.put("/api/v1/players/player-1/availability", json=body).status_code == 422


class TestProposalsApi:
    def test_create_is_idempotent(self, client, add_event):
        add_event("evt-1")
        body = {"player_id": "player-1", "event_id": "evt-1"}

        first = client.post("/api/v1/proposals", json=body)
        second = client.post("/api/v1/proposals", json=body)

        assert first.status_code == 201
        assert second.status_code == 200
        assert first.json()["id"] == second.json()["id"]
        assert first.json()["status"] == "pending"

    def test_unknown_event(self, client):
        body = {"player_id": "player-1", "event_id": "missing"}
        assert client.post("/api/v1/proposals", json=body).status_code == 404

    def test_organizer(self, client, add_event):
        add_event("evt-1", created_by="player-1")
        body = {"player_id": "player-1", "event_id": "evt-1"}
        assert client.post("/api/v1/proposals", json=body).status_code == 400

    def test_accept_then_conflict(self, client, add_event):
        add_event("evt-1")
        proposal = client.post(
            "/api/v1/proposals", json={"player_id": "player-1", "event_id": "evt-1"}
        ).json()

        accepted = client.post(f"/api/v1/proposals/{proposal['id']}/accept")
        assert accepted.status_code == 200
        assert accepted.json()["status"] == "accepted"
        assert accepted.json()["commitment_acknowledged_at"] is not None

        assert client.post(f"/api/v1/proposals/{proposal['id']}/decline").status_code == 409
        assert client.post(f"/api/v1/proposals/{proposal['id']}/accept").status_code == 409

        games = client.get("/api/v1/games").json()["games"]
        assert games[0]["attending_count"] == 1

    def test_accept_store_failure_is_502(self, client, add_event):
        add_event("evt-1")
        proposal = client.post(
            "/api/v1/proposals", json={"player_id": "player-1", "event_id": "evt-1"}
        ).json()

        with patch(
            "playmatch.eventstore.local.SqliteEventStore.commit_attendance",
            side_effect=ExternalStoreError("down"),
        ):
            response = client.post(f"/api/v1/proposals/{proposal['id']}/accept")

        assert response.status_code == 502
        assert client.get(f"/api/v1/proposals/{proposal['id']}").json()["status"] == "pending"

    def test_decline_and_list(self, client, add_event):
        add_event("evt-1")
        proposal = client.post(
            "/api/v1/proposals", json={"player_id": "player-1", "event_id": "evt-1"}
        ).json()
        client.post(f"/api/v1/proposals/{proposal['id']}/decline")

        pending = client.get("/api/v1/players/player-1/proposals").json()
        everything = client.get("/api/v1/players/player-1/proposals", params={"status": "all"})
        declined = client.get("/api/v1/players/player-1/proposals", params={"status": "declined"})

        assert pending == []
        assert [p["id"] for p in everything.json()] == [proposal["id"]]
        assert declined.json()[0]["status"] == "declined"

    def test_bad_status_filter(self, client):
        response = client.get("/api/v1/players/player-1/proposals", params={"status": "expired"})
        assert response.status_code == 400

    def test_unknown_proposal(self, client):
        assert client.get("/api/v1/proposals/nope").status_code == 404
        assert client.post("/api/v1/proposals/nope/accept").status_code == 404


class TestGamesApi:
    def test_unscored_listing(self, client, add_event):
        add_event("evt-1")
        data = client.get("/api/v1/games").json()

        assert data["scored"] is False
        assert data["total"] == 1
        assert data["games"][0]["match_score"] is None
        assert data["games"][0]["sport_name"] == "Football"

    def test_scored_for_player_with_window(self, client, add_event):
        add_event("evt-1")
        client.put("/api/v1/players/player-1/availability", json=_window_body())

        data = client.get("/api/v1/games", params={"player_id": "player-1"}).json()

        assert data["scored"] is True
        score = data["games"][0]["match_score"]
        assert score["total"] == 100
        assert score["label"] == "perfect"
        assert score["breakdown"]["location"] == 25

    def test_filters(self, client, add_event):
        add_event("evt-1", sport="football")
        add_event("evt-2", sport="basketball")
        data = client.get("/api/v1/games", params={"sport": "basketball"}).json()
        assert [g["id"] for g in data["games"]] == ["evt-2"]


class TestMatchingApi:
    def test_opening_window_proposes_and_notifies(self, client, add_event):
        add_event("evt-1", title="Sunday kickabout")
        client.put("/api/v1/players/player-1/availability", json=_window_body())

        proposals = client.get("/api/v1/players/player-1/proposals").json()
        assert [p["event_id"] for p in proposals] == ["evt-1"]

        notifications = client.get("/api/v1/players/player-1/notifications").json()
        assert notifications[0]["type"] == "match_proposal"
        assert "Sunday kickabout" in notifications[0]["message"]

        notification_id = notifications[0]["id"]
        assert client.post(f"/api/v1/notifications/{notification_id}/read").status_code == 204
        unread = client.get(
            "/api/v1/players/player-1/notifications", params={"unread_only": True}
        ).json()
        assert unread == []

    def test_manual_run_for_event(self, client, add_event):
        client.put("/api/v1/players/player-1/availability", json=_window_body())
        add_event("evt-1")

        response = client.post("/api/v1/matching/run", json={"event_id": "evt-1"})

        assert response.status_code == 200
        assert response.json()["proposals_created"] == 1

    def test_manual_run_all(self, client):
        response = client.post("/api/v1/matching/run")
        assert response.status_code == 200
        assert response.json()["pairs_evaluated"] == 0

    def test_manual_run_unknown_event(self, client):
        response = client.post("/api/v1/matching/run", json={"event_id": "missing"})
        assert response.status_code == 404


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"
