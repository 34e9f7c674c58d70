"""HTTP client for a remote event store.

Endpoints used:
- GET  /events                                  open events (query filters)
- GET  /events/{event_id}                       single event
- GET  /events/attendance-counts?ids=a,b        attending count per event
- GET  /events/{event_id}/attendance/{player}   attendance row (404 if none)
- PUT  /events/{event_id}/attendance/{player}   idempotent committed RSVP
"""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime

import httpx

from playmatch.core.errors import ExternalStoreError
from playmatch.utilities.http import RetryingClient
from playmatch.utilities.tz import to_iso

logger = logging.getLogger(__name__)


class EventStoreClient:
    """Low-level client returning raw JSON.

    Unreachable store or a non-2xx answer raises ExternalStoreError; a 404
    on single-resource reads returns None.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 10.0,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        kwargs = {"sleep": sleep} if sleep else {}
        self._http = RetryingClient(
            base_url,
            token=token,
            timeout=timeout,
            max_retries=max_retries,
            transport=transport,
            log_tag="EVENT STORE",
            **kwargs,
        )

    def _call(
        self,
        method: str,
        endpoint: str,
        data: dict | None = None,
        params: dict | None = None,
        allow_404: bool = False,
    ) -> httpx.Response | None:
        response = self._http.request(method, endpoint, data=data, params=params)
        if response is None:
            raise ExternalStoreError(f"Event store unreachable for {method} {endpoint}")
        if allow_404 and response.status_code == 404:
            return None
        if not response.is_success:
            raise ExternalStoreError(
                f"Event store returned HTTP {response.status_code} for {method} {endpoint}"
            )
        return response

    def list_events(
        self,
        sport: str | None = None,
        district: str | None = None,
        start_after: datetime | None = None,
        start_before: datetime | None = None,
    ) -> list[dict]:
        params: dict[str, str] = {"looking_for_players": "true"}
        if sport:
            params["sport"] = sport
        if district:
            params["district"] = district
        if start_after:
            params["start_after"] = to_iso(start_after)
        if start_before:
            params["start_before"] = to_iso(start_before)

        response = self._call("GET", "/events", params=params)
        payload = response.json()
        # Accept both a bare list and a {"results": [...]} envelope
        if isinstance(payload, dict):
            return payload.get("results", [])
        return payload

    def get_event(self, event_id: str) -> dict | None:
        response = self._call("GET", f"/events/{event_id}", allow_404=True)
        return response.json() if response is not None else None

    def attendance_counts(self, event_ids: Iterable[str]) -> dict[str, int]:
        ids = list(event_ids)
        if not ids:
            return {}
        response = self._call(
            "GET", "/events/attendance-counts", params={"ids": ",".join(ids)}
        )
        counts = {event_id: 0 for event_id in ids}
        counts.update({str(k): int(v) for k, v in response.json().items()})
        return counts

    def get_attendance(self, event_id: str, player_id: str) -> dict | None:
        response = self._call(
            "GET", f"/events/{event_id}/attendance/{player_id}", allow_404=True
        )
        return response.json() if response is not None else None

    def put_attendance(self, event_id: str, player_id: str) -> None:
        self._call(
            "PUT",
            f"/events/{event_id}/attendance/{player_id}",
            data={"status": "attending", "is_committed": True},
        )
        logger.info("[EVENT STORE] Committed player=%s event=%s", player_id, event_id)

    def close(self) -> None:
        self._http.close()
