"""Availability-to-event match scoring.

Four independent, additive sub-scores with no cross terms:

- sport (0 or 30): exact case-insensitive match, no partial credit
- location (0-25): same district > adjacent > same zone > elsewhere
- time (0-25): hard gate on the event start, then centering in the window
- skill (0-20): inside the event range, or penalized by distance

Everything here is pure: identical inputs always give identical scores, so
the same functions serve live ranking and offline fixtures.
"""

import math
from datetime import datetime

from playmatch.consumers.matching.constants import (
    LABEL_FALLBACK,
    LABEL_THRESHOLDS,
    LOCATION_ADJACENT,
    LOCATION_NEUTRAL,
    LOCATION_OTHER,
    LOCATION_SAME_DISTRICT,
    LOCATION_SAME_ZONE,
    SKILL_BY_DISTANCE,
    SKILL_IN_RANGE,
    SKILL_LEVEL_MAX,
    SKILL_LEVEL_MIN,
    SKILL_NEUTRAL,
    SPORT_MATCH_SCORE,
    TIME_CENTER_SPREAD,
    TIME_SCORE_MAX,
    TIME_SCORE_MIN,
)
from playmatch.core.districts import DEFAULT_GRAPH, DistrictGraph
from playmatch.core.sports import normalize_sport
from playmatch.core.types import Availability, CandidateEvent, MatchScore


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def calculate_sport_score(player_sport: str | None, event_sport: str | None) -> int:
    """30 for an exact case-insensitive match, otherwise 0."""
    player = normalize_sport(player_sport)
    event = normalize_sport(event_sport)
    if not event or not player:
        return 0
    return SPORT_MATCH_SCORE if player == event else 0


def calculate_location_score(
    player_district: str | None,
    event_district: str | None,
    graph: DistrictGraph = DEFAULT_GRAPH,
) -> int:
    """Priority cascade; returns on the first tier that applies."""
    if not player_district or not event_district:
        return LOCATION_NEUTRAL
    if player_district == event_district:
        return LOCATION_SAME_DISTRICT
    if graph.adjacent(player_district, event_district):
        return LOCATION_ADJACENT
    if graph.same_zone(player_district, event_district):
        return LOCATION_SAME_ZONE
    return LOCATION_OTHER


def calculate_time_score(
    available_from: datetime,
    available_until: datetime,
    event_start: datetime,
    event_end: datetime,
) -> int:
    """Score how well the event sits in the availability window.

    Only the event start is gated: an event starting outside
    [available_from, available_until] scores 0. The end time only feeds the
    midpoint used for centering.
    """
    if event_start < available_from or event_start > available_until:
        return 0

    half_window = (available_until - available_from).total_seconds() / 2
    if half_window <= 0:
        return TIME_SCORE_MAX

    window_mid = available_from + (available_until - available_from) / 2
    event_mid = event_start + (event_end - event_start) / 2
    distance = abs((event_mid - window_mid).total_seconds())

    raw = _round_half_up(TIME_SCORE_MAX - (distance / half_window) * TIME_CENTER_SPREAD)
    return max(TIME_SCORE_MIN, min(TIME_SCORE_MAX, raw))


def calculate_skill_score(
    player_skill: int | None,
    event_skill_min: int | None,
    event_skill_max: int | None,
) -> int:
    """20 inside the range, 10/5/0 at distance 1/2/3+, neutral 15 if unset."""
    if not player_skill:
        return SKILL_NEUTRAL
    if not event_skill_min and not event_skill_max:
        return SKILL_NEUTRAL

    min_level = event_skill_min or SKILL_LEVEL_MIN
    max_level = event_skill_max or SKILL_LEVEL_MAX

    if min_level <= player_skill <= max_level:
        return SKILL_IN_RANGE

    if player_skill < min_level:
        distance = min_level - player_skill
    else:
        distance = player_skill - max_level
    return SKILL_BY_DISTANCE.get(distance, 0)


def label_for(total: int) -> str:
    """Qualitative label for a total score."""
    for threshold, label in LABEL_THRESHOLDS:
        if total >= threshold:
            return label
    return LABEL_FALLBACK


def calculate_match_score(
    availability: Availability,
    event: CandidateEvent,
    graph: DistrictGraph = DEFAULT_GRAPH,
) -> MatchScore:
    """Score one availability window against one candidate event."""
    sport = calculate_sport_score(availability.sport, event.sport)
    location = calculate_location_score(availability.district, event.district, graph)
    time = calculate_time_score(
        availability.available_from,
        availability.available_until,
        event.start_time,
        event.end_time,
    )
    skill = calculate_skill_score(availability.skill_level, event.skill_min, event.skill_max)

    return MatchScore(
        sport=sport,
        location=location,
        time=time,
        skill=skill,
        label=label_for(sport + location + time + skill),
    )


class MatchScorer:
    """Scorer bound to a district graph.

    Stateless after construction and safe to share between threads.
    """

    def __init__(self, graph: DistrictGraph = DEFAULT_GRAPH):
        self._graph = graph

    @property
    def graph(self) -> DistrictGraph:
        return self._graph

    def score(self, availability: Availability, event: CandidateEvent) -> MatchScore:
        return calculate_match_score(availability, event, self._graph)
