"""Availability-to-event matching.

The scorer is re-exported here; import MatchingRunner from
playmatch.consumers.matching.runner (it depends on the services layer).
"""

from playmatch.consumers.matching.scorer import (
    MatchScorer,
    calculate_location_score,
    calculate_match_score,
    calculate_skill_score,
    calculate_sport_score,
    calculate_time_score,
    label_for,
)

__all__ = [
    "MatchScorer",
    "calculate_location_score",
    "calculate_match_score",
    "calculate_skill_score",
    "calculate_sport_score",
    "calculate_time_score",
    "label_for",
]
