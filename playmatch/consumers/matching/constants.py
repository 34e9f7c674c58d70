"""Constants for the matching module.

Scoring weights and thresholds for availability-to-event matching. The four
sub-score maxima add up to 100.
"""

# =============================================================================
# SUB-SCORE WEIGHTS
# =============================================================================

SPORT_MATCH_SCORE = 30

# Location cascade, evaluated top to bottom
LOCATION_SAME_DISTRICT = 25
LOCATION_ADJACENT = 18
LOCATION_SAME_ZONE = 12
LOCATION_OTHER = 5
# Either side has no district: absence of preference is not penalized
LOCATION_NEUTRAL = 15

# Time score for an event starting inside the window ranges between these
TIME_SCORE_MAX = 25
TIME_SCORE_MIN = 15
# Points lost when the event midpoint sits at the very edge of the window
TIME_CENTER_SPREAD = 10

SKILL_IN_RANGE = 20
SKILL_NEUTRAL = 15
# Points by distance (in levels) from the nearest bound of the event range
SKILL_BY_DISTANCE = {1: 10, 2: 5}

# Missing skill bounds default to the full scale
SKILL_LEVEL_MIN = 1
SKILL_LEVEL_MAX = 5

# =============================================================================
# LABEL THRESHOLDS
# Checked in order; the first threshold the total reaches wins.
# =============================================================================

LABEL_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (85, "perfect"),
    (70, "great"),
    (50, "good"),
)
LABEL_FALLBACK = "fair"

# Minimum total for the background matcher to create a proposal
DEFAULT_PROPOSAL_MIN_SCORE = 50
