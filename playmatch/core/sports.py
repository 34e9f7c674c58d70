"""Sport identifier utilities.

Sport identifiers are compared case-insensitively and exactly: there is no
alias folding ("soccer" and "football" are different sports here), because
the matcher gives no partial credit for related sports.
"""

# Sports offered in the sport picker, as (code, display name)
SPORTS: tuple[tuple[str, str], ...] = (
    ("football", "Football"),
    ("basketball", "Basketball"),
    ("tennis", "Tennis"),
    ("volleyball", "Volleyball"),
    ("badminton", "Badminton"),
    ("soccer", "Soccer"),
    ("cricket", "Cricket"),
    ("rugby", "Rugby"),
    ("hockey", "Hockey"),
    ("baseball", "Baseball"),
    ("golf", "Golf"),
    ("swimming", "Swimming"),
    ("running", "Running"),
    ("cycling", "Cycling"),
    ("boxing", "Boxing"),
    ("martial_arts", "Martial Arts"),
    ("other", "Other"),
)

SPORT_DISPLAY_NAMES: dict[str, str] = dict(SPORTS)


def normalize_sport(sport: str | None) -> str:
    """Normalize a sport identifier for comparison and storage.

    Args:
        sport: Sport identifier in any case (e.g., "Football", " tennis ")

    Returns:
        Lowercase, trimmed identifier; empty string for None/blank

    Examples:
        >>> normalize_sport("Football")
        'football'
        >>> normalize_sport(None)
        ''
    """
    if not sport:
        return ""
    return sport.strip().lower()


def get_sport_display_name(sport: str | None) -> str:
    """Get display name for a sport, falling back to title case."""
    code = normalize_sport(sport)
    if not code:
        return ""
    return SPORT_DISPLAY_NAMES.get(code, code.replace("_", " ").title())
