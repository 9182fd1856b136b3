"""Date parsing and comparison utilities for statement data."""

import re
from datetime import date, datetime

# Slash-separated dates are ambiguous. "03/04/2024" is read month-first;
# a first component above 12 ("13/04/2024") can only be day-first.
SLASH_DATE_PATTERN = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")

# Year-first dates anywhere in the text, including non-padded "2024-1-5"
YEAR_FIRST_PATTERN = re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})")

# Formats tried last, before giving up
FALLBACK_PATTERNS = [
    (r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$", "%d.%m.%Y"),
    (r"^(\d{1,2})-(\w{3})-(\d{4})$", "%d-%b-%Y"),
    (r"^(\w{3})\s+(\d{1,2}),?\s+(\d{4})$", "%b %d %Y"),
    (r"^(\w+)\s+(\d{1,2}),?\s+(\d{4})$", "%B %d %Y"),
    (r"^(\d{8})$", "%Y%m%d"),
]

COMPILED_FALLBACKS = [(re.compile(pattern), fmt) for pattern, fmt in FALLBACK_PATTERNS]


def _parse_iso(date_str: str) -> date | None:
    candidate = date_str
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(candidate).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(candidate)
    except ValueError:
        return None


def _parse_slash(date_str: str) -> date | None:
    match = SLASH_DATE_PATTERN.search(date_str)
    if not match:
        return None
    first, second, year = (int(g) for g in match.groups())
    if first > 12:
        day, month = first, second
    else:
        month, day = first, second
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _parse_year_first(date_str: str) -> date | None:
    match = YEAR_FIRST_PATTERN.search(date_str)
    if not match:
        return None
    year, month, day = (int(g) for g in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _parse_fallback(date_str: str) -> date | None:
    normalized = date_str.replace(",", " ")
    normalized = re.sub(r"\s+", " ", normalized).strip()
    for pattern, fmt in COMPILED_FALLBACKS:
        if pattern.match(normalized):
            try:
                return datetime.strptime(normalized, fmt).date()
            except ValueError:
                continue
    return None


def parse_statement_date(raw_date: str | None) -> date | None:
    """Parse a statement date string.

    Attempts, in order:
    - ISO-8601: 2024-01-15, 2024-01-15T10:30:00, 2024-01-15T10:30:00Z
    - Slash dates: 01/15/2024 (month-first) or 15/01/2024 (day-first when
      the first component is above 12)
    - Year-first dates embedded in text: "posted 2024-1-5"
    - Dotted European and text-month forms: 15.01.2024, 15-Jan-2024,
      Jan 15, 2024, January 15 2024, 20240115

    Args:
        raw_date: The raw date string.

    Returns:
        The parsed date, or None if every attempt failed.
    """
    if not raw_date:
        return None

    date_str = raw_date.strip()
    if not date_str:
        return None

    for attempt in (_parse_iso, _parse_slash, _parse_year_first, _parse_fallback):
        parsed = attempt(date_str)
        if parsed is not None:
            return parsed

    return None


def day_distance(first: date | None, second: date | None) -> int | None:
    """Absolute number of calendar days between two dates.

    Returns:
        Day distance, or None if either date is missing.
    """
    if first is None or second is None:
        return None
    return abs((first - second).days)


def date_to_iso(d: date | None) -> str:
    """Convert a date to ISO 8601 format (YYYY-MM-DD), empty string for None."""
    if d is None:
        return ""
    return d.isoformat()
