"""Date helpers for Jira sprint reports."""

import re
from datetime import datetime

from jira_sprint_bot.exceptions import BadDateError

TRACKER_DATE_FORMAT = "%d/%b/%y %I:%M %p"

# strptime accepts single-digit fields and stray whitespace, the tracker never sends those
_TRACKER_DATE_RE = re.compile(r"\d{2}/[A-Z][a-z]{2}/\d{2} \d{2}:\d{2} (AM|PM)")


def parse_tracker_date(value) -> datetime:
    """Parse a Jira sprint date such as ``"03/Jan/18 10:48 AM"``.

    Raises:
        BadDateError: If the value is not a string in exactly that format
    """
    if not isinstance(value, str) or not _TRACKER_DATE_RE.fullmatch(value):
        raise BadDateError(f"Unrecognised sprint date: {value!r}")
    try:
        return datetime.strptime(value, TRACKER_DATE_FORMAT)
    except ValueError as e:
        raise BadDateError(f"Unrecognised sprint date: {value!r}") from e


def ordinal_suffix(day: int) -> str:
    """Return the English ordinal suffix for a day of the month."""
    if not 1 <= day <= 31:
        raise BadDateError(f"Day of month out of range: {day}")
    if day // 10 == 1:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def ordinal(day: int) -> str:
    return f"{day}{ordinal_suffix(day)}"


def pretty_date(value: datetime) -> str:
    """Format a date as ``"Wednesday, January 3rd, 2018"``."""
    return f"{value:%A, %B} {ordinal(value.day)}, {value:%Y}"


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from start to end, truncated toward zero."""
    return int((end - start).total_seconds() / 86400)
