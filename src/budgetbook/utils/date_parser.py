"""Date parsing utilities."""

from datetime import date, datetime, timedelta
from typing import Optional
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

# Tried in order after a format's own pattern.
FALLBACK_DATE_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%b %d, %Y",
)


def parse_date(raw: str, preferred_format: Optional[str] = None) -> Optional[str]:
    """Parse a statement date into an ISO ``YYYY-MM-DD`` string.

    The preferred ``strptime`` pattern is tried first, then the fallback
    list, then a best-effort generic parse.

    Args:
        raw: Date string as it appears in the file
        preferred_format: Optional ``strptime`` pattern for this source

    Returns:
        ISO date string, or None if nothing matched
    """
    if raw is None:
        return None
    raw = raw.strip()
    if not raw:
        return None

    patterns = list(FALLBACK_DATE_FORMATS)
    if preferred_format:
        patterns.insert(0, preferred_format)

    for pattern in patterns:
        try:
            return datetime.strptime(raw, pattern).date().isoformat()
        except ValueError:
            continue

    try:
        return date_parser.parse(raw).date().isoformat()
    except (ValueError, OverflowError, TypeError):
        return None


def parse_user_date(date_str: str) -> date:
    """Parse a date typed on the command line.

    Supports absolute dates and relative ones:
    - "2024-01-15", "January 15, 2024", etc.
    - "today", "yesterday", "tomorrow"
    - "last month", "this month", "last year", "this week", ...

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)
        elif period == "week":
            return today - timedelta(days=today.weekday() + 7)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
        elif period == "week":
            return today - timedelta(days=today.weekday())

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError, TypeError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def month_of(value: date | str) -> str:
    """Return the ``YYYY-MM`` budget month for a date or ISO date string."""
    if isinstance(value, str):
        return value[:7]
    return value.strftime("%Y-%m")


def to_date(value: date | str) -> date:
    """Coerce an ISO date string to a date."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)
