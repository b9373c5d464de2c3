"""Date parsing utilities."""

import re
from datetime import date, datetime, timedelta
from typing import Callable

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DISPLAY_DATE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")

# Relative phrases resolve to the first day of the named window
_RELATIVE_DATES: dict[str, Callable[[date], date]] = {
    "today": lambda today: today,
    "yesterday": lambda today: today - timedelta(days=1),
    "tomorrow": lambda today: today + timedelta(days=1),
    "this week": lambda today: today - timedelta(days=today.weekday()),
    "last week": lambda today: today - timedelta(days=today.weekday() + 7),
    "this month": lambda today: today.replace(day=1),
    "last month": lambda today: today.replace(day=1) - relativedelta(months=1),
    "this year": lambda today: today.replace(month=1, day=1),
    "last year": lambda today: today.replace(month=1, day=1) - relativedelta(years=1),
}


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Accepts relative phrases ("today", "yesterday", "last week", "this
    month", ...), day-first "DD/MM/YYYY", and anything else dateutil can read
    ("2024-01-15", "January 15, 2024"). Week phrases resolve to a Monday.

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = " ".join(date_str.strip().lower().split())

    relative = _RELATIVE_DATES.get(text)
    if relative is not None:
        return relative(date.today())

    match = _DISPLAY_DATE.match(text)
    if match:
        day, month, year = (int(part) for part in match.groups())
        try:
            return date(year, month, day)
        except ValueError as e:
            raise ValueError(f"Could not parse date '{date_str}': {e}")

    try:
        return date_parser.parse(text).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def coerce_date(value: date | datetime | str) -> date:
    """Turn a stored or user-supplied date value into a calendar day.

    Raises:
        ValueError: If the value is not a recognizable date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Could not parse date '{value}'")
    if _ISO_DATE.match(value.strip()):
        return date.fromisoformat(value.strip())
    return parse_date(value)


def days_between(earlier: date, later: date) -> int:
    """Whole calendar days from earlier to later (negative if reversed)."""
    return (later - earlier).days
