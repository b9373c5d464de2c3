"""Calendar period ranges and entry filtering by date."""

from datetime import date, timedelta
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from kharcha.domain import errors
from kharcha.domain.entities import DateRange, Entry, Period
from kharcha.utils.date_parser import coerce_date


def parse_period(period: Period | str) -> Period:
    """Resolve a period keyword ("daily" is an alias of "today").

    Raises:
        ValidationError: If the keyword is not recognized
    """
    if isinstance(period, Period):
        return period
    keyword = str(period).strip().lower()
    try:
        return Period(keyword)
    except ValueError:
        raise errors.ValidationError(
            errors.unknown_choice("period", period, [p.value for p in Period] + ["daily"])
        )


def get_period_dates(period: Period | str, reference_date: Optional[date] = None) -> DateRange:
    """Get the inclusive date range of a period containing reference_date.

    Weeks start on Monday, so a Sunday belongs to the week that began six
    days earlier. Quarters are Jan-Mar, Apr-Jun, Jul-Sep and Oct-Dec.

    Args:
        period: Period keyword (today/daily, weekly, monthly, quarterly, yearly)
        reference_date: Day inside the period (defaults to today)

    Returns:
        DateRange for the period

    Raises:
        ValidationError: If the period keyword is not recognized
    """
    period = parse_period(period)
    today = coerce_date(reference_date) if reference_date is not None else date.today()

    if period is Period.TODAY:
        return DateRange(today, today)

    if period is Period.WEEKLY:
        start = today - timedelta(days=today.weekday())
        return DateRange(start, start + timedelta(days=6))

    if period is Period.MONTHLY:
        start = today.replace(day=1)
        return DateRange(start, start + relativedelta(months=1) - timedelta(days=1))

    if period is Period.QUARTERLY:
        start = today.replace(month=(today.month - 1) // 3 * 3 + 1, day=1)
        return DateRange(start, start + relativedelta(months=3) - timedelta(days=1))

    return DateRange(today.replace(month=1, day=1), today.replace(month=12, day=31))


def filter_entries_by_date_range(entries: Iterable[Entry], start: date, end: date) -> list[Entry]:
    """Keep entries dated within [start, end], preserving order.

    Entries without a usable date fall outside every range.
    """
    start, end = coerce_date(start), coerce_date(end)
    return [
        entry
        for entry in entries
        if isinstance(entry.date, date) and start <= entry.date <= end
    ]


def filter_entries_by_period(
    entries: Iterable[Entry],
    period: Period | str,
    reference_date: Optional[date] = None,
) -> list[Entry]:
    """Keep entries inside the period containing reference_date."""
    date_range = get_period_dates(period, reference_date)
    return filter_entries_by_date_range(entries, date_range.start, date_range.end)
