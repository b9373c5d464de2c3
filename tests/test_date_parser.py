"""Tests for date parser with relative dates."""

import pytest
from datetime import date, datetime, timedelta
from dateutil.relativedelta import relativedelta
from kharcha.utils.date_parser import coerce_date, days_between, parse_date


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    result = parse_date("2024-01-15")
    assert result == date(2024, 1, 15)


def test_parse_today():
    """Test parsing 'today'."""
    result = parse_date("today")
    assert result == date.today()


def test_parse_yesterday():
    """Test parsing 'yesterday'."""
    result = parse_date(" Yesterday ")
    assert result == date.today() - timedelta(days=1)


def test_parse_tomorrow():
    """Test parsing 'tomorrow'."""
    result = parse_date("tomorrow")
    assert result == date.today() + timedelta(days=1)


def test_parse_last_month():
    """Test parsing 'last month'."""
    result = parse_date("last month")
    # Should be first day of last month
    assert result == (date.today() - relativedelta(months=1)).replace(day=1)


def test_parse_last_week():
    """Test parsing 'last week'."""
    result = parse_date("last week")
    today = date.today()
    assert result == today - timedelta(days=today.weekday() + 7)
    assert result.weekday() == 0


def test_parse_this_week():
    """Test parsing 'this week'."""
    result = parse_date("this week")
    assert result.weekday() == 0
    assert 0 <= (date.today() - result).days <= 6


def test_parse_this_month():
    """Test parsing 'this month'."""
    today = date.today()
    assert parse_date("this month") == date(today.year, today.month, 1)


def test_parse_this_and_last_year():
    """Test parsing 'this year' and 'last year'."""
    today = date.today()
    assert parse_date("this year") == date(today.year, 1, 1)
    assert parse_date("last year") == date(today.year - 1, 1, 1)


def test_parse_invalid_relative():
    """Test parsing invalid relative date."""
    with pytest.raises(ValueError):
        parse_date("last invalid")


def test_parse_day_first_format():
    """Test DD/MM/YYYY is read day first."""
    assert parse_date("05/03/2024") == date(2024, 3, 5)
    assert parse_date("15/01/2024") == date(2024, 1, 15)


def test_parse_day_first_invalid():
    """Test an impossible DD/MM/YYYY date."""
    with pytest.raises(ValueError, match="Could not parse date"):
        parse_date("31/02/2024")


def test_parse_standard_formats():
    """Test parsing other formats via dateutil."""
    assert parse_date("January 15, 2024") == date(2024, 1, 15)


def test_coerce_date():
    """Test coerce_date accepts dates, datetimes and strings."""
    assert coerce_date(date(2024, 3, 15)) == date(2024, 3, 15)
    assert coerce_date(datetime(2024, 3, 15, 23, 59)) == date(2024, 3, 15)
    assert coerce_date("2024-03-15") == date(2024, 3, 15)
    assert coerce_date("15/03/2024") == date(2024, 3, 15)


def test_coerce_date_rejects_other_types():
    """Test coerce_date rejects non-date values."""
    with pytest.raises(ValueError):
        coerce_date(20240315)


def test_days_between():
    """Test calendar day differences."""
    assert days_between(date(2024, 2, 28), date(2024, 3, 1)) == 2
    assert days_between(date(2024, 3, 1), date(2024, 2, 28)) == -2
