"""CLI helpers for date range resolution."""

from datetime import date

import click

from kharcha.domain.errors import ValidationError
from kharcha.domain.periods import get_period_dates
from kharcha.utils.date_parser import parse_date

PERIOD_CHOICES = ["today", "daily", "weekly", "monthly", "quarterly", "yearly"]


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    on: str | None = None,
    default_period: str | None = None,
) -> tuple[date | None, date | None]:
    """Resolve CLI date range from a period keyword or explicit dates.

    Args:
        ctx: Click context
        start_date: Optional --start-date value
        end_date: Optional --end-date value
        period: Optional --period keyword
        on: Optional reference day for the period (defaults to today)
        default_period: Period to use when neither a period nor dates are given
    """
    if period and (start_date or end_date):
        click.echo(
            "Error: --period cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if not period and not start_date and not end_date:
        period = default_period

    reference = None
    if on:
        try:
            reference = parse_date(on)
        except ValueError as e:
            click.echo(f"Error: Invalid reference date: {e}", err=True)
            ctx.exit(1)

    if period:
        try:
            date_range = get_period_dates(period, reference)
        except ValidationError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        return date_range.start, date_range.end

    start = None
    end = None

    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    return start, end
