"""Summary commands."""

import click

from kharcha.cli.date_filters import PERIOD_CHOICES, resolve_cli_date_range
from kharcha.cli.error_handling import format_amount
from kharcha.domain.category import CategoryService
from kharcha.domain.entities import CategoryBreakdown
from kharcha.domain.entries import EntryService
from kharcha.domain.ledger import calculate_category_breakdown, calculate_totals


def _display_breakdown(breakdown: CategoryBreakdown, categories: CategoryService) -> None:
    click.echo("\nBy category")
    click.echo("-" * 56)
    click.echo(f"{'Category':<22} {'Expense':>12} {'Income':>12} {'Count':>6}")
    rows = list(breakdown.categories)
    if breakdown.uncategorized.count:
        rows.append(breakdown.uncategorized)
    if not rows:
        click.echo("No expense or income entries.")
        return
    for row in rows:
        if row.category_id is None:
            name = "Uncategorized"
        else:
            category = categories.get_category_by_id(row.category_id)
            name = category.name if category is not None else "Unknown"
        click.echo(
            f"{name[:22]:<22} {format_amount(row.expense):>12} "
            f"{format_amount(row.income):>12} {row.count:>6}"
        )


@click.command("summary")
@click.option(
    "--period",
    type=click.Choice(PERIOD_CHOICES),
    help="Calendar period (defaults to monthly when no dates are given)",
)
@click.option("--on", "reference", help="Day inside the period (defaults to today)")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--all", "all_time", is_flag=True, help="Summarize the whole entry log")
@click.option("--by-category", is_flag=True, help="Also break expense and income down by category")
@click.pass_context
def summary(
    ctx,
    period: str | None,
    reference: str | None,
    start_date: str | None,
    end_date: str | None,
    all_time: bool,
    by_category: bool,
):
    """Show expense, income and balance totals with the UPI/cash breakdown."""
    db = ctx.obj["db"]
    service = EntryService(db)

    if all_time and (period or start_date or end_date):
        click.echo("Error: --all cannot be combined with a period or dates.", err=True)
        ctx.exit(1)

    if all_time:
        start, end = None, None
    else:
        start, end = resolve_cli_date_range(
            ctx,
            start_date=start_date,
            end_date=end_date,
            period=period,
            on=reference,
            default_period="monthly",
        )

    entries = service.list_entries(start_date=start, end_date=end)
    totals = calculate_totals(entries)

    if start is None and end is None:
        click.echo("\nSummary (all time)")
    else:
        click.echo(f"\nSummary {start or '...'} to {end or '...'}")
    click.echo("-" * 40)
    click.echo(f"{'Income':<20} {format_amount(totals.income):>18}")
    click.echo(f"{'  UPI':<20} {format_amount(totals.income_upi):>18}")
    click.echo(f"{'  Cash':<20} {format_amount(totals.income_cash):>18}")
    click.echo(f"{'Expense':<20} {format_amount(totals.expense):>18}")
    click.echo(f"{'  UPI':<20} {format_amount(totals.expense_upi):>18}")
    click.echo(f"{'  Cash':<20} {format_amount(totals.expense_cash):>18}")
    click.echo("-" * 40)
    click.echo(f"{'Balance':<20} {format_amount(totals.balance):>18}")

    if by_category:
        _display_breakdown(calculate_category_breakdown(entries), CategoryService(db))

    click.echo(f"\n{len(entries)} entry(ies)")


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary)
