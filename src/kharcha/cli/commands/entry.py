"""Entry commands: add, edit, delete and list."""

import click

from kharcha.cli.date_filters import PERIOD_CHOICES, resolve_cli_date_range
from kharcha.cli.error_handling import format_amount, handle_domain_error
from kharcha.domain.category import CategoryService
from kharcha.domain.entities import AdjustmentType, EntryType, PaymentMode, RecordResult
from kharcha.domain.entries import EntryService
from kharcha.domain.errors import DomainError
from kharcha.domain.recording import RecordingService
from kharcha.utils.date_parser import parse_date

ENTRY_TYPES = [entry_type.value for entry_type in EntryType]
MODES = [mode.value for mode in PaymentMode]
ADJUSTMENTS = [adjustment.value for adjustment in AdjustmentType]


def _parse_date_or_exit(ctx, value: str):
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


def echo_recorded(result: RecordResult) -> None:
    """Print a recorded entry with its streak and any new achievements."""
    entry = result.entry
    click.echo(f"Created entry {entry.id}")
    click.echo(f"  Type: {entry.type.value}")
    click.echo(f"  Date: {entry.date}")
    click.echo(f"  Amount: {format_amount(entry.amount)}")
    if entry.mode is not None:
        click.echo(f"  Mode: {entry.mode.value}")
    if entry.adjustment_type is not None:
        click.echo(f"  Adjustment: {entry.adjustment_type.value}")
    if entry.note:
        click.echo(f"  Note: {entry.note}")

    streak = result.streak
    click.echo(f"Streak: {streak.current_streak} day(s)")
    if streak.is_new_streak and streak.current_streak > 1:
        click.echo(f"🔥 Streak extended to {streak.current_streak} days!")
    elif streak.is_new_streak:
        click.echo("🔥 Streak started! Come back tomorrow to keep it going.")
    for achievement in result.achievements.new_achievements:
        click.echo(f"Achievement unlocked: {achievement.name} - {achievement.description}")


@click.command("add")
@click.option("--type", "entry_type", type=click.Choice(ENTRY_TYPES), required=True, help="Entry type")
@click.option("--amount", required=True, help="Positive amount (e.g., 250 or 1,250.50)")
@click.option(
    "--date",
    "entry_date",
    default="today",
    show_default=True,
    help="Entry date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--mode", type=click.Choice(MODES), help="Payment mode (defaults to upi; ignored for transfers)")
@click.option("--adjustment", type=click.Choice(ADJUSTMENTS), help="Direction of a balance adjustment")
@click.option("--note", help="Note")
@click.option("--category", help="Category ID (see 'kharcha categories list')")
@click.pass_context
def add_entry(
    ctx,
    entry_type: str,
    amount: str,
    entry_date: str,
    mode: str | None,
    adjustment: str | None,
    note: str | None,
    category: str | None,
):
    """Record a new entry and update streak and achievements.

    Examples:
        kharcha add --type expense --amount 200 --mode cash --note "Lunch"
        kharcha add --type income --amount 50000 --date 2024-01-01 --category income_salary
        kharcha add --type balance_adjustment --amount 50 --adjustment subtract
        kharcha add --type cash_withdrawal --amount 2000
    """
    db = ctx.obj["db"]
    service = RecordingService(db)

    txn_date = _parse_date_or_exit(ctx, entry_date)

    try:
        result = service.record_entry(
            type=entry_type,
            amount=amount,
            date=txn_date,
            mode=mode,
            adjustment_type=adjustment,
            note=note,
            category_id=category,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    echo_recorded(result)


@click.command("edit")
@click.argument("entry_id")
@click.option("--type", "entry_type", type=click.Choice(ENTRY_TYPES), help="New entry type")
@click.option("--amount", help="New amount")
@click.option("--date", "entry_date", help="New date")
@click.option("--mode", type=click.Choice(MODES), help="New payment mode")
@click.option("--adjustment", type=click.Choice(ADJUSTMENTS), help="New adjustment direction")
@click.option("--note", help="New note")
@click.option("--category", help="New category ID")
@click.pass_context
def edit_entry(
    ctx,
    entry_id: str,
    entry_type: str | None,
    amount: str | None,
    entry_date: str | None,
    mode: str | None,
    adjustment: str | None,
    note: str | None,
    category: str | None,
):
    """Replace an entry with an edited copy (the ID is kept)."""
    db = ctx.obj["db"]
    service = EntryService(db)

    changes = {
        "type": entry_type,
        "amount": amount,
        "mode": mode,
        "adjustment_type": adjustment,
        "note": note,
        "category_id": category,
    }
    if entry_date is not None:
        changes["date"] = _parse_date_or_exit(ctx, entry_date)
    changes = {key: value for key, value in changes.items() if value is not None}

    if not changes:
        click.echo("Error: At least one field must be provided to update.", err=True)
        ctx.exit(1)

    try:
        entry = service.update_entry(entry_id, **changes)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated entry {entry.id}")


@click.command("delete")
@click.argument("entry_id")
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def delete_entry(ctx, entry_id: str, force: bool):
    """Delete an entry. Unlocked achievements are kept."""
    db = ctx.obj["db"]
    service = EntryService(db)

    try:
        entry = service.require_entry(entry_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not force:
        click.confirm(
            f"Delete {entry.type.value} of {format_amount(entry.amount)} on {entry.date}?",
            abort=True,
        )

    service.delete_entry(entry_id)
    click.echo(f"Deleted entry {entry_id}")


@click.command("list")
@click.option("--period", type=click.Choice(PERIOD_CHOICES), help="Calendar period")
@click.option("--on", "reference", help="Day inside the period (defaults to today)")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative)")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative)")
@click.pass_context
def list_entries(
    ctx,
    period: str | None,
    reference: str | None,
    start_date: str | None,
    end_date: str | None,
):
    """List entries, newest first."""
    db = ctx.obj["db"]
    service = EntryService(db)
    category_service = CategoryService(db)

    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period=period, on=reference
    )
    entries = service.list_entries(start_date=start, end_date=end, newest_first=True)

    if not entries:
        click.echo("No entries found.")
        return

    click.echo(f"\nFound {len(entries)} entry(ies):")
    click.echo("-" * 100)
    click.echo(
        f"{'ID':<15} {'Date':<12} {'Type':<20} {'Mode':<6} {'Amount':>14}  {'Category':<18} {'Note'}"
    )
    click.echo("-" * 100)
    for entry in entries:
        category_name = ""
        if entry.category_id:
            category_obj = category_service.get_category_by_id(entry.category_id)
            category_name = category_obj.name if category_obj else entry.category_id
        mode = entry.mode.value if entry.mode else "-"
        click.echo(
            f"{entry.id:<15} {str(entry.date):<12} {entry.type.value:<20} {mode:<6} "
            f"{format_amount(entry.amount):>14}  {category_name[:18]:<18} {(entry.note or '')[:30]}"
        )


def register_commands(cli):
    """Register entry commands with main CLI."""
    cli.add_command(add_entry)
    cli.add_command(edit_entry)
    cli.add_command(delete_entry)
    cli.add_command(list_entries)
