"""Balance commands."""

import click

from kharcha.cli.error_handling import format_amount, parse_amount_or_exit
from kharcha.domain.ledger import BalanceService
from kharcha.utils.amount_parser import to_cents


@click.group()
def balance_group():
    """Show and configure account balances."""
    pass


@balance_group.command("show")
@click.pass_context
def show_balances(ctx):
    """Show current bank (UPI) and cash balances."""
    db = ctx.obj["db"]
    service = BalanceService(db)

    baselines = service.get_baselines()
    bank = service.get_current_bank_balance()
    cash = service.get_current_cash_balance()

    click.echo("\nBalances:")
    click.echo("-" * 60)
    click.echo(f"{'Account':<10} {'Starting':>18} {'Current':>18}")
    click.echo(f"{'Bank':<10} {format_amount(baselines.bank):>18} {format_amount(bank):>18}")
    click.echo(f"{'Cash':<10} {format_amount(baselines.cash):>18} {format_amount(cash):>18}")
    if baselines.bank is None or baselines.cash is None:
        click.echo("\nSet a starting balance with 'kharcha balance set --bank AMOUNT --cash AMOUNT'.")


@balance_group.command("set")
@click.option("--bank", help="Starting bank (UPI) balance")
@click.option("--cash", help="Starting cash balance")
@click.pass_context
def set_balances(ctx, bank: str | None, cash: str | None):
    """Set starting balances.

    Examples:
        kharcha balance set --bank 25000
        kharcha balance set --bank 25000 --cash 1500
    """
    db = ctx.obj["db"]
    service = BalanceService(db)

    if bank is None and cash is None:
        click.echo("Error: Provide --bank and/or --cash.", err=True)
        ctx.exit(1)

    if bank is not None:
        amount = to_cents(parse_amount_or_exit(ctx, bank, "bank balance"))
        service.set_initial_bank_balance(amount)
        click.echo(f"Starting bank balance set to {format_amount(amount)}")
    if cash is not None:
        amount = to_cents(parse_amount_or_exit(ctx, cash, "cash balance"))
        service.set_initial_cash_balance(amount)
        click.echo(f"Starting cash balance set to {format_amount(amount)}")


@balance_group.command("clear")
@click.option("--bank", is_flag=True, help="Clear the starting bank balance")
@click.option("--cash", is_flag=True, help="Clear the starting cash balance")
@click.pass_context
def clear_balances(ctx, bank: bool, cash: bool):
    """Clear starting balances (current balances become 'not set')."""
    db = ctx.obj["db"]
    service = BalanceService(db)

    if not bank and not cash:
        click.echo("Error: Provide --bank and/or --cash.", err=True)
        ctx.exit(1)

    if bank:
        service.set_initial_bank_balance(None)
        click.echo("Starting bank balance cleared")
    if cash:
        service.set_initial_cash_balance(None)
        click.echo("Starting cash balance cleared")


@balance_group.command("flows")
@click.pass_context
def show_flows(ctx):
    """Show the net bank and cash flow of all entries, ignoring starting balances."""
    db = ctx.obj["db"]
    service = BalanceService(db)

    bank, cash = service.get_net_flows()
    click.echo(f"Net bank flow: {format_amount(bank)}")
    click.echo(f"Net cash flow: {format_amount(cash)}")


def register_commands(cli):
    """Register balance commands with main CLI."""
    cli.add_command(balance_group, name="balance")
