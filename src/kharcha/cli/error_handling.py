"""CLI error handling helpers."""

from decimal import Decimal
from typing import Optional

import click

from kharcha.domain.errors import DomainError
from kharcha.utils.amount_parser import parse_amount


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def parse_amount_or_exit(ctx: click.Context, value: str, label: str = "amount") -> Decimal:
    """Parse an amount option, or exit with a CLI error."""
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def format_amount(amount: Optional[Decimal]) -> str:
    """Plain two-decimal rendering; currency symbols are left to the display layer."""
    if amount is None:
        return "not set"
    return f"{amount:,.2f}"
