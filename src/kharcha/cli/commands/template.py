"""Entry template commands."""

import click

from kharcha.cli.commands.entry import ADJUSTMENTS, ENTRY_TYPES, MODES, echo_recorded
from kharcha.cli.error_handling import format_amount, handle_domain_error
from kharcha.domain.errors import DomainError
from kharcha.domain.recording import RecordingService
from kharcha.domain.templates import TemplateService
from kharcha.utils.date_parser import parse_date


@click.group()
def template_group():
    """Manage entry templates for quick recording."""
    pass


@template_group.command("list")
@click.pass_context
def list_templates(ctx):
    """List saved templates."""
    db = ctx.obj["db"]
    service = TemplateService(db)

    templates = service.list_templates()
    if not templates:
        click.echo("No templates saved.")
        return

    click.echo("\nTemplates:")
    click.echo("-" * 80)
    for template in templates:
        amount = format_amount(template.amount) if template.amount is not None else "-"
        mode = template.mode.value if template.mode is not None else ""
        click.echo(
            f"{template.id:<15} {template.name:<22} {template.type.value:<20} {mode:<6} {amount:>12}"
        )


@template_group.command("add")
@click.argument("name")
@click.option("--type", "entry_type", type=click.Choice(ENTRY_TYPES), required=True, help="Entry type")
@click.option("--amount", help="Default amount (can be given when the template is used)")
@click.option("--mode", type=click.Choice(MODES), help="Payment mode")
@click.option("--adjustment", type=click.Choice(ADJUSTMENTS), help="Direction of a balance adjustment")
@click.option("--note", help="Note")
@click.option("--category", help="Category ID")
@click.pass_context
def add_template(
    ctx,
    name: str,
    entry_type: str,
    amount: str | None,
    mode: str | None,
    adjustment: str | None,
    note: str | None,
    category: str | None,
):
    """Save a template.

    Examples:
        kharcha template add "Morning chai" --type expense --amount 20 --mode cash
        kharcha template add Rent --type expense --category bills_utilities
    """
    db = ctx.obj["db"]
    service = TemplateService(db)

    try:
        template = service.add_template(
            name,
            type=entry_type,
            amount=amount,
            mode=mode,
            adjustment_type=adjustment,
            note=note,
            category_id=category,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created template '{template.name}' (ID: {template.id})")


@template_group.command("delete")
@click.argument("template_id")
@click.pass_context
def delete_template(ctx, template_id: str):
    """Delete a template."""
    db = ctx.obj["db"]
    service = TemplateService(db)

    try:
        service.delete_template(template_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted template {template_id}")


@template_group.command("use")
@click.argument("template_id")
@click.option("--amount", help="Amount (overrides the template's)")
@click.option("--date", "entry_date", default="today", show_default=True, help="Entry date")
@click.option("--note", help="Note (overrides the template's)")
@click.pass_context
def use_template(ctx, template_id: str, amount: str | None, entry_date: str, note: str | None):
    """Record an entry from a template."""
    db = ctx.obj["db"]

    try:
        txn_date = parse_date(entry_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        fields = TemplateService(db).entry_fields(template_id, amount=amount, note=note)
        result = RecordingService(db).record_entry(date=txn_date, **fields)
    except DomainError as e:
        handle_domain_error(ctx, e)

    echo_recorded(result)


def register_commands(cli):
    """Register template commands with main CLI."""
    cli.add_command(template_group, name="template")
