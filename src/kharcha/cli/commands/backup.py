"""JSON backup commands: import and export."""

import json

import click

from kharcha.cli.error_handling import handle_domain_error
from kharcha.domain.entries import EntryService
from kharcha.domain.errors import DomainError


@click.command("import")
@click.argument("json_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--merge", is_flag=True, help="Keep existing entries and add only new IDs")
@click.option("--force", is_flag=True, help="Skip confirmation when replacing the entry log")
@click.pass_context
def import_json(ctx, json_file: str, merge: bool, force: bool):
    """Import entries from a JSON backup.

    Without --merge the whole entry log is replaced.
    """
    db = ctx.obj["db"]
    service = EntryService(db)

    if not merge and not force:
        click.confirm("Replace all existing entries with the backup?", abort=True)

    with open(json_file, "r", encoding="utf-8") as f:
        payload = f.read()

    try:
        result = service.import_entries(payload, merge=merge)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo("\nImport complete:")
    click.echo(f"  Read: {result.imported} entries")
    click.echo(f"  Added: {result.added}")
    click.echo(f"  Skipped: {result.skipped} existing IDs")
    if result.reissued:
        click.echo(f"  Re-issued: {result.reissued} duplicate IDs")
    click.echo(f"  Total: {result.total} entries")


@click.command("export")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output file (defaults to stdout)")
@click.pass_context
def export_json(ctx, output: str | None):
    """Export the entry log as a JSON backup."""
    db = ctx.obj["db"]
    service = EntryService(db)

    text = json.dumps({"entries": service.export_entries()}, indent=2, ensure_ascii=False)
    if output is None:
        click.echo(text)
        return

    with open(output, "w", encoding="utf-8") as f:
        f.write(text + "\n")
    click.echo(f"Exported entries to {output}")


def register_commands(cli):
    """Register backup commands with main CLI."""
    cli.add_command(import_json)
    cli.add_command(export_json)
