"""Main CLI entry point."""

import logging

import click
from kharcha.database.factories import create_sqlite_database

# Import and register all commands at module level
from kharcha.cli.commands import (
    backup,
    balance,
    category,
    engagement,
    entry,
    goal,
    summary,
    template,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides KHARCHA_DB_PATH environment variable)",
    envvar="KHARCHA_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Kharcha - Personal expense tracking.

    Record income, expenses and transfers across UPI and cash, track savings
    and spending goals, and keep a daily streak going.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
entry.register_commands(cli)
summary.register_commands(cli)
balance.register_commands(cli)
goal.register_commands(cli)
engagement.register_commands(cli)
category.register_commands(cli)
backup.register_commands(cli)
template.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
