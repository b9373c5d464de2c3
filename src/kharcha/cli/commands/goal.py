"""Goal commands."""

import click

from kharcha.cli.error_handling import format_amount, handle_domain_error
from kharcha.domain.entities import GoalCategory, GoalPeriod, GoalProgress
from kharcha.domain.errors import DomainError
from kharcha.domain.goals import GoalService
from kharcha.utils.date_parser import parse_date

GOAL_PERIODS = [period.value for period in GoalPeriod]
GOAL_CATEGORIES = [category.value for category in GoalCategory]


def _format_progress(progress: GoalProgress) -> str:
    if progress.target_goal <= 0:
        return "no target"
    if progress.is_over_limit:
        status = "over limit"
    elif progress.is_completed:
        status = "completed"
    else:
        status = f"{format_amount(progress.remaining)} to go"
    return (
        f"{format_amount(progress.current_value)} / {format_amount(progress.target_goal)} "
        f"({progress.progress:.1f}%, {status})"
    )


@click.group()
def goal_group():
    """Manage savings and expense goals."""
    pass


@goal_group.command("show")
@click.option("--on", "reference", help="Day inside the goal periods (defaults to today)")
@click.pass_context
def show_goals(ctx, reference: str | None):
    """Show every goal with its progress for the current period."""
    db = ctx.obj["db"]
    service = GoalService(db)

    reference_date = None
    if reference:
        try:
            reference_date = parse_date(reference)
        except ValueError as e:
            click.echo(f"Error: Invalid reference date: {e}", err=True)
            ctx.exit(1)

    goals = service.get_goals()
    completed = service.get_completed_goals()

    for category in GoalCategory:
        click.echo(f"\n{category.value.capitalize()} goals:")
        click.echo("-" * 70)
        for period in GoalPeriod:
            progress = service.calculate_goal_progress(period, category, reference_date)
            label = period.value
            if period is GoalPeriod.CUSTOM and goals.name_for(category):
                label = f"custom ({goals.name_for(category)})"
            line = f"{label:<24} {_format_progress(progress)}"
            if category is GoalCategory.SAVINGS and completed.is_set(period):
                line += " [celebrated]"
            click.echo(line)


@goal_group.command("set")
@click.argument("period", type=click.Choice(GOAL_PERIODS))
@click.argument("category", type=click.Choice(GOAL_CATEGORIES))
@click.argument("amount")
@click.option("--name", help="Label for a custom goal")
@click.pass_context
def set_goal(ctx, period: str, category: str, amount: str, name: str | None):
    """Set a goal target. Use 0 to clear it.

    Examples:
        kharcha goal set monthly savings 10000
        kharcha goal set weekly expense 3000
        kharcha goal set custom savings 50000 --name "New laptop"
    """
    db = ctx.obj["db"]
    service = GoalService(db)

    if name is not None and period != GoalPeriod.CUSTOM.value:
        click.echo("Error: --name only applies to custom goals.", err=True)
        ctx.exit(1)

    try:
        goals = service.set_goal(period, category, amount, name)
    except DomainError as e:
        handle_domain_error(ctx, e)

    target = goals.target_for(GoalPeriod(period), GoalCategory(category))
    click.echo(f"Set {period} {category} goal to {format_amount(target)}")


@goal_group.command("progress")
@click.option("--period", type=click.Choice(GOAL_PERIODS), default="monthly", show_default=True)
@click.option("--category", type=click.Choice(GOAL_CATEGORIES), default="savings", show_default=True)
@click.pass_context
def goal_progress(ctx, period: str, category: str):
    """Show progress towards one goal."""
    db = ctx.obj["db"]
    service = GoalService(db)

    progress = service.calculate_goal_progress(period, category)
    click.echo(f"{period.capitalize()} {category} goal: {_format_progress(progress)}")


def register_commands(cli):
    """Register goal commands with main CLI."""
    cli.add_command(goal_group, name="goal")
