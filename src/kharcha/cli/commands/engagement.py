"""Streak, achievement and motivation commands."""

import click

from kharcha.domain.achievements import AchievementService
from kharcha.domain.motivation import get_motivational_message
from kharcha.domain.streak import StreakService


@click.command("streak")
@click.pass_context
def show_streak(ctx):
    """Show the current and longest daily streak."""
    db = ctx.obj["db"]
    service = StreakService(db)

    record = service.get_streak()
    if record.last_entry_date is None:
        click.echo("No streak yet. Add an entry to start one.")
        return

    click.echo(f"Current streak: {record.current_streak} day(s)")
    click.echo(f"Longest streak: {record.longest_streak} day(s)")
    click.echo(f"Last entry: {record.last_entry_date}")


@click.command("achievements")
@click.option("--check", is_flag=True, help="Re-evaluate the rules before listing")
@click.pass_context
def list_achievements(ctx, check: bool):
    """List achievements and whether they are unlocked."""
    db = ctx.obj["db"]
    service = AchievementService(db)

    if check:
        result = service.check_achievements()
        for achievement in result.new_achievements:
            click.echo(f"Achievement unlocked: {achievement.name} - {achievement.description}")
        statuses = result.all_achievements
    else:
        statuses = service.list_achievements()

    unlocked_count = sum(1 for status in statuses if status.unlocked)
    click.echo(f"\nAchievements ({unlocked_count}/{len(statuses)} unlocked):")
    click.echo("-" * 70)
    for status in statuses:
        marker = "x" if status.unlocked else " "
        click.echo(f"[{marker}] {status.icon} {status.name:<22} {status.description}")


@click.command("motivate")
@click.pass_context
def motivate(ctx):
    """Show a motivational message based on your progress."""
    db = ctx.obj["db"]
    click.echo(get_motivational_message(AchievementService(db)))


def register_commands(cli):
    """Register engagement commands with main CLI."""
    cli.add_command(show_streak)
    cli.add_command(list_achievements)
    cli.add_command(motivate)
