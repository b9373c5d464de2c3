"""Category management commands."""

import click

from kharcha.cli.error_handling import handle_domain_error
from kharcha.domain.category import DEFAULT_CATEGORY_IDS, CategoryService
from kharcha.domain.entities import CategoryType
from kharcha.domain.errors import DomainError

CATEGORY_TYPES = [category_type.value for category_type in CategoryType]


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--type", "category_type", type=click.Choice(CATEGORY_TYPES), help="Only show this type")
@click.pass_context
def list_categories(ctx, category_type: str | None):
    """List default and custom categories."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    categories = service.list_categories(category_type)
    if not categories:
        click.echo("No categories found.")
        return

    click.echo("\nCategories:")
    click.echo("-" * 60)
    for category in categories:
        marker = "" if category.id in DEFAULT_CATEGORY_IDS else " (custom)"
        click.echo(f"{category.id:<28} {category.name:<22} {category.type.value}{marker}")


@category_group.command("add")
@click.argument("name")
@click.option("--type", "category_type", type=click.Choice(CATEGORY_TYPES), default="expense", show_default=True)
@click.option("--icon", default="ellipse-outline", show_default=True, help="Icon name")
@click.option("--color", default="#9E9E9E", show_default=True, help="Display color")
@click.pass_context
def add_category(ctx, name: str, category_type: str, icon: str, color: str):
    """Add a custom category."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        category = service.add_category(name, icon=icon, color=color, category_type=category_type)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created category '{category.name}' (ID: {category.id})")


@category_group.command("delete")
@click.argument("category_id")
@click.pass_context
def delete_category(ctx, category_id: str):
    """Delete a custom category. Entries keep their category reference."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        service.delete_category(category_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted category {category_id}")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="categories")
