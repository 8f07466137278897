"""Category management commands."""

import click
from budgetbook.cli.error_handling import handle_domain_error
from budgetbook.cli.resolution import resolve_entity_or_exit, resolve_household_or_exit
from budgetbook.domain.category import CategoryService
from budgetbook.domain.errors import DomainError


def print_category_tree(nodes: list[dict], indent: int = 0) -> None:
    """Recursively print category tree."""
    for node in nodes:
        cat = node["category"]
        prefix = "  " * indent
        flag = " [owner draw]" if cat.is_owner_draw else ""
        click.echo(f"{prefix}{cat.name} (ID: {cat.id}){flag}")
        if node["children"]:
            print_category_tree(node["children"], indent + 1)


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--household", help="Household name or ID (optional with one household)")
@click.pass_context
def list_categories(ctx, household: str | None):
    """List all categories in tree format."""
    household_id = resolve_household_or_exit(ctx, household)
    service = CategoryService(ctx.obj["db"])

    tree = service.get_category_tree(household_id)
    if not tree:
        click.echo("No categories found. Run 'category seed' to create default categories.")
        return

    click.echo("\nCategories:")
    print_category_tree(tree)


@category_group.command("create")
@click.argument("name")
@click.option("--parent", help="Parent category path (e.g., 'Food')")
@click.option("--household", help="Household name or ID (optional with one household)")
@click.option("--entity", help="Entity name or ID the category belongs to")
@click.option(
    "--owner-draw/--no-owner-draw",
    default=None,
    help="Mark as owner draw category (default: inferred from the name)",
)
@click.pass_context
def create_category(
    ctx, name: str, parent: str | None, household: str | None, entity: str | None, owner_draw: bool | None
):
    """Create a new category.

    Examples:
        budgetbook category create "Farmers Market" --parent "Food"
        budgetbook category create "Distributions" --parent "Owner & Payroll" --owner-draw
    """
    household_id = resolve_household_or_exit(ctx, household)
    entity_id = resolve_entity_or_exit(ctx, household_id, entity) if entity else None
    service = CategoryService(ctx.obj["db"])

    try:
        category_id = service.create_category(
            household_id,
            name,
            parent_path=parent,
            entity_id=entity_id,
            is_owner_draw=owner_draw,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    parent_str = f" under '{parent}'" if parent else ""
    click.echo(f"Created category '{name}'{parent_str} (ID: {category_id})")


@category_group.command("seed")
@click.option("--household", help="Household name or ID (optional with one household)")
@click.pass_context
def seed_categories(ctx, household: str | None):
    """Create the default category groups.

    Does nothing if the household already has categories.
    """
    household_id = resolve_household_or_exit(ctx, household)
    service = CategoryService(ctx.obj["db"])

    count = service.seed_default_categories(household_id)
    if count == 0:
        click.echo("Categories already exist. Skipping initialization.")
    else:
        click.echo(f"Created {count} default categories")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
