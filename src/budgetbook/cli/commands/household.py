"""Household and entity management commands."""

import click
from budgetbook.cli.error_handling import handle_domain_error
from budgetbook.cli.resolution import resolve_household_or_exit
from budgetbook.domain.category import CategoryService
from budgetbook.domain.entities import ENTITY_TYPES, PERSONAL
from budgetbook.domain.errors import DomainError
from budgetbook.domain.household import HouseholdService


@click.group()
def household_group():
    """Manage households."""
    pass


@household_group.command("create")
@click.argument("name", metavar="HOUSEHOLD_NAME")
@click.option(
    "--personal-entity",
    default="Personal",
    show_default=True,
    help="Name of the personal entity created with the household",
)
@click.option("--no-seed", is_flag=True, help="Do not create the default categories")
@click.pass_context
def create_household(ctx, name: str, personal_entity: str, no_seed: bool):
    """Create a new household with a personal entity.

    Examples:
        budgetbook household create "Smith Family"
        budgetbook household create "Smith Family" --no-seed
    """
    db = ctx.obj["db"]
    service = HouseholdService(db)

    try:
        household_id = service.create_household(name)
        entity_id = service.create_entity(household_id, personal_entity, entity_type=PERSONAL)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created household '{name}' (ID: {household_id})")
    click.echo(f"Created entity '{personal_entity}' (ID: {entity_id})")

    if not no_seed:
        count = CategoryService(db).seed_default_categories(household_id)
        click.echo(f"Created {count} default categories")


@household_group.command("list")
@click.pass_context
def list_households(ctx):
    """List all households."""
    service = HouseholdService(ctx.obj["db"])

    households = service.list_households()
    if not households:
        click.echo("No households found.")
        return

    click.echo("\nHouseholds:")
    click.echo("-" * 60)
    for hh in households:
        click.echo(f"ID: {hh.id:3d} | {hh.name}")


@click.group()
def entity_group():
    """Manage personal and business entities."""
    pass


@entity_group.command("create")
@click.argument("name", metavar="ENTITY_NAME")
@click.option("--household", help="Household name or ID (optional with one household)")
@click.option(
    "--type",
    "entity_type",
    type=click.Choice(ENTITY_TYPES),
    default=PERSONAL,
    show_default=True,
    help="Entity type",
)
@click.option("--tax-rate", type=float, default=0.0, help="Estimated tax rate percent")
@click.pass_context
def create_entity(ctx, name: str, household: str | None, entity_type: str, tax_rate: float):
    """Create an entity in a household.

    Business entities get default business categories, including
    "Owner & Payroll > Owner Draw".

    Examples:
        budgetbook entity create "Acme LLC" --type business --tax-rate 25
    """
    household_id = resolve_household_or_exit(ctx, household)
    service = HouseholdService(ctx.obj["db"])

    try:
        entity_id = service.create_entity(
            household_id, name, entity_type=entity_type, tax_rate_percent=tax_rate
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created {entity_type} entity '{name}' (ID: {entity_id})")


@entity_group.command("list")
@click.option("--household", help="Household name or ID (optional with one household)")
@click.pass_context
def list_entities(ctx, household: str | None):
    """List the entities of a household."""
    household_id = resolve_household_or_exit(ctx, household)
    service = HouseholdService(ctx.obj["db"])

    entities = service.list_entities(household_id)
    if not entities:
        click.echo("No entities found.")
        return

    click.echo("\nEntities:")
    click.echo("-" * 60)
    for ent in entities:
        click.echo(
            f"ID: {ent.id:3d} | {ent.name:20s} | {ent.entity_type:8s} | Tax: {ent.tax_rate_percent:g}%"
        )


def register_commands(cli):
    """Register household and entity commands with main CLI."""
    cli.add_command(household_group, name="household")
    cli.add_command(entity_group, name="entity")
