"""Auto-categorization rule commands."""

import click
from budgetbook.cli.error_handling import handle_domain_error
from budgetbook.cli.resolution import resolve_household_or_exit
from budgetbook.domain.categorization import AutoCategorizationService
from budgetbook.domain.category import CategoryService
from budgetbook.domain.entities import MATCH_CONTAINS, MATCH_TYPES
from budgetbook.domain.errors import DomainError


@click.group()
def rule_group():
    """Manage auto-categorization rules."""
    pass


@rule_group.command("list")
@click.option("--household", help="Household name or ID (optional with one household)")
@click.pass_context
def list_rules(ctx, household: str | None):
    """List rules in the order they are evaluated (newest first)."""
    household_id = resolve_household_or_exit(ctx, household)
    service = AutoCategorizationService(ctx.obj["db"], use_cache=False)

    rules = service.get_rules(household_id)
    if not rules:
        click.echo("No rules found. Run 'rule seed' to add rules for common merchants.")
        return

    click.echo("\nRules:")
    click.echo("-" * 60)
    for rule in rules:
        click.echo(
            f"ID: {rule.id:3d} | {rule.match_type:8s} | {rule.search_term:20s} -> {rule.category_name}"
        )


@rule_group.command("create")
@click.argument("search_term")
@click.argument("category_path")
@click.option(
    "--match",
    "match_type",
    type=click.Choice(MATCH_TYPES),
    default=MATCH_CONTAINS,
    show_default=True,
    help="How the term is compared with payees",
)
@click.option("--household", help="Household name or ID (optional with one household)")
@click.pass_context
def create_rule(ctx, search_term: str, category_path: str, match_type: str, household: str | None):
    """Create a rule that assigns CATEGORY_PATH to matching payees.

    Examples:
        budgetbook rule create "Trader Joe" "Food > Groceries"
        budgetbook rule create "PAYROLL ACME" "Income > Paycheck 1" --match exact
    """
    household_id = resolve_household_or_exit(ctx, household)
    db = ctx.obj["db"]

    try:
        category = CategoryService(db).require_category_by_path(household_id, category_path)
        rule_id = AutoCategorizationService(db).create_rule(
            household_id, search_term, category.id, match_type=match_type
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created rule {rule_id}: '{search_term.strip()}' -> {category_path}")


@rule_group.command("delete")
@click.argument("rule_id", type=int)
@click.option("--household", help="Household name or ID (optional with one household)")
@click.pass_context
def delete_rule(ctx, rule_id: int, household: str | None):
    """Delete a rule."""
    household_id = resolve_household_or_exit(ctx, household)
    service = AutoCategorizationService(ctx.obj["db"])

    if not service.delete_rule(household_id, rule_id):
        click.echo(f"Error: Rule {rule_id} not found", err=True)
        ctx.exit(1)

    click.echo(f"Deleted rule {rule_id}")


@rule_group.command("seed")
@click.option("--household", help="Household name or ID (optional with one household)")
@click.pass_context
def seed_rules(ctx, household: str | None):
    """Add built-in rules for common merchants.

    Rules are only added for categories that exist and terms not yet covered.
    """
    household_id = resolve_household_or_exit(ctx, household)
    service = AutoCategorizationService(ctx.obj["db"])

    count = service.seed_default_rules(household_id)
    click.echo(f"Added {count} rules")


def register_commands(cli):
    """Register rule commands with main CLI."""
    cli.add_command(rule_group, name="rule")
