"""CLI helpers for household, entity and account resolution."""

from __future__ import annotations

import click
from budgetbook.domain.account import AccountService
from budgetbook.domain.household import HouseholdService
from budgetbook.utils.resolver import resolve_account, resolve_entity, resolve_household


def resolve_household_or_exit(ctx: click.Context, household: str | None) -> int:
    """Resolve household name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_household(HouseholdService(ctx.obj["db"]), household)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_entity_or_exit(ctx: click.Context, household_id: int, entity: str | None) -> int:
    """Resolve entity name or ID within a household, or exit with a CLI error."""
    try:
        return resolve_entity(HouseholdService(ctx.obj["db"]), household_id, entity)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_account_or_exit(ctx: click.Context, entity_id: int, account: str) -> int:
    """Resolve account name or ID within an entity, or exit with a CLI error."""
    try:
        return resolve_account(AccountService(ctx.obj["db"]), entity_id, account)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def scope_options(func):
    """Add --household and --entity options to a command."""
    func = click.option("--entity", help="Entity name or ID (defaults to the personal entity)")(func)
    func = click.option("--household", help="Household name or ID (optional with one household)")(func)
    return func


def resolve_scope_or_exit(ctx: click.Context, household: str | None, entity: str | None) -> tuple[int, int]:
    """Resolve --household and --entity to (household_id, entity_id)."""
    household_id = resolve_household_or_exit(ctx, household)
    return household_id, resolve_entity_or_exit(ctx, household_id, entity)
