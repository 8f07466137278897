"""Account management commands."""

import click
from budgetbook.cli.error_handling import handle_domain_error
from budgetbook.cli.resolution import resolve_account_or_exit, resolve_scope_or_exit, scope_options
from budgetbook.domain.account import AccountService
from budgetbook.domain.entities import ACCOUNT_TYPES
from budgetbook.domain.errors import DomainError
from budgetbook.utils.amount_parser import format_cents, parse_money


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(ACCOUNT_TYPES),
    default="checking",
    show_default=True,
    help="Account type",
)
@click.option("--balance", default="0", help="Opening balance (e.g., 1,250.00)")
@scope_options
@click.pass_context
def create_account(ctx, name: str, account_type: str, balance: str, household: str | None, entity: str | None):
    """Create a new account.

    Examples:
        budgetbook account create "Checking" --balance 1500.00
        budgetbook account create "Business Card" --type credit --entity "Acme LLC"
    """
    _, entity_id = resolve_scope_or_exit(ctx, household, entity)
    service = AccountService(ctx.obj["db"])

    try:
        account_id = service.create_account(
            entity_id, name, account_type=account_type, balance_cents=parse_money(balance)
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created account '{name}' (ID: {account_id})")


@account_group.command("list")
@click.option("--all", "include_archived", is_flag=True, help="Include archived accounts")
@scope_options
@click.pass_context
def list_accounts(ctx, include_archived: bool, household: str | None, entity: str | None):
    """List accounts with balances."""
    _, entity_id = resolve_scope_or_exit(ctx, household, entity)
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts(entity_id, include_archived=include_archived)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 60)
    for acc in accounts:
        archived = " (archived)" if acc.archived else ""
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:20s} | {acc.account_type:8s} | "
            f"{format_cents(acc.balance_cents):>12s}{archived}"
        )
    click.echo("-" * 60)
    click.echo(f"Total: {format_cents(service.total_balance(entity_id))}")


@account_group.command("rename")
@click.argument("account", metavar="ACCOUNT")
@click.argument("new_name", metavar="NEW_NAME")
@scope_options
@click.pass_context
def rename_account(ctx, account: str, new_name: str, household: str | None, entity: str | None) -> None:
    """Rename an account.

    ACCOUNT can be an account name or ID.
    """
    _, entity_id = resolve_scope_or_exit(ctx, household, entity)
    account_id = resolve_account_or_exit(ctx, entity_id, account)
    service = AccountService(ctx.obj["db"])

    try:
        service.rename_account(account_id, new_name)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Renamed account to '{new_name}'")


@account_group.command("adjust")
@click.argument("account", metavar="ACCOUNT")
@click.argument("balance", metavar="BALANCE")
@scope_options
@click.pass_context
def adjust_balance(ctx, account: str, balance: str, household: str | None, entity: str | None) -> None:
    """Set an account balance to match a bank statement.

    Examples:
        budgetbook account adjust "Checking" 1234.56
    """
    _, entity_id = resolve_scope_or_exit(ctx, household, entity)
    account_id = resolve_account_or_exit(ctx, entity_id, account)
    service = AccountService(ctx.obj["db"])

    try:
        difference = service.adjust_balance(account_id, parse_money(balance))
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Balance set to {format_cents(parse_money(balance))} (change: {format_cents(difference)})")


@account_group.command("archive")
@click.argument("account", metavar="ACCOUNT")
@scope_options
@click.pass_context
def archive_account(ctx, account: str, household: str | None, entity: str | None) -> None:
    """Archive an account, keeping its transactions."""
    _, entity_id = resolve_scope_or_exit(ctx, household, entity)
    account_id = resolve_account_or_exit(ctx, entity_id, account)
    service = AccountService(ctx.obj["db"])

    try:
        service.archive_account(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Archived account {account_id}")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@scope_options
@click.pass_context
def delete_account(ctx, account: str, yes: bool, household: str | None, entity: str | None) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID.

    The account can only be deleted if it has no transactions; archive it
    otherwise.
    """
    _, entity_id = resolve_scope_or_exit(ctx, household, entity)
    account_id = resolve_account_or_exit(ctx, entity_id, account)
    service = AccountService(ctx.obj["db"])
    account_obj = service.get_account(account_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account '{account_obj.name}' (ID: {account_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted account '{account_obj.name}'")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
