"""Add transaction command."""

import click
from budgetbook.cli.error_handling import handle_domain_error
from budgetbook.cli.resolution import resolve_account_or_exit, resolve_scope_or_exit, scope_options
from budgetbook.domain.category import CategoryService
from budgetbook.domain.entities import EXPENSE, INCOME, TRANSACTION_TYPES
from budgetbook.domain.errors import DomainError
from budgetbook.domain.transaction import TransactionService
from budgetbook.utils.amount_parser import format_cents, parse_money
from budgetbook.utils.date_parser import parse_user_date


@click.command("add")
@click.option(
    "--date",
    required=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--amount", required=True, help="Transaction amount (e.g., 42.50 or -42.50)")
@click.option("--payee", required=True, help="Payee")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice(TRANSACTION_TYPES),
    help="Transaction type (default: expense, or income for a positive amount with a '+' sign)",
)
@click.option("--category", help="Category path (e.g., 'Food > Groceries')")
@click.option("--account", help="Account name or ID")
@click.option("--memo", help="Memo")
@scope_options
@click.pass_context
def add_transaction(
    ctx,
    date: str,
    amount: str,
    payee: str,
    txn_type: str | None,
    category: str | None,
    account: str | None,
    memo: str | None,
    household: str | None,
    entity: str | None,
):
    """Add a transaction manually.

    The account balance moves by the amount. An expense in a business
    entity categorized as owner draw also records the income in the
    personal entity.

    Examples:
        budgetbook add --date today --amount 42.50 --payee "Kroger" --category "Food > Groceries"
        budgetbook add --date 2024-01-15 --amount 2500 --payee "Owner" --entity "Acme LLC" \\
            --category "Owner & Payroll > Owner Draw"
    """
    household_id, entity_id = resolve_scope_or_exit(ctx, household, entity)
    account_id = resolve_account_or_exit(ctx, entity_id, account) if account else None
    db = ctx.obj["db"]

    # Parse date
    try:
        txn_date = parse_user_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    amount_cents = parse_money(amount)
    if txn_type is None:
        txn_type = INCOME if amount.strip().startswith("+") else EXPENSE

    try:
        category_id = None
        if category:
            category_id = CategoryService(db).require_category_by_path(household_id, category).id

        transaction_id = TransactionService(db).create_transaction(
            household_id=household_id,
            entity_id=entity_id,
            date=txn_date,
            amount_cents=abs(amount_cents),
            type=txn_type,
            payee=payee,
            memo=memo,
            category_id=category_id,
            account_id=account_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Date: {txn_date}")
    click.echo(f"  Amount: {format_cents(abs(amount_cents))} ({txn_type})")
    click.echo(f"  Payee: {payee}")
    if category:
        click.echo(f"  Category: {category}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
