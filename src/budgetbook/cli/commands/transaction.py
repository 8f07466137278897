"""Transaction management commands."""

import click
from budgetbook.cli.error_handling import handle_domain_error
from budgetbook.cli.resolution import (
    resolve_account_or_exit,
    resolve_entity_or_exit,
    resolve_household_or_exit,
)
from budgetbook.domain.category import CategoryService
from budgetbook.domain.entities import EXPENSE, INCOME, TRANSACTION_TYPES
from budgetbook.domain.errors import DomainError, transaction_not_found
from budgetbook.domain.transaction import TransactionService
from budgetbook.utils.amount_parser import format_cents, parse_money
from budgetbook.utils.date_parser import parse_user_date

_household_option = click.option(
    "--household", help="Household name or ID (optional with one household)"
)


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--date", help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--amount", help="Transaction amount (e.g., 42.50)")
@click.option("--type", "txn_type", type=click.Choice(TRANSACTION_TYPES), help="Transaction type")
@click.option("--payee", help="Payee")
@click.option("--memo", help="Memo, or empty string to clear")
@click.option("--category", help="Category path (e.g., 'Food > Groceries') or empty string to clear")
@click.option("--account", help="Account name or ID, or empty string to clear")
@_household_option
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    date: str | None,
    amount: str | None,
    txn_type: str | None,
    payee: str | None,
    memo: str | None,
    category: str | None,
    account: str | None,
    household: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided. Account balances follow the
    change, and a linked owner draw gets the new date, amount and payee.

    Examples:
        budgetbook transaction update 1 --amount 75.00
        budgetbook transaction update 1 --category ""  # Clear category
    """
    household_id = resolve_household_or_exit(ctx, household)
    db = ctx.obj["db"]
    service = TransactionService(db)

    txn = service.get_transaction(transaction_id, household_id)
    if txn is None:
        click.echo(f"Error: {transaction_not_found(transaction_id)}", err=True)
        ctx.exit(1)

    changes = {}
    if date is not None:
        try:
            changes["date"] = parse_user_date(date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)
    if amount is not None:
        changes["amount_cents"] = abs(parse_money(amount))
    if txn_type is not None:
        changes["type"] = txn_type
    if payee is not None:
        changes["payee"] = payee
    if memo is not None:
        changes["memo"] = memo or None
    if account is not None:
        changes["account_id"] = (
            resolve_account_or_exit(ctx, txn.entity_id, account) if account else None
        )

    try:
        if category is not None:
            changes["category_id"] = (
                CategoryService(db).require_category_by_path(household_id, category).id
                if category
                else None
            )
        service.update_transaction(transaction_id, household_id, **changes)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("list")
@click.option("--month", help="Month as YYYY-MM")
@click.option("--category", help="Category path (e.g., 'Food > Groceries')")
@click.option("--payee", help="Payee text to search for")
@click.option("--type", "txn_type", type=click.Choice(TRANSACTION_TYPES), help="Only income or expenses")
@click.option("--uncategorized", is_flag=True, help="Show only uncategorized transactions")
@click.option("--entity", help="Entity name or ID")
@_household_option
@click.pass_context
def list_transactions(
    ctx,
    month: str | None,
    category: str | None,
    payee: str | None,
    txn_type: str | None,
    uncategorized: bool,
    entity: str | None,
    household: str | None,
):
    """View transactions with optional filters, newest first."""
    household_id = resolve_household_or_exit(ctx, household)
    entity_id = resolve_entity_or_exit(ctx, household_id, entity) if entity else None
    db = ctx.obj["db"]
    service = TransactionService(db)
    category_service = CategoryService(db)

    try:
        category_id = None
        if category:
            category_id = category_service.require_category_by_path(household_id, category).id
        transactions = service.list_transactions(
            household_id,
            month=month,
            category_id=category_id,
            payee=payee,
            type=txn_type,
            uncategorized=uncategorized,
            entity_id=entity_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 100)
    click.echo(f"{'ID':<6} {'Date':<12} {'Amount':>12}  {'Payee':<30} {'Category':<30}")
    click.echo("-" * 100)

    for txn in transactions:
        category_name = ""
        if txn.category_id:
            category_name = category_service.format_category_path(txn.category_id)
        signed = txn.amount_cents if txn.type == INCOME else -txn.amount_cents
        transfer = " *" if txn.is_transfer else ""
        click.echo(
            f"{txn.id:<6} {str(txn.date):<12} {format_cents(signed):>12}  "
            f"{txn.payee[:30]:<30} {category_name[:30]:<30}{transfer}"
        )

    total_expenses = sum(txn.amount_cents for txn in transactions if txn.type == EXPENSE)
    total_income = sum(txn.amount_cents for txn in transactions if txn.type == INCOME)
    click.echo("-" * 100)
    click.echo(
        f"{'TOTAL':<6} Expenses: {format_cents(total_expenses)} | "
        f"Income: {format_cents(total_income)} | Count: {len(transactions)}"
    )


@transaction_group.command("categorize")
@click.argument("transaction_id", type=int)
@click.argument("category_path")
@_household_option
@click.pass_context
def categorize_transaction(ctx, transaction_id: int, category_path: str, household: str | None) -> None:
    """Set a transaction's category. Use an empty CATEGORY_PATH to clear it.

    Examples:
        budgetbook transaction categorize 12 "Food > Restaurants"
    """
    household_id = resolve_household_or_exit(ctx, household)
    db = ctx.obj["db"]

    try:
        category_id = None
        if category_path:
            category_id = CategoryService(db).require_category_by_path(household_id, category_path).id
        TransactionService(db).quick_categorize(transaction_id, household_id, category_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Categorized transaction {transaction_id}")


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@_household_option
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool, household: str | None) -> None:
    """Delete a transaction.

    The account balance is restored; deleting an owner draw also removes
    the linked personal income.

    Examples:
        budgetbook transaction delete 1
    """
    household_id = resolve_household_or_exit(ctx, household)
    service = TransactionService(ctx.obj["db"])

    # Get transaction info for display
    txn = service.get_transaction(transaction_id, household_id)
    if txn is None:
        click.echo(f"Error: {transaction_not_found(transaction_id)}", err=True)
        ctx.exit(1)

    # Confirm deletion
    if not yes and not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id, household_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
