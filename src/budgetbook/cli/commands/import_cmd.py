"""CSV import commands."""

import click
from budgetbook.cli.error_handling import handle_domain_error
from budgetbook.cli.resolution import (
    resolve_account_or_exit,
    resolve_household_or_exit,
    resolve_scope_or_exit,
    scope_options,
)
from budgetbook.domain.category import CategoryService
from budgetbook.domain.csv_import import ImportService
from budgetbook.domain.csv_parser import AUTO, BANK_FORMATS, CsvParserService
from budgetbook.domain.errors import DomainError, NotFoundError
from budgetbook.domain.staging import create_staging_store
from budgetbook.utils.amount_parser import format_cents


def _import_service(ctx) -> ImportService:
    staging = create_staging_store(ctx.obj.get("staging_dir"))
    return ImportService(ctx.obj["db"], staging)


def _parse_override(ctx, category_service: CategoryService, household_id: int, raw: str) -> tuple[int, int | None]:
    """Parse INDEX=CATEGORY, where CATEGORY is a path, an ID, or empty to clear."""
    index_str, sep, value = raw.partition("=")
    try:
        index = int(index_str)
    except ValueError:
        index = None
    if not sep or index is None:
        click.echo(f"Error: Invalid category override '{raw}', expected INDEX=CATEGORY", err=True)
        ctx.exit(1)

    value = value.strip()
    if value in ("", "0"):
        return index, None
    if value.isdigit():
        return index, int(value)

    try:
        return index, category_service.require_category_by_path(household_id, value).id
    except NotFoundError as e:
        handle_domain_error(ctx, e)


@click.group()
def import_group():
    """Import bank CSV files."""
    pass


@import_group.command("formats")
def list_formats():
    """List supported bank formats."""
    click.echo("\nFormats:")
    for format_id, name in CsvParserService().get_formats().items():
        click.echo(f"  {format_id:12s} {name}")


@import_group.command("preview")
@click.argument("csv_file", type=click.Path())
@click.option(
    "--format",
    "format_id",
    type=click.Choice([AUTO, *BANK_FORMATS]),
    default=AUTO,
    show_default=True,
    help="Bank format",
)
@click.option("--account", help="Account name or ID the rows are posted to")
@scope_options
@click.pass_context
def preview_import(ctx, csv_file: str, format_id: str, account: str | None, household: str | None, entity: str | None):
    """Parse a CSV file and stage it for import.

    Rows already in the ledger are listed as duplicates and left out.
    Pass the printed import ID to 'import confirm'.

    Examples:
        budgetbook import preview statement.csv
        budgetbook import preview export.csv --format visions_cu --account Checking
    """
    household_id, entity_id = resolve_scope_or_exit(ctx, household, entity)
    account_id = resolve_account_or_exit(ctx, entity_id, account) if account else None
    service = _import_service(ctx)

    try:
        result = service.preview(
            csv_file, household_id, entity_id, format_id=format_id, account_id=account_id
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nFormat: {result.format_name}")
    click.echo(f"New: {result.total_new} | Duplicates: {result.total_duplicates}")
    if result.transactions:
        click.echo("-" * 80)
        for index, txn in enumerate(result.transactions):
            category = result.categories.get(txn.category_id, "") if txn.category_id else ""
            amount = format_cents(txn.amount_cents if txn.type == "income" else -txn.amount_cents)
            click.echo(f"{index:4d} | {txn.date} | {amount:>12s} | {txn.payee[:35]:35s} | {category}")

    if result.duplicates:
        click.echo("\nDuplicates (not imported):")
        for txn in result.duplicates:
            click.echo(f"     | {txn.date} | {format_cents(txn.amount_cents):>12s} | {txn.payee}")

    for error in result.errors:
        click.echo(f"  {error}", err=True)

    click.echo(f"\nImport ID: {result.import_id}")


@import_group.command("confirm")
@click.argument("import_id")
@click.option(
    "--select", "selected", type=int, multiple=True, help="Row index to import (repeatable; default: all)"
)
@click.option(
    "--category",
    "overrides",
    multiple=True,
    help="Category for a row as INDEX=PATH or INDEX=ID; INDEX= clears it (repeatable)",
)
@click.option("--household", help="Household name or ID (optional with one household)")
@click.pass_context
def confirm_import(ctx, import_id: str, selected: tuple[int, ...], overrides: tuple[str, ...], household: str | None):
    """Import the rows staged by 'import preview'.

    Examples:
        budgetbook import confirm 3f2a...
        budgetbook import confirm 3f2a... --select 0 --select 2 --category "2=Food > Restaurants"
    """
    household_id = resolve_household_or_exit(ctx, household)
    category_service = CategoryService(ctx.obj["db"])
    category_overrides = dict(
        _parse_override(ctx, category_service, household_id, raw) for raw in overrides
    )
    service = _import_service(ctx)

    try:
        result = service.confirm(
            import_id,
            selected=list(selected),
            category_overrides=category_overrides,
            household_id=household_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Successfully imported {result.imported} transactions.")
    if result.first_month:
        click.echo(f"View them with: budgetbook transaction list --month {result.first_month}")


@import_group.command("discard")
@click.argument("import_id")
@click.pass_context
def discard_import(ctx, import_id: str):
    """Drop a staged import without importing it."""
    service = _import_service(ctx)

    if not service.discard(import_id):
        click.echo(f"Error: No staged import '{import_id}'", err=True)
        ctx.exit(1)

    click.echo(f"Discarded import {import_id}")


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(import_group, name="import")
