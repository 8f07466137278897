"""Main CLI entry point."""

import logging

import click
from budgetbook.database.factories import create_database, create_sqlite_database

# Import and register all commands at module level
from budgetbook.cli.commands import (
    household,
    category,
    account,
    rule,
    import_cmd,
    add,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BUDGETBOOK_DB_PATH environment variable)",
    envvar="BUDGETBOOK_DB_PATH",
)
@click.option(
    "--staging-dir",
    type=click.Path(file_okay=False),
    help="Directory for imports awaiting confirmation (overrides BUDGETBOOK_STAGING_DIR)",
    envvar="BUDGETBOOK_STAGING_DIR",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, staging_dir: str | None, verbose: bool):
    """Budgetbook - Household budgeting application.

    Import bank CSV exports, categorize them with rules, and keep account
    balances and owner draws between business and personal ledgers in sync.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj["staging_dir"] = staging_dir

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None and "db" not in ctx.obj:
        if db_path is not None:
            db = create_sqlite_database(database_path=db_path)
        else:
            db = create_database()
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
household.register_commands(cli)
category.register_commands(cli)
account.register_commands(cli)
rule.register_commands(cli)
import_cmd.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
