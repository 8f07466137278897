"""Integration tests for end-to-end CLI workflows."""

import re
from datetime import date, timedelta

import pytest
from budgetbook.cli.main import cli


@pytest.fixture
def run(cli_runner, temp_db, tmp_path):
    """Invoke the CLI against the temporary database and a staging directory."""

    def invoke(*args, **kwargs):
        return cli_runner.invoke(
            cli,
            ["--db-path", temp_db.database_path, "--staging-dir", str(tmp_path / "staging"), *args],
            **kwargs,
        )

    return invoke


@pytest.fixture
def household(run):
    """Create a household with a personal entity and default categories."""
    result = run("household", "create", "Test Household")
    assert result.exit_code == 0, result.output
    return result


def _import_id(output: str) -> str:
    match = re.search(r"Import ID: ([0-9a-f]+)", output)
    assert match, output
    return match.group(1)


def test_household_create(household, run):
    """Test creating a household seeds entity and categories."""
    assert "Created household 'Test Household' (ID: 1)" in household.output
    assert "Created entity 'Personal' (ID: 1)" in household.output
    assert "default categories" in household.output

    result = run("category", "seed")
    assert "Categories already exist. Skipping initialization." in result.output

    result = run("entity", "list")
    assert "Personal" in result.output


def test_no_household(run):
    """Test commands explain how to get started without a household."""
    result = run("account", "list")

    assert result.exit_code == 1
    assert "No households found" in result.output


def test_full_workflow(household, run, tmp_path):
    """Test account, rule, import, categorize and list together."""
    result = run("account", "create", "Checking", "--balance", "1,000.00")
    assert result.exit_code == 0, result.output
    assert "Created account 'Checking' (ID: 1)" in result.output

    result = run("rule", "create", "walmart", "Food > Groceries")
    assert result.exit_code == 0, result.output

    today = date.today()
    statement = tmp_path / "statement.csv"
    statement.write_text(
        "Date,Amount,Description\n"
        f"{(today - timedelta(days=1)).isoformat()},-42.50,WALMART #123\n"
        f"{today.isoformat()},-10.00,CORNER CAFE\n",
        encoding="utf-8",
    )

    result = run("import", "preview", str(statement), "--account", "Checking")
    assert result.exit_code == 0, result.output
    assert "Format: Generic CSV" in result.output
    assert "New: 2 | Duplicates: 0" in result.output
    assert "Food > Groceries" in result.output
    import_id = _import_id(result.output)

    result = run("import", "confirm", import_id, "--category", "1=Food > Restaurants")
    assert result.exit_code == 0, result.output
    assert "Successfully imported 2 transactions." in result.output

    result = run("account", "list")
    assert "$947.50" in result.output

    result = run("transaction", "list", "--category", "Food > Restaurants")
    assert "CORNER CAFE" in result.output
    assert "WALMART" not in result.output

    # The same statement again is all duplicates
    result = run("import", "preview", str(statement))
    assert "New: 0 | Duplicates: 2" in result.output


def test_import_confirm_twice(household, run, fixtures_dir):
    """Test a staged import cannot be confirmed twice."""
    result = run("import", "preview", str(fixtures_dir / "generic_scenario.csv"))
    import_id = _import_id(result.output)

    assert run("import", "confirm", import_id).exit_code == 0

    result = run("import", "confirm", import_id)
    assert result.exit_code == 1
    assert "No transactions to import. Please upload a file first." in result.output


def test_import_confirm_other_household(household, run, fixtures_dir):
    """Test a staged import is only confirmed for the household that previewed it."""
    result = run("import", "preview", str(fixtures_dir / "generic_scenario.csv"))
    import_id = _import_id(result.output)
    assert run("household", "create", "Neighbors").exit_code == 0

    result = run("import", "confirm", import_id, "--household", "Neighbors")
    assert result.exit_code == 1
    assert "This import was previewed for another household." in result.output

    result = run("import", "confirm", import_id, "--household", "Test Household")
    assert result.exit_code == 0, result.output


def test_import_discard(household, run, fixtures_dir):
    """Test discarding a staged import."""
    result = run("import", "preview", str(fixtures_dir / "generic_scenario.csv"))
    import_id = _import_id(result.output)

    result = run("import", "discard", import_id)
    assert result.exit_code == 0
    assert f"Discarded import {import_id}" in result.output

    result = run("import", "discard", import_id)
    assert result.exit_code == 1


def test_import_rejects_extension(household, run, tmp_path):
    """Test non-CSV uploads are refused."""
    upload = tmp_path / "statement.pdf"
    upload.write_text("Date,Amount,Description\n", encoding="utf-8")

    result = run("import", "preview", str(upload))

    assert result.exit_code == 1
    assert "Only CSV files are allowed." in result.output


def test_import_formats(run):
    """Test the format list includes every bank."""
    result = run("import", "formats")

    assert result.exit_code == 0
    for name in ("auto", "corning_cu", "visions_cu", "generic"):
        assert name in result.output


def test_owner_draw_workflow(household, run):
    """Test an owner draw from a business shows up as personal income."""
    result = run("entity", "create", "Acme LLC", "--type", "business", "--tax-rate", "25")
    assert result.exit_code == 0, result.output
    assert "Created business entity 'Acme LLC' (ID: 2)" in result.output

    result = run("account", "create", "Business Checking", "--entity", "Acme LLC", "--balance", "5000")
    assert result.exit_code == 0, result.output

    result = run(
        "add",
        "--date", "2024-03-01",
        "--amount", "2500",
        "--payee", "Jane Owner",
        "--entity", "Acme LLC",
        "--account", "Business Checking",
        "--category", "Owner & Payroll > Owner Draw",
    )
    assert result.exit_code == 0, result.output
    assert "Created transaction 1" in result.output

    result = run("transaction", "list", "--month", "2024-03", "--entity", "Personal")
    assert "Jane Owner (Draw)" in result.output
    assert "Income > Paycheck 1" in result.output

    result = run("account", "list", "--entity", "Acme LLC")
    assert "$2,500.00" in result.output

    result = run("transaction", "update", "1", "--amount", "3000")
    assert result.exit_code == 0, result.output
    result = run("transaction", "list", "--type", "income")
    assert "$3,000.00" in result.output

    result = run("transaction", "delete", "1", "--yes")
    assert result.exit_code == 0, result.output
    result = run("transaction", "list")
    assert "No transactions found." in result.output

    result = run("account", "list", "--entity", "Acme LLC")
    assert "$5,000.00" in result.output


def test_add_income_sign(household, run):
    """Test a leading '+' records income."""
    result = run("add", "--date", "2024-01-31", "--amount", "+1200", "--payee", "Payroll")

    assert result.exit_code == 0, result.output
    assert "(income)" in result.output


def test_add_invalid_input(household, run):
    """Test validation errors exit with an error message."""
    result = run("add", "--date", "2024-01-31", "--amount", "0", "--payee", "Nothing")
    assert result.exit_code == 1
    assert "Error: Amount must be greater than zero" in result.output

    result = run("add", "--date", "someday", "--amount", "5", "--payee", "X")
    assert result.exit_code == 1
    assert "Invalid date format" in result.output

    result = run("add", "--date", "2024-01-31", "--amount", "5", "--payee", "X", "--category", "Nope")
    assert result.exit_code == 1
    assert "Category 'Nope' not found" in result.output


def test_transaction_categorize(household, run):
    """Test quick categorize and the uncategorized filter."""
    run("add", "--date", "2024-01-05", "--amount", "12.00", "--payee", "Shell")

    result = run("transaction", "list", "--uncategorized")
    assert "Shell" in result.output

    result = run("transaction", "categorize", "1", "Transportation > Gas")
    assert result.exit_code == 0, result.output

    result = run("transaction", "list", "--uncategorized")
    assert "No transactions found." in result.output


def test_account_management(household, run):
    """Test adjusting, archiving and deleting accounts."""
    run("account", "create", "Savings", "--type", "savings", "--balance", "100")

    result = run("account", "adjust", "Savings", "150.25")
    assert result.exit_code == 0, result.output
    assert "Balance set to $150.25 (change: $50.25)" in result.output

    run("add", "--date", "2024-01-05", "--amount", "5", "--payee", "Fee", "--account", "Savings")
    result = run("account", "delete", "Savings", "--yes")
    assert result.exit_code == 1
    assert "Please archive it instead." in result.output

    result = run("account", "archive", "Savings")
    assert result.exit_code == 0, result.output
    assert "No accounts found." in run("account", "list").output
    assert "(archived)" in run("account", "list", "--all").output


def test_rules(household, run):
    """Test seeding, listing and deleting rules."""
    result = run("rule", "seed")
    assert result.exit_code == 0, result.output
    assert re.search(r"Added \d+ rules", result.output)
    assert "Added 0 rules" in run("rule", "seed").output

    result = run("rule", "list")
    assert "Kroger" in result.output

    result = run("rule", "delete", "9999")
    assert result.exit_code == 1
    assert "Error: Rule 9999 not found" in result.output


def test_verbose_flag(household, run):
    """Test --verbose is accepted before a command."""
    result = run("--verbose", "household", "list")
    assert result.exit_code == 0
    assert "Test Household" in result.output
