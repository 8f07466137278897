"""Shared pytest fixtures for budgetbook tests."""

import tempfile
import os
from pathlib import Path
import pytest

from budgetbook.database.factories import create_sqlite_database
from budgetbook.domain.account import AccountService
from budgetbook.domain.categorization import AutoCategorizationService
from budgetbook.domain.category import CategoryService
from budgetbook.domain.csv_import import ImportService
from budgetbook.domain.entities import BUSINESS, PERSONAL
from budgetbook.domain.household import HouseholdService
from budgetbook.domain.staging import MemoryStagingStore
from budgetbook.domain.transaction import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def household_service(temp_db):
    """Create a HouseholdService with a temporary database."""
    return HouseholdService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def categorizer(temp_db):
    """Create an AutoCategorizationService with a temporary database."""
    return AutoCategorizationService(temp_db)


@pytest.fixture
def staging():
    """Create an in-memory staging store."""
    return MemoryStagingStore()


@pytest.fixture
def import_service(temp_db, staging):
    """Create an ImportService with a temporary database and memory staging."""
    return ImportService(temp_db, staging)


@pytest.fixture
def sample_household(household_service, category_service):
    """Create a household with default categories."""
    household_id = household_service.create_household("Test Household")
    category_service.seed_default_categories(household_id)
    return household_service.get_household(household_id)


@pytest.fixture
def personal_entity(household_service, sample_household):
    """Create the personal entity of the sample household."""
    entity_id = household_service.create_entity(sample_household.id, "Personal", entity_type=PERSONAL)
    return household_service.get_entity(entity_id)


@pytest.fixture
def business_entity(household_service, sample_household):
    """Create a business entity (with default business categories)."""
    entity_id = household_service.create_entity(
        sample_household.id, "Acme LLC", entity_type=BUSINESS, tax_rate_percent=25
    )
    return household_service.get_entity(entity_id)


@pytest.fixture
def sample_account(account_service, personal_entity):
    """Create a personal checking account with a $1,000.00 balance."""
    account_id = account_service.create_account(
        personal_entity.id, "Checking", account_type="checking", balance_cents=100000
    )
    return account_service.get_account(account_id)


@pytest.fixture
def business_account(account_service, business_entity):
    """Create a business checking account with a $5,000.00 balance."""
    account_id = account_service.create_account(
        business_entity.id, "Business Checking", account_type="checking", balance_cents=500000
    )
    return account_service.get_account(account_id)


@pytest.fixture
def sample_categories(category_service, sample_household):
    """Return the IDs of commonly used default categories by path."""
    paths = [
        "Income > Paycheck 1",
        "Food > Groceries",
        "Food > Restaurants",
        "Food > Coffee Shops",
        "Transportation > Gas",
    ]
    return {
        path: category_service.get_category_by_path(sample_household.id, path).id for path in paths
    }


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
