"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, Optional
from datetime import date

# Import entities directly to avoid circular import through domain/__init__.py
from budgetbook.domain.entities import (
    Household,
    Entity,
    Category,
    BudgetMonth,
    Account,
    Transaction,
    CategorizationRule,
    LinkedTransfer,
)


class Database(ABC):
    """Abstract database interface for budgetbook."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Transaction control
    @abstractmethod
    def begin(self) -> None:
        """Begin a database transaction."""
        pass

    @abstractmethod
    def commit(self) -> None:
        """Commit the open database transaction."""
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Roll back the open database transaction."""
        pass

    @abstractmethod
    def in_transaction(self) -> bool:
        """Return True while a transaction opened with begin() is active."""
        pass

    @contextmanager
    def transaction(self) -> Iterator["Database"]:
        """Run a block atomically.

        Commits when the block completes and rolls back on any exception.
        A nested ``transaction()`` joins the outer one, so only the outermost
        block commits.
        """
        if self.in_transaction():
            yield self
            return

        self.begin()
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        else:
            self.commit()

    # Household operations
    @abstractmethod
    def create_household(self, name: str) -> int:
        """Create a household. Returns household ID."""
        pass

    @abstractmethod
    def get_household(self, household_id: int) -> Optional[Household]:
        """Get household by ID."""
        pass

    @abstractmethod
    def list_households(self) -> list[Household]:
        """List all households."""
        pass

    # Entity operations
    @abstractmethod
    def create_entity(
        self, household_id: int, name: str, entity_type: str, tax_rate_percent: float = 0.0
    ) -> int:
        """Create an entity. Returns entity ID."""
        pass

    @abstractmethod
    def get_entity(self, entity_id: int) -> Optional[Entity]:
        """Get entity by ID."""
        pass

    @abstractmethod
    def list_entities(self, household_id: int) -> list[Entity]:
        """List entities of a household, oldest first."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        household_id: int,
        name: str,
        parent_id: Optional[int] = None,
        entity_id: Optional[int] = None,
        is_owner_draw: bool = False,
        sort_order: int = 0,
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_path(self, household_id: int, path: str) -> Optional[Category]:
        """Get category by path (e.g., 'Food > Groceries')."""
        pass

    @abstractmethod
    def list_categories(
        self, household_id: int, entity_id: Optional[int] = None, include_archived: bool = False
    ) -> list[Category]:
        """List all categories of a household ordered by sort order.

        When entity_id is given, only that entity's categories are returned.
        """
        pass

    @abstractmethod
    def count_categories(self, household_id: int) -> int:
        """Count categories of a household."""
        pass

    # Budget month operations
    @abstractmethod
    def get_budget_month(self, household_id: int, entity_id: int, month: str) -> Optional[BudgetMonth]:
        """Get budget month record for a YYYY-MM month."""
        pass

    @abstractmethod
    def create_budget_month(self, household_id: int, entity_id: int, month: str) -> int:
        """Create a budget month record. Returns its ID."""
        pass

    # Account operations
    @abstractmethod
    def create_account(self, entity_id: int, name: str, account_type: str, balance_cents: int = 0) -> int:
        """Create an account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self, entity_id: int, include_archived: bool = False) -> list[Account]:
        """List accounts of an entity."""
        pass

    @abstractmethod
    def update_account(
        self,
        account_id: int,
        name: Optional[str] = None,
        balance_cents: Optional[int] = None,
        archived: Optional[bool] = None,
    ) -> None:
        """Update account fields that are not None."""
        pass

    @abstractmethod
    def increment_account_balance(self, account_id: int, delta_cents: int) -> None:
        """Atomically add delta_cents to an account's balance."""
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def get_account_transaction_count(self, account_id: int) -> int:
        """Count transactions posted to an account."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        household_id: int,
        entity_id: int,
        budget_month_id: int,
        date: date,
        amount_cents: int,
        type: str,
        payee: str,
        memo: Optional[str] = None,
        category_id: Optional[int] = None,
        account_id: Optional[int] = None,
        is_transfer: bool = False,
        created_by_user_id: Optional[int] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def update_transaction(self, transaction_id: int, **fields) -> None:
        """Update the given transaction columns."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        household_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category_id: Optional[int] = None,
        payee: Optional[str] = None,
        type: Optional[str] = None,
        uncategorized: bool = False,
        entity_id: Optional[int] = None,
    ) -> list[Transaction]:
        """List transactions of a household, newest first.

        Args:
            household_id: Household to list
            start_date: Optional inclusive start date
            end_date: Optional inclusive end date
            category_id: Optional category filter
            payee: Optional case-insensitive payee substring
            type: Optional 'income' or 'expense'
            uncategorized: If True, only transactions without a category
            entity_id: Optional entity filter
        """
        pass

    # Rule operations
    @abstractmethod
    def create_rule(self, household_id: int, search_term: str, category_id: int, match_type: str) -> int:
        """Create an auto-categorization rule. Returns rule ID."""
        pass

    @abstractmethod
    def list_rules(self, household_id: int) -> list[CategorizationRule]:
        """List a household's rules, most recently created first."""
        pass

    @abstractmethod
    def delete_rule(self, household_id: int, rule_id: int) -> bool:
        """Delete a rule scoped to a household. Returns True if a row was removed."""
        pass

    # Linked transfer operations
    @abstractmethod
    def create_linked_transfer(
        self, from_transaction_id: int, to_transaction_id: int, transfer_type: str
    ) -> int:
        """Link two transactions. Returns link ID."""
        pass

    @abstractmethod
    def get_linked_transfer_from(self, transaction_id: int) -> Optional[LinkedTransfer]:
        """Get the link whose source is the given transaction."""
        pass

    @abstractmethod
    def get_linked_transfer_to(self, transaction_id: int) -> Optional[LinkedTransfer]:
        """Get the link whose mirror is the given transaction."""
        pass

    @abstractmethod
    def delete_linked_transfers(self, transaction_id: int) -> int:
        """Delete links touching a transaction on either side. Returns count."""
        pass
