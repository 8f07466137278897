"""Account domain service."""

import logging
from typing import Optional

from budgetbook.database.base import Database
from budgetbook.domain.entities import Account as AccountEntity, ACCOUNT_TYPES, INCOME, EXPENSE
from budgetbook.domain.errors import (
    DependencyError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
    entity_not_found,
)

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNT_TYPE = "checking"


def signed_effect(amount_cents: int, txn_type: str) -> int:
    """Balance delta of a transaction: income adds, expense subtracts."""
    if txn_type == INCOME:
        return amount_cents
    if txn_type == EXPENSE:
        return -amount_cents
    raise ValidationError(f"Invalid transaction type '{txn_type}'")


class AccountService:
    """Service for managing accounts and their running balances."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self, entity_id: int, name: str, account_type: str = DEFAULT_ACCOUNT_TYPE, balance_cents: int = 0
    ) -> int:
        """Create a new account.

        Args:
            entity_id: Owning entity ID
            name: Account name
            account_type: One of checking, savings, credit or cash; anything
                else is stored as checking
            balance_cents: Opening balance in cents

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is empty
            NotFoundError: If the entity does not exist
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Account name is required")

        if self.db.get_entity(entity_id) is None:
            raise NotFoundError(entity_not_found(entity_id))

        if account_type not in ACCOUNT_TYPES:
            account_type = DEFAULT_ACCOUNT_TYPE

        return self.db.create_account(
            entity_id=entity_id, name=name, account_type=account_type, balance_cents=balance_cents
        )

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def list_accounts(self, entity_id: int, include_archived: bool = False) -> list[AccountEntity]:
        """List accounts of an entity, grouped by type then name."""
        return self.db.list_accounts(entity_id, include_archived=include_archived)

    def total_balance(self, entity_id: int) -> int:
        """Sum of the balances of an entity's open accounts, in cents."""
        return sum(acc.balance_cents for acc in self.db.list_accounts(entity_id))

    def rename_account(self, account_id: int, name: str) -> None:
        """Rename an account.

        Raises:
            ValidationError: If the new name is empty
            NotFoundError: If the account does not exist
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Account name is required")
        self._require(account_id)
        self.db.update_account(account_id, name=name)

    def adjust_balance(self, account_id: int, balance_cents: int) -> int:
        """Set an account's balance after reconciling with a statement.

        Args:
            account_id: Account ID
            balance_cents: Balance shown by the bank

        Returns:
            The difference applied (new minus old), in cents

        Raises:
            NotFoundError: If the account does not exist
        """
        account = self._require(account_id)
        self.db.update_account(account_id, balance_cents=balance_cents)
        difference = balance_cents - account.balance_cents
        logger.info("Adjusted account %s balance by %d cents", account_id, difference)
        return difference

    def archive_account(self, account_id: int) -> None:
        """Hide an account from pickers and totals without deleting history."""
        self._require(account_id)
        self.db.update_account(account_id, archived=True)

    def delete_account(self, account_id: int) -> None:
        """Delete an account.

        Raises:
            NotFoundError: If the account does not exist
            DependencyError: If transactions are posted to the account
        """
        self._require(account_id)
        count = self.db.get_account_transaction_count(account_id)
        if count > 0:
            raise DependencyError(account_delete_blocked(account_id, count))
        self.db.delete_account(account_id)

    def apply_balance_effect(self, account_id: Optional[int], amount_cents: int, txn_type: str) -> None:
        """Move an account balance by a transaction's signed amount.

        Issues a single increment against the stored balance, so it composes
        with whatever database transaction the caller has open. A missing
        account id is a no-op.
        """
        if account_id is None:
            return
        self.db.increment_account_balance(account_id, signed_effect(amount_cents, txn_type))

    def reverse_balance_effect(self, account_id: Optional[int], amount_cents: int, txn_type: str) -> None:
        """Undo :meth:`apply_balance_effect` for the same arguments."""
        if account_id is None:
            return
        self.db.increment_account_balance(account_id, -signed_effect(amount_cents, txn_type))

    def _require(self, account_id: int) -> AccountEntity:
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account
