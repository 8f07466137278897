"""Transaction domain service.

Every write keeps account balances and owner-draw transfers in step with the
transaction rows. Each public write runs inside one database transaction, so
the row change, its balance increments and any mirror rows commit together.
"""

import calendar
import logging
from datetime import date
from typing import Optional

from budgetbook.database.base import Database
from budgetbook.domain.account import AccountService
from budgetbook.domain.entities import (
    BUSINESS,
    EXPENSE,
    INCOME,
    OWNER_DRAW,
    PERSONAL,
    TRANSACTION_TYPES,
    Category as CategoryEntity,
    Entity as EntityEntity,
    LinkedTransfer as LinkedTransferEntity,
    Transaction as TransactionEntity,
)
from budgetbook.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    category_not_found,
    entity_not_found,
    transaction_not_found,
)
from budgetbook.utils.date_parser import month_of, to_date

logger = logging.getLogger(__name__)

DRAW_SUFFIX = " (Draw)"
PAYCHECK_NAME = "paycheck"

_UNSET = object()


def month_bounds(month: str) -> tuple[date, date]:
    """First and last day of a ``YYYY-MM`` month.

    Raises:
        ValidationError: If the month is malformed
    """
    try:
        year, month_num = (int(part) for part in month.split("-"))
        last_day = calendar.monthrange(year, month_num)[1]
        return date(year, month_num, 1), date(year, month_num, last_day)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"Invalid month '{month}', expected YYYY-MM") from e


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database, accounts: Optional[AccountService] = None):
        """Initialize transaction service.

        Args:
            db: Database instance
            accounts: Account service used for balance effects
        """
        self.db = db
        self.accounts = accounts or AccountService(db)

    def create_transaction(
        self,
        household_id: int,
        entity_id: int,
        date: date | str,
        amount_cents: int,
        type: str,
        payee: str,
        memo: Optional[str] = None,
        category_id: Optional[int] = None,
        account_id: Optional[int] = None,
        created_by: Optional[int] = None,
        imported: bool = False,
    ) -> int:
        """Create a transaction.

        Posts the amount to the account balance and, for an owner draw from
        a business entity, records the matching income in the personal
        entity.

        Args:
            household_id: Household ID
            entity_id: Entity the transaction belongs to
            date: Transaction date (date or ISO string)
            amount_cents: Positive amount in cents
            type: 'income' or 'expense'
            payee: Payee text
            memo: Optional memo
            category_id: Optional category ID; ignored unless it belongs
                to the household
            account_id: Optional account ID within the entity
            created_by: Optional user ID
            imported: Row comes from a bank statement; a zero amount and an
                empty payee are accepted as the bank reported them

        Returns:
            Transaction ID

        Raises:
            ValidationError: If payee, amount or type is invalid
            NotFoundError: If entity or account doesn't exist in scope
        """
        payee = (payee or "").strip()
        txn_date = self._validate(
            payee, amount_cents, type, date, allow_zero=imported, allow_blank_payee=imported
        )
        entity = self._require_entity(household_id, entity_id)
        if account_id is not None:
            self._require_account(entity_id, account_id)

        category = None
        if category_id is not None:
            category = self.db.get_category(category_id)
            if category is None or category.household_id != household_id:
                logger.debug("Dropping category %s outside household %s", category_id, household_id)
                category = None
                category_id = None

        with self.db.transaction():
            transaction_id = self.db.create_transaction(
                household_id=household_id,
                entity_id=entity_id,
                budget_month_id=self._budget_month_id(household_id, entity_id, txn_date),
                date=txn_date,
                amount_cents=amount_cents,
                type=type,
                payee=payee,
                memo=memo or None,
                category_id=category_id,
                account_id=account_id,
                created_by_user_id=created_by,
            )
            self.accounts.apply_balance_effect(account_id, amount_cents, type)

            if type == EXPENSE and entity.entity_type == BUSINESS and category and category.is_owner_draw:
                self._link_owner_draw(household_id, transaction_id, txn_date, amount_cents, payee, created_by)

        return transaction_id

    def get_transaction(
        self, transaction_id: int, household_id: Optional[int] = None
    ) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID
            household_id: If given, transactions of other households are hidden

        Returns:
            Transaction entity or None if not found
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            return None
        if household_id is not None and txn.household_id != household_id:
            return None
        return txn

    def update_transaction(
        self,
        transaction_id: int,
        household_id: int,
        date: date | str | None = None,
        amount_cents: Optional[int] = None,
        type: Optional[str] = None,
        payee: Optional[str] = None,
        memo=_UNSET,
        category_id=_UNSET,
        account_id=_UNSET,
    ) -> None:
        """Update transaction fields.

        Fields left as None are unchanged. ``memo``, ``category_id`` and
        ``account_id`` may be passed explicitly as None to clear them.
        The old balance effect is reversed and the new one applied, and a
        linked owner-draw mirror gets the new date, amount and payee.

        Raises:
            NotFoundError: If transaction, category or account doesn't exist in scope
            ValidationError: If the new values are invalid
        """
        txn = self._require_transaction(transaction_id, household_id)

        new_payee = txn.payee if payee is None else payee.strip()
        new_amount = txn.amount_cents if amount_cents is None else amount_cents
        new_type = txn.type if type is None else type
        # Values kept from the stored row are not re-checked
        new_date = self._validate(
            new_payee,
            new_amount,
            new_type,
            txn.date if date is None else date,
            allow_zero=amount_cents is None,
            allow_blank_payee=payee is None,
        )

        fields = {
            "date": new_date,
            "amount_cents": new_amount,
            "type": new_type,
            "payee": new_payee,
        }
        if memo is not _UNSET:
            fields["memo"] = memo or None
        if category_id is not _UNSET:
            if category_id is not None:
                self._require_category(household_id, category_id)
            fields["category_id"] = category_id

        new_account_id = txn.account_id
        if account_id is not _UNSET:
            if account_id is not None:
                self._require_account(txn.entity_id, account_id)
            new_account_id = account_id
            fields["account_id"] = account_id

        with self.db.transaction():
            if month_of(new_date) != month_of(txn.date):
                fields["budget_month_id"] = self._budget_month_id(household_id, txn.entity_id, new_date)

            self.accounts.reverse_balance_effect(txn.account_id, txn.amount_cents, txn.type)
            self.accounts.apply_balance_effect(new_account_id, new_amount, new_type)
            self.db.update_transaction(transaction_id, **fields)

            link = self.db.get_linked_transfer_from(transaction_id)
            if link is not None:
                self._sync_mirror(link.to_transaction_id, new_date, new_amount, new_payee)

    def delete_transaction(self, transaction_id: int, household_id: int) -> None:
        """Delete a transaction.

        Reverses its balance effect. Deleting the source of an owner draw
        also deletes the mirrored personal income.

        Raises:
            NotFoundError: If transaction doesn't exist in the household
        """
        txn = self._require_transaction(transaction_id, household_id)

        with self.db.transaction():
            self.accounts.reverse_balance_effect(txn.account_id, txn.amount_cents, txn.type)

            link = self.db.get_linked_transfer_from(transaction_id)
            if link is not None:
                mirror = self.db.get_transaction(link.to_transaction_id)
                if mirror is not None:
                    self.accounts.reverse_balance_effect(
                        mirror.account_id, mirror.amount_cents, mirror.type
                    )
                    self.db.delete_linked_transfers(mirror.id)
                    self.db.delete_transaction(mirror.id)
                    logger.info("Deleted owner draw mirror %s of %s", mirror.id, transaction_id)

            self.db.delete_linked_transfers(transaction_id)
            self.db.delete_transaction(transaction_id)

    def list_transactions(
        self,
        household_id: int,
        month: Optional[str] = None,
        category_id: Optional[int] = None,
        payee: Optional[str] = None,
        type: Optional[str] = None,
        uncategorized: bool = False,
        entity_id: Optional[int] = None,
    ) -> list[TransactionEntity]:
        """List transactions with filters, newest first.

        Args:
            household_id: Household ID
            month: Optional YYYY-MM month
            category_id: Optional category filter
            payee: Optional case-insensitive payee substring
            type: Optional 'income' or 'expense'
            uncategorized: Only transactions without a category
            entity_id: Optional entity filter

        Returns:
            List of transaction entities
        """
        start_date = end_date = None
        if month:
            start_date, end_date = month_bounds(month)

        return self.db.list_transactions(
            household_id=household_id,
            start_date=start_date,
            end_date=end_date,
            category_id=category_id,
            payee=payee,
            type=type,
            uncategorized=uncategorized,
            entity_id=entity_id,
        )

    def quick_categorize(
        self, transaction_id: int, household_id: int, category_id: Optional[int]
    ) -> None:
        """Set or clear a transaction's category.

        Raises:
            NotFoundError: If the transaction or category is not in the household
        """
        self._require_transaction(transaction_id, household_id)
        if category_id is not None:
            self._require_category(household_id, category_id)
        self.db.update_transaction(transaction_id, category_id=category_id)

    def get_linked_transfer(self, transaction_id: int) -> Optional[LinkedTransferEntity]:
        """The transfer link a transaction takes part in, on either side."""
        link = self.db.get_linked_transfer_from(transaction_id)
        if link is None:
            link = self.db.get_linked_transfer_to(transaction_id)
        return link

    def _link_owner_draw(
        self,
        household_id: int,
        source_id: int,
        txn_date: date,
        amount_cents: int,
        payee: str,
        created_by: Optional[int],
    ) -> None:
        personal = self._personal_entity(household_id)
        if personal is None:
            logger.debug("No personal entity in household %s, owner draw not linked", household_id)
            return

        category = self._draw_income_category(household_id, personal)
        mirror_id = self.db.create_transaction(
            household_id=household_id,
            entity_id=personal.id,
            budget_month_id=self._budget_month_id(household_id, personal.id, txn_date),
            date=txn_date,
            amount_cents=amount_cents,
            type=INCOME,
            payee=payee + DRAW_SUFFIX,
            category_id=category.id if category else None,
            is_transfer=True,
            created_by_user_id=created_by,
        )
        self.db.create_linked_transfer(source_id, mirror_id, OWNER_DRAW)
        logger.info("Linked owner draw %s to personal income %s", source_id, mirror_id)

    def _sync_mirror(self, mirror_id: int, new_date: date, amount_cents: int, payee: str) -> None:
        mirror = self.db.get_transaction(mirror_id)
        if mirror is None:
            return

        fields = {"date": new_date, "amount_cents": amount_cents, "payee": payee + DRAW_SUFFIX}
        if month_of(new_date) != month_of(mirror.date):
            fields["budget_month_id"] = self._budget_month_id(
                mirror.household_id, mirror.entity_id, new_date
            )
        self.accounts.reverse_balance_effect(mirror.account_id, mirror.amount_cents, mirror.type)
        self.accounts.apply_balance_effect(mirror.account_id, amount_cents, mirror.type)
        self.db.update_transaction(mirror_id, **fields)

    def _personal_entity(self, household_id: int) -> Optional[EntityEntity]:
        for entity in self.db.list_entities(household_id):
            if entity.entity_type == PERSONAL:
                return entity
        return None

    def _draw_income_category(self, household_id: int, personal: EntityEntity) -> Optional[CategoryEntity]:
        """Owner-draw flagged personal category, else a Paycheck one."""
        candidates = [
            cat
            for cat in self.db.list_categories(household_id)
            if cat.entity_id in (None, personal.id)
        ]
        for cat in candidates:
            if cat.is_owner_draw:
                return cat
        for cat in candidates:
            if PAYCHECK_NAME in cat.name.lower():
                return cat
        return None

    def _budget_month_id(self, household_id: int, entity_id: int, txn_date: date) -> int:
        month = month_of(txn_date)
        record = self.db.get_budget_month(household_id, entity_id, month)
        if record is not None:
            return record.id
        return self.db.create_budget_month(household_id, entity_id, month)

    def _validate(
        self,
        payee: str,
        amount_cents: int,
        txn_type: str,
        txn_date: date | str,
        allow_zero: bool = False,
        allow_blank_payee: bool = False,
    ) -> date:
        if not payee and not allow_blank_payee:
            raise ValidationError("Payee is required")
        if not isinstance(amount_cents, int) or amount_cents < 0:
            raise ValidationError("Amount must not be negative")
        if amount_cents == 0 and not allow_zero:
            raise ValidationError("Amount must be greater than zero")
        if txn_type not in TRANSACTION_TYPES:
            raise ValidationError(
                f"Invalid transaction type '{txn_type}'. Must be one of: {', '.join(TRANSACTION_TYPES)}"
            )
        try:
            return to_date(txn_date)
        except (ValueError, TypeError) as e:
            raise ValidationError(f"Invalid date '{txn_date}'") from e

    def _require_transaction(self, transaction_id: int, household_id: int) -> TransactionEntity:
        txn = self.get_transaction(transaction_id, household_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def _require_entity(self, household_id: int, entity_id: int) -> EntityEntity:
        entity = self.db.get_entity(entity_id)
        if entity is None or entity.household_id != household_id:
            raise NotFoundError(entity_not_found(entity_id))
        return entity

    def _require_account(self, entity_id: int, account_id: int) -> None:
        account = self.db.get_account(account_id)
        if account is None or account.entity_id != entity_id:
            raise NotFoundError(account_not_found(account_id))

    def _require_category(self, household_id: int, category_id: int) -> None:
        category = self.db.get_category(category_id)
        if category is None or category.household_id != household_id:
            raise NotFoundError(category_not_found(category_id))
