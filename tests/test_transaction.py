"""Tests for the transaction service."""

from datetime import date

import pytest

from budgetbook.domain.entities import OWNER_DRAW
from budgetbook.domain.errors import NotFoundError, ValidationError
from budgetbook.domain.transaction import TransactionService, month_bounds


@pytest.fixture
def owner_draw_category(category_service, sample_household, business_entity):
    """The business entity's owner draw category."""
    return category_service.get_category_by_path(sample_household.id, "Owner & Payroll > Owner Draw")


def _balance(account_service, account_id):
    return account_service.get_account(account_id).balance_cents


class TestCreateTransaction:
    """Tests for creating transactions."""

    def test_create(self, transaction_service, sample_household, personal_entity, sample_categories):
        """Test a transaction is stored with its budget month."""
        txn_id = transaction_service.create_transaction(
            sample_household.id,
            personal_entity.id,
            "2024-01-15",
            4250,
            "expense",
            "  Kroger  ",
            memo="weekly",
            category_id=sample_categories["Food > Groceries"],
        )

        txn = transaction_service.get_transaction(txn_id)
        assert txn.date == date(2024, 1, 15)
        assert txn.amount_cents == 4250
        assert txn.payee == "Kroger"
        assert txn.memo == "weekly"
        assert txn.category_id == sample_categories["Food > Groceries"]
        assert txn.is_transfer is False
        assert txn.budget_month_id is not None

    def test_same_month_shares_budget_month(self, transaction_service, sample_household, personal_entity):
        """Test transactions in one month reuse the budget month record."""
        first = transaction_service.create_transaction(
            sample_household.id, personal_entity.id, "2024-01-02", 100, "expense", "A"
        )
        second = transaction_service.create_transaction(
            sample_household.id, personal_entity.id, "2024-01-30", 100, "expense", "B"
        )
        third = transaction_service.create_transaction(
            sample_household.id, personal_entity.id, "2024-02-01", 100, "expense", "C"
        )

        get = transaction_service.get_transaction
        assert get(first).budget_month_id == get(second).budget_month_id
        assert get(first).budget_month_id != get(third).budget_month_id

    @pytest.mark.parametrize(
        "payee,amount,txn_type,txn_date,message",
        [
            ("", 100, "expense", "2024-01-01", "Payee is required"),
            ("X", 0, "expense", "2024-01-01", "Amount must be greater than zero"),
            ("X", -5, "expense", "2024-01-01", "Amount must not be negative"),
            ("X", 100, "transfer", "2024-01-01", "Invalid transaction type"),
            ("X", 100, "expense", "2024-13-45", "Invalid date"),
        ],
    )
    def test_validation(
        self, transaction_service, sample_household, personal_entity, payee, amount, txn_type, txn_date, message
    ):
        """Test invalid input is rejected."""
        with pytest.raises(ValidationError, match=message):
            transaction_service.create_transaction(
                sample_household.id, personal_entity.id, txn_date, amount, txn_type, payee
            )

    def test_imported_rows_accept_zero_and_blank_payee(self, transaction_service, sample_household, personal_entity):
        """Test statement rows keep a zero amount and an empty payee as reported."""
        zero_id = transaction_service.create_transaction(
            sample_household.id, personal_entity.id, "2024-01-01", 0, "income", "INTEREST PAID", imported=True
        )
        blank_id = transaction_service.create_transaction(
            sample_household.id, personal_entity.id, "2024-01-01", 500, "expense", "", imported=True
        )

        assert transaction_service.get_transaction(zero_id).amount_cents == 0
        assert transaction_service.get_transaction(blank_id).payee == ""
        with pytest.raises(ValidationError, match="Amount must not be negative"):
            transaction_service.create_transaction(
                sample_household.id, personal_entity.id, "2024-01-01", -5, "expense", "X", imported=True
            )

    def test_update_imported_row(self, transaction_service, sample_household, personal_entity):
        """Test an imported zero amount row can be edited without restating its values."""
        txn_id = transaction_service.create_transaction(
            sample_household.id, personal_entity.id, "2024-01-01", 0, "income", "", imported=True
        )

        transaction_service.update_transaction(txn_id, sample_household.id, memo="bank fee reversal")

        assert transaction_service.get_transaction(txn_id).memo == "bank fee reversal"
        with pytest.raises(ValidationError, match="Payee is required"):
            transaction_service.update_transaction(txn_id, sample_household.id, payee="  ")

    def test_entity_must_be_in_household(self, transaction_service, household_service, sample_household):
        """Test an entity of another household is rejected."""
        other_id = household_service.create_household("Other")
        other_entity = household_service.create_entity(other_id, "Personal")

        with pytest.raises(NotFoundError):
            transaction_service.create_transaction(
                sample_household.id, other_entity, "2024-01-01", 100, "expense", "X"
            )

    def test_account_must_be_in_entity(
        self, transaction_service, sample_household, personal_entity, business_account
    ):
        """Test an account of another entity is rejected."""
        with pytest.raises(NotFoundError):
            transaction_service.create_transaction(
                sample_household.id,
                personal_entity.id,
                "2024-01-01",
                100,
                "expense",
                "X",
                account_id=business_account.id,
            )

    def test_foreign_category_is_dropped(
        self, transaction_service, household_service, category_service, sample_household, personal_entity
    ):
        """Test a category of another household is silently ignored."""
        other_id = household_service.create_household("Other")
        category_service.seed_default_categories(other_id)
        foreign = category_service.get_category_by_path(other_id, "Food > Groceries")

        txn_id = transaction_service.create_transaction(
            sample_household.id, personal_entity.id, "2024-01-01", 100, "expense", "X", category_id=foreign.id
        )

        assert transaction_service.get_transaction(txn_id).category_id is None


class TestBalances:
    """Tests for account balance effects."""

    def test_expense_and_income(
        self, transaction_service, account_service, sample_household, personal_entity, sample_account
    ):
        """Test expenses lower and income raises the balance."""
        transaction_service.create_transaction(
            sample_household.id, personal_entity.id, "2024-01-01", 2500, "expense", "X",
            account_id=sample_account.id,
        )
        assert _balance(account_service, sample_account.id) == 97500

        transaction_service.create_transaction(
            sample_household.id, personal_entity.id, "2024-01-02", 10000, "income", "Y",
            account_id=sample_account.id,
        )
        assert _balance(account_service, sample_account.id) == 107500

    def test_no_account_no_effect(
        self, transaction_service, account_service, sample_household, personal_entity, sample_account
    ):
        """Test a transaction without an account leaves balances alone."""
        transaction_service.create_transaction(
            sample_household.id, personal_entity.id, "2024-01-01", 2500, "expense", "X"
        )
        assert _balance(account_service, sample_account.id) == 100000

    def test_update_amount_and_type(
        self, transaction_service, account_service, sample_household, personal_entity, sample_account
    ):
        """Test updating reverses the old effect and applies the new one."""
        txn_id = transaction_service.create_transaction(
            sample_household.id, personal_entity.id, "2024-01-01", 2500, "expense", "X",
            account_id=sample_account.id,
        )

        transaction_service.update_transaction(txn_id, sample_household.id, amount_cents=4000)
        assert _balance(account_service, sample_account.id) == 96000

        transaction_service.update_transaction(txn_id, sample_household.id, type="income")
        assert _balance(account_service, sample_account.id) == 104000

    def test_update_moves_between_accounts(
        self, transaction_service, account_service, sample_household, personal_entity, sample_account
    ):
        """Test moving a transaction moves its balance effect."""
        savings_id = account_service.create_account(personal_entity.id, "Savings", "savings", 0)
        txn_id = transaction_service.create_transaction(
            sample_household.id, personal_entity.id, "2024-01-01", 2500, "expense", "X",
            account_id=sample_account.id,
        )

        transaction_service.update_transaction(txn_id, sample_household.id, account_id=savings_id)
        assert _balance(account_service, sample_account.id) == 100000
        assert _balance(account_service, savings_id) == -2500

        transaction_service.update_transaction(txn_id, sample_household.id, account_id=None)
        assert _balance(account_service, savings_id) == 0
        assert transaction_service.get_transaction(txn_id).account_id is None

    def test_delete_restores_balance(
        self, transaction_service, account_service, sample_household, personal_entity, sample_account
    ):
        """Test deleting reverses the balance effect."""
        txn_id = transaction_service.create_transaction(
            sample_household.id, personal_entity.id, "2024-01-01", 2500, "expense", "X",
            account_id=sample_account.id,
        )

        transaction_service.delete_transaction(txn_id, sample_household.id)

        assert _balance(account_service, sample_account.id) == 100000
        assert transaction_service.get_transaction(txn_id) is None

    def test_balance_matches_history(
        self, transaction_service, account_service, sample_household, personal_entity, sample_account
    ):
        """Test the balance equals the opening balance plus every signed amount."""
        ids = [
            transaction_service.create_transaction(
                sample_household.id, personal_entity.id, f"2024-01-{day:02d}", amount, txn_type, "X",
                account_id=sample_account.id,
            )
            for day, amount, txn_type in [(1, 500, "expense"), (2, 900, "income"), (3, 250, "expense")]
        ]
        transaction_service.update_transaction(ids[0], sample_household.id, amount_cents=700)
        transaction_service.delete_transaction(ids[2], sample_household.id)

        history = transaction_service.list_transactions(sample_household.id)
        signed = sum(t.amount_cents if t.type == "income" else -t.amount_cents for t in history)
        assert _balance(account_service, sample_account.id) == 100000 + signed == 100200


class TestOwnerDraw:
    """Tests for owner draw transfers from a business to the personal entity."""

    def test_creates_mirror(
        self,
        transaction_service,
        account_service,
        sample_household,
        personal_entity,
        business_entity,
        business_account,
        owner_draw_category,
        sample_categories,
    ):
        """Test a business owner draw records income in the personal entity."""
        source_id = transaction_service.create_transaction(
            sample_household.id, business_entity.id, "2024-03-01", 250000, "expense", "Jane Owner",
            category_id=owner_draw_category.id, account_id=business_account.id,
        )

        link = transaction_service.get_linked_transfer(source_id)
        assert link.transfer_type == OWNER_DRAW
        assert link.from_transaction_id == source_id

        mirror = transaction_service.get_transaction(link.to_transaction_id)
        assert mirror.entity_id == personal_entity.id
        assert mirror.type == "income"
        assert mirror.amount_cents == 250000
        assert mirror.payee == "Jane Owner (Draw)"
        assert mirror.is_transfer is True
        assert mirror.account_id is None
        assert mirror.category_id == sample_categories["Income > Paycheck 1"]
        assert transaction_service.get_linked_transfer(mirror.id).id == link.id
        assert _balance(account_service, business_account.id) == 250000

    def test_prefers_flagged_personal_category(
        self,
        transaction_service,
        category_service,
        sample_household,
        personal_entity,
        business_entity,
        owner_draw_category,
    ):
        """Test a personal owner draw category wins over a paycheck one."""
        draws_id = category_service.create_category(sample_household.id, "Owner Draws", parent_path="Income")

        source_id = transaction_service.create_transaction(
            sample_household.id, business_entity.id, "2024-03-01", 1000, "expense", "Owner",
            category_id=owner_draw_category.id,
        )

        mirror_id = transaction_service.get_linked_transfer(source_id).to_transaction_id
        assert transaction_service.get_transaction(mirror_id).category_id == draws_id

    def test_only_business_expenses_link(
        self,
        transaction_service,
        sample_household,
        personal_entity,
        business_entity,
        owner_draw_category,
        sample_categories,
    ):
        """Test income, other categories and personal entities do not link."""
        ids = [
            transaction_service.create_transaction(
                sample_household.id, business_entity.id, "2024-03-01", 1000, "income", "Owner",
                category_id=owner_draw_category.id,
            ),
            transaction_service.create_transaction(
                sample_household.id, business_entity.id, "2024-03-01", 1000, "expense", "Store",
                category_id=sample_categories["Food > Groceries"],
            ),
            transaction_service.create_transaction(
                sample_household.id, personal_entity.id, "2024-03-01", 1000, "expense", "Owner",
                category_id=owner_draw_category.id,
            ),
        ]

        assert all(transaction_service.get_linked_transfer(txn_id) is None for txn_id in ids)
        assert len(transaction_service.list_transactions(sample_household.id)) == 3

    def test_no_personal_entity(
        self, transaction_service, sample_household, business_entity, owner_draw_category
    ):
        """Test a household without a personal entity records only the expense."""
        source_id = transaction_service.create_transaction(
            sample_household.id, business_entity.id, "2024-03-01", 1000, "expense", "Owner",
            category_id=owner_draw_category.id,
        )

        assert transaction_service.get_linked_transfer(source_id) is None
        assert len(transaction_service.list_transactions(sample_household.id)) == 1

    def test_update_syncs_mirror(
        self, transaction_service, sample_household, personal_entity, business_entity, owner_draw_category
    ):
        """Test date, amount and payee changes reach the mirror."""
        source_id = transaction_service.create_transaction(
            sample_household.id, business_entity.id, "2024-03-01", 1000, "expense", "Owner",
            category_id=owner_draw_category.id,
        )
        mirror_id = transaction_service.get_linked_transfer(source_id).to_transaction_id
        before = transaction_service.get_transaction(mirror_id)

        transaction_service.update_transaction(
            source_id, sample_household.id, date="2024-04-10", amount_cents=1500, payee="J. Owner", memo="q2"
        )

        mirror = transaction_service.get_transaction(mirror_id)
        assert mirror.date == date(2024, 4, 10)
        assert mirror.amount_cents == 1500
        assert mirror.payee == "J. Owner (Draw)"
        assert mirror.memo is None
        assert mirror.budget_month_id != before.budget_month_id

    def test_delete_removes_mirror(
        self, transaction_service, sample_household, personal_entity, business_entity, owner_draw_category
    ):
        """Test deleting the draw deletes the personal income too."""
        source_id = transaction_service.create_transaction(
            sample_household.id, business_entity.id, "2024-03-01", 1000, "expense", "Owner",
            category_id=owner_draw_category.id,
        )
        mirror_id = transaction_service.get_linked_transfer(source_id).to_transaction_id

        transaction_service.delete_transaction(source_id, sample_household.id)

        assert transaction_service.get_transaction(mirror_id) is None
        assert transaction_service.list_transactions(sample_household.id) == []

    def test_delete_mirror_keeps_source(
        self, transaction_service, sample_household, personal_entity, business_entity, owner_draw_category
    ):
        """Test deleting the mirror leaves the business expense."""
        source_id = transaction_service.create_transaction(
            sample_household.id, business_entity.id, "2024-03-01", 1000, "expense", "Owner",
            category_id=owner_draw_category.id,
        )
        mirror_id = transaction_service.get_linked_transfer(source_id).to_transaction_id

        transaction_service.delete_transaction(mirror_id, sample_household.id)

        assert transaction_service.get_transaction(source_id) is not None
        assert transaction_service.get_linked_transfer(source_id) is None

    def test_rollback_on_mirror_failure(
        self, temp_db, sample_household, personal_entity, business_entity, owner_draw_category, monkeypatch
    ):
        """Test a failure while linking leaves no half-written draw."""
        service = TransactionService(temp_db)

        def fail(*args, **kwargs):
            raise RuntimeError("link failed")

        monkeypatch.setattr(temp_db, "create_linked_transfer", fail)

        with pytest.raises(RuntimeError):
            service.create_transaction(
                sample_household.id, business_entity.id, "2024-03-01", 1000, "expense", "Owner",
                category_id=owner_draw_category.id,
            )

        assert service.list_transactions(sample_household.id) == []


class TestQueries:
    """Tests for listing and categorizing."""

    @pytest.fixture
    def history(self, transaction_service, sample_household, personal_entity, sample_categories):
        create = transaction_service.create_transaction
        return [
            create(sample_household.id, personal_entity.id, "2024-01-05", 100, "expense", "Kroger",
                   category_id=sample_categories["Food > Groceries"]),
            create(sample_household.id, personal_entity.id, "2024-01-20", 5000, "income", "Payroll"),
            create(sample_household.id, personal_entity.id, "2024-02-01", 300, "expense", "Shell"),
        ]

    def test_list_by_month(self, transaction_service, sample_household, history):
        """Test month filtering uses calendar bounds and newest first order."""
        january = transaction_service.list_transactions(sample_household.id, month="2024-01")
        assert [t.id for t in january] == [history[1], history[0]]

    def test_list_filters(self, transaction_service, sample_household, history, sample_categories):
        """Test category, payee, type and uncategorized filters."""
        list_ = transaction_service.list_transactions
        hh = sample_household.id

        assert [t.id for t in list_(hh, category_id=sample_categories["Food > Groceries"])] == [history[0]]
        assert [t.id for t in list_(hh, payee="krog")] == [history[0]]
        assert [t.id for t in list_(hh, type="income")] == [history[1]]
        assert [t.id for t in list_(hh, uncategorized=True)] == [history[2], history[1]]

    def test_invalid_month(self, transaction_service, sample_household):
        """Test a malformed month is rejected."""
        with pytest.raises(ValidationError):
            transaction_service.list_transactions(sample_household.id, month="January")

    def test_month_bounds(self):
        """Test month bounds cover leap years."""
        assert month_bounds("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))
        assert month_bounds("2023-12") == (date(2023, 12, 1), date(2023, 12, 31))

    def test_quick_categorize(self, transaction_service, sample_household, history, sample_categories):
        """Test setting and clearing a category."""
        gas = sample_categories["Transportation > Gas"]
        transaction_service.quick_categorize(history[2], sample_household.id, gas)
        assert transaction_service.get_transaction(history[2]).category_id == gas

        transaction_service.quick_categorize(history[2], sample_household.id, None)
        assert transaction_service.get_transaction(history[2]).category_id is None

    def test_quick_categorize_foreign_category(
        self, transaction_service, household_service, category_service, sample_household, history
    ):
        """Test a category of another household is rejected."""
        other_id = household_service.create_household("Other")
        category_service.seed_default_categories(other_id)
        foreign = category_service.get_category_by_path(other_id, "Food > Groceries")

        with pytest.raises(NotFoundError):
            transaction_service.quick_categorize(history[0], sample_household.id, foreign.id)

    def test_hidden_across_households(self, transaction_service, household_service, sample_household, history):
        """Test another household cannot read, update or delete a transaction."""
        other_id = household_service.create_household("Other")

        assert transaction_service.get_transaction(history[0], other_id) is None
        with pytest.raises(NotFoundError):
            transaction_service.update_transaction(history[0], other_id, payee="X")
        with pytest.raises(NotFoundError):
            transaction_service.delete_transaction(history[0], other_id)
