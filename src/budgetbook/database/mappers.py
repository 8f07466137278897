"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, making it easy to change when
the database schema changes.
"""

from budgetbook.domain import entities as domain
from budgetbook.database.models import (
    Household as ORMHousehold,
    Entity as ORMEntity,
    Category as ORMCategory,
    BudgetMonth as ORMBudgetMonth,
    Account as ORMAccount,
    Transaction as ORMTransaction,
    TransactionRule as ORMTransactionRule,
    LinkedTransfer as ORMLinkedTransfer,
)


def household_to_domain(orm_household: ORMHousehold) -> domain.Household:
    """Convert SQLAlchemy Household model to domain Household entity."""
    return domain.Household(
        id=orm_household.id,
        name=orm_household.name,
        created_at=orm_household.created_at,
    )


def entity_to_domain(orm_entity: ORMEntity) -> domain.Entity:
    """Convert SQLAlchemy Entity model to domain Entity entity."""
    return domain.Entity(
        id=orm_entity.id,
        household_id=orm_entity.household_id,
        name=orm_entity.name,
        entity_type=orm_entity.entity_type,
        tax_rate_percent=orm_entity.tax_rate_percent,
        created_at=orm_entity.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        household_id=orm_category.household_id,
        entity_id=orm_category.entity_id,
        parent_id=orm_category.parent_id,
        name=orm_category.name,
        is_owner_draw=bool(orm_category.is_owner_draw),
        archived=bool(orm_category.archived),
        sort_order=orm_category.sort_order,
        created_at=orm_category.created_at,
    )


def budget_month_to_domain(orm_month: ORMBudgetMonth) -> domain.BudgetMonth:
    """Convert SQLAlchemy BudgetMonth model to domain BudgetMonth entity."""
    return domain.BudgetMonth(
        id=orm_month.id,
        household_id=orm_month.household_id,
        entity_id=orm_month.entity_id,
        month=orm_month.month,
        created_at=orm_month.created_at,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        entity_id=orm_account.entity_id,
        name=orm_account.name,
        account_type=orm_account.account_type,
        balance_cents=orm_account.balance_cents,
        archived=bool(orm_account.archived),
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        household_id=orm_transaction.household_id,
        entity_id=orm_transaction.entity_id,
        account_id=orm_transaction.account_id,
        budget_month_id=orm_transaction.budget_month_id,
        date=orm_transaction.date,
        amount_cents=orm_transaction.amount_cents,
        type=orm_transaction.type,
        payee=orm_transaction.payee,
        memo=orm_transaction.memo,
        category_id=orm_transaction.category_id,
        is_transfer=bool(orm_transaction.is_transfer),
        created_by_user_id=orm_transaction.created_by_user_id,
        created_at=orm_transaction.created_at,
        updated_at=orm_transaction.updated_at,
    )


def rule_to_domain(orm_rule: ORMTransactionRule, category_name: str) -> domain.CategorizationRule:
    """Convert SQLAlchemy TransactionRule model to domain CategorizationRule entity."""
    return domain.CategorizationRule(
        id=orm_rule.id,
        household_id=orm_rule.household_id,
        search_term=orm_rule.search_term,
        match_type=orm_rule.match_type,
        category_id=orm_rule.category_id,
        category_name=category_name,
        created_at=orm_rule.created_at,
        updated_at=orm_rule.updated_at,
    )


def linked_transfer_to_domain(orm_link: ORMLinkedTransfer) -> domain.LinkedTransfer:
    """Convert SQLAlchemy LinkedTransfer model to domain LinkedTransfer entity."""
    return domain.LinkedTransfer(
        id=orm_link.id,
        from_transaction_id=orm_link.from_transaction_id,
        to_transaction_id=orm_link.to_transaction_id,
        transfer_type=orm_link.transfer_type,
        created_at=orm_link.created_at,
    )
