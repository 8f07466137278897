"""Utilities for resolving household, entity and account names to IDs."""

from typing import Optional

from budgetbook.domain.account import AccountService
from budgetbook.domain.household import HouseholdService


def _as_id(value: str | int) -> Optional[int]:
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def resolve_household(household_service: HouseholdService, household: str | int | None) -> int:
    """Resolve household name or ID to household ID.

    When no household is given and exactly one exists, that one is used.

    Args:
        household_service: HouseholdService instance
        household: Household name, ID, or None

    Returns:
        Household ID

    Raises:
        ValueError: If household is not found or cannot be chosen
    """
    if household is None:
        households = household_service.list_households()
        if len(households) == 1:
            return households[0].id
        if not households:
            raise ValueError("No households found. Create one with 'budgetbook household create'")
        raise ValueError("Several households exist, use --household to choose one")

    household_id = _as_id(household)
    if household_id is not None:
        if household_service.get_household(household_id) is None:
            raise ValueError(f"Household ID {household_id} not found")
        return household_id

    for hh in household_service.list_households():
        if hh.name == household:
            return hh.id

    raise ValueError(f"Household '{household}' not found")


def resolve_entity(
    household_service: HouseholdService, household_id: int, entity: str | int | None
) -> int:
    """Resolve entity name or ID within a household.

    When no entity is given, the household's personal entity is used.

    Raises:
        ValueError: If entity is not found in the household
    """
    if entity is None:
        personal = household_service.get_personal_entity(household_id)
        if personal is None:
            raise ValueError("Household has no personal entity, use --entity to choose one")
        return personal.id

    entities = household_service.list_entities(household_id)
    entity_id = _as_id(entity)
    for ent in entities:
        if ent.id == entity_id or ent.name == entity:
            return ent.id

    raise ValueError(f"Entity '{entity}' not found")


def resolve_account(account_service: AccountService, entity_id: int, account: str | int) -> int:
    """Resolve account name or ID within an entity.

    Raises:
        ValueError: If account is not found in the entity
    """
    accounts = account_service.list_accounts(entity_id, include_archived=True)
    account_id = _as_id(account)
    for acc in accounts:
        if acc.id == account_id or acc.name == account:
            return acc.id

    raise ValueError(f"Account '{account}' not found")
