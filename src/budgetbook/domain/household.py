"""Household and entity domain service."""

import logging
from typing import Optional

from budgetbook.database.base import Database
from budgetbook.domain.category import BUSINESS_CATEGORIES, CategoryService
from budgetbook.domain.entities import (
    BUSINESS,
    ENTITY_TYPES,
    PERSONAL,
    Entity as EntityEntity,
    Household as HouseholdEntity,
)
from budgetbook.domain.errors import NotFoundError, ValidationError, household_not_found

logger = logging.getLogger(__name__)


class HouseholdService:
    """Service for managing households and their entities."""

    def __init__(self, db: Database):
        """Initialize household service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_household(self, name: str) -> int:
        """Create a household.

        Raises:
            ValidationError: If the name is empty
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Household name is required")
        return self.db.create_household(name)

    def get_household(self, household_id: int) -> Optional[HouseholdEntity]:
        """Get household by ID."""
        return self.db.get_household(household_id)

    def list_households(self) -> list[HouseholdEntity]:
        """List all households."""
        return self.db.list_households()

    def create_entity(
        self,
        household_id: int,
        name: str,
        entity_type: str = PERSONAL,
        tax_rate_percent: float = 0,
    ) -> int:
        """Create a personal or business entity in a household.

        Business entities get the default business category groups, whose
        "Owner Draw" category drives linked owner-draw transfers.

        Args:
            household_id: Household ID
            name: Entity name
            entity_type: 'personal' or 'business'
            tax_rate_percent: Estimated tax rate, 0 to 100

        Returns:
            Entity ID

        Raises:
            ValidationError: If the name, type or tax rate is invalid
            NotFoundError: If the household does not exist
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Entity name is required")
        if entity_type not in ENTITY_TYPES:
            raise ValidationError(
                f"Invalid entity type '{entity_type}'. Must be one of: {', '.join(ENTITY_TYPES)}"
            )
        if not 0 <= tax_rate_percent <= 100:
            raise ValidationError("Tax rate must be between 0 and 100")
        if self.db.get_household(household_id) is None:
            raise NotFoundError(household_not_found(household_id))

        with self.db.transaction():
            entity_id = self.db.create_entity(
                household_id=household_id,
                name=name,
                entity_type=entity_type,
                tax_rate_percent=tax_rate_percent,
            )
            if entity_type == BUSINESS:
                count = CategoryService(self.db).seed_groups(
                    household_id, BUSINESS_CATEGORIES, entity_id=entity_id
                )
                logger.info("Created %d business categories for entity %s", count, entity_id)

        return entity_id

    def get_entity(self, entity_id: int) -> Optional[EntityEntity]:
        """Get entity by ID."""
        return self.db.get_entity(entity_id)

    def list_entities(self, household_id: int) -> list[EntityEntity]:
        """List a household's entities, oldest first."""
        return self.db.list_entities(household_id)

    def get_personal_entity(self, household_id: int) -> Optional[EntityEntity]:
        """The household's personal entity (the oldest one if several exist)."""
        for entity in self.db.list_entities(household_id):
            if entity.entity_type == PERSONAL:
                return entity
        return None
