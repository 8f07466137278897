"""Tests for households and entities."""

import pytest

from budgetbook.domain.category import BUSINESS_CATEGORIES
from budgetbook.domain.errors import NotFoundError, ValidationError


class TestHouseholdService:
    """Tests for HouseholdService."""

    def test_create_household(self, household_service):
        """Test creating and listing households."""
        household_id = household_service.create_household("  Smith Family ")

        assert household_service.get_household(household_id).name == "Smith Family"
        assert [h.id for h in household_service.list_households()] == [household_id]

    def test_create_household_requires_name(self, household_service):
        """Test an empty name is rejected."""
        with pytest.raises(ValidationError, match="Household name is required"):
            household_service.create_household("")

    def test_create_personal_entity(self, household_service, sample_household):
        """Test a personal entity gets no extra categories."""
        entity_id = household_service.create_entity(sample_household.id, "Personal")

        entity = household_service.get_entity(entity_id)
        assert entity.entity_type == "personal"
        assert entity.tax_rate_percent == 0
        assert household_service.get_personal_entity(sample_household.id).id == entity_id

    def test_create_business_entity_seeds_categories(
        self, household_service, category_service, sample_household
    ):
        """Test a business entity gets its own category groups."""
        entity_id = household_service.create_entity(
            sample_household.id, "Acme LLC", entity_type="business", tax_rate_percent=30
        )

        categories = category_service.list_categories(sample_household.id, entity_id)
        assert len(categories) == sum(len(names) for names in BUSINESS_CATEGORIES.values())
        draw = category_service.get_category_by_path(sample_household.id, "Owner & Payroll > Owner Draw")
        assert draw.is_owner_draw is True
        assert draw.entity_id == entity_id
        assert household_service.get_entity(entity_id).tax_rate_percent == 30

    def test_list_entities(self, household_service, sample_household, personal_entity, business_entity):
        """Test entities are listed oldest first."""
        entities = household_service.list_entities(sample_household.id)

        assert [e.id for e in entities] == [personal_entity.id, business_entity.id]
        assert household_service.get_personal_entity(sample_household.id).id == personal_entity.id

    def test_no_personal_entity(self, household_service, sample_household, business_entity):
        """Test a household with only a business has no personal entity."""
        assert household_service.get_personal_entity(sample_household.id) is None

    @pytest.mark.parametrize(
        "name,entity_type,tax_rate,message",
        [
            ("", "personal", 0, "Entity name is required"),
            ("X", "nonprofit", 0, "Invalid entity type"),
            ("X", "business", 101, "Tax rate must be between 0 and 100"),
            ("X", "business", -1, "Tax rate must be between 0 and 100"),
        ],
    )
    def test_create_entity_validation(self, household_service, sample_household, name, entity_type, tax_rate, message):
        """Test invalid entity input is rejected."""
        with pytest.raises(ValidationError, match=message):
            household_service.create_entity(sample_household.id, name, entity_type, tax_rate)

    def test_create_entity_missing_household(self, household_service):
        """Test the household must exist."""
        with pytest.raises(NotFoundError):
            household_service.create_entity(9999, "Personal")
