"""Category domain service."""

import logging
from typing import Optional

from budgetbook.database.base import Database
from budgetbook.domain.entities import Category as CategoryEntity
from budgetbook.domain.errors import (
    NotFoundError,
    ValidationError,
    category_path_not_found,
)

logger = logging.getLogger(__name__)

OWNER_DRAW_NAME = "owner draw"

DEFAULT_CATEGORIES = {
    "Income": ["Paycheck 1", "Paycheck 2", "Side Income", "Bonus"],
    "Housing": [
        "Mortgage/Rent",
        "Property Taxes",
        "Home Insurance",
        "HOA Fees",
        "Home Maintenance",
        "Home Improvement",
    ],
    "Transportation": [
        "Car Payment",
        "Car Insurance",
        "Gas",
        "Car Maintenance",
        "Parking",
        "Public Transit",
    ],
    "Food": ["Groceries", "Restaurants", "Coffee Shops"],
    "Utilities": ["Electric", "Gas/Heating", "Water", "Trash", "Internet", "Phone"],
    "Insurance": ["Health Insurance", "Life Insurance", "Disability Insurance"],
    "Health": ["Doctor", "Dentist", "Vision", "Prescriptions", "Gym"],
    "Personal": ["Clothing", "Personal Care", "Subscriptions", "Entertainment", "Hobbies"],
    "Giving": ["Tithe/Charity", "Gifts"],
    "Savings": ["Emergency Fund", "Retirement", "Investments", "Vacation", "Other Savings"],
    "Debt": ["Credit Card", "Student Loans", "Personal Loan"],
    "Miscellaneous": ["Miscellaneous", "Pet Care", "Childcare", "Education"],
}

BUSINESS_CATEGORIES = {
    "Revenue": ["Client Income", "Contract Work", "Product Sales", "Other Revenue"],
    "Operating Expenses": [
        "Software & Subscriptions",
        "Equipment",
        "Office Supplies",
        "Professional Services",
        "Marketing & Advertising",
    ],
    "Owner & Payroll": ["Owner Draw", "Contractor Payments", "Payroll", "Payroll Taxes"],
    "Taxes & Fees": [
        "Federal Tax Payments",
        "State Tax Payments",
        "Business Licenses",
        "Bank Fees",
    ],
}


def is_owner_draw_name(name: str) -> bool:
    """Whether a category name marks owner draws."""
    return OWNER_DRAW_NAME in name.lower()


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        household_id: int,
        name: str,
        parent_path: Optional[str] = None,
        entity_id: Optional[int] = None,
        is_owner_draw: Optional[bool] = None,
    ) -> int:
        """Create a category.

        Args:
            household_id: Household ID
            name: Category name
            parent_path: Optional parent category path (e.g., "Food")
            entity_id: Optional entity the category belongs to; defaults to
                the parent's entity
            is_owner_draw: Owner-draw flag; inferred from the name when None

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is empty
            NotFoundError: If the parent category doesn't exist
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")

        parent_id = None
        if parent_path is not None:
            parent = self.db.get_category_by_path(household_id, parent_path)
            if parent is None:
                raise NotFoundError(f"Parent category '{parent_path}' not found")
            parent_id = parent.id
            if entity_id is None:
                entity_id = parent.entity_id

        if is_owner_draw is None:
            is_owner_draw = is_owner_draw_name(name)

        return self.db.create_category(
            household_id=household_id,
            name=name,
            parent_id=parent_id,
            entity_id=entity_id,
            is_owner_draw=is_owner_draw,
        )

    def get_category(self, category_id: int) -> Optional[CategoryEntity]:
        """Get category by ID.

        Args:
            category_id: Category ID

        Returns:
            Category entity or None if not found
        """
        return self.db.get_category(category_id)

    def get_category_by_path(self, household_id: int, path: str) -> Optional[CategoryEntity]:
        """Get category by path.

        Args:
            household_id: Household ID
            path: Category path (e.g., "Food > Groceries")

        Returns:
            Category entity or None if not found
        """
        return self.db.get_category_by_path(household_id, path)

    def require_category_by_path(self, household_id: int, path: str) -> CategoryEntity:
        """Like :meth:`get_category_by_path` but raises NotFoundError."""
        category = self.db.get_category_by_path(household_id, path)
        if category is None:
            raise NotFoundError(category_path_not_found(path))
        return category

    def list_categories(self, household_id: int, entity_id: Optional[int] = None) -> list[CategoryEntity]:
        """List assignable categories, the leaves under each group.

        Args:
            household_id: Household ID
            entity_id: Optional entity filter

        Returns:
            Non-archived categories that have a parent, in group order
        """
        categories = self.db.list_categories(household_id, entity_id=entity_id)
        groups = [cat for cat in categories if cat.parent_id is None]
        leaves = [cat for cat in categories if cat.parent_id is not None]

        group_order = {group.id: index for index, group in enumerate(groups)}
        return sorted(
            leaves,
            key=lambda cat: (group_order.get(cat.parent_id, len(groups)), cat.sort_order, cat.id),
        )

    def get_category_tree(self, household_id: int) -> list[dict]:
        """Get full category tree.

        Returns:
            List of root categories as ``{"category": ..., "children": [...]}``
            dicts, children nested the same way
        """
        categories = self.db.list_categories(household_id)
        nodes = {cat.id: {"category": cat, "children": []} for cat in categories}

        roots = []
        for cat in categories:
            node = nodes[cat.id]
            if cat.parent_id is not None and cat.parent_id in nodes:
                nodes[cat.parent_id]["children"].append(node)
            else:
                roots.append(node)
        return roots

    def format_category_path(self, category_id: int) -> str:
        """Get full path for a category.

        Args:
            category_id: Category ID

        Returns:
            Full category path (e.g., "Food > Groceries")
        """
        cat = self.get_category(category_id)
        if cat is None:
            return ""

        path_parts = [cat.name]
        current_parent_id = cat.parent_id

        while current_parent_id is not None:
            parent = self.get_category(current_parent_id)
            if parent is None:
                break
            path_parts.append(parent.name)
            current_parent_id = parent.parent_id

        return " > ".join(reversed(path_parts))

    def category_belongs_to_household(self, category_id: int, household_id: int) -> bool:
        """Whether a category exists and is owned by the household."""
        category = self.db.get_category(category_id)
        return category is not None and category.household_id == household_id

    def seed_default_categories(self, household_id: int) -> int:
        """Create the default personal category groups.

        Does nothing when the household already has categories.

        Returns:
            Number of categories created (groups included)
        """
        existing = self.db.count_categories(household_id)
        if existing > 0:
            logger.info(
                "Household %s already has %d categories, skipping seed", household_id, existing
            )
            return 0

        with self.db.transaction():
            count = self.seed_groups(household_id, DEFAULT_CATEGORIES)

        logger.info("Seeded %d default categories for household %s", count, household_id)
        return count

    def seed_groups(
        self, household_id: int, groups: dict[str, list[str]], entity_id: Optional[int] = None
    ) -> int:
        """Insert groups and their categories in order. Returns count created."""
        count = 0
        for group_order, (group_name, names) in enumerate(groups.items()):
            group_id = self.db.create_category(
                household_id=household_id,
                name=group_name,
                entity_id=entity_id,
                is_owner_draw=is_owner_draw_name(group_name),
                sort_order=group_order,
            )
            count += 1
            for cat_order, name in enumerate(names):
                self.db.create_category(
                    household_id=household_id,
                    name=name,
                    parent_id=group_id,
                    entity_id=entity_id,
                    is_owner_draw=is_owner_draw_name(name),
                    sort_order=cat_order,
                )
                count += 1
        return count
