"""Auto-categorization domain service.

Rules are evaluated newest first and the first hit wins; there is no
weighting beyond creation order.
"""

import logging
import threading
from typing import Optional

from budgetbook.database.base import Database
from budgetbook.domain.entities import (
    CategorizationRule as RuleEntity,
    MATCH_CONTAINS,
    MATCH_EXACT,
    MATCH_TYPES,
)
from budgetbook.domain.errors import ValidationError

logger = logging.getLogger(__name__)

# Merchant search term -> category name
DEFAULT_RULES = [
    # Food
    ("Walmart", "Groceries"),
    ("Kroger", "Groceries"),
    ("Aldi", "Groceries"),
    ("Whole Foods", "Groceries"),
    ("Publix", "Groceries"),
    ("Costco", "Groceries"),
    ("McDonald's", "Restaurants"),
    ("Chick-fil-A", "Restaurants"),
    ("Chipotle", "Restaurants"),
    ("Starbucks", "Coffee Shops"),
    ("Dunkin", "Coffee Shops"),
    # Transportation
    ("Shell", "Gas"),
    ("Exxon", "Gas"),
    ("BP", "Gas"),
    ("Chevron", "Gas"),
    ("Wawa", "Gas"),
    ("Uber", "Public Transit"),
    ("Lyft", "Public Transit"),
    # Utilities
    ("AT&T", "Phone"),
    ("Verizon", "Phone"),
    ("T-Mobile", "Phone"),
    ("Comcast", "Internet"),
    ("Xfinity", "Internet"),
    ("Spectrum", "Internet"),
    # Personal
    ("Netflix", "Subscriptions"),
    ("Spotify", "Subscriptions"),
    ("Hulu", "Subscriptions"),
    ("Disney+", "Subscriptions"),
    ("Amazon Prime", "Subscriptions"),
    ("Apple.com", "Subscriptions"),
    ("Target", "Clothing"),
    ("T.J. Maxx", "Clothing"),
    # Home
    ("Home Depot", "Home Improvement"),
    ("Lowe's", "Home Improvement"),
]


class RuleCache:
    """Per-household rule lists kept for the life of the process.

    This is an optimization only. Every household has a generation number
    that moves on invalidation; a list loaded before an invalidation is not
    stored, so a slow reader cannot put stale rules back. Other processes
    are not notified, so their caches may lag until they restart.
    """

    def __init__(self):
        self._rules: dict[int, list[RuleEntity]] = {}
        self._generations: dict[int, int] = {}
        self._lock = threading.Lock()

    def get(self, household_id: int) -> Optional[list[RuleEntity]]:
        with self._lock:
            return self._rules.get(household_id)

    def generation(self, household_id: int) -> int:
        with self._lock:
            return self._generations.get(household_id, 0)

    def put(self, household_id: int, rules: list[RuleEntity], generation: int) -> bool:
        """Store rules loaded at ``generation``. Returns False if they are stale."""
        with self._lock:
            if self._generations.get(household_id, 0) != generation:
                return False
            self._rules[household_id] = rules
            return True

    def invalidate(self, household_id: int) -> None:
        with self._lock:
            self._rules.pop(household_id, None)
            self._generations[household_id] = self._generations.get(household_id, 0) + 1

    def clear(self) -> None:
        with self._lock:
            for household_id in list(self._rules):
                self._generations[household_id] = self._generations.get(household_id, 0) + 1
            self._rules.clear()


def rule_matches(rule: RuleEntity, payee_lower: str) -> bool:
    """Whether a rule matches an already-lowercased payee."""
    term = rule.search_term.lower()
    if rule.match_type == MATCH_EXACT:
        return payee_lower == term
    return term in payee_lower


class AutoCategorizationService:
    """Service for matching payees to categories with household rules."""

    def __init__(self, db: Database, cache: Optional[RuleCache] = None, use_cache: bool = True):
        """Initialize auto-categorization service.

        Args:
            db: Database instance
            cache: Optional shared rule cache
            use_cache: If False, rules are read from the database on every call
        """
        self.db = db
        self.use_cache = use_cache
        self.cache = cache if cache is not None else RuleCache()

    def get_rules(self, household_id: int) -> list[RuleEntity]:
        """Get a household's rules, most recently created first.

        Args:
            household_id: Household ID

        Returns:
            List of rule entities in evaluation order
        """
        if not self.use_cache:
            return self.db.list_rules(household_id)

        cached = self.cache.get(household_id)
        if cached is not None:
            return cached

        generation = self.cache.generation(household_id)
        rules = self.db.list_rules(household_id)
        if not self.cache.put(household_id, rules, generation):
            logger.debug("Discarded stale rule list for household %s", household_id)
        return rules

    def match(self, household_id: int, payee: str) -> Optional[int]:
        """Find the category for a payee.

        Args:
            household_id: Household ID
            payee: Payee text

        Returns:
            Category ID of the first matching rule, or None
        """
        payee_lower = (payee or "").lower()
        for rule in self.get_rules(household_id):
            if rule_matches(rule, payee_lower):
                return rule.category_id
        return None

    def create_rule(
        self,
        household_id: int,
        search_term: str,
        category_id: int,
        match_type: str = MATCH_CONTAINS,
    ) -> int:
        """Create a new rule.

        The category is not checked against the household; callers that
        take the id from user input must verify ownership themselves.

        Args:
            household_id: Household ID
            search_term: Text to look for in payees (trimmed)
            category_id: Category to assign on match
            match_type: 'contains' or 'exact'

        Returns:
            Rule ID

        Raises:
            ValidationError: If the term is empty or the match type is unknown
        """
        term = (search_term or "").strip()
        if not term:
            raise ValidationError("Search term is required")
        if match_type not in MATCH_TYPES:
            raise ValidationError(
                f"Invalid match type '{match_type}'. Must be one of: {', '.join(MATCH_TYPES)}"
            )

        rule_id = self.db.create_rule(
            household_id=household_id,
            search_term=term,
            category_id=category_id,
            match_type=match_type,
        )
        self.cache.invalidate(household_id)
        return rule_id

    def delete_rule(self, household_id: int, rule_id: int) -> bool:
        """Delete a rule belonging to a household.

        Returns:
            True if a rule was removed
        """
        deleted = self.db.delete_rule(household_id, rule_id)
        self.cache.invalidate(household_id)
        return deleted

    def seed_default_rules(self, household_id: int) -> int:
        """Insert the built-in merchant rules a household does not have yet.

        Terms whose category name does not exist in the household are
        skipped, as are terms already covered by an existing rule
        (case-insensitive). Safe to run repeatedly.

        Returns:
            Number of rules inserted
        """
        category_ids = {cat.name: cat.id for cat in self.db.list_categories(household_id)}
        existing_terms = {rule.search_term.lower() for rule in self.get_rules(household_id)}

        count = 0
        with self.db.transaction():
            for term, category_name in DEFAULT_RULES:
                category_id = category_ids.get(category_name)
                if category_id is None or term.lower() in existing_terms:
                    continue
                self.db.create_rule(
                    household_id=household_id,
                    search_term=term,
                    category_id=category_id,
                    match_type=MATCH_CONTAINS,
                )
                existing_terms.add(term.lower())
                count += 1

        self.cache.invalidate(household_id)
        logger.info("Seeded %d default rules for household %s", count, household_id)
        return count
