"""Domain model entities for budgetbook.

These are pure data classes representing business concepts, independent of
database schema. Services receive and return these; the ORM models never
leave the database layer.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from typing import Optional

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

PERSONAL = "personal"
BUSINESS = "business"
ENTITY_TYPES = (PERSONAL, BUSINESS)

ACCOUNT_TYPES = ("checking", "savings", "credit", "cash")

MATCH_EXACT = "exact"
MATCH_CONTAINS = "contains"
MATCH_TYPES = (MATCH_EXACT, MATCH_CONTAINS)

OWNER_DRAW = "owner_draw"


@dataclass(frozen=True)
class Household:
    """Top-level tenant."""

    id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class Entity:
    """Personal or business sub-ledger within a household."""

    id: int
    household_id: int
    name: str
    entity_type: str
    tax_rate_percent: float
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Category domain entity with hierarchical structure.

    Root categories act as groups; transactions are normally assigned to
    their children.
    """

    id: int
    household_id: int
    entity_id: Optional[int]
    parent_id: Optional[int]
    name: str
    is_owner_draw: bool
    archived: bool
    sort_order: int
    created_at: datetime


@dataclass(frozen=True)
class BudgetMonth:
    """Household+entity scoped period record."""

    id: int
    household_id: int
    entity_id: int
    month: str
    created_at: datetime


@dataclass(frozen=True)
class Account:
    """Bank account domain entity."""

    id: int
    entity_id: int
    name: str
    account_type: str
    balance_cents: int
    archived: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``amount_cents`` is always a non-negative magnitude; ``type`` carries
    the direction.
    """

    id: int
    household_id: int
    entity_id: int
    account_id: Optional[int]
    budget_month_id: int
    date: date
    amount_cents: int
    type: str
    payee: str
    memo: Optional[str]
    category_id: Optional[int]
    is_transfer: bool
    created_by_user_id: Optional[int]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class CategorizationRule:
    """Household-scoped payee matching rule."""

    id: int
    household_id: int
    search_term: str
    match_type: str
    category_id: int
    category_name: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class LinkedTransfer:
    """Mirrored pair of transactions across two entities of one household."""

    id: int
    from_transaction_id: int
    to_transaction_id: int
    transfer_type: str
    created_at: datetime


@dataclass
class ParsedTransaction:
    """Transaction read from a CSV file, not yet persisted."""

    date: str
    amount_cents: int
    type: str
    payee: str
    fingerprint: str
    raw_row: list[str] = field(default_factory=list)
    memo: Optional[str] = None
    category_id: Optional[int] = None

    def to_dict(self) -> dict:
        """Serialize for staging storage."""
        return {
            "date": self.date,
            "amount_cents": self.amount_cents,
            "type": self.type,
            "payee": self.payee,
            "fingerprint": self.fingerprint,
            "raw_row": list(self.raw_row),
            "memo": self.memo,
            "category_id": self.category_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ParsedTransaction":
        """Rebuild from :meth:`to_dict` output."""
        return cls(
            date=data["date"],
            amount_cents=int(data["amount_cents"]),
            type=data["type"],
            payee=data["payee"],
            fingerprint=data["fingerprint"],
            raw_row=list(data.get("raw_row") or []),
            memo=data.get("memo"),
            category_id=data.get("category_id"),
        )
