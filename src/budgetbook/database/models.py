"""SQLAlchemy models for budgetbook database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Boolean,
    Float,
    UniqueConstraint,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class Household(Base):
    """Household (tenant) model."""

    __tablename__ = "households"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    entities = relationship("Entity", back_populates="household", cascade="all, delete-orphan")


class Entity(Base):
    """Personal or business sub-ledger model."""

    __tablename__ = "entities"

    id = Column(Integer, primary_key=True)
    household_id = Column(Integer, ForeignKey("households.id"), nullable=False)
    name = Column(String, nullable=False)
    entity_type = Column(String, nullable=False, default="personal")
    tax_rate_percent = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, default=_now, nullable=False)

    household = relationship("Household", back_populates="entities")
    accounts = relationship("Account", back_populates="entity", cascade="all, delete-orphan")


class Category(Base):
    """Category model with hierarchical structure (roots are groups)."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    household_id = Column(Integer, ForeignKey("households.id"), nullable=False)
    entity_id = Column(Integer, ForeignKey("entities.id"), nullable=True)
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    name = Column(String, nullable=False)
    is_owner_draw = Column(Boolean, default=False, nullable=False)
    archived = Column(Boolean, default=False, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    parent = relationship("Category", remote_side=[id], backref="children")


class BudgetMonth(Base):
    """Budget month model."""

    __tablename__ = "budget_months"

    id = Column(Integer, primary_key=True)
    household_id = Column(Integer, ForeignKey("households.id"), nullable=False)
    entity_id = Column(Integer, ForeignKey("entities.id"), nullable=False)
    month = Column(String(7), nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("household_id", "entity_id", "month", name="uq_budget_month"),
    )


class Account(Base):
    """Bank account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    entity_id = Column(Integer, ForeignKey("entities.id"), nullable=False)
    name = Column(String, nullable=False)
    account_type = Column(String, nullable=False, default="checking")
    balance_cents = Column(Integer, nullable=False, default=0)
    archived = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    entity = relationship("Entity", back_populates="accounts")


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    household_id = Column(Integer, ForeignKey("households.id"), nullable=False)
    entity_id = Column(Integer, ForeignKey("entities.id"), nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    budget_month_id = Column(Integer, ForeignKey("budget_months.id"), nullable=False)
    date = Column(Date, nullable=False)
    amount_cents = Column(Integer, nullable=False)
    type = Column(String, nullable=False)
    payee = Column(String, nullable=False)
    memo = Column(String, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    is_transfer = Column(Boolean, default=False, nullable=False)
    created_by_user_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    __table_args__ = (Index("ix_transactions_household_date", "household_id", "date"),)


class TransactionRule(Base):
    """Auto-categorization rule model."""

    __tablename__ = "transaction_rules"

    id = Column(Integer, primary_key=True)
    household_id = Column(Integer, ForeignKey("households.id"), nullable=False)
    search_term = Column(String, nullable=False)
    match_type = Column(String, nullable=False, default="contains")
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    category = relationship("Category")


class LinkedTransfer(Base):
    """Link between a source transaction and its mirror in another entity."""

    __tablename__ = "linked_transfers"

    id = Column(Integer, primary_key=True)
    from_transaction_id = Column(
        Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False
    )
    to_transaction_id = Column(
        Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False
    )
    transfer_type = Column(String, nullable=False, default="owner_draw")
    created_at = Column(DateTime, default=_now, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
