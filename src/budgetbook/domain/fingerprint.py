"""Transaction fingerprinting for duplicate detection.

A fingerprint is the SHA-256 of ``date|amount_cents|payee`` with the payee
normalized. The same function is used when a CSV row is parsed and when
stored transactions are compared, so both sides always agree.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import date, timedelta
from typing import Iterable, Optional

from budgetbook.database.base import Database
from budgetbook.domain.entities import ParsedTransaction

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 90


def normalize_payee(payee: str | None) -> str:
    """Trim, collapse internal whitespace and lowercase a payee."""
    if not payee:
        return ""
    return " ".join(payee.split()).lower()


def fingerprint(txn_date: date | str, amount_cents: int, payee: str | None) -> str:
    """Generate a stable transaction fingerprint.

    Args:
        txn_date: Transaction date or ISO date string
        amount_cents: Non-negative amount in cents
        payee: Payee text (normalized before hashing)

    Returns:
        SHA-256 hex digest string
    """
    if isinstance(txn_date, date):
        txn_date = txn_date.isoformat()
    data = f"{txn_date}|{int(amount_cents)}|{normalize_payee(payee)}"
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


class DuplicateDetector:
    """Flags parsed transactions that already exist in recent history."""

    def __init__(self, db: Database, window_days: int = DEFAULT_WINDOW_DAYS):
        """Initialize duplicate detector.

        Args:
            db: Database instance
            window_days: How far back stored transactions are compared
        """
        self.db = db
        self.window_days = window_days

    def load_recent_fingerprints(self, household_id: int, as_of: Optional[date] = None) -> set[str]:
        """Fingerprints of the household's transactions in the lookback window.

        Args:
            household_id: Household to scan
            as_of: Reference date for the window (defaults to today)

        Returns:
            Set of fingerprint hashes
        """
        as_of = as_of or date.today()
        since = as_of - timedelta(days=self.window_days)
        transactions = self.db.list_transactions(household_id=household_id, start_date=since)
        hashes = {fingerprint(txn.date, txn.amount_cents, txn.payee) for txn in transactions}
        logger.debug(
            "Loaded %d fingerprints for household %s since %s", len(hashes), household_id, since
        )
        return hashes

    def partition(
        self,
        household_id: int,
        transactions: Iterable[ParsedTransaction],
        as_of: Optional[date] = None,
    ) -> tuple[list[ParsedTransaction], list[ParsedTransaction]]:
        """Split parsed transactions into (new, duplicates)."""
        existing = self.load_recent_fingerprints(household_id, as_of=as_of)

        new_transactions = []
        duplicates = []
        for txn in transactions:
            if txn.fingerprint in existing:
                duplicates.append(txn)
            else:
                new_transactions.append(txn)

        return new_transactions, duplicates
