"""Utility functions for budgetbook."""

from budgetbook.utils.date_parser import parse_date, parse_user_date
from budgetbook.utils.amount_parser import (
    parse_money,
    parse_amount_with_accounting_notation,
    format_cents,
)

__all__ = [
    "parse_date",
    "parse_user_date",
    "parse_money",
    "parse_amount_with_accounting_notation",
    "format_cents",
]
