"""Amount parsing utilities.

All amounts are handled as integer cents. Parsing is forgiving: malformed
input yields 0 instead of raising, so a bad cell never aborts an import.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

_MONEY_CHARS = re.compile(r"[^0-9.\-]")
_ACCOUNTING_CHARS = re.compile(r"[^0-9.\-()]")


def _to_cents(cleaned: str) -> int:
    """Convert a cleaned numeric string to cents, 0 when it does not parse."""
    if not cleaned:
        return 0
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return 0
    if not amount.is_finite():
        return 0
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_money(raw: str | None) -> int:
    """Parse a free-form money string into cents.

    Handles values such as:
    - "123.45"
    - "$1,234.56"
    - "-42.50"

    Args:
        raw: Money string

    Returns:
        Amount in cents, or 0 if the string is empty or malformed
    """
    if raw is None:
        return 0
    return _to_cents(_MONEY_CHARS.sub("", str(raw)))


def parse_amount_with_accounting_notation(raw: str | None) -> int:
    """Parse a signed amount, treating parenthesized values as negative.

    "(12.34)" -> -1234, "$-5.00" -> -500, "1,200.00" -> 120000.

    Args:
        raw: Amount string from a bank statement

    Returns:
        Signed amount in cents, or 0 if malformed
    """
    if raw is None:
        return 0
    cleaned = _ACCOUNTING_CHARS.sub("", str(raw))

    if cleaned.startswith("(") and cleaned.endswith(")"):
        cleaned = "-" + cleaned.strip("()")

    return _to_cents(cleaned)


def format_cents(cents: int) -> str:
    """Format cents for display, e.g. -1234 -> "-$12.34"."""
    sign = "-" if cents < 0 else ""
    return f"{sign}${abs(cents) / 100:,.2f}"
