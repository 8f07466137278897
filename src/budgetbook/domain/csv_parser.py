"""Bank CSV format registry and parser.

Turns the raw bytes of a bank statement export into normalized
:class:`ParsedTransaction` records. Row-level problems are collected as
messages; only structural problems (no data, missing columns) stop a parse,
and even then a result is returned rather than an exception raised.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from budgetbook.domain.entities import ParsedTransaction, INCOME, EXPENSE
from budgetbook.domain.errors import NotFoundError
from budgetbook.domain.fingerprint import fingerprint
from budgetbook.utils.amount_parser import parse_amount_with_accounting_notation
from budgetbook.utils.date_parser import parse_date

logger = logging.getLogger(__name__)

AUTO = "auto"
GENERIC = "generic"
MAX_PAYEE_LENGTH = 200


@dataclass(frozen=True)
class BankFormat:
    """Column layout of one bank's CSV export."""

    format_id: str
    name: str
    date_column: str
    alt_date_columns: tuple[str, ...]
    amount_column: str
    alt_amount_columns: tuple[str, ...]
    description_column: str
    alt_description_columns: tuple[str, ...]
    date_format: str


BANK_FORMATS: dict[str, BankFormat] = {
    "corning_cu": BankFormat(
        format_id="corning_cu",
        name="Corning Credit Union",
        date_column="Date",
        alt_date_columns=("Transaction Date", "Posted Date", "Posting Date"),
        amount_column="Amount",
        alt_amount_columns=("Transaction Amount",),
        description_column="Description",
        alt_description_columns=("Memo", "Transaction Description"),
        date_format="%m/%d/%Y",
    ),
    "visions_cu": BankFormat(
        format_id="visions_cu",
        name="Visions Credit Union",
        date_column="Date",
        alt_date_columns=("Trans Date", "Posted Date", "Transaction Date"),
        amount_column="Amount",
        alt_amount_columns=("Transaction Amount", "Debit", "Credit"),
        description_column="Description",
        alt_description_columns=("Memo", "Payee", "Transaction Description"),
        date_format="%m/%d/%Y",
    ),
    GENERIC: BankFormat(
        format_id=GENERIC,
        name="Generic CSV",
        date_column="Date",
        alt_date_columns=("Transaction Date", "Posted Date", "Trans Date", "Posting Date"),
        amount_column="Amount",
        alt_amount_columns=("Transaction Amount", "Debit", "Credit"),
        description_column="Description",
        alt_description_columns=("Memo", "Payee", "Name"),
        date_format="%Y-%m-%d",
    ),
}


@dataclass
class ParseResult:
    """Outcome of parsing one CSV file."""

    transactions: list[ParsedTransaction] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    detected_format: Optional[str] = None
    format_name: Optional[str] = None
    headers: list[str] = field(default_factory=list)
    skipped_rows: int = 0


def clean_description(description: str) -> str:
    """Collapse whitespace, trim and truncate payee text."""
    cleaned = " ".join(description.split())
    if len(cleaned) > MAX_PAYEE_LENGTH:
        cleaned = cleaned[: MAX_PAYEE_LENGTH - 3] + "..."
    return cleaned


def find_column(headers: Sequence[str], primary: str, alternates: Sequence[str]) -> Optional[int]:
    """Index of the first header matching primary, then each alternate."""
    headers_lower = [h.lower() for h in headers]
    for candidate in (primary, *alternates):
        try:
            return headers_lower.index(candidate.lower())
        except ValueError:
            continue
    return None


class CsvParserService:
    """Service for parsing bank CSV exports."""

    def get_formats(self) -> dict[str, str]:
        """Format ids and display names for pickers, 'auto' first."""
        formats = {AUTO: "Auto-detect"}
        for format_id, bank_format in BANK_FORMATS.items():
            formats[format_id] = bank_format.name
        return formats

    def detect_format(self, headers: Sequence[str]) -> str:
        """Guess the bank format from a header row.

        Args:
            headers: Header cells

        Returns:
            Format id ('corning_cu', 'visions_cu' or 'generic')
        """
        headers_lower = {h.strip().lower() for h in headers}

        if "check number" in headers_lower or "share id" in headers_lower:
            return "corning_cu"

        if "account" in headers_lower and "balance" in headers_lower:
            return "visions_cu"

        return GENERIC

    def parse_file(self, file_path: str | Path, format_id: str = AUTO) -> ParseResult:
        """Parse a CSV file from disk.

        Raises:
            NotFoundError: If the file does not exist
        """
        path = Path(file_path)
        if not path.is_file():
            raise NotFoundError(f"File not found: {file_path}")
        return self.parse(path.read_bytes(), format_id)

    def parse(self, content: bytes | str, format_id: str = AUTO) -> ParseResult:
        """Parse CSV content into normalized transactions.

        Args:
            content: Raw file bytes or already-decoded text
            format_id: Format id from :meth:`get_formats`, or 'auto'

        Returns:
            ParseResult with transactions, row/structural errors, the format
            used and the header row
        """
        rows = self._tokenize(content)

        if len(rows) < 2:
            return ParseResult(errors=["File is empty or has no data rows"])

        headers = [h.strip() for h in rows[0]]
        data_rows = rows[1:]

        if format_id == AUTO:
            format_id = self.detect_format(headers)

        bank_format = BANK_FORMATS.get(format_id)
        if bank_format is None:
            logger.debug("Unknown format '%s', using generic", format_id)
            bank_format = BANK_FORMATS[GENERIC]
        format_id = bank_format.format_id

        date_col = find_column(headers, bank_format.date_column, bank_format.alt_date_columns)
        amount_col = find_column(headers, bank_format.amount_column, bank_format.alt_amount_columns)
        desc_col = find_column(
            headers, bank_format.description_column, bank_format.alt_description_columns
        )

        result = ParseResult(
            detected_format=format_id,
            format_name=bank_format.name,
            headers=headers,
        )

        if date_col is None:
            result.errors.append("Could not find date column")
        if amount_col is None:
            result.errors.append("Could not find amount column")
        if desc_col is None:
            result.errors.append("Could not find description column")
        if result.errors:
            return result

        min_fields = max(date_col, amount_col, desc_col) + 1

        # Row 1 is the header
        for row_num, row in enumerate(data_rows, start=2):
            if len(row) < min_fields:
                result.skipped_rows += 1
                continue

            date_str = row[date_col].strip()
            amount_str = row[amount_col].strip()
            description = row[desc_col].strip()

            if not date_str or not amount_str:
                result.skipped_rows += 1
                continue

            txn_date = parse_date(date_str, bank_format.date_format)
            if txn_date is None:
                result.errors.append(f"Row {row_num}: Invalid date format '{date_str}'")
                continue

            signed_cents = parse_amount_with_accounting_notation(amount_str)
            txn_type = INCOME if signed_cents >= 0 else EXPENSE
            amount_cents = abs(signed_cents)
            payee = clean_description(description)

            result.transactions.append(
                ParsedTransaction(
                    date=txn_date,
                    amount_cents=amount_cents,
                    type=txn_type,
                    payee=payee,
                    fingerprint=fingerprint(txn_date, amount_cents, payee),
                    raw_row=list(row),
                )
            )

        logger.info(
            "Parsed %d transactions as %s (%d errors, %d skipped rows)",
            len(result.transactions),
            format_id,
            len(result.errors),
            result.skipped_rows,
        )
        return result

    def _tokenize(self, content: bytes | str) -> list[list[str]]:
        """Split CSV content into rows, honoring quoted fields."""
        if isinstance(content, bytes):
            content = content.decode("utf-8-sig", errors="replace")
        elif content.startswith("\ufeff"):
            content = content[1:]

        content = content.replace("\r\n", "\n").replace("\r", "\n")
        reader = csv.reader(io.StringIO(content, newline=""))
        # Blank lines come back as empty lists
        return [row for row in reader if row]
