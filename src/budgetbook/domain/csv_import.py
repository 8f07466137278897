"""CSV import domain service.

An import runs in two steps. :meth:`ImportService.preview` parses a staged
file, sets aside rows already in the ledger and suggests categories; the
result is kept in a :class:`StagingStore` under a fresh import id.
:meth:`ImportService.confirm` then writes the chosen rows in a single
database transaction.
"""

import logging
import shutil
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

from budgetbook.database.base import Database
from budgetbook.domain.categorization import AutoCategorizationService
from budgetbook.domain.category import CategoryService
from budgetbook.domain.csv_parser import AUTO, CsvParserService
from budgetbook.domain.entities import ParsedTransaction
from budgetbook.domain.errors import (
    ImportFailedError,
    NotFoundError,
    ValidationError,
    entity_not_found,
    account_not_found,
)
from budgetbook.domain.fingerprint import DuplicateDetector
from budgetbook.domain.staging import TEMP_PATH_KEY, StagingStore
from budgetbook.domain.transaction import TransactionService
from budgetbook.utils.date_parser import month_of

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = ("csv", "txt")
IMPORT_MEMO = "Imported from CSV"

INVALID_UPLOAD = "Please upload a valid CSV file."
INVALID_EXTENSION = "Only CSV files are allowed."
NOTHING_STAGED = "No transactions to import. Please upload a file first."
OTHER_HOUSEHOLD = "This import was previewed for another household."


@dataclass
class PreviewResult:
    """What an import would do, shown before confirming."""

    import_id: str
    transactions: list[ParsedTransaction] = field(default_factory=list)
    duplicates: list[ParsedTransaction] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    format_name: str = "Unknown"
    categories: dict[int, str] = field(default_factory=dict)
    skipped_rows: int = 0

    @property
    def total_new(self) -> int:
        return len(self.transactions)

    @property
    def total_duplicates(self) -> int:
        return len(self.duplicates)


@dataclass
class ImportResult:
    """Outcome of a confirmed import."""

    imported: int
    transaction_ids: list[int]
    first_month: Optional[str]


def _override_category(value: Any) -> Optional[int]:
    """Form-style category override: None, 0 or '' clear it."""
    if value is None or value == "" or str(value).strip() in ("", "0"):
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid category '{value}'") from e


class ImportService:
    """Service for importing bank CSV files."""

    def __init__(
        self,
        db: Database,
        staging: StagingStore,
        parser: Optional[CsvParserService] = None,
        categorizer: Optional[AutoCategorizationService] = None,
        detector: Optional[DuplicateDetector] = None,
    ):
        """Initialize import service.

        Args:
            db: Database instance
            staging: Store holding previews until confirmed or discarded
            parser: CSV parser (default: new CsvParserService)
            categorizer: Rule engine used for suggestions
            detector: Duplicate detector (default: 90 day window)
        """
        self.db = db
        self.staging = staging
        self.parser = parser or CsvParserService()
        self.categorizer = categorizer or AutoCategorizationService(db)
        self.detector = detector or DuplicateDetector(db)
        self.transaction_service = TransactionService(db)
        self.category_service = CategoryService(db)

    def stage_upload(self, source_path: str | Path, filename: Optional[str] = None) -> str:
        """Copy an uploaded file into the staging area.

        Args:
            source_path: Path of the uploaded file
            filename: Original client filename, used for the extension check;
                defaults to the source file's name

        Returns:
            Path of the staged copy

        Raises:
            ValidationError: If the file is missing or not a CSV/TXT file
        """
        source = Path(source_path) if source_path else None
        if source is None or not source.is_file():
            raise ValidationError(INVALID_UPLOAD)

        extension = Path(filename or source.name).suffix.lower().lstrip(".")
        if extension not in ALLOWED_EXTENSIONS:
            raise ValidationError(INVALID_EXTENSION)

        target = self.staging.upload_dir / f"import_{uuid.uuid4().hex}.csv"
        shutil.copyfile(source, target)
        return str(target)

    def preview(
        self,
        file_path: str | Path,
        household_id: int,
        entity_id: int,
        format_id: str = AUTO,
        account_id: Optional[int] = None,
        filename: Optional[str] = None,
    ) -> PreviewResult:
        """Parse a file and stage the rows that are not yet imported.

        Args:
            file_path: Uploaded CSV file
            household_id: Household importing the file
            entity_id: Entity the rows will belong to
            format_id: Bank format id or 'auto'
            account_id: Optional account the rows are posted to
            filename: Original client filename

        Returns:
            PreviewResult carrying the import id to pass to :meth:`confirm`

        Raises:
            ValidationError: If the upload is missing or not a CSV file
            NotFoundError: If entity or account is not in scope
        """
        entity = self.db.get_entity(entity_id)
        if entity is None or entity.household_id != household_id:
            raise NotFoundError(entity_not_found(entity_id))
        if account_id is not None:
            account = self.db.get_account(account_id)
            if account is None or account.entity_id != entity_id:
                raise NotFoundError(account_not_found(account_id))

        temp_path = self.stage_upload(file_path, filename)
        parsed = self.parser.parse_file(temp_path, format_id)

        new_transactions, duplicates = self.detector.partition(household_id, parsed.transactions)
        for txn in new_transactions:
            txn.category_id = self.categorizer.match(household_id, txn.payee)

        import_id = uuid.uuid4().hex
        self.staging.put(
            import_id,
            {
                "transactions": [txn.to_dict() for txn in new_transactions],
                TEMP_PATH_KEY: temp_path,
                "household_id": household_id,
                "entity_id": entity_id,
                "account_id": account_id,
            },
        )

        categories = {
            cat.id: self.category_service.format_category_path(cat.id)
            for cat in self.category_service.list_categories(household_id)
        }

        logger.info(
            "Staged import %s: %d new, %d duplicates, %d errors",
            import_id,
            len(new_transactions),
            len(duplicates),
            len(parsed.errors),
        )
        return PreviewResult(
            import_id=import_id,
            transactions=new_transactions,
            duplicates=duplicates,
            errors=parsed.errors,
            format_name=parsed.format_name or "Unknown",
            categories=categories,
            skipped_rows=parsed.skipped_rows,
        )

    def confirm(
        self,
        import_id: str,
        selected: Optional[Iterable[int]] = None,
        category_overrides: Optional[dict[int, Any]] = None,
        created_by: Optional[int] = None,
        household_id: Optional[int] = None,
    ) -> ImportResult:
        """Write staged rows as transactions.

        Args:
            import_id: Id returned by :meth:`preview`
            selected: Row indices to import; all rows when empty or None.
                Indices outside the staged list are ignored.
            category_overrides: Row index to category id. None, 0 or ''
                clears the suggestion; rows not listed keep it.
            created_by: Optional user ID
            household_id: If given, must be the household the preview was
                made for

        Returns:
            ImportResult with the new transaction ids

        Raises:
            ValidationError: If nothing is staged under the id, or it was
                staged for a different household
            ImportFailedError: If writing fails; nothing is written and the
                staged rows are kept for another attempt
        """
        staged = self.staging.get(import_id)
        if not staged or not staged.get("transactions"):
            raise ValidationError(NOTHING_STAGED)
        if household_id is not None and staged.get("household_id") != household_id:
            raise ValidationError(OTHER_HOUSEHOLD)

        rows = [ParsedTransaction.from_dict(item) for item in staged["transactions"]]
        indices = list(selected) if selected else list(range(len(rows)))
        overrides = category_overrides or {}

        transaction_ids = []
        first_month = None
        try:
            with self.db.transaction():
                seen = set()
                for index in indices:
                    index = int(index)
                    if index in seen or not 0 <= index < len(rows):
                        continue
                    seen.add(index)

                    row = rows[index]
                    if index in overrides:
                        category_id = _override_category(overrides[index])
                    else:
                        category_id = row.category_id

                    transaction_ids.append(
                        self.transaction_service.create_transaction(
                            household_id=staged["household_id"],
                            entity_id=staged["entity_id"],
                            date=row.date,
                            amount_cents=row.amount_cents,
                            type=row.type,
                            payee=row.payee,
                            memo=IMPORT_MEMO,
                            category_id=category_id,
                            account_id=staged.get("account_id"),
                            created_by=created_by,
                            imported=True,
                        )
                    )
                    if first_month is None:
                        first_month = month_of(row.date)
        except Exception as e:
            logger.exception("Import %s failed", import_id)
            raise ImportFailedError(f"Import failed: {e}") from e

        self._cleanup(import_id, staged)
        logger.info("Imported %d transactions from %s", len(transaction_ids), import_id)
        return ImportResult(
            imported=len(transaction_ids),
            transaction_ids=transaction_ids,
            first_month=first_month,
        )

    def discard(self, import_id: str) -> bool:
        """Drop a staged import and its uploaded file.

        Returns:
            True if something was staged under the id
        """
        staged = self.staging.get(import_id)
        if staged is None:
            return False
        self._cleanup(import_id, staged)
        return True

    def _cleanup(self, import_id: str, staged: dict) -> None:
        self.staging.delete(import_id)
        temp_path = staged.get(TEMP_PATH_KEY)
        if temp_path:
            Path(temp_path).unlink(missing_ok=True)
