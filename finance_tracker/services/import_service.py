"""
Import service: feeds normalized rows into the ledger.

Each import run:
1. Runs raw CSV rows through an import profile (mapping,
   per-row normalization, batch finalize / transfer pairing)
2. Resolves account and category names to ids, creating the
   missing ones with default icon, color and currency
3. Creates one ledger entry per row through LedgerService
4. Records the run and its summary as an ImportJob

Rows commit one at a time: a failing row is tallied and skipped,
and rows already imported stay committed. Storage errors are not
row errors and abort the run.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from sqlalchemy.orm import Session

from finance_tracker.config import get_settings
from finance_tracker.models.account import Account
from finance_tracker.models.base import atomic
from finance_tracker.models.category import Category
from finance_tracker.models.enums import (
    CategoryType,
    ExpenseType,
    ImportStatus,
    IncomeType,
    TransactionType,
)
from finance_tracker.repositories.accounts import AccountRepository
from finance_tracker.repositories.categories import CategoryRepository
from finance_tracker.repositories.imports import ImportJobRepository
from finance_tracker.schemas.account import (
    AccountCreate,
    CategoryCreate,
    DEFAULT_ACCOUNT_ICON,
    DEFAULT_ACCOUNT_TYPE,
    DEFAULT_CATEGORY_ICON,
)
from finance_tracker.schemas.imports import (
    ImportErrorDetail,
    ImportSummary,
    NormalizedImportRow,
)
from finance_tracker.schemas.ledger import LedgerEntryCreate
from finance_tracker.services.errors import (
    AccountNotFoundError,
    CategoryNotFoundError,
    ImportRowError,
    InvalidAmountError,
    LedgerError,
)
from finance_tracker.services.import_profiles import (
    ImportProfile,
    get_import_profile,
)
from finance_tracker.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

# Cycled through for accounts and categories created by an import
COLOR_OPTIONS = [
    "hsl(12 76% 61%)",
    "hsl(173 58% 39%)",
    "hsl(197 37% 24%)",
    "hsl(43 74% 66%)",
    "hsl(27 87% 67%)",
    "hsl(220 70% 50%)",
    "hsl(160 60% 45%)",
    "hsl(280 65% 60%)",
]

SAMPLE_FIELDS = (
    "transaction_type",
    "date",
    "amount",
    "amount_sent",
    "amount_received",
    "account_name",
    "from_account_name",
    "to_account_name",
    "category_name",
)


def to_cents(value: Decimal) -> int:
    """Major units to integer minor units, rounding half up."""
    try:
        cents = (Decimal(value) * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ImportRowError("invalid_amount", f"Amount {value} is out of range.")
    return int(cents)


def normalize_currency(value: str | None, fallback: str) -> str:
    return (value or fallback).strip().upper()


def _ensure_positive(value) -> Decimal:
    if value is None:
        raise ImportRowError("invalid_amount", "Amount must be greater than zero.")
    amount = Decimal(value)
    if not amount.is_finite() or amount <= 0:
        raise ImportRowError("invalid_amount", "Amount must be greater than zero.")
    return amount


def _error_code(error: Exception) -> str:
    if isinstance(error, ImportRowError):
        return error.code
    if isinstance(error, AccountNotFoundError):
        return "missing_account"
    if isinstance(error, CategoryNotFoundError):
        return "missing_category"
    if isinstance(error, InvalidAmountError):
        return "invalid_amount"
    if isinstance(error, LedgerError):
        return "transaction_service_error"
    return "unknown"


@dataclass
class PreparedImport:
    profile: ImportProfile
    mapping: dict[str, str]
    rows: list[NormalizedImportRow]
    errors: list[ImportErrorDetail]


@dataclass
class ImportContext:
    """
    State for a single import run.

    Holds the name caches, the color cursor and the summary
    counters. Created per run and never shared between runs.
    """
    user_id: str
    default_currency: str
    max_error_details: int
    summary: ImportSummary = field(default_factory=ImportSummary)
    accounts_by_id: dict[str, Account] = field(default_factory=dict)
    accounts_by_name: dict[str, Account] = field(default_factory=dict)
    categories_by_id: dict[str, Category] = field(default_factory=dict)
    categories_by_name: dict[str, Category] = field(default_factory=dict)
    color_cursor: int = 0

    def next_color(self) -> str:
        color = COLOR_OPTIONS[self.color_cursor % len(COLOR_OPTIONS)]
        self.color_cursor += 1
        return color

    def record_error(
        self,
        row_index: int,
        code: str,
        message: str,
        row: NormalizedImportRow | None = None,
    ) -> None:
        self.summary.error_count += 1
        self.summary.error_stats[code] = self.summary.error_stats.get(code, 0) + 1
        if len(self.summary.error_details) >= self.max_error_details:
            return
        sample = None
        if row is not None:
            sample = row.model_dump(mode="json", include=set(SAMPLE_FIELDS))
        self.summary.error_details.append(ImportErrorDetail(
            row_index=row_index, code=code, message=message, row_sample=sample,
        ))


class ImportService:

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()
        self.accounts = AccountRepository(db)
        self.categories = CategoryRepository(db)
        self.jobs = ImportJobRepository(db)
        self.ledger = LedgerService(db)

    # --- Normalization ---

    def prepare(
        self,
        profile_id: str | None,
        raw_rows: list[dict[str, str]],
        default_currency: str | None = None,
        mapping: dict[str, str] | None = None,
    ) -> PreparedImport:
        """
        Run raw rows through a profile.

        Row-level problems are returned as errors. An unpairable
        transfer raises ReconciliationError for the whole batch.
        """
        profile = get_import_profile(profile_id)
        currency = normalize_currency(default_currency, self.settings.DEFAULT_CURRENCY)

        if mapping is None:
            headers: list[str] = []
            for raw_row in raw_rows:
                headers.extend(h for h in raw_row if h not in headers)
            mapping = profile.infer_mapping(headers)

        mapped_rows = [profile.apply_mapping(raw_row, mapping) for raw_row in raw_rows]
        items, errors = profile.normalize_rows(mapped_rows, currency)
        rows = profile.finalize(items, currency)

        logger.info(
            "Prepared %d rows with profile %s (%d rejected)",
            len(rows), profile.id, len(errors),
        )
        return PreparedImport(profile=profile, mapping=mapping, rows=rows, errors=errors)

    # --- Name resolution ---

    def _load_context(self, user_id: str, default_currency: str) -> ImportContext:
        ctx = ImportContext(
            user_id=user_id,
            default_currency=default_currency,
            max_error_details=self.settings.IMPORT_MAX_ERROR_DETAILS,
        )
        for account in self.accounts.list(user_id):
            ctx.accounts_by_id[account.id] = account
            ctx.accounts_by_name[account.name.strip().lower()] = account
        for category in self.categories.list(user_id):
            ctx.categories_by_id[category.id] = category
            ctx.categories_by_name[category.name.strip().lower()] = category
        return ctx

    def _resolve_account(
        self,
        ctx: ImportContext,
        account_id: str | None,
        name: str | None,
        currency: str | None,
    ) -> Account:
        if account_id:
            account = ctx.accounts_by_id.get(account_id)
            if account is None:
                raise AccountNotFoundError(account_id)
            return account

        name = (name or "").strip()
        if not name:
            raise ImportRowError("missing_account", "Account name is required.")

        key = name.lower()
        if key in ctx.accounts_by_name:
            return ctx.accounts_by_name[key]

        with atomic(self.db):
            account = self.accounts.create(ctx.user_id, AccountCreate(
                name=name,
                currency=normalize_currency(currency, ctx.default_currency),
                icon=DEFAULT_ACCOUNT_ICON,
                color=ctx.next_color(),
                type=DEFAULT_ACCOUNT_TYPE,
            ))

        ctx.accounts_by_id[account.id] = account
        ctx.accounts_by_name[key] = account
        ctx.summary.new_accounts += 1
        ctx.summary.new_account_names.append(name)
        logger.info("Import created account %s for user %s", name, ctx.user_id)
        return account

    def _resolve_category(
        self,
        ctx: ImportContext,
        category_id: str | None,
        name: str | None,
        category_type: CategoryType,
    ) -> Category | None:
        if category_id:
            category = ctx.categories_by_id.get(category_id)
            if category is None:
                raise ImportRowError(
                    "missing_category", f"Category {category_id} not found."
                )
            return category

        name = (name or "").strip()
        if not name:
            return None

        key = name.lower()
        if key in ctx.categories_by_name:
            return ctx.categories_by_name[key]

        with atomic(self.db):
            category = self.categories.create(ctx.user_id, CategoryCreate(
                name=name,
                type=category_type,
                icon=DEFAULT_CATEGORY_ICON,
                color=ctx.next_color(),
            ))

        ctx.categories_by_id[category.id] = category
        ctx.categories_by_name[key] = category
        ctx.summary.new_categories += 1
        ctx.summary.new_category_names.append(name)
        return category

    # --- Row processing ---

    def _process_row(self, ctx: ImportContext, row: NormalizedImportRow) -> None:
        description = row.description or ""

        if row.transaction_type == TransactionType.TRANSFER:
            sent = _ensure_positive(
                row.amount_sent if row.amount_sent is not None else row.amount
            )
            received = _ensure_positive(
                row.amount_received if row.amount_received is not None else row.amount
            )
            source = self._resolve_account(
                ctx,
                row.from_account_id or row.account_id,
                row.from_account_name or row.account_name,
                row.from_account_currency or row.account_currency,
            )
            destination = self._resolve_account(
                ctx, row.to_account_id, row.to_account_name, row.to_account_currency,
            )
            self.ledger.create(ctx.user_id, LedgerEntryCreate(
                transaction_type=TransactionType.TRANSFER,
                from_account_id=source.id,
                to_account_id=destination.id,
                amount_sent_cents=to_cents(sent),
                amount_received_cents=to_cents(received),
                date=row.date,
                description=description,
            ))
            return

        amount = _ensure_positive(
            row.amount
            if row.amount is not None
            else row.amount_sent if row.amount_sent is not None
            else row.amount_received
        )
        account = self._resolve_account(
            ctx, row.account_id, row.account_name, row.account_currency,
        )
        category = self._resolve_category(
            ctx, row.category_id, row.category_name,
            CategoryType(row.transaction_type.value),
        )
        is_expense = row.transaction_type == TransactionType.EXPENSE
        self.ledger.create(ctx.user_id, LedgerEntryCreate(
            transaction_type=row.transaction_type,
            account_id=account.id,
            category_id=category.id if category else None,
            amount_cents=to_cents(amount),
            date=row.date,
            description=description,
            expense_type=ExpenseType.OPTIONAL if is_expense else None,
            income_type=None if is_expense else IncomeType.ACTIVE,
        ))

    def run(
        self,
        user_id: str,
        rows: list[NormalizedImportRow],
        source: str = "csv",
        default_currency: str | None = None,
        prior_errors: list[ImportErrorDetail] | None = None,
    ) -> ImportSummary:
        """
        Import normalized rows and return the run summary.

        prior_errors are rows already rejected during normalization;
        they are counted in the summary of this run.
        """
        currency = normalize_currency(default_currency, self.settings.DEFAULT_CURRENCY)
        ctx = self._load_context(user_id, currency)

        with atomic(self.db):
            job = self.jobs.create(user_id, source, ImportStatus.RUNNING)
        job_id = job.id

        for detail in prior_errors or []:
            ctx.record_error(detail.row_index, detail.code, detail.message)

        try:
            for index, row in enumerate(rows):
                try:
                    self._process_row(ctx, row)
                except ValueError as e:
                    logger.warning("Failed to import row %d: %s", index, e)
                    ctx.record_error(index, _error_code(e), str(e), row)
                    continue
                ctx.summary.success_count += 1
        except Exception:
            # A storage error aborts the run; the job must not stay RUNNING
            logger.exception("Import %s for user %s aborted", job_id, user_id)
            ctx.summary.processed_rows = (
                ctx.summary.success_count + ctx.summary.error_count
            )
            with atomic(self.db):
                self.jobs.update_status(
                    job, ImportStatus.FAILED, ctx.summary.model_dump(mode="json"),
                )
            raise

        summary = ctx.summary
        summary.processed_rows = len(rows) + len(prior_errors or [])
        status = ImportStatus.FAILED if summary.error_count else ImportStatus.COMPLETED

        with atomic(self.db):
            self.jobs.update_status(job, status, summary.model_dump(mode="json"))

        logger.info(
            "Import %s for user %s finished: %d imported, %d failed",
            job_id, user_id, summary.success_count, summary.error_count,
        )
        return summary

    def import_csv(
        self,
        user_id: str,
        content: str,
        profile_id: str | None = None,
        default_currency: str | None = None,
        mapping: dict[str, str] | None = None,
    ) -> ImportSummary:
        """Parse CSV text with the profile's delimiter and import it."""
        profile = get_import_profile(profile_id)
        raw_rows = read_csv_rows(content, profile.options.delimiter)
        if not raw_rows:
            raise ImportRowError("empty_file", "CSV file contains no data rows.")

        prepared = self.prepare(profile.id, raw_rows, default_currency, mapping)
        return self.run(
            user_id,
            prepared.rows,
            source=profile.id,
            default_currency=default_currency,
            prior_errors=prepared.errors,
        )


def read_csv_rows(content: str, delimiter: str) -> list[dict[str, str]]:
    """Read CSV text into header -> cell dicts, skipping blank lines."""
    reader = csv.DictReader(io.StringIO(content.lstrip("\ufeff")), delimiter=delimiter)
    rows = []
    for row in reader:
        cleaned = {
            (key or "").strip(): (value or "").strip()
            for key, value in row.items()
            if key is not None
        }
        if any(cleaned.values()):
            rows.append(cleaned)
    return rows
