"""
Pydantic schemas for CSV imports.

Normalized rows reference accounts and categories by name; the
ImportService resolves names to ids before touching the ledger.
Amounts here are major units (e.g. 12.50), not cents.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from finance_tracker.models.enums import ImportStatus, TransactionType


class NormalizedImportRow(BaseModel):
    transaction_type: TransactionType
    date: int
    description: str | None = None
    amount: Decimal | None = None
    amount_sent: Decimal | None = None
    amount_received: Decimal | None = None
    account_id: str | None = None
    account_name: str | None = None
    account_currency: str | None = None
    from_account_id: str | None = None
    from_account_name: str | None = None
    from_account_currency: str | None = None
    to_account_id: str | None = None
    to_account_name: str | None = None
    to_account_currency: str | None = None
    category_id: str | None = None
    category_name: str | None = None


class ImportErrorDetail(BaseModel):
    row_index: int
    code: str
    message: str
    row_sample: dict | None = None


class ImportSummary(BaseModel):
    success_count: int = 0
    error_count: int = 0
    new_accounts: int = 0
    new_categories: int = 0
    new_account_names: list[str] = Field(default_factory=list)
    new_category_names: list[str] = Field(default_factory=list)
    processed_rows: int = 0
    error_details: list[ImportErrorDetail] = Field(default_factory=list)
    error_stats: dict[str, int] = Field(default_factory=dict)


# --- Request Schemas ---

class ImportRequest(BaseModel):
    """Already-normalized rows, ready for the ledger."""
    rows: list[NormalizedImportRow] = Field(min_length=1)
    source: str = Field(default="csv", max_length=50)
    default_currency: str | None = Field(default=None, min_length=3, max_length=3)


class ImportPreviewRequest(BaseModel):
    """Raw CSV rows (header -> cell) to run through a profile."""
    profile: str | None = None
    rows: list[dict[str, str]] = Field(min_length=1)
    mapping: dict[str, str] | None = None
    default_currency: str | None = Field(default=None, min_length=3, max_length=3)


class CsvImportRequest(BaseModel):
    profile: str | None = None
    content: str = Field(min_length=1)
    mapping: dict[str, str] | None = None
    default_currency: str | None = Field(default=None, min_length=3, max_length=3)


# --- Response Schemas ---

class ImportPreviewResponse(BaseModel):
    profile: str
    mapping: dict[str, str]
    rows: list[NormalizedImportRow]
    errors: list[ImportErrorDetail]


class ImportJobResponse(BaseModel):
    id: str
    source: str
    status: ImportStatus
    summary: ImportSummary | None = None
    created_at: int
    updated_at: int


class ImportProfileResponse(BaseModel):
    id: str
    label: str
    description: str | None
    delimiter: str
    fields: list[str]
