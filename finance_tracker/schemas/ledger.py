"""
Pydantic schemas for ledger operations.

These define the API contract. Amounts are integer minor units
(cents). Positivity and account rules are enforced by the
LedgerService rather than here, so the service reports them
with its own error types whichever way it is called.
"""

from pydantic import BaseModel, Field

from finance_tracker.models.base import now_ms
from finance_tracker.models.enums import (
    TransactionType,
    ExpenseType,
    IncomeType,
    SortDirection,
)


DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100

# Amounts and dates are stored as signed 64-bit integers
MAX_INT64 = 2**63 - 1


# --- Request Schemas ---

class LedgerEntryCreate(BaseModel):
    """Parameters for a new expense, income or transfer."""
    transaction_type: TransactionType
    account_id: str | None = None
    from_account_id: str | None = None
    to_account_id: str | None = None
    category_id: str | None = None
    amount_cents: int | None = None
    amount_sent_cents: int | None = None
    amount_received_cents: int | None = None
    date: int = Field(default_factory=now_ms, ge=-MAX_INT64, le=MAX_INT64)
    description: str | None = Field(default=None, max_length=500)
    expense_type: ExpenseType | None = None
    income_type: IncomeType | None = None


class LedgerEntryUpdate(BaseModel):
    """
    Partial update. Only fields explicitly present in the
    request are applied; everything else keeps its stored value.
    """
    transaction_type: TransactionType | None = None
    account_id: str | None = None
    from_account_id: str | None = None
    to_account_id: str | None = None
    category_id: str | None = None
    amount_cents: int | None = None
    amount_sent_cents: int | None = None
    amount_received_cents: int | None = None
    date: int | None = Field(default=None, ge=-MAX_INT64, le=MAX_INT64)
    description: str | None = Field(default=None, max_length=500)
    expense_type: ExpenseType | None = None
    income_type: IncomeType | None = None


class LedgerFilters(BaseModel):
    """Filters and keyset cursor for listing entries."""
    account_id: str | None = None
    category_id: str | None = None
    transaction_type: TransactionType | None = None
    start_date: int | None = None
    end_date: int | None = None
    # date of the last item on the previous page
    cursor: int | None = None
    limit: int | None = None
    sort: SortDirection = SortDirection.DESC

    def page_size(self) -> int:
        if self.limit is None:
            return DEFAULT_PAGE_SIZE
        return min(max(self.limit, 1), MAX_PAGE_SIZE)


# --- Response Schemas ---

class LedgerEntryResponse(BaseModel):
    id: str
    user_id: str
    transaction_type: TransactionType
    account_id: str | None
    from_account_id: str | None
    to_account_id: str | None
    category_id: str | None
    amount_cents: int | None
    amount_sent_cents: int | None
    amount_received_cents: int | None
    date: int
    description: str | None
    expense_type: ExpenseType | None
    income_type: IncomeType | None
    created_at: int
    updated_at: int

    model_config = {"from_attributes": True}


class LedgerPageResponse(BaseModel):
    items: list[LedgerEntryResponse]
    has_more: bool
    next_cursor: int | None

    model_config = {"from_attributes": True}
