"""
Ledger and import error types.

Every input error is a ValueError subclass, so callers can keep
catching ValueError at the HTTP boundary and turn it into a 4xx.
Storage failures are never wrapped: SQLAlchemy errors propagate
unchanged after the atomic unit rolls back.
"""

from datetime import datetime, timezone


class LedgerError(ValueError):
    """Base class for user-correctable ledger input errors."""


class InvalidAmountError(LedgerError):
    def __init__(self, field: str, value=None, message: str | None = None):
        self.field = field
        self.value = value
        super().__init__(
            message or f"{field} must be greater than zero (got {value!r})"
        )


class AccountNotFoundError(LedgerError):
    """Raised for missing accounts and for accounts owned by someone else."""

    def __init__(self, account_id: str | None):
        self.account_id = account_id
        if account_id is None:
            super().__init__("Account is required for this operation")
        else:
            super().__init__(f"Account {account_id} not found")


class CategoryNotFoundError(LedgerError):
    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Category {category_id} not found")


class InvalidTransferError(LedgerError):
    pass


class EntryNotFoundError(LedgerError):
    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Transaction {entry_id} not found")


class BalanceAdjustmentError(RuntimeError):
    """A balance update matched no row after validation passed."""


# --- Import errors ---

class ImportRowError(LedgerError):
    """A single import row could not be normalized."""

    def __init__(self, code: str, message: str):
        self.code = code
        super().__init__(message)


class ReconciliationError(LedgerError):
    """A transfer leg could not be paired with its counterpart."""

    def __init__(
        self,
        account: str,
        other_account: str,
        date: int,
        row_index: int | None = None,
    ):
        self.account = account
        self.other_account = other_account
        self.date = date
        self.row_index = row_index
        super().__init__(
            f"Unpaired transfer between {account} and {other_account} "
            f"on {format_date_label(date)}"
        )


def format_date_label(value: int) -> str:
    """Render epoch millis as YYYY-MM-DD (UTC)."""
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc).strftime(
        "%Y-%m-%d"
    )
