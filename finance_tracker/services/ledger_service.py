"""
Ledger service: the core of the tracker.

This service enforces the fundamental rule:

    account.balance_cents == sum of the signed effects of every
    ledger entry that references the account

It does so by treating an entry's effect as a pure function of
its stored fields. Creating applies the effect, deleting reverts
it, and updating reverts the old effect and applies the new one.
Each of these runs inside one atomic unit: the entry row and the
balance adjustments commit together or not at all.

No other code writes balances or ledger rows directly.
"""

import logging

from sqlalchemy.orm import Session

from finance_tracker.models.account import Account
from finance_tracker.models.base import atomic
from finance_tracker.models.enums import TransactionType
from finance_tracker.models.ledger_entry import LedgerEntry
from finance_tracker.repositories.accounts import AccountRepository
from finance_tracker.repositories.categories import CategoryRepository
from finance_tracker.repositories.ledger import (
    LedgerRepository,
    LedgerPage,
    UPDATABLE_FIELDS,
)
from finance_tracker.schemas.ledger import (
    MAX_INT64,
    LedgerEntryCreate,
    LedgerEntryUpdate,
    LedgerFilters,
)
from finance_tracker.services.errors import (
    AccountNotFoundError,
    BalanceAdjustmentError,
    CategoryNotFoundError,
    EntryNotFoundError,
    InvalidAmountError,
    InvalidTransferError,
)

logger = logging.getLogger(__name__)

# Columns an update may not set to NULL
NON_NULLABLE_FIELDS = ("transaction_type", "date")

MAX_AMOUNT_CENTS = MAX_INT64


def entry_values(entry: LedgerEntry) -> dict:
    """Snapshot the effect-relevant columns of a stored entry."""
    return {name: getattr(entry, name) for name in UPDATABLE_FIELDS}


def compute_effect(values: dict) -> dict[str, int]:
    """
    Return {account_id: delta_cents} for an entry's field values.

    Expense: account loses amount. Income: account gains amount.
    Transfer: source loses the sent amount, destination gains the
    received amount. Pure: the same values always give the same
    deltas.
    """
    effects: dict[str, int] = {}

    def add(account_id, delta):
        if account_id and delta:
            effects[account_id] = effects.get(account_id, 0) + delta

    kind = values.get("transaction_type")
    amount = values.get("amount_cents") or 0

    if kind == TransactionType.EXPENSE:
        add(values.get("account_id"), -amount)
    elif kind == TransactionType.INCOME:
        add(values.get("account_id"), amount)
    elif kind == TransactionType.TRANSFER:
        sent = values.get("amount_sent_cents")
        received = values.get("amount_received_cents")
        add(values.get("from_account_id"), -(sent if sent is not None else amount))
        add(values.get("to_account_id"), received if received is not None else amount)

    return effects


def _ensure_positive(value, field: str) -> int:
    if value is None or value <= 0:
        raise InvalidAmountError(field, value)
    if value > MAX_AMOUNT_CENTS:
        raise InvalidAmountError(
            field, value,
            f"{field} must not exceed {MAX_AMOUNT_CENTS} (got {value!r})",
        )
    return value


class LedgerService:
    """
    All ledger mutations pass through this service.

    Unlike read helpers, every mutating method owns its atomic
    unit: it commits on success and rolls back on any error, so
    the caller never sees an entry without its balance effect.
    """

    def __init__(self, db: Session):
        self.db = db
        self.accounts = AccountRepository(db)
        self.categories = CategoryRepository(db)
        self.entries = LedgerRepository(db)

    # --- Validation ---

    def _require_account(self, user_id: str, account_id: str | None) -> Account:
        """Missing and foreign accounts raise the same error."""
        if not account_id:
            raise AccountNotFoundError(None)
        account = self.accounts.get(user_id, account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    def _prepare(self, user_id: str, values: dict) -> dict:
        """
        Validate target field values and fill in derived ones.

        Raises before anything is written. Fields that do not apply
        to the entry's kind are cleared.
        """
        values = dict(values)
        kind = TransactionType(values["transaction_type"])
        values["transaction_type"] = kind

        if kind in (TransactionType.EXPENSE, TransactionType.INCOME):
            amount = _ensure_positive(values.get("amount_cents"), "amount_cents")
            self._require_account(user_id, values.get("account_id"))
            category_id = values.get("category_id")
            if category_id and self.categories.get(user_id, category_id) is None:
                raise CategoryNotFoundError(category_id)
            values.update(
                amount_cents=amount,
                from_account_id=None,
                to_account_id=None,
                amount_sent_cents=None,
                amount_received_cents=None,
            )
            if kind == TransactionType.EXPENSE:
                values["income_type"] = None
            else:
                values["expense_type"] = None
            return values

        source = self._require_account(user_id, values.get("from_account_id"))
        destination = self._require_account(user_id, values.get("to_account_id"))
        if source.id == destination.id:
            raise InvalidTransferError("Source and destination accounts must differ")

        amount = values.get("amount_cents")
        sent = values.get("amount_sent_cents")
        received = values.get("amount_received_cents")
        if sent is None:
            sent = amount
        if received is None:
            received = amount

        if sent is None and received is None:
            raise InvalidAmountError("amount_sent_cents", None)
        if sent is None or received is None:
            # One side may only stand in for the other without conversion
            if source.currency != destination.currency:
                raise InvalidTransferError(
                    f"Both sent and received amounts are required for a "
                    f"transfer from {source.currency} to {destination.currency}"
                )
            sent = sent if sent is not None else received
            received = received if received is not None else sent

        sent = _ensure_positive(sent, "amount_sent_cents")
        received = _ensure_positive(received, "amount_received_cents")

        values.update(
            account_id=None,
            category_id=None,
            amount_cents=sent if sent == received else None,
            amount_sent_cents=sent,
            amount_received_cents=received,
            expense_type=None,
            income_type=None,
        )
        return values

    # --- Effect application ---

    def _apply_effect(self, effects: dict[str, int], sign: int) -> None:
        for account_id, delta in effects.items():
            touched = self.accounts.adjust_balance(account_id, sign * delta)
            if not touched:
                raise BalanceAdjustmentError(
                    f"Balance of account {account_id} could not be adjusted"
                )

    # --- Operations ---

    def create(self, user_id: str, params: LedgerEntryCreate) -> LedgerEntry:
        """
        Record a new entry and apply its effect.

        Raises InvalidAmountError, AccountNotFoundError,
        CategoryNotFoundError or InvalidTransferError without
        writing anything.
        """
        with atomic(self.db):
            values = self._prepare(user_id, params.model_dump())
            entry = self.entries.create(user_id, values)
            self._apply_effect(compute_effect(values), sign=1)

        logger.info(
            "Created %s entry %s for user %s",
            entry.transaction_type.value, entry.id, user_id,
        )
        return entry

    def update(
        self, user_id: str, entry_id: str, params: LedgerEntryUpdate
    ) -> LedgerEntry:
        """
        Change an entry: revert its stored effect, persist the merged
        fields, apply the new effect.

        The merged target is validated before any write, so a failed
        update leaves the entry and every balance untouched. This
        also covers changes of kind (e.g. expense to transfer).
        """
        changes = params.model_dump(exclude_unset=True)
        for name in NON_NULLABLE_FIELDS:
            if name in changes and changes[name] is None:
                del changes[name]

        with atomic(self.db):
            existing = self.entries.get(user_id, entry_id)
            if existing is None:
                raise EntryNotFoundError(entry_id)

            current = entry_values(existing)
            target = {**current, **changes}

            if target["transaction_type"] == TransactionType.TRANSFER:
                side_changed = (
                    "amount_sent_cents" in changes
                    or "amount_received_cents" in changes
                )
                if "amount_cents" in changes:
                    # A new single amount replaces the stored per-side amounts
                    for name in ("amount_sent_cents", "amount_received_cents"):
                        if name not in changes:
                            target[name] = None
                elif (
                    side_changed
                    and current["transaction_type"] != TransactionType.TRANSFER
                ):
                    # The old expense/income amount is not a transfer side
                    target["amount_cents"] = None

            target = self._prepare(user_id, target)

            self._apply_effect(compute_effect(current), sign=-1)
            self.entries.update(existing, target)
            self._apply_effect(compute_effect(target), sign=1)

        logger.info("Updated entry %s for user %s", entry_id, user_id)
        return existing

    def delete(self, user_id: str, entry_id: str) -> LedgerEntry | None:
        """
        Revert an entry's effect and remove it.

        Returns the removed entry (detached from the session), or
        None when there was nothing to delete.
        """
        with atomic(self.db):
            existing = self.entries.get(user_id, entry_id)
            if existing is None:
                return None

            effects = compute_effect(entry_values(existing))
            self.db.expunge(existing)
            self._apply_effect(effects, sign=-1)
            self.entries.delete(user_id, entry_id)

        logger.info("Deleted entry %s for user %s", entry_id, user_id)
        return existing

    def get(self, user_id: str, entry_id: str) -> LedgerEntry:
        entry = self.entries.get(user_id, entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        return entry

    def list(self, user_id: str, filters: LedgerFilters | None = None) -> LedgerPage:
        """One keyset page of entries; see LedgerRepository.list."""
        return self.entries.list(user_id, filters)
