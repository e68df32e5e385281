"""
Ledger repository: storage and listing of ledger entries.

This layer never touches balances. Anything that changes an
entry's effect must go through LedgerService.
"""

from dataclasses import dataclass, field

from sqlalchemy import select, delete, or_
from sqlalchemy.orm import Session

from finance_tracker.models.enums import SortDirection
from finance_tracker.models.ledger_entry import LedgerEntry
from finance_tracker.schemas.ledger import LedgerFilters


# Columns the service may write through update()
UPDATABLE_FIELDS = (
    "transaction_type",
    "account_id",
    "from_account_id",
    "to_account_id",
    "category_id",
    "amount_cents",
    "amount_sent_cents",
    "amount_received_cents",
    "date",
    "description",
    "expense_type",
    "income_type",
)


@dataclass
class LedgerPage:
    items: list[LedgerEntry] = field(default_factory=list)
    has_more: bool = False
    next_cursor: int | None = None


class LedgerRepository:

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str, entry_id: str) -> LedgerEntry | None:
        return self.db.execute(
            select(LedgerEntry).where(
                LedgerEntry.user_id == user_id,
                LedgerEntry.id == entry_id,
            )
        ).scalar_one_or_none()

    def create(self, user_id: str, values: dict) -> LedgerEntry:
        entry = LedgerEntry(user_id=user_id, **values)
        self.db.add(entry)
        self.db.flush()
        return entry

    def update(self, entry: LedgerEntry, values: dict) -> LedgerEntry:
        for name, value in values.items():
            if name in UPDATABLE_FIELDS:
                setattr(entry, name, value)
        self.db.flush()
        return entry

    def delete(self, user_id: str, entry_id: str) -> int:
        result = self.db.execute(
            delete(LedgerEntry).where(
                LedgerEntry.user_id == user_id,
                LedgerEntry.id == entry_id,
            )
        )
        return result.rowcount

    def _where_clauses(self, user_id: str, filters: LedgerFilters) -> list:
        clauses = [LedgerEntry.user_id == user_id]

        if filters.category_id:
            clauses.append(LedgerEntry.category_id == filters.category_id)

        if filters.transaction_type is not None:
            clauses.append(
                LedgerEntry.transaction_type == filters.transaction_type
            )

        # Transfers show up in both accounts' history
        if filters.account_id:
            clauses.append(or_(
                LedgerEntry.account_id == filters.account_id,
                LedgerEntry.from_account_id == filters.account_id,
                LedgerEntry.to_account_id == filters.account_id,
            ))

        if filters.start_date is not None:
            clauses.append(LedgerEntry.date >= filters.start_date)

        if filters.end_date is not None:
            clauses.append(LedgerEntry.date <= filters.end_date)

        # Strict inequality on a non-unique column: entries that share
        # the cursor date with the last item of the previous page are
        # skipped. Known limitation of date-only cursors.
        if filters.cursor is not None:
            if filters.sort == SortDirection.ASC:
                clauses.append(LedgerEntry.date > filters.cursor)
            else:
                clauses.append(LedgerEntry.date < filters.cursor)

        return clauses

    def list(self, user_id: str, filters: LedgerFilters | None = None) -> LedgerPage:
        """
        Return one keyset page of entries ordered by date.

        Fetches limit + 1 rows: the extra row only tells us whether
        another page exists and is never returned.
        """
        filters = filters or LedgerFilters()
        limit = filters.page_size()

        order = (
            LedgerEntry.date.asc()
            if filters.sort == SortDirection.ASC
            else LedgerEntry.date.desc()
        )

        rows = list(self.db.execute(
            select(LedgerEntry)
            .where(*self._where_clauses(user_id, filters))
            .order_by(order)
            .limit(limit + 1)
        ).scalars().all())

        has_more = len(rows) > limit
        items = rows[:limit]
        next_cursor = items[-1].date if has_more and items else None

        return LedgerPage(items=items, has_more=has_more, next_cursor=next_cursor)
