"""
Ledger entry model.

One row per recorded financial event. Expenses and incomes
reference a single account through account_id/amount_cents.
Transfers reference two accounts and carry one amount per
side, each in its own account's currency: the ledger never
converts between them.
"""

import uuid

from sqlalchemy import (
    String, BigInteger, ForeignKey, Index,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from finance_tracker.models.base import Base, now_ms
from finance_tracker.models.enums import (
    TransactionType,
    ExpenseType,
    IncomeType,
)


def _values(enum_cls):
    return [m.value for m in enum_cls]


class LedgerEntry(Base):
    """
    A mutable ledger entry.

    Fields are only changed through LedgerService.update(),
    which reverts the stored effect before applying the new one.
    """

    __tablename__ = "transactions"
    __table_args__ = (
        Index("transactions_user_date_idx", "user_id", "date"),
        Index("transactions_user_account_idx", "user_id", "account_id"),
        Index("transactions_user_category_idx", "user_id", "category_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    transaction_type: Mapped[TransactionType] = mapped_column(
        SAEnum(
            TransactionType,
            name="transaction_type_enum",
            values_callable=_values,
        ),
        nullable=False,
    )
    account_id: Mapped[str | None] = mapped_column(
        ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True
    )
    from_account_id: Mapped[str | None] = mapped_column(
        ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True
    )
    to_account_id: Mapped[str | None] = mapped_column(
        ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True
    )
    category_id: Mapped[str | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    amount_cents: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    amount_sent_cents: Mapped[int | None] = mapped_column(
        BigInteger, nullable=True
    )
    amount_received_cents: Mapped[int | None] = mapped_column(
        BigInteger, nullable=True
    )
    # Epoch millis, not unique
    date: Mapped[int] = mapped_column(BigInteger, nullable=False)
    description: Mapped[str | None] = mapped_column(
        String(500), nullable=True
    )
    expense_type: Mapped[ExpenseType | None] = mapped_column(
        SAEnum(ExpenseType, name="expense_type_enum", values_callable=_values),
        nullable=True,
    )
    income_type: Mapped[IncomeType | None] = mapped_column(
        SAEnum(IncomeType, name="income_type_enum", values_callable=_values),
        nullable=True,
    )
    created_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=now_ms
    )
    updated_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=now_ms, onupdate=now_ms
    )

    def __repr__(self) -> str:
        return f"<LedgerEntry {self.transaction_type.value} {self.date}>"
