"""
Account model.

An account holds a running balance in minor units (cents).
The balance is never written directly by callers: it only
moves through relative adjustments made by the LedgerService
when entries are created, updated or deleted.
"""

import uuid

from sqlalchemy import String, BigInteger
from sqlalchemy.orm import Mapped, mapped_column

from finance_tracker.models.base import Base, now_ms


class Account(Base):
    """
    A user-owned account (cash, bank, card...).

    Invariant: balance_cents equals the sum of the signed
    effects of every ledger entry that references this account.
    """

    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    balance_cents: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0
    )
    icon: Mapped[str] = mapped_column(String(50), nullable=False)
    color: Mapped[str] = mapped_column(String(50), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    # Opaque to the ledger, never converted
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    created_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=now_ms
    )
    updated_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=now_ms, onupdate=now_ms
    )

    def __repr__(self) -> str:
        return f"<Account {self.name} {self.balance_cents} {self.currency}>"
