"""
Account repository.

Point lookups are always scoped by owner: an account owned by
another user is indistinguishable from a missing one.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from finance_tracker.models.account import Account
from finance_tracker.models.base import now_ms
from finance_tracker.schemas.account import AccountCreate, AccountUpdate

logger = logging.getLogger(__name__)


class AccountRepository:

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str, account_id: str) -> Account | None:
        return self.db.execute(
            select(Account).where(
                Account.user_id == user_id,
                Account.id == account_id,
            )
        ).scalar_one_or_none()

    def list(self, user_id: str) -> list[Account]:
        accounts = self.db.execute(
            select(Account)
            .where(Account.user_id == user_id)
            .order_by(Account.name)
        ).scalars().all()
        return list(accounts)

    def create(self, user_id: str, request: AccountCreate) -> Account:
        account = Account(
            user_id=user_id,
            name=request.name.strip(),
            balance_cents=request.balance_cents,
            icon=request.icon,
            color=request.color,
            type=request.type,
            currency=request.currency,
        )
        self.db.add(account)
        self.db.flush()
        return account

    def update(self, account: Account, request: AccountUpdate) -> Account:
        """Apply the fields set on the request; unset fields are kept."""
        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in changes:
            changes["name"] = changes["name"].strip()
        for name, value in changes.items():
            setattr(account, name, value)
        self.db.flush()
        return account

    def adjust_balance(self, account_id: str, delta_cents: int) -> int:
        """
        Add delta_cents to the stored balance.

        The update is relative (balance = balance + delta) so
        serialized concurrent adjustments commute. Returns the
        number of rows touched; a zero delta touches nothing.
        """
        if not delta_cents:
            return 0
        result = self.db.execute(
            update(Account)
            .where(Account.id == account_id)
            .values(
                balance_cents=Account.balance_cents + delta_cents,
                updated_at=now_ms(),
            )
        )
        logger.debug("Adjusted account %s by %d", account_id, delta_cents)
        return result.rowcount
