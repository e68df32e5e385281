"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from finance_tracker.models.base import Base
from finance_tracker.models.enums import (
    TransactionType,
    CategoryType,
    ExpenseType,
    IncomeType,
    ImportStatus,
    SortDirection,
)
from finance_tracker.models.account import Account
from finance_tracker.models.category import Category
from finance_tracker.models.ledger_entry import LedgerEntry
from finance_tracker.models.import_job import ImportJob

__all__ = [
    "Base",
    "TransactionType",
    "CategoryType",
    "ExpenseType",
    "IncomeType",
    "ImportStatus",
    "SortDirection",
    "Account",
    "Category",
    "LedgerEntry",
    "ImportJob",
]
