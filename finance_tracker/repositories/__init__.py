"""Owner-scoped data access."""

from finance_tracker.repositories.accounts import AccountRepository
from finance_tracker.repositories.categories import CategoryRepository
from finance_tracker.repositories.ledger import LedgerRepository, LedgerPage
from finance_tracker.repositories.imports import ImportJobRepository

__all__ = [
    "AccountRepository",
    "CategoryRepository",
    "LedgerRepository",
    "LedgerPage",
    "ImportJobRepository",
]
