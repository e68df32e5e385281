"""Business logic services."""

from finance_tracker.services.ledger_service import LedgerService
from finance_tracker.services.import_service import ImportService

__all__ = ["LedgerService", "ImportService"]
