"""Personal finance ledger with CSV import reconciliation."""

__version__ = "0.1.0"
