"""
Shared enumerations for database models and schemas.
"""

import enum


class TransactionType(str, enum.Enum):
    """Kind of a ledger entry."""
    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"


class CategoryType(str, enum.Enum):
    EXPENSE = "expense"
    INCOME = "income"


class ExpenseType(str, enum.Enum):
    MANDATORY = "mandatory"
    OPTIONAL = "optional"


class IncomeType(str, enum.Enum):
    ACTIVE = "active"
    PASSIVE = "passive"


class ImportStatus(str, enum.Enum):
    """Lifecycle of an import run."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class SortDirection(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"
