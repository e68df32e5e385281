"""
Pydantic schemas for accounts and categories.
"""

from pydantic import BaseModel, Field, field_validator

from finance_tracker.models.enums import CategoryType


DEFAULT_ACCOUNT_ICON = "Landmark"
DEFAULT_ACCOUNT_TYPE = "Bank Account"
DEFAULT_ACCOUNT_COLOR = "hsl(var(--muted-foreground))"
DEFAULT_CATEGORY_ICON = "MoreHorizontal"


# --- Account Schemas ---

class AccountCreate(BaseModel):
    """Request to open an account. balance_cents is the opening balance."""
    name: str = Field(min_length=1, max_length=100)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    balance_cents: int = 0
    icon: str = Field(default=DEFAULT_ACCOUNT_ICON, max_length=50)
    color: str = Field(default=DEFAULT_ACCOUNT_COLOR, max_length=50)
    type: str = Field(default=DEFAULT_ACCOUNT_TYPE, max_length=50)

    @field_validator("currency")
    @classmethod
    def currency_upper(cls, v: str) -> str:
        return v.strip().upper()


class AccountUpdate(BaseModel):
    """
    Partial update of an account's display fields.

    Balance and currency are not editable: the balance only moves
    through ledger entries, and existing entries are denominated
    in the account's currency.
    """
    name: str | None = Field(default=None, min_length=1, max_length=100)
    icon: str | None = Field(default=None, max_length=50)
    color: str | None = Field(default=None, max_length=50)
    type: str | None = Field(default=None, max_length=50)


class AccountResponse(BaseModel):
    id: str
    name: str
    balance_cents: int
    icon: str
    color: str
    type: str
    currency: str
    created_at: int
    updated_at: int

    model_config = {"from_attributes": True}


# --- Category Schemas ---

class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    type: CategoryType
    icon: str = Field(default=DEFAULT_CATEGORY_ICON, max_length=50)
    color: str = Field(default=DEFAULT_ACCOUNT_COLOR, max_length=50)
    parent_id: str | None = None


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    type: CategoryType | None = None
    icon: str | None = Field(default=None, max_length=50)
    color: str | None = Field(default=None, max_length=50)
    parent_id: str | None = None


class CategoryResponse(BaseModel):
    id: str
    name: str
    type: CategoryType
    icon: str
    color: str
    parent_id: str | None
    created_at: int
    updated_at: int

    model_config = {"from_attributes": True}
