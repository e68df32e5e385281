"""
Account API endpoints.

Accounts are opened here with an optional opening balance.
After that their balance only moves through ledger entries, so
PATCH edits display fields only and there is no DELETE.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from finance_tracker.api.dependencies import get_owner_id
from finance_tracker.models.base import atomic, get_db
from finance_tracker.repositories.accounts import AccountRepository
from finance_tracker.schemas.account import (
    AccountCreate,
    AccountResponse,
    AccountUpdate,
)

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post("", response_model=AccountResponse, status_code=201)
def create_account(
    request: AccountCreate,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    with atomic(db):
        account = AccountRepository(db).create(owner_id, request)
    return AccountResponse.model_validate(account)


@router.get("", response_model=list[AccountResponse])
def list_accounts(
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    accounts = AccountRepository(db).list(owner_id)
    return [AccountResponse.model_validate(a) for a in accounts]


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: str,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    account = AccountRepository(db).get(owner_id, account_id)
    if account is None:
        raise HTTPException(
            status_code=404, detail=f"Account {account_id} not found"
        )
    return AccountResponse.model_validate(account)


@router.patch("/{account_id}", response_model=AccountResponse)
def update_account(
    account_id: str,
    request: AccountUpdate,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    repo = AccountRepository(db)
    account = repo.get(owner_id, account_id)
    if account is None:
        raise HTTPException(
            status_code=404, detail=f"Account {account_id} not found"
        )
    with atomic(db):
        repo.update(account, request)
    return AccountResponse.model_validate(account)
