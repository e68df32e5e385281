"""
Transaction (ledger entry) API endpoints.

The API layer is thin: it maps query parameters and payloads to
schemas, turns ledger errors into HTTP status codes, and leaves
all balance logic to the LedgerService. The service commits its
own atomic units, so endpoints never commit.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from finance_tracker.api.dependencies import get_owner_id
from finance_tracker.models.base import get_db
from finance_tracker.models.enums import SortDirection, TransactionType
from finance_tracker.schemas.ledger import (
    LedgerEntryCreate,
    LedgerEntryUpdate,
    LedgerEntryResponse,
    LedgerFilters,
    LedgerPageResponse,
)
from finance_tracker.services.errors import EntryNotFoundError, LedgerError
from finance_tracker.services.ledger_service import LedgerService

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.get("", response_model=LedgerPageResponse)
def list_transactions(
    account_id: str | None = Query(default=None, alias="accountId"),
    category_id: str | None = Query(default=None, alias="categoryId"),
    transaction_type: TransactionType | None = Query(
        default=None, alias="transactionType"
    ),
    start_date: int | None = Query(default=None, alias="startDate"),
    end_date: int | None = Query(default=None, alias="endDate"),
    cursor: int | None = None,
    limit: int | None = None,
    sort: SortDirection = SortDirection.DESC,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """
    List entries newest first (or oldest first with sort=asc).

    Pass the returned next_cursor as cursor to get the next page.
    """
    page = LedgerService(db).list(owner_id, LedgerFilters(
        account_id=account_id,
        category_id=category_id,
        transaction_type=transaction_type,
        start_date=start_date,
        end_date=end_date,
        cursor=cursor,
        limit=limit,
        sort=sort,
    ))
    return LedgerPageResponse.model_validate(page)


@router.post("", response_model=LedgerEntryResponse, status_code=201)
def create_transaction(
    request: LedgerEntryCreate,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """Record an expense, income or transfer and update balances."""
    try:
        entry = LedgerService(db).create(owner_id, request)
    except LedgerError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return LedgerEntryResponse.model_validate(entry)


@router.get("/{transaction_id}", response_model=LedgerEntryResponse)
def get_transaction(
    transaction_id: str,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    try:
        entry = LedgerService(db).get(owner_id, transaction_id)
    except EntryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return LedgerEntryResponse.model_validate(entry)


@router.patch("/{transaction_id}", response_model=LedgerEntryResponse)
def update_transaction(
    transaction_id: str,
    request: LedgerEntryUpdate,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """
    Edit an entry. Only fields present in the body change; the old
    balance effect is reverted and the new one applied atomically.
    """
    service = LedgerService(db)
    try:
        entry = service.update(owner_id, transaction_id, request)
    except EntryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LedgerError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return LedgerEntryResponse.model_validate(entry)


@router.delete("/{transaction_id}")
def delete_transaction(
    transaction_id: str,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    deleted = LedgerService(db).delete(owner_id, transaction_id)
    if deleted is None:
        raise HTTPException(
            status_code=404, detail=f"Transaction {transaction_id} not found"
        )
    return {"ok": True}
