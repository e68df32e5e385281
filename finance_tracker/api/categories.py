"""
Category API endpoints.

Categories are labels on expense and income entries. Deleting
one never touches balances: entries that used it simply lose
their category.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from finance_tracker.api.dependencies import get_owner_id
from finance_tracker.models.base import atomic, get_db
from finance_tracker.repositories.categories import CategoryRepository
from finance_tracker.schemas.account import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["Categories"])


def _not_found(category_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Category {category_id} not found")


def _check_parent(
    repo: CategoryRepository,
    owner_id: str,
    parent_id: str | None,
    category_id: str | None = None,
) -> None:
    if parent_id is None:
        return
    if parent_id == category_id:
        raise HTTPException(
            status_code=400, detail="A category cannot be its own parent"
        )
    if repo.get(owner_id, parent_id) is None:
        raise HTTPException(
            status_code=400, detail=f"Parent category {parent_id} not found"
        )


@router.post("", response_model=CategoryResponse, status_code=201)
def create_category(
    request: CategoryCreate,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    repo = CategoryRepository(db)
    _check_parent(repo, owner_id, request.parent_id)
    with atomic(db):
        category = repo.create(owner_id, request)
    return CategoryResponse.model_validate(category)


@router.get("", response_model=list[CategoryResponse])
def list_categories(
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    categories = CategoryRepository(db).list(owner_id)
    return [CategoryResponse.model_validate(c) for c in categories]


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(
    category_id: str,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    category = CategoryRepository(db).get(owner_id, category_id)
    if category is None:
        raise _not_found(category_id)
    return CategoryResponse.model_validate(category)


@router.patch("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: str,
    request: CategoryUpdate,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """Only the fields present in the body change. parent_id: null detaches."""
    repo = CategoryRepository(db)
    category = repo.get(owner_id, category_id)
    if category is None:
        raise _not_found(category_id)

    changes = request.model_dump(exclude_unset=True)
    for name in ("name", "type", "icon", "color"):
        if name in changes and changes[name] is None:
            del changes[name]
    if "parent_id" in changes:
        _check_parent(repo, owner_id, changes["parent_id"], category_id)

    with atomic(db):
        repo.update(category, changes)
    return CategoryResponse.model_validate(category)


@router.delete("/{category_id}")
def delete_category(
    category_id: str,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    with atomic(db):
        deleted = CategoryRepository(db).delete(owner_id, category_id)
    if not deleted:
        raise _not_found(category_id)
    logger.info("Deleted category %s for user %s", category_id, owner_id)
    return {"ok": True}
