"""
Category repository: owner-scoped lookups, creation and edits.
"""

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from finance_tracker.models.category import Category
from finance_tracker.schemas.account import CategoryCreate


class CategoryRepository:

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str, category_id: str) -> Category | None:
        return self.db.execute(
            select(Category).where(
                Category.user_id == user_id,
                Category.id == category_id,
            )
        ).scalar_one_or_none()

    def list(self, user_id: str) -> list[Category]:
        return list(self.db.execute(
            select(Category)
            .where(Category.user_id == user_id)
            .order_by(Category.name)
        ).scalars().all())

    def create(self, user_id: str, request: CategoryCreate) -> Category:
        category = Category(
            user_id=user_id,
            name=request.name.strip(),
            type=request.type,
            icon=request.icon,
            color=request.color,
            parent_id=request.parent_id,
        )
        self.db.add(category)
        self.db.flush()
        return category

    def update(self, category: Category, changes: dict) -> Category:
        if "name" in changes:
            changes = {**changes, "name": changes["name"].strip()}
        for name, value in changes.items():
            setattr(category, name, value)
        self.db.flush()
        return category

    def delete(self, user_id: str, category_id: str) -> bool:
        """
        Remove a category. Entries and child categories that pointed
        at it keep existing with a NULL reference.
        """
        result = self.db.execute(
            delete(Category).where(
                Category.user_id == user_id,
                Category.id == category_id,
            )
        )
        return result.rowcount > 0
