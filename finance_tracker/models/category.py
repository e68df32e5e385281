"""
Category model.

Categories are referenced by ledger entries as an opaque
foreign key. One level of parent/child nesting is used by
the UI; deeper trees are not enforced.
"""

import uuid

from sqlalchemy import String, BigInteger, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from finance_tracker.models.base import Base, now_ms
from finance_tracker.models.enums import CategoryType


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    icon: Mapped[str] = mapped_column(String(50), nullable=False)
    color: Mapped[str] = mapped_column(String(50), nullable=False)
    type: Mapped[CategoryType] = mapped_column(
        SAEnum(
            CategoryType,
            name="category_type_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    parent_id: Mapped[str | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=now_ms
    )
    updated_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=now_ms, onupdate=now_ms
    )

    def __repr__(self) -> str:
        return f"<Category {self.name} ({self.type.value})>"
