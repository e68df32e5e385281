"""
Import job model.

Records every import run together with its summary so
users can see what a past import created or rejected.
"""

import uuid

from sqlalchemy import String, BigInteger, Text, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from finance_tracker.models.base import Base, now_ms
from finance_tracker.models.enums import ImportStatus


class ImportJob(Base):
    __tablename__ = "imports"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    source: Mapped[str] = mapped_column(
        String(50), nullable=False, index=True
    )
    status: Mapped[ImportStatus] = mapped_column(
        SAEnum(
            ImportStatus,
            name="import_status_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=ImportStatus.PENDING,
    )
    # JSON-encoded ImportSummary
    meta: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=now_ms
    )
    updated_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=now_ms, onupdate=now_ms
    )

    def __repr__(self) -> str:
        return f"<ImportJob {self.source} ({self.status.value})>"
