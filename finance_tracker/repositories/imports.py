"""
Import job repository.
"""

import json

from sqlalchemy import select
from sqlalchemy.orm import Session

from finance_tracker.models.enums import ImportStatus
from finance_tracker.models.import_job import ImportJob


class ImportJobRepository:

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str, job_id: str) -> ImportJob | None:
        return self.db.execute(
            select(ImportJob).where(
                ImportJob.user_id == user_id,
                ImportJob.id == job_id,
            )
        ).scalar_one_or_none()

    def list(self, user_id: str) -> list[ImportJob]:
        return list(self.db.execute(
            select(ImportJob)
            .where(ImportJob.user_id == user_id)
            .order_by(ImportJob.created_at.desc())
        ).scalars().all())

    def create(
        self,
        user_id: str,
        source: str,
        status: ImportStatus,
        meta: dict | None = None,
    ) -> ImportJob:
        job = ImportJob(
            user_id=user_id,
            source=source,
            status=status,
            meta=json.dumps(meta) if meta is not None else None,
        )
        self.db.add(job)
        self.db.flush()
        return job

    def update_status(
        self,
        job: ImportJob,
        status: ImportStatus,
        meta: dict | None = None,
    ) -> ImportJob:
        job.status = status
        if meta is not None:
            job.meta = json.dumps(meta)
        self.db.flush()
        return job
