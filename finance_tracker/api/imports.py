"""
Import API endpoints.

/imports/preview runs raw CSV rows through a profile without
touching the ledger, so the client can review the mapping and
the normalized rows. /imports takes normalized rows and writes
them; /imports/csv does both in one call.
"""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from finance_tracker.api.dependencies import get_owner_id
from finance_tracker.models.base import get_db
from finance_tracker.models.import_job import ImportJob
from finance_tracker.repositories.imports import ImportJobRepository
from finance_tracker.schemas.imports import (
    CsvImportRequest,
    ImportJobResponse,
    ImportPreviewRequest,
    ImportPreviewResponse,
    ImportProfileResponse,
    ImportRequest,
    ImportSummary,
)
from finance_tracker.services.errors import ImportRowError, ReconciliationError
from finance_tracker.services.import_profiles import IMPORT_PROFILES
from finance_tracker.services.import_service import ImportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/imports", tags=["Imports"])


def _reconciliation_error(e: ReconciliationError) -> HTTPException:
    return HTTPException(status_code=422, detail={
        "message": str(e),
        "account": e.account,
        "other_account": e.other_account,
        "date": e.date,
        "row_index": e.row_index,
    })


@router.get("/profiles", response_model=list[ImportProfileResponse])
def list_profiles():
    return [
        ImportProfileResponse(
            id=profile.id,
            label=profile.label,
            description=profile.description,
            delimiter=profile.options.delimiter,
            fields=profile.fields,
        )
        for profile in IMPORT_PROFILES.values()
    ]


@router.post("/preview", response_model=ImportPreviewResponse)
def preview_import(
    request: ImportPreviewRequest,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    try:
        prepared = ImportService(db).prepare(
            request.profile, request.rows, request.default_currency, request.mapping,
        )
    except ReconciliationError as e:
        raise _reconciliation_error(e)
    return ImportPreviewResponse(
        profile=prepared.profile.id,
        mapping=prepared.mapping,
        rows=prepared.rows,
        errors=prepared.errors,
    )


@router.post("", response_model=ImportSummary)
def run_import(
    request: ImportRequest,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    return ImportService(db).run(
        owner_id, request.rows, request.source, request.default_currency,
    )


@router.post("/csv", response_model=ImportSummary)
def import_csv(
    request: CsvImportRequest,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    try:
        return ImportService(db).import_csv(
            owner_id,
            request.content,
            request.profile,
            request.default_currency,
            request.mapping,
        )
    except ReconciliationError as e:
        raise _reconciliation_error(e)
    except ImportRowError as e:
        logger.warning("CSV import rejected for user %s: %s", owner_id, e)
        raise HTTPException(status_code=400, detail=str(e))


def _job_response(job: ImportJob) -> ImportJobResponse:
    summary = ImportSummary.model_validate(json.loads(job.meta)) if job.meta else None
    return ImportJobResponse(
        id=job.id,
        source=job.source,
        status=job.status,
        summary=summary,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


@router.get("/jobs", response_model=list[ImportJobResponse])
def list_import_jobs(
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """Past import runs, newest first."""
    return [_job_response(job) for job in ImportJobRepository(db).list(owner_id)]


@router.get("/jobs/{job_id}", response_model=ImportJobResponse)
def get_import_job(
    job_id: str,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    job = ImportJobRepository(db).get(owner_id, job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Import {job_id} not found")
    return _job_response(job)
