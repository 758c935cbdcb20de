"""
Job posting endpoints.

Provides REST API for posting, listing and closing jobs, and for viewing
the candidates that match a job.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import require_employer
from api.schemas.candidates import CandidateResponse
from api.schemas.jobs import JobCreateRequest, JobResponse
from api.services import jobs as job_service
from api.services import matching as matching_service
from core.errors import ForbiddenError
from core.middleware.authentication import Principal, get_current_principal
from database.engine import get_db
from database.models.users import UserRole

router = APIRouter()


@router.post(
    "",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post Job",
    description="Post a job. The employer must have accepted the placement agreement.",
)
async def create_job(
    data: JobCreateRequest,
    principal: Principal = Depends(require_employer),
    db: AsyncSession = Depends(get_db),
):
    return await job_service.create_job(
        db,
        user_id=principal.user_id,
        title=data.title,
        description=data.description,
        parish=data.parish,
        role_category=data.role_category,
    )


@router.get(
    "",
    response_model=list[JobResponse],
    summary="List Open Jobs",
    description="Public listing of open jobs.",
)
async def list_jobs(
    role_category: Optional[str] = Query(None, description="Filter by role category"),
    parish: Optional[str] = Query(None, description="Filter by parish"),
    db: AsyncSession = Depends(get_db),
):
    return await job_service.list_open_jobs(db, role_category=role_category, parish=parish)


@router.get(
    "/{job_id}/matches",
    response_model=list[CandidateResponse],
    summary="Matching Candidates",
    description="Active candidates whose specialties include the job's role category.",
)
async def get_matches(
    job_id: str = Path(..., description="Job ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Visible to admins and to the employer that owns the job."""
    if principal.role != UserRole.ADMIN:
        owner_user_id = await job_service.get_job_owner_user_id(db, job_id)
        if principal.role != UserRole.EMPLOYER or owner_user_id != principal.user_id:
            raise ForbiddenError("Not allowed to view matches for this job")
    return await matching_service.find_matches(db, job_id)


@router.post("/{job_id}/close", response_model=JobResponse, summary="Close Job")
async def close_job(
    job_id: str = Path(..., description="Job ID"),
    principal: Principal = Depends(require_employer),
    db: AsyncSession = Depends(get_db),
):
    """Stop listing a job. Existing introductions are unaffected."""
    return await job_service.close_job(db, job_id, principal.user_id)
