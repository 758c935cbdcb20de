"""
Employer endpoints.

Employers maintain their profile, accept the placement agreement, and see
their jobs, the introductions made to them and the invoices they owe.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import require_employer
from api.schemas.employers import EmployerProfileRequest, EmployerResponse
from api.schemas.jobs import JobResponse
from api.schemas.placements import InvoiceResponse
from api.services import employers as employer_service
from api.services import jobs as job_service
from core.middleware.authentication import Principal
from database.engine import get_db

router = APIRouter()


@router.get("/me", response_model=Optional[EmployerResponse], summary="Get My Profile")
async def get_my_profile(
    principal: Principal = Depends(require_employer),
    db: AsyncSession = Depends(get_db),
):
    """The caller's employer profile, or null before it is created."""
    return await employer_service.get_my_employer_profile(db, principal.user_id)


@router.put("/me", response_model=EmployerResponse, summary="Save My Profile")
async def save_my_profile(
    data: EmployerProfileRequest,
    principal: Principal = Depends(require_employer),
    db: AsyncSession = Depends(get_db),
):
    """Create or replace the caller's employer profile."""
    return await employer_service.upsert_employer_profile(
        db,
        user_id=principal.user_id,
        company_name=data.company_name,
        contact_name=data.contact_name,
        parish=data.parish,
        phone=data.phone,
        website=data.website,
    )


@router.post(
    "/me/accept-agreement",
    response_model=EmployerResponse,
    summary="Accept Placement Agreement",
)
async def accept_agreement(
    principal: Principal = Depends(require_employer),
    db: AsyncSession = Depends(get_db),
):
    """Accept the placement agreement; required before posting jobs."""
    return await employer_service.accept_agreement(db, principal.user_id)


@router.get("/me/jobs", response_model=list[JobResponse], summary="List My Jobs")
async def list_my_jobs(
    principal: Principal = Depends(require_employer),
    db: AsyncSession = Depends(get_db),
):
    return await job_service.list_employer_jobs(db, principal.user_id)


@router.get("/me/introductions", summary="List My Introductions")
async def list_my_introductions(
    principal: Principal = Depends(require_employer),
    db: AsyncSession = Depends(get_db),
):
    """Candidates introduced to the caller's jobs, with hire status."""
    return await employer_service.list_employer_introductions(db, principal.user_id)


@router.get("/me/invoices", response_model=list[InvoiceResponse], summary="List My Invoices")
async def list_my_invoices(
    principal: Principal = Depends(require_employer),
    db: AsyncSession = Depends(get_db),
):
    return await employer_service.list_employer_invoices(db, principal.user_id)
