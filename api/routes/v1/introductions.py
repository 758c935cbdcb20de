"""
Introduction and hire endpoints.

Admins introduce candidates to jobs; the owning employer confirms a hire,
which invoices the placement fee.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_invoicing_provider, require_admin, require_employer
from api.schemas.placements import (
    HireConfirmRequest,
    HireResultResponse,
    IntroductionCreateRequest,
    IntroductionCreatedResponse,
)
from api.services import hiring as hiring_service
from api.services import introductions as introduction_service
from core.integrations.invoicing import InvoicingProvider
from core.middleware.authentication import Principal
from database.engine import get_db

router = APIRouter()


@router.post(
    "",
    response_model=IntroductionCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Introduce Candidate",
)
async def create_introduction(
    data: IntroductionCreateRequest,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Introduce a candidate to a job. Each pair can be introduced once."""
    introduction_id = await introduction_service.create_introduction(
        db,
        job_id=data.job_id,
        candidate_id=data.candidate_id,
        note=data.note,
        introduced_by=principal.user_id,
    )
    return IntroductionCreatedResponse(id=introduction_id)


@router.get("", summary="List Introductions")
async def list_introductions(
    job_id: Optional[str] = Query(None, description="Filter by job"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await introduction_service.list_introductions(
        db, job_id=job_id, limit=limit, offset=offset
    )


@router.post(
    "/{introduction_id}/hire-confirm",
    response_model=HireResultResponse,
    summary="Confirm Hire",
    description=(
        "Confirm that the introduced candidate was hired. Records the hire once "
        "and invoices the placement fee."
    ),
)
async def confirm_hire(
    data: HireConfirmRequest,
    introduction_id: str = Path(..., description="Introduction ID"),
    principal: Principal = Depends(require_employer),
    provider: Optional[InvoicingProvider] = Depends(get_invoicing_provider),
    db: AsyncSession = Depends(get_db),
):
    return await hiring_service.confirm_hire(
        db,
        introduction_id=introduction_id,
        start_date=data.start_date,
        principal=principal,
        provider=provider,
    )


@router.post(
    "/{introduction_id}/invoice",
    response_model=HireResultResponse,
    summary="Complete Invoicing",
    description="Finish invoicing for a confirmed hire whose invoice is missing or unsent.",
)
async def ensure_invoice(
    introduction_id: str = Path(..., description="Introduction ID"),
    principal: Principal = Depends(require_admin),
    provider: Optional[InvoicingProvider] = Depends(get_invoicing_provider),
    db: AsyncSession = Depends(get_db),
):
    return await hiring_service.ensure_invoice_for_hire(
        db,
        introduction_id=introduction_id,
        provider=provider,
        requested_by=principal.user_id,
    )
