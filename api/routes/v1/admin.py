"""
Admin endpoints.

Dashboard totals, the candidate directory, and invoice oversight.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import require_admin
from api.schemas.candidates import CandidateResponse
from api.schemas.placements import InvoiceResponse, StatsResponse
from api.services import candidates as candidate_service
from api.services import invoices as invoice_service
from core.middleware.authentication import Principal
from database.engine import get_db
from database.models.candidates import CandidateStatus
from database.models.invoices import InvoiceStatus

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=StatsResponse, summary="Dashboard Stats")
async def get_stats(db: AsyncSession = Depends(get_db)):
    """Confirmed hires, open jobs, collected revenue and unpaid invoices."""
    return await invoice_service.get_stats(db)


@router.get("/candidates", response_model=list[CandidateResponse], summary="List Candidates")
async def list_candidates(
    status: Optional[CandidateStatus] = Query(None, description="Filter by status"),
    parish: Optional[str] = Query(None, description="Filter by parish"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    return await candidate_service.list_candidates(
        db, status=status, parish=parish, limit=limit, offset=offset
    )


@router.get(
    "/candidates/{candidate_id}",
    response_model=CandidateResponse,
    summary="Get Candidate",
)
async def get_candidate(
    candidate_id: str = Path(..., description="Candidate ID"),
    db: AsyncSession = Depends(get_db),
):
    return await candidate_service.get_candidate(db, candidate_id)


@router.get("/invoices", response_model=list[InvoiceResponse], summary="List Invoices")
async def list_invoices(
    status: Optional[InvoiceStatus] = Query(None, description="Filter by status"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    return await invoice_service.list_invoices(db, status=status, limit=limit, offset=offset)


@router.post(
    "/invoices/{invoice_id}/void",
    response_model=InvoiceResponse,
    summary="Void Invoice",
    description="Void an unpaid invoice. Paid and void invoices cannot be voided.",
)
async def void_invoice(
    invoice_id: str = Path(..., description="Invoice ID"),
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await invoice_service.void_invoice(db, invoice_id, voided_by=principal.user_id)
