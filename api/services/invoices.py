"""Placement invoice service functions."""

from typing import Any, Optional
import logging

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.audit import AuditAction, ResourceType, log_audit_event
from core.errors import ConflictError, NotFoundError
from core.utils.datetime import isoformat
from core.utils.formatting import format_cents
from database.models.candidates import CandidateProfile
from database.models.employers import EmployerProfile
from database.models.introductions import HireConfirmation
from database.models.invoices import InvoiceStatus, PlacementInvoice, statuses_leading_to
from database.models.jobs import JobPosting, JobStatus

logger = logging.getLogger(__name__)


def invoice_to_dict(invoice: PlacementInvoice) -> dict[str, Any]:
    return {
        "id": invoice.id,
        "introduction_id": invoice.introduction_id,
        "employer_id": invoice.employer_id,
        "candidate_id": invoice.candidate_id,
        "job_id": invoice.job_id,
        "amount_cents": invoice.amount_cents,
        "amount_display": format_cents(invoice.amount_cents, invoice.currency),
        "currency": invoice.currency,
        "status": invoice.status.value,
        "stripe_invoice_id": invoice.stripe_invoice_id,
        "stripe_payment_status": invoice.stripe_payment_status,
        "created_at": isoformat(invoice.created_at),
        "paid_at": isoformat(invoice.paid_at),
    }


async def list_invoices(
    session: AsyncSession,
    status: Optional[InvoiceStatus] = None,
    limit: int = 100,
    offset: int = 0,
) -> list[dict[str, Any]]:
    """List all placement invoices with company, candidate and job names."""
    query = (
        select(
            PlacementInvoice,
            EmployerProfile.company_name,
            CandidateProfile.full_name,
            JobPosting.title,
        )
        .join(EmployerProfile, PlacementInvoice.employer_id == EmployerProfile.id)
        .join(CandidateProfile, PlacementInvoice.candidate_id == CandidateProfile.id)
        .join(JobPosting, PlacementInvoice.job_id == JobPosting.id)
        .order_by(PlacementInvoice.created_at.desc())
    )
    if status:
        query = query.where(PlacementInvoice.status == status)
    query = query.limit(limit).offset(offset)

    result = await session.execute(query)
    return [
        {
            **invoice_to_dict(invoice),
            "company_name": company_name,
            "candidate_name": candidate_name,
            "job_title": job_title,
        }
        for invoice, company_name, candidate_name, job_title in result.all()
    ]


async def void_invoice(
    session: AsyncSession,
    invoice_id: str,
    voided_by: Optional[str] = None,
) -> dict[str, Any]:
    """
    Void an invoice that has not been paid.

    Only the local record changes; voiding on the provider side is done
    in the provider's dashboard.

    Raises:
        NotFoundError: If the invoice does not exist
        ConflictError: If the invoice is already paid or void
    """
    invoice = await session.get(PlacementInvoice, invoice_id)
    if not invoice:
        raise NotFoundError("Invoice not found")

    previous = invoice.status
    # Conditional on the current status so a concurrent payment is never overwritten
    result = await session.execute(
        update(PlacementInvoice)
        .where(
            PlacementInvoice.id == invoice.id,
            PlacementInvoice.status.in_(statuses_leading_to(InvoiceStatus.VOID)),
        )
        .values(status=InvoiceStatus.VOID)
    )
    await session.commit()

    if result.rowcount == 0:
        await session.refresh(invoice)
        raise ConflictError(f"Cannot void a {invoice.status.value} invoice")

    await session.refresh(invoice)
    logger.info(f"Voided invoice {invoice.id} (was {previous.value})")
    log_audit_event(
        action=AuditAction.VOID_INVOICE,
        resource_type=ResourceType.INVOICE,
        resource_id=invoice.id,
        user_id=voided_by,
        details={"from_status": previous.value},
    )
    return invoice_to_dict(invoice)


async def get_stats(session: AsyncSession) -> dict[str, Any]:
    """Headline numbers for the admin dashboard."""
    total_hires = await session.scalar(select(func.count(HireConfirmation.id)))
    active_jobs = await session.scalar(
        select(func.count(JobPosting.id)).where(JobPosting.status == JobStatus.OPEN)
    )
    total_revenue = await session.scalar(
        select(func.coalesce(func.sum(PlacementInvoice.amount_cents), 0)).where(
            PlacementInvoice.status == InvoiceStatus.PAID
        )
    )
    outstanding = await session.scalar(
        select(func.count(PlacementInvoice.id)).where(
            PlacementInvoice.status.in_(
                [InvoiceStatus.DRAFT, InvoiceStatus.SENT, InvoiceStatus.DUE]
            )
        )
    )

    return {
        "total_hires": total_hires or 0,
        "active_jobs": active_jobs or 0,
        "total_revenue_cents": int(total_revenue or 0),
        "outstanding_invoices": outstanding or 0,
    }
