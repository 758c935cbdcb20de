"""
Hire confirmation and placement invoicing.

Confirming a hire is a multi-step sequence that is not atomic:

1. the hire confirmation is committed (at most once per introduction,
   enforced by a unique constraint);
2. the employer's billing customer is resolved, created lazily;
3. the provider invoice is created and sent;
4. the local placement invoice is written, ``sent`` with the provider
   reference or ``draft`` when no provider is configured.

If a provider call fails after step 1 the hire stays recorded and no
invoice is written. ``ensure_invoice_for_hire`` picks the sequence up
again from wherever it stopped.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.audit import AuditAction, ResourceType, log_audit_event
from core.constants import PLACEMENT_CURRENCY, PLACEMENT_FEE_CENTS
from core.errors import ConflictError, ExternalServiceError, ForbiddenError, NotFoundError
from core.integrations.invoicing import InvoicingProvider
from core.middleware.authentication import Principal
from core.utils.formatting import format_cents
from database.models.candidates import CandidateProfile
from database.models.employers import EmployerProfile
from database.models.introductions import HireConfirmation, Introduction
from database.models.invoices import InvoiceStatus, PlacementInvoice, can_transition
from database.models.jobs import JobPosting
from database.models.users import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacementContext:
    """Everything the invoicing steps need, read once from the ledger."""

    introduction_id: str
    job_id: str
    candidate_id: str
    candidate_name: str
    employer_id: str
    employer_user_id: str
    employer_email: str
    company_name: str
    stripe_customer_id: Optional[str]


async def load_placement_context(
    session: AsyncSession, introduction_id: str
) -> PlacementContext:
    """
    Resolve introduction -> job -> employer -> user, plus the candidate.

    Raises:
        NotFoundError: If the introduction does not exist
    """
    result = await session.execute(
        select(
            Introduction.id,
            Introduction.job_id,
            Introduction.candidate_id,
            CandidateProfile.full_name,
            EmployerProfile.id,
            EmployerProfile.user_id,
            User.email,
            EmployerProfile.company_name,
            EmployerProfile.stripe_customer_id,
        )
        .join(JobPosting, Introduction.job_id == JobPosting.id)
        .join(EmployerProfile, JobPosting.employer_id == EmployerProfile.id)
        .join(User, EmployerProfile.user_id == User.id)
        .join(CandidateProfile, Introduction.candidate_id == CandidateProfile.id)
        .where(Introduction.id == introduction_id)
    )
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("Introduction not found")
    return PlacementContext(*row)


def _hire_result(hire_id: str, invoice: PlacementInvoice) -> dict[str, Any]:
    return {
        "hire_id": hire_id,
        "introduction_id": invoice.introduction_id,
        "invoice_id": invoice.id,
        "invoice_status": invoice.status.value,
        "stripe_invoice_id": invoice.stripe_invoice_id,
        "amount_cents": invoice.amount_cents,
        "currency": invoice.currency,
    }


async def _ensure_customer(
    session: AsyncSession,
    ctx: PlacementContext,
    provider: InvoicingProvider,
) -> str:
    """
    Billing customer for the employer, created on first use.

    The reference is stored with a conditional update so two hires racing
    for the same employer keep whichever customer was stored first.
    """
    if ctx.stripe_customer_id:
        return ctx.stripe_customer_id

    customer_ref = await provider.ensure_customer(
        ctx.employer_id, ctx.employer_email, ctx.company_name
    )
    result = await session.execute(
        update(EmployerProfile)
        .where(
            EmployerProfile.id == ctx.employer_id,
            EmployerProfile.stripe_customer_id.is_(None),
        )
        .values(stripe_customer_id=customer_ref)
    )
    await session.commit()

    if result.rowcount == 0:
        stored = await session.scalar(
            select(EmployerProfile.stripe_customer_id).where(
                EmployerProfile.id == ctx.employer_id
            )
        )
        logger.info(f"Employer {ctx.employer_id} already had billing customer {stored}")
        return stored

    logger.info(f"Stored billing customer {customer_ref} for employer {ctx.employer_id}")
    return customer_ref


async def _send_provider_invoice(
    session: AsyncSession,
    ctx: PlacementContext,
    provider: InvoicingProvider,
) -> str:
    """Create and send the placement invoice remotely; returns its id."""
    customer_ref = await _ensure_customer(session, ctx, provider)
    invoice_ref = await provider.create_invoice(
        customer_ref,
        PLACEMENT_FEE_CENTS,
        PLACEMENT_CURRENCY,
        f"Placement fee for {ctx.candidate_name}",
        idempotency_key=f"placement-{ctx.introduction_id}",
    )
    sent_id = await provider.send_invoice(invoice_ref.id)
    logger.info(
        f"Sent provider invoice {sent_id} for introduction {ctx.introduction_id} "
        f"({format_cents(PLACEMENT_FEE_CENTS, PLACEMENT_CURRENCY)})"
    )
    return sent_id


async def _issue_invoice(
    session: AsyncSession,
    ctx: PlacementContext,
    provider: Optional[InvoicingProvider],
    issued_by: Optional[str] = None,
) -> PlacementInvoice:
    """
    Run the invoicing steps and write the local placement invoice.

    When another request wrote the invoice first, that invoice is returned.
    """
    stripe_invoice_id = None
    if provider is not None:
        stripe_invoice_id = await _send_provider_invoice(session, ctx, provider)

    invoice = PlacementInvoice(
        employer_id=ctx.employer_id,
        candidate_id=ctx.candidate_id,
        job_id=ctx.job_id,
        introduction_id=ctx.introduction_id,
        amount_cents=PLACEMENT_FEE_CENTS,
        currency=PLACEMENT_CURRENCY,
        status=InvoiceStatus.SENT if stripe_invoice_id else InvoiceStatus.DRAFT,
        stripe_invoice_id=stripe_invoice_id,
    )
    session.add(invoice)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        existing = await session.scalar(
            select(PlacementInvoice).where(
                PlacementInvoice.introduction_id == ctx.introduction_id
            )
        )
        if existing is None:
            raise
        logger.warning(
            f"Invoice for introduction {ctx.introduction_id} was written concurrently"
        )
        return existing

    log_audit_event(
        action=AuditAction.ISSUE_INVOICE,
        resource_type=ResourceType.INVOICE,
        resource_id=invoice.id,
        user_id=issued_by,
        details={
            "introduction_id": ctx.introduction_id,
            "status": invoice.status.value,
            "stripe_invoice_id": stripe_invoice_id,
            "amount_cents": invoice.amount_cents,
        },
    )
    return invoice


async def confirm_hire(
    session: AsyncSession,
    introduction_id: str,
    start_date: date,
    principal: Principal,
    provider: Optional[InvoicingProvider],
) -> dict[str, Any]:
    """
    Record that the introduced candidate was hired and invoice the employer.

    Args:
        session: Database session
        introduction_id: Introduction being confirmed
        start_date: Candidate's first day
        principal: Employer confirming the hire
        provider: Invoicing provider, or None to leave the invoice in draft

    Returns:
        Hire id and the resulting invoice's id, status and provider id

    Raises:
        NotFoundError: If the introduction does not exist
        ForbiddenError: If the caller does not own the introduction's job
        ConflictError: If the hire was already confirmed
        ExternalServiceError: If the provider failed after the hire was
            recorded; no invoice is written in that case
    """
    ctx = await load_placement_context(session, introduction_id)
    if ctx.employer_user_id != principal.user_id:
        raise ForbiddenError("Not the employer for this introduction")

    hire = HireConfirmation(introduction_id=introduction_id, start_date=start_date)
    session.add(hire)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("Hire already confirmed for this introduction")

    logger.info(f"Hire {hire.id} confirmed for introduction {introduction_id}")
    log_audit_event(
        action=AuditAction.CONFIRM_HIRE,
        resource_type=ResourceType.HIRE_CONFIRMATION,
        resource_id=hire.id,
        user_id=principal.user_id,
        details={
            "introduction_id": introduction_id,
            "start_date": start_date.isoformat(),
        },
    )

    try:
        invoice = await _issue_invoice(session, ctx, provider, issued_by=principal.user_id)
    except ExternalServiceError as e:
        logger.error(
            f"Hire {hire.id} recorded but invoicing failed for introduction "
            f"{introduction_id}: {e.message}"
        )
        raise

    return _hire_result(hire.id, invoice)


async def ensure_invoice_for_hire(
    session: AsyncSession,
    introduction_id: str,
    provider: Optional[InvoicingProvider],
    requested_by: Optional[str] = None,
) -> dict[str, Any]:
    """
    Finish invoicing for a confirmed hire. Safe to call repeatedly.

    - no invoice yet: run the invoicing steps
    - draft invoice never sent, provider now configured: send it
    - anything else: return the invoice as it is

    Raises:
        NotFoundError: If the introduction has no confirmed hire
        ExternalServiceError: If the provider call fails
    """
    hire_id = await session.scalar(
        select(HireConfirmation.id).where(
            HireConfirmation.introduction_id == introduction_id
        )
    )
    if hire_id is None:
        raise NotFoundError("No confirmed hire for this introduction")

    ctx = await load_placement_context(session, introduction_id)
    invoice = await session.scalar(
        select(PlacementInvoice).where(PlacementInvoice.introduction_id == introduction_id)
    )

    if invoice is None:
        logger.info(f"Issuing missing invoice for hire {hire_id}")
        invoice = await _issue_invoice(session, ctx, provider, issued_by=requested_by)

    elif (
        invoice.status == InvoiceStatus.DRAFT
        and invoice.stripe_invoice_id is None
        and provider is not None
    ):
        stripe_invoice_id = await _send_provider_invoice(session, ctx, provider)
        # The invoice may have been voided while the provider calls ran
        await session.refresh(invoice)
        if can_transition(invoice.status, InvoiceStatus.SENT) and invoice.stripe_invoice_id is None:
            invoice.stripe_invoice_id = stripe_invoice_id
            invoice.status = InvoiceStatus.SENT
            await session.commit()
            log_audit_event(
                action=AuditAction.ISSUE_INVOICE,
                resource_type=ResourceType.INVOICE,
                resource_id=invoice.id,
                user_id=requested_by,
                details={
                    "introduction_id": introduction_id,
                    "status": invoice.status.value,
                    "stripe_invoice_id": stripe_invoice_id,
                },
            )

    return _hire_result(hire_id, invoice)
