"""Employer profile service functions."""

from typing import Any, Optional
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.services.invoices import invoice_to_dict
from core.audit import AuditAction, ResourceType, log_audit_event
from core.errors import NotFoundError
from core.utils.datetime import isoformat, now
from database.models.candidates import CandidateProfile
from database.models.employers import EmployerProfile
from database.models.introductions import HireConfirmation, Introduction
from database.models.invoices import PlacementInvoice
from database.models.jobs import JobPosting

logger = logging.getLogger(__name__)


def employer_to_dict(employer: EmployerProfile) -> dict[str, Any]:
    return {
        "id": employer.id,
        "user_id": employer.user_id,
        "company_name": employer.company_name,
        "contact_name": employer.contact_name,
        "phone": employer.phone,
        "parish": employer.parish,
        "website": employer.website,
        "accepted_agreement_at": isoformat(employer.accepted_agreement_at),
        "has_billing_customer": employer.stripe_customer_id is not None,
    }


async def get_employer_by_user(
    session: AsyncSession, user_id: str
) -> Optional[EmployerProfile]:
    result = await session.execute(
        select(EmployerProfile).where(EmployerProfile.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def require_employer_profile(session: AsyncSession, user_id: str) -> EmployerProfile:
    """
    Employer profile of ``user_id``.

    Raises:
        NotFoundError: If the employer has not created a profile yet
    """
    employer = await get_employer_by_user(session, user_id)
    if not employer:
        raise NotFoundError("Employer profile not found")
    return employer


async def get_my_employer_profile(
    session: AsyncSession, user_id: str
) -> Optional[dict[str, Any]]:
    employer = await get_employer_by_user(session, user_id)
    return employer_to_dict(employer) if employer else None


async def upsert_employer_profile(
    session: AsyncSession,
    user_id: str,
    company_name: str,
    contact_name: str,
    parish: str,
    phone: Optional[str] = None,
    website: Optional[str] = None,
) -> dict[str, Any]:
    """
    Create or replace the profile owned by ``user_id``.

    The agreement timestamp and billing customer are never touched here.
    """
    fields = {
        "company_name": company_name,
        "contact_name": contact_name,
        "phone": phone,
        "parish": parish,
        "website": website,
    }

    employer = await get_employer_by_user(session, user_id)
    if employer is None:
        employer = EmployerProfile(user_id=user_id, **fields)
        session.add(employer)
        try:
            await session.commit()
            logger.info(f"Created employer profile {employer.id}")
            return employer_to_dict(employer)
        except IntegrityError:
            await session.rollback()
            employer = await get_employer_by_user(session, user_id)
            if employer is None:
                raise

    for key, value in fields.items():
        setattr(employer, key, value)
    await session.commit()
    return employer_to_dict(employer)


async def accept_agreement(session: AsyncSession, user_id: str) -> dict[str, Any]:
    """
    Record acceptance of the placement agreement.

    The first acceptance time is kept; repeating the call is a no-op.
    """
    employer = await require_employer_profile(session, user_id)
    if employer.accepted_agreement_at is None:
        employer.accepted_agreement_at = now()
        await session.commit()
        log_audit_event(
            action=AuditAction.ACCEPT_AGREEMENT,
            resource_type=ResourceType.EMPLOYER,
            resource_id=employer.id,
            user_id=user_id,
        )
    return employer_to_dict(employer)


async def list_employer_introductions(
    session: AsyncSession, user_id: str
) -> list[dict[str, Any]]:
    """
    Introductions made on the caller's jobs.

    Each row carries the candidate's name and summary, the job title, and
    the hire id once the employer has confirmed the hire.
    """
    employer = await get_employer_by_user(session, user_id)
    if not employer:
        return []

    result = await session.execute(
        select(
            Introduction,
            CandidateProfile.full_name,
            CandidateProfile.experience_summary,
            JobPosting.title,
            HireConfirmation.id,
        )
        .join(CandidateProfile, Introduction.candidate_id == CandidateProfile.id)
        .join(JobPosting, Introduction.job_id == JobPosting.id)
        .outerjoin(HireConfirmation, HireConfirmation.introduction_id == Introduction.id)
        .where(JobPosting.employer_id == employer.id)
        .order_by(Introduction.introduced_at.desc())
    )

    return [
        {
            "id": intro.id,
            "job_id": intro.job_id,
            "candidate_id": intro.candidate_id,
            "note": intro.note,
            "introduced_at": isoformat(intro.introduced_at),
            "candidate_name": candidate_name,
            "experience_summary": experience_summary,
            "job_title": job_title,
            "hire_id": hire_id,
        }
        for intro, candidate_name, experience_summary, job_title, hire_id in result.all()
    ]


async def list_employer_invoices(
    session: AsyncSession, user_id: str
) -> list[dict[str, Any]]:
    """Placement invoices billed to the caller, with candidate and job names."""
    employer = await get_employer_by_user(session, user_id)
    if not employer:
        return []

    result = await session.execute(
        select(PlacementInvoice, CandidateProfile.full_name, JobPosting.title)
        .join(CandidateProfile, PlacementInvoice.candidate_id == CandidateProfile.id)
        .join(JobPosting, PlacementInvoice.job_id == JobPosting.id)
        .where(PlacementInvoice.employer_id == employer.id)
        .order_by(PlacementInvoice.created_at.desc())
    )

    return [
        {**invoice_to_dict(invoice), "candidate_name": candidate_name, "job_title": job_title}
        for invoice, candidate_name, job_title in result.all()
    ]
