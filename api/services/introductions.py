"""
Introduction ledger.

Admin-made introductions of a candidate to a job. The ledger is
append-only and holds at most one introduction per (job, candidate) pair;
the pair is enforced by a unique constraint, so concurrent duplicates are
detected on insert rather than by reading first.
"""

from typing import Any, Optional
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.audit import AuditAction, ResourceType, log_audit_event
from core.errors import ConflictError, NotFoundError
from core.utils.datetime import isoformat
from database.models.candidates import CandidateProfile
from database.models.employers import EmployerProfile
from database.models.introductions import HireConfirmation, Introduction
from database.models.invoices import PlacementInvoice
from database.models.jobs import JobPosting

logger = logging.getLogger(__name__)


async def create_introduction(
    session: AsyncSession,
    job_id: str,
    candidate_id: str,
    note: Optional[str] = None,
    introduced_by: Optional[str] = None,
) -> str:
    """
    Introduce a candidate to a job and return the introduction id.

    Raises:
        NotFoundError: If the job or the candidate does not exist
        ConflictError: If this candidate was already introduced to this job
    """
    if await session.get(JobPosting, job_id) is None:
        raise NotFoundError("Job not found")
    if await session.get(CandidateProfile, candidate_id) is None:
        raise NotFoundError("Candidate not found")

    introduction = Introduction(job_id=job_id, candidate_id=candidate_id, note=note)
    session.add(introduction)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.info(f"Duplicate introduction of candidate {candidate_id} to job {job_id}")
        raise ConflictError("Candidate already introduced to this job")

    logger.info(f"Introduced candidate {candidate_id} to job {job_id}")
    log_audit_event(
        action=AuditAction.CREATE,
        resource_type=ResourceType.INTRODUCTION,
        resource_id=introduction.id,
        user_id=introduced_by,
        details={"job_id": job_id, "candidate_id": candidate_id},
    )
    return introduction.id


async def list_introductions(
    session: AsyncSession,
    job_id: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> list[dict[str, Any]]:
    """
    Every introduction with its job, company and candidate, plus hire and
    invoice state so the admin team can spot hires that were never invoiced.
    """
    query = (
        select(
            Introduction,
            JobPosting.title,
            EmployerProfile.company_name,
            CandidateProfile.full_name,
            HireConfirmation.id,
            PlacementInvoice.status,
        )
        .join(JobPosting, Introduction.job_id == JobPosting.id)
        .join(EmployerProfile, JobPosting.employer_id == EmployerProfile.id)
        .join(CandidateProfile, Introduction.candidate_id == CandidateProfile.id)
        .outerjoin(HireConfirmation, HireConfirmation.introduction_id == Introduction.id)
        .outerjoin(PlacementInvoice, PlacementInvoice.introduction_id == Introduction.id)
        .order_by(Introduction.introduced_at.desc())
    )
    if job_id:
        query = query.where(Introduction.job_id == job_id)
    query = query.limit(limit).offset(offset)

    result = await session.execute(query)
    return [
        {
            "id": intro.id,
            "job_id": intro.job_id,
            "candidate_id": intro.candidate_id,
            "note": intro.note,
            "introduced_at": isoformat(intro.introduced_at),
            "job_title": job_title,
            "company_name": company_name,
            "candidate_name": candidate_name,
            "hire_id": hire_id,
            "invoice_status": invoice_status.value if invoice_status else None,
        }
        for intro, job_title, company_name, candidate_name, hire_id, invoice_status in result.all()
    ]
