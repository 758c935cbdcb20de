"""Job posting service functions."""

from typing import Any, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.services.employers import require_employer_profile
from core.audit import AuditAction, ResourceType, log_audit_event
from core.errors import ForbiddenError, NotFoundError
from core.utils.datetime import isoformat
from database.models.employers import EmployerProfile
from database.models.jobs import JobPosting, JobStatus

logger = logging.getLogger(__name__)


def job_to_dict(job: JobPosting, company_name: Optional[str] = None) -> dict[str, Any]:
    data = {
        "id": job.id,
        "employer_id": job.employer_id,
        "title": job.title,
        "description": job.description,
        "parish": job.parish,
        "role_category": job.role_category,
        "status": job.status.value,
        "created_at": isoformat(job.created_at),
    }
    if company_name is not None:
        data["company_name"] = company_name
    return data


async def create_job(
    session: AsyncSession,
    user_id: str,
    title: str,
    description: str,
    parish: str,
    role_category: str,
) -> dict[str, Any]:
    """
    Post a job for the caller's employer profile.

    Raises:
        ForbiddenError: If there is no profile or the placement agreement
            has not been accepted
    """
    employer = await require_employer_profile(session, user_id)
    if employer.accepted_agreement_at is None:
        raise ForbiddenError("Placement agreement not accepted")

    job = JobPosting(
        employer_id=employer.id,
        title=title,
        description=description,
        parish=parish,
        role_category=role_category,
    )
    session.add(job)
    await session.commit()

    logger.info(f"Employer {employer.id} posted job {job.id} ({role_category})")
    log_audit_event(
        action=AuditAction.CREATE,
        resource_type=ResourceType.JOB,
        resource_id=job.id,
        user_id=user_id,
        details={"role_category": role_category, "parish": parish},
    )
    return job_to_dict(job)


async def list_open_jobs(
    session: AsyncSession,
    role_category: Optional[str] = None,
    parish: Optional[str] = None,
) -> list[dict[str, Any]]:
    """Public listing of open jobs with the posting company's name."""
    query = (
        select(JobPosting, EmployerProfile.company_name)
        .join(EmployerProfile, JobPosting.employer_id == EmployerProfile.id)
        .where(JobPosting.status == JobStatus.OPEN)
        .order_by(JobPosting.created_at.desc())
    )
    if role_category:
        query = query.where(JobPosting.role_category == role_category)
    if parish:
        query = query.where(JobPosting.parish == parish)

    result = await session.execute(query)
    return [job_to_dict(job, company_name) for job, company_name in result.all()]


async def list_employer_jobs(session: AsyncSession, user_id: str) -> list[dict[str, Any]]:
    """All jobs, open or closed, posted by the caller."""
    result = await session.execute(
        select(JobPosting)
        .join(EmployerProfile, JobPosting.employer_id == EmployerProfile.id)
        .where(EmployerProfile.user_id == user_id)
        .order_by(JobPosting.created_at.desc())
    )
    return [job_to_dict(job) for job in result.scalars().all()]


async def get_job_owner_user_id(session: AsyncSession, job_id: str) -> str:
    """
    User id of the employer that owns ``job_id``.

    Raises:
        NotFoundError: If the job does not exist
    """
    result = await session.execute(
        select(EmployerProfile.user_id)
        .join(JobPosting, JobPosting.employer_id == EmployerProfile.id)
        .where(JobPosting.id == job_id)
    )
    owner = result.scalar_one_or_none()
    if owner is None:
        raise NotFoundError("Job not found")
    return owner


async def close_job(session: AsyncSession, job_id: str, user_id: str) -> dict[str, Any]:
    """
    Close one of the caller's jobs. Closing a closed job is a no-op.

    Raises:
        NotFoundError: If the job does not exist
        ForbiddenError: If the caller does not own the job
    """
    if await get_job_owner_user_id(session, job_id) != user_id:
        raise ForbiddenError("Not the owner of this job")

    job = await session.get(JobPosting, job_id)
    if job.status != JobStatus.CLOSED:
        job.status = JobStatus.CLOSED
        await session.commit()
        logger.info(f"Closed job {job.id}")
        log_audit_event(
            action=AuditAction.UPDATE,
            resource_type=ResourceType.JOB,
            resource_id=job.id,
            user_id=user_id,
            details={"status": JobStatus.CLOSED.value},
        )
    return job_to_dict(job)
