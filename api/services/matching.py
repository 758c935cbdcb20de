"""
Candidate matching for job postings.

A candidate matches a job when the job's role category is one of the
candidate's specialty tags and the candidate is active. Matching is a
read-only query; nothing is recorded.
"""

from typing import Any, Iterable
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.services.candidates import candidate_to_dict
from core.errors import NotFoundError
from database.models.candidates import CandidateProfile, CandidateStatus
from database.models.jobs import JobPosting

logger = logging.getLogger(__name__)


def candidate_matches(role_category: str, specialties: Iterable[str]) -> bool:
    """Whether a specialty set covers ``role_category`` (exact tag match)."""
    return role_category in frozenset(specialties)


async def find_matches(session: AsyncSession, job_id: str) -> list[dict[str, Any]]:
    """
    Active candidates whose specialties include the job's role category.

    Specialty data that cannot be decoded reads back as an empty set, so a
    malformed row simply never matches.

    Raises:
        NotFoundError: If the job does not exist
    """
    role_category = await session.scalar(
        select(JobPosting.role_category).where(JobPosting.id == job_id)
    )
    if role_category is None:
        raise NotFoundError("Job not found")

    result = await session.execute(
        select(CandidateProfile).where(CandidateProfile.status == CandidateStatus.ACTIVE)
    )
    matches = [
        candidate_to_dict(candidate)
        for candidate in result.scalars().all()
        if candidate_matches(role_category, candidate.role_specialties)
    ]

    logger.debug(f"Job {job_id} ({role_category}): {len(matches)} matching candidates")
    return matches
