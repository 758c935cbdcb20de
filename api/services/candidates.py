"""Candidate profile service functions."""

from typing import Any, Iterable, Optional
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotFoundError
from database.models.candidates import CandidateProfile, CandidateStatus

logger = logging.getLogger(__name__)


def candidate_to_dict(candidate: CandidateProfile) -> dict[str, Any]:
    return {
        "id": candidate.id,
        "user_id": candidate.user_id,
        "full_name": candidate.full_name,
        "phone": candidate.phone,
        "parish": candidate.parish,
        "role_specialties": sorted(candidate.role_specialties or ()),
        "experience_summary": candidate.experience_summary,
        "resume_url": candidate.resume_url,
        "status": candidate.status.value,
    }


async def _get_by_user(session: AsyncSession, user_id: str) -> Optional[CandidateProfile]:
    result = await session.execute(
        select(CandidateProfile).where(CandidateProfile.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_my_candidate_profile(
    session: AsyncSession, user_id: str
) -> Optional[dict[str, Any]]:
    """Get the caller's profile, or None if it was never created."""
    candidate = await _get_by_user(session, user_id)
    return candidate_to_dict(candidate) if candidate else None


async def upsert_candidate_profile(
    session: AsyncSession,
    user_id: str,
    full_name: str,
    parish: str,
    role_specialties: Iterable[str],
    phone: Optional[str] = None,
    experience_summary: Optional[str] = None,
    resume_url: Optional[str] = None,
    status: Optional[CandidateStatus] = None,
) -> dict[str, Any]:
    """
    Create or replace the profile owned by ``user_id``.

    Specialties are stored as a set; duplicates in the input collapse.
    """
    fields = {
        "full_name": full_name,
        "phone": phone,
        "parish": parish,
        "role_specialties": frozenset(role_specialties),
        "experience_summary": experience_summary,
        "resume_url": resume_url,
    }
    if status is not None:
        fields["status"] = status

    candidate = await _get_by_user(session, user_id)
    if candidate is None:
        candidate = CandidateProfile(user_id=user_id, **fields)
        session.add(candidate)
        try:
            await session.commit()
            logger.info(f"Created candidate profile {candidate.id}")
            return candidate_to_dict(candidate)
        except IntegrityError:
            # Lost a race with a concurrent first save; fall through to update
            await session.rollback()
            candidate = await _get_by_user(session, user_id)
            if candidate is None:
                raise

    for key, value in fields.items():
        setattr(candidate, key, value)
    await session.commit()
    return candidate_to_dict(candidate)


async def list_candidates(
    session: AsyncSession,
    status: Optional[CandidateStatus] = None,
    parish: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> list[dict[str, Any]]:
    """List candidate profiles for the admin team."""
    query = select(CandidateProfile).order_by(CandidateProfile.full_name)
    if status:
        query = query.where(CandidateProfile.status == status)
    if parish:
        query = query.where(CandidateProfile.parish == parish)
    query = query.limit(limit).offset(offset)

    result = await session.execute(query)
    return [candidate_to_dict(c) for c in result.scalars().all()]


async def get_candidate(session: AsyncSession, candidate_id: str) -> dict[str, Any]:
    """Get one candidate profile by id."""
    candidate = await session.get(CandidateProfile, candidate_id)
    if not candidate:
        raise NotFoundError("Candidate not found")
    return candidate_to_dict(candidate)
