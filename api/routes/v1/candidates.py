"""
Candidate endpoints.

Candidates read and maintain their own profile.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import require_candidate
from api.schemas.candidates import CandidateProfileRequest, CandidateResponse
from api.services import candidates as candidate_service
from core.middleware.authentication import Principal
from database.engine import get_db

router = APIRouter()


@router.get(
    "/me",
    response_model=Optional[CandidateResponse],
    summary="Get My Profile",
    description="The caller's candidate profile, or null before it is created.",
)
async def get_my_profile(
    principal: Principal = Depends(require_candidate),
    db: AsyncSession = Depends(get_db),
):
    return await candidate_service.get_my_candidate_profile(db, principal.user_id)


@router.put(
    "/me",
    response_model=CandidateResponse,
    summary="Save My Profile",
    description="Create or replace the caller's candidate profile.",
)
async def save_my_profile(
    data: CandidateProfileRequest,
    principal: Principal = Depends(require_candidate),
    db: AsyncSession = Depends(get_db),
):
    return await candidate_service.upsert_candidate_profile(
        db,
        user_id=principal.user_id,
        full_name=data.full_name,
        parish=data.parish,
        role_specialties=data.role_specialties,
        phone=data.phone,
        experience_summary=data.experience_summary,
        resume_url=data.resume_url,
        status=data.status,
    )
