"""Candidate-related Pydantic schemas."""

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from api.schemas.common import validate_parish, validate_role_category
from database.models.candidates import CandidateStatus


class CandidateProfileRequest(BaseModel):
    """Create or replace the caller's candidate profile."""

    full_name: str = Field(min_length=1, max_length=200, description="Candidate's full name")
    phone: Optional[str] = Field(None, max_length=30, description="Contact phone number")
    parish: str = Field(description="Home parish")
    role_specialties: list[str] = Field(
        default_factory=list, description="Role categories the candidate can fill"
    )
    experience_summary: Optional[str] = Field(None, max_length=5000)
    resume_url: Optional[str] = Field(None, max_length=500, description="Link to a resume")
    status: Optional[CandidateStatus] = Field(None, description="active or inactive")

    @field_validator("full_name", mode="before")
    @classmethod
    def strip_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("parish")
    @classmethod
    def check_parish(cls, v: str) -> str:
        return validate_parish(v)

    @field_validator("role_specialties")
    @classmethod
    def check_specialties(cls, v: list[str]) -> list[str]:
        """Every specialty must be a known role category."""
        return [validate_role_category(tag) for tag in v]


class CandidateResponse(BaseModel):
    """Candidate profile."""

    id: str = Field(description="Unique candidate identifier")
    user_id: str
    full_name: str
    phone: Optional[str] = None
    parish: str
    role_specialties: list[str]
    experience_summary: Optional[str] = None
    resume_url: Optional[str] = None
    status: str
