"""Job posting schemas."""

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from api.schemas.common import validate_parish, validate_role_category


class JobCreateRequest(BaseModel):
    """New job posting."""

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=10000)
    parish: str
    role_category: str = Field(description="Single role category used for matching")

    @field_validator("parish")
    @classmethod
    def check_parish(cls, v: str) -> str:
        return validate_parish(v)

    @field_validator("role_category")
    @classmethod
    def check_role_category(cls, v: str) -> str:
        return validate_role_category(v)


class JobResponse(BaseModel):
    id: str
    employer_id: str
    title: str
    description: str
    parish: str
    role_category: str
    status: str
    created_at: Optional[str] = None
    company_name: Optional[str] = None
