"""Employer-related Pydantic schemas."""

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from api.schemas.common import validate_parish


class EmployerProfileRequest(BaseModel):
    """Create or replace the caller's employer profile."""

    company_name: str = Field(min_length=1, max_length=255)
    contact_name: str = Field(min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    parish: str
    website: Optional[str] = Field(None, max_length=500)

    @field_validator("company_name", "contact_name", mode="before")
    @classmethod
    def strip_names(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("parish")
    @classmethod
    def check_parish(cls, v: str) -> str:
        return validate_parish(v)


class EmployerResponse(BaseModel):
    id: str
    user_id: str
    company_name: str
    contact_name: str
    phone: Optional[str] = None
    parish: str
    website: Optional[str] = None
    accepted_agreement_at: Optional[str] = None
    has_billing_customer: bool = False
