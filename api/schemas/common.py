"""Common Pydantic schemas shared across the API."""

from typing import Any, Optional
from pydantic import BaseModel, Field

from core.constants import ALLOWED_PARISHES, ROLE_CATEGORIES


def validate_parish(value: str) -> str:
    """Ensure a parish is inside the service area."""
    value = value.strip()
    if value not in ALLOWED_PARISHES:
        raise ValueError(f"Parish must be one of: {', '.join(ALLOWED_PARISHES)}")
    return value


def validate_role_category(value: str) -> str:
    """Ensure a role category is in the catalogue."""
    value = value.strip()
    if value not in ROLE_CATEGORIES:
        raise ValueError(f"Unknown role category: {value}")
    return value


class ErrorDetail(BaseModel):
    """Body of an error response."""

    code: str = Field(description="Error code for programmatic handling")
    message: str = Field(description="Human-readable error message")
    path: Optional[str] = Field(None, description="Request path")
    method: Optional[str] = Field(None, description="Request method")
    details: Optional[Any] = Field(None, description="Field-level validation errors")


class ErrorResponse(BaseModel):
    """Error response model."""

    error: ErrorDetail


class SuccessResponse(BaseModel):
    success: bool = True
