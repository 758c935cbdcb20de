"""Authentication request/response schemas."""

from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """
    Self-registration request.

    ``role`` is checked by the service so an admin role or an unknown role
    is reported as a validation error rather than a schema failure.
    """

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    role: str = Field(..., description="candidate or employer")


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., max_length=72)


class UserResponse(BaseModel):
    """Account information."""

    id: str
    email: str
    role: str
    created_at: Optional[str] = None


class AuthResponse(BaseModel):
    """Authentication response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
