"""
Authentication endpoints.

Provides:
- Email/password registration for candidates and employers
- Login issuing a JWT (response body and HTTP-only cookie)
- Logout
- Current account lookup
"""

import logging
from typing import Any
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from api.schemas.common import SuccessResponse
from api.services import users as user_service
from core.config import settings
from core.middleware.authentication import Principal, get_current_principal
from core.security import create_access_token
from database.engine import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_token(response: Response, user: dict[str, Any]) -> AuthResponse:
    """Sign a token for ``user`` and also set it as the auth cookie."""
    token = create_access_token(user["id"], user["email"], user["role"])
    expires_in = settings.access_token_expire_minutes * 60

    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=expires_in,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="lax",
    )
    return AuthResponse(
        access_token=token,
        expires_in=expires_in,
        user=UserResponse(**user),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a candidate or employer account and log it in.

    Admin accounts cannot be self-registered.
    """
    user = await user_service.register_user(db, data.email, data.password, data.role)
    return _issue_token(response, user)


@router.post("/login", response_model=AuthResponse)
async def login(
    data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Log in with email and password."""
    user = await user_service.authenticate_user(db, data.email, data.password)
    logger.info(f"User {user['id']} logged in")
    return _issue_token(response, user)


@router.post("/logout", response_model=SuccessResponse)
async def logout(response: Response):
    """Clear the auth cookie. Bearer tokens simply expire."""
    response.delete_cookie(settings.auth_cookie_name)
    return SuccessResponse()


@router.get("/me", response_model=UserResponse)
async def me(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Current account."""
    return await user_service.get_user(db, principal.user_id)
