"""User account service functions."""

from typing import Any, Optional
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.audit import AuditAction, ResourceType, log_audit_event
from core.errors import ConflictError, InputValidationError, NotFoundError, UnauthorizedError
from core.security import hash_password, verify_password
from core.utils.datetime import isoformat
from core.utils.formatting import mask_email
from database.models.users import SELF_REGISTRATION_ROLES, User, UserRole

logger = logging.getLogger(__name__)


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "role": user.role.value,
        "created_at": isoformat(user.created_at),
    }


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def register_user(
    session: AsyncSession,
    email: str,
    password: str,
    role: str,
) -> dict[str, Any]:
    """
    Create a candidate or employer account.

    Raises:
        InputValidationError: If the role cannot be self-assigned
        ConflictError: If the email is already registered
    """
    try:
        user_role = UserRole(role)
    except ValueError:
        raise InputValidationError(f"Unsupported role: {role}")
    if user_role not in SELF_REGISTRATION_ROLES:
        raise InputValidationError(f"Unsupported role: {role}")

    user = User(
        email=normalize_email(email),
        password_hash=hash_password(password),
        role=user_role,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("Email already registered")

    logger.info(f"Registered {user_role.value} {mask_email(user.email)}")
    log_audit_event(
        action=AuditAction.CREATE,
        resource_type=ResourceType.USER,
        resource_id=user.id,
        user_id=user.id,
        details={"role": user_role.value},
    )
    return user_to_dict(user)


async def authenticate_user(
    session: AsyncSession,
    email: str,
    password: str,
) -> dict[str, Any]:
    """
    Check credentials and return the account.

    Raises:
        UnauthorizedError: If the email is unknown or the password is wrong
    """
    result = await session.execute(
        select(User).where(User.email == normalize_email(email))
    )
    user = result.scalar_one_or_none()

    if not user or not verify_password(password, user.password_hash):
        logger.warning(f"Failed login for {mask_email(normalize_email(email))}")
        raise UnauthorizedError("Invalid email or password")

    return user_to_dict(user)


async def get_user(session: AsyncSession, user_id: str) -> dict[str, Any]:
    """Get an account by id."""
    user = await session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user_to_dict(user)


async def seed_admin(
    session: AsyncSession,
    email: Optional[str],
    password: Optional[str],
) -> Optional[str]:
    """
    Create the configured admin account if it does not exist yet.

    Admins cannot self-register; this is how the first one is provisioned.
    Returns the admin user id, or None when no admin is configured.
    """
    if not email or not password:
        return None

    normalized = normalize_email(email)
    result = await session.execute(select(User).where(User.email == normalized))
    existing = result.scalar_one_or_none()
    if existing:
        if existing.role != UserRole.ADMIN:
            logger.warning(f"Admin seed email {mask_email(normalized)} belongs to a {existing.role.value}")
        return existing.id

    admin = User(
        email=normalized,
        password_hash=hash_password(password),
        role=UserRole.ADMIN,
    )
    session.add(admin)
    try:
        await session.commit()
    except IntegrityError:
        # Another worker seeded it concurrently
        await session.rollback()
        result = await session.execute(select(User.id).where(User.email == normalized))
        return result.scalar_one()

    logger.info(f"Seeded admin account {mask_email(normalized)}")
    return admin.id
