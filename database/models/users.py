from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    DateTime,
    func,
    Enum as SQLEnum,
)
from database.engine import Base
from database.types import new_id
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum


# ==================== User Role ===================== #
class UserRole(str, PyEnum):
    CANDIDATE = "candidate"  # job seeker with a candidate profile
    EMPLOYER = "employer"  # hiring organization with an employer profile
    ADMIN = "admin"  # internal team making introductions


# Roles a user may pick at self-registration
SELF_REGISTRATION_ROLES = frozenset({UserRole.CANDIDATE, UserRole.EMPLOYER})


class User(Base):
    """
    Login identity. The role is fixed at creation and never updated.
    """

    __tablename__: str = "users"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )
