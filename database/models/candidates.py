"""
Candidates Module

Candidate profiles owned 1:1 by a candidate user.
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    ForeignKey,
    Text,
    Enum as SQLEnum,
)
from database.engine import Base
from database.types import new_id
from database.types import SpecialtySet
from enum import Enum as PyEnum


class CandidateStatus(str, PyEnum):
    """Whether a candidate is available for matching."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class CandidateProfile(Base):
    """
    Candidate profile with home parish and role specialties.
    """

    __tablename__ = "candidates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(30))
    parish: Mapped[str] = mapped_column(String(100), nullable=False)
    role_specialties: Mapped[frozenset[str]] = mapped_column(
        SpecialtySet, nullable=False, default=lambda: frozenset()
    )
    experience_summary: Mapped[str | None] = mapped_column(Text)
    resume_url: Mapped[str | None] = mapped_column(String(500))
    status: Mapped[CandidateStatus] = mapped_column(
        SQLEnum(CandidateStatus, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CandidateStatus.ACTIVE,
        index=True,
    )
