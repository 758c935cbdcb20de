"""
Jobs Module

Job postings owned by an employer.
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    ForeignKey,
    DateTime,
    func,
    Text,
    Enum as SQLEnum,
    Index,
)
from database.engine import Base
from database.types import new_id
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum


class JobStatus(str, PyEnum):
    """Status of job posting."""

    OPEN = "open"
    CLOSED = "closed"


class JobPosting(Base):
    """
    Job posting with a single role category used for matching.
    """

    __tablename__ = "job_postings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    employer_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("employers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    parish: Mapped[str] = mapped_column(String(100), nullable=False)
    role_category: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[JobStatus] = mapped_column(
        SQLEnum(JobStatus, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=JobStatus.OPEN,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    __table_args__ = (
        Index("idx_job_postings_status_created", "status", "created_at"),
    )
