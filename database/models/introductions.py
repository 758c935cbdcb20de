"""
Introductions Module

Admin-curated introductions between a job and a candidate, and the
employer's one-time confirmation that the introduced candidate was hired.
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    ForeignKey,
    DateTime,
    Date,
    func,
    Text,
    UniqueConstraint,
)
from database.engine import Base
from database.types import new_id
from core.utils.datetime import now
from datetime import date, datetime


class Introduction(Base):
    """
    One job x one candidate. Append-only; the pair is unique.
    """

    __tablename__ = "introductions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    job_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("job_postings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    candidate_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("candidates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    note: Mapped[str | None] = mapped_column(Text)
    introduced_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("job_id", "candidate_id", name="uq_introductions_job_candidate"),
    )


class HireConfirmation(Base):
    """
    Employer-asserted hire. At most one per introduction, never updated.
    """

    __tablename__ = "hire_confirmations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    introduction_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("introductions.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    confirmed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )
