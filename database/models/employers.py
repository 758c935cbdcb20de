"""
Employers Module

Employer profiles, placement agreement acceptance and billing customer link.
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    ForeignKey,
    DateTime,
)
from database.engine import Base
from database.types import new_id
from datetime import datetime


class EmployerProfile(Base):
    """
    Employer profile owned 1:1 by an employer user.

    ``accepted_agreement_at`` stays null until the placement agreement is
    accepted; no job can be posted before that. ``stripe_customer_id`` is
    filled the first time the employer is invoiced and reused afterwards.
    """

    __tablename__ = "employers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(30))
    parish: Mapped[str] = mapped_column(String(100), nullable=False)
    website: Mapped[str | None] = mapped_column(String(500))

    # Billing
    stripe_customer_id: Mapped[str | None] = mapped_column(String(100))
    accepted_agreement_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True)
    )
