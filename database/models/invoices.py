"""
Invoices Module

Placement invoices for the flat recruiting fee and their status lifecycle.
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    Integer,
    ForeignKey,
    DateTime,
    func,
    Enum as SQLEnum,
    Index,
)
from database.engine import Base
from database.types import new_id
from core.constants import PLACEMENT_CURRENCY, PLACEMENT_FEE_CENTS
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum


class InvoiceStatus(str, PyEnum):
    """Status of a placement invoice."""

    DRAFT = "draft"  # recorded locally, not sent to the provider
    SENT = "sent"  # sent to the employer by the provider
    DUE = "due"
    PAID = "paid"
    VOID = "void"


# Forward-only transitions; paid and void are terminal
INVOICE_TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset(
        {InvoiceStatus.SENT, InvoiceStatus.DUE, InvoiceStatus.PAID, InvoiceStatus.VOID}
    ),
    InvoiceStatus.SENT: frozenset(
        {InvoiceStatus.DUE, InvoiceStatus.PAID, InvoiceStatus.VOID}
    ),
    InvoiceStatus.DUE: frozenset({InvoiceStatus.PAID, InvoiceStatus.VOID}),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.VOID: frozenset(),
}


def can_transition(current: InvoiceStatus, target: InvoiceStatus) -> bool:
    """Whether an invoice may move from ``current`` to ``target``."""
    return target in INVOICE_TRANSITIONS[current]


def statuses_leading_to(target: InvoiceStatus) -> list[InvoiceStatus]:
    """Statuses an invoice may be in for a move to ``target`` to be allowed."""
    return [status for status, targets in INVOICE_TRANSITIONS.items() if target in targets]


class PlacementInvoice(Base):
    """
    Billing record for one confirmed hire.

    Employer, candidate and job are denormalized from the introduction so
    invoice listings need no joins through the ledger.
    """

    __tablename__ = "placement_invoices"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    employer_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("employers.id"), nullable=False, index=True
    )
    candidate_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("candidates.id"), nullable=False
    )
    job_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("job_postings.id"), nullable=False
    )
    introduction_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("introductions.id"), unique=True, nullable=False
    )
    amount_cents: Mapped[int] = mapped_column(
        Integer, nullable=False, default=PLACEMENT_FEE_CENTS
    )
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default=PLACEMENT_CURRENCY
    )
    status: Mapped[InvoiceStatus] = mapped_column(
        SQLEnum(InvoiceStatus, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=InvoiceStatus.DRAFT,
    )
    stripe_invoice_id: Mapped[str | None] = mapped_column(
        String(100), unique=True, nullable=True
    )
    stripe_payment_status: Mapped[str | None] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        Index("idx_placement_invoices_status", "status"),
    )
