"""
Payment reconciliation for invoicing provider notifications.

Notifications are authenticated against the shared secret before the body
is parsed. Only ``invoice.paid`` changes state; the matching placement
invoice is found by provider invoice id alone, so a notification that
arrives before its invoice row exists is acknowledged without effect.
"""

from datetime import datetime
from typing import Any, Optional
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.audit import AuditAction, ResourceType, log_audit_event
from core.config import settings
from core.integrations.stripe import construct_event
from core.utils.datetime import from_unix_timestamp, isoformat, now
from database.models.invoices import InvoiceStatus, PlacementInvoice, statuses_leading_to

logger = logging.getLogger(__name__)

INVOICE_PAID_EVENT = "invoice.paid"


def _paid_at(invoice_object: dict[str, Any]) -> datetime:
    """Payment time reported by the provider, else now."""
    transitions = invoice_object.get("status_transitions") or {}
    paid_at = transitions.get("paid_at") if isinstance(transitions, dict) else None
    if isinstance(paid_at, int) and not isinstance(paid_at, bool):
        return from_unix_timestamp(paid_at)
    return now()


async def mark_invoice_paid(
    session: AsyncSession,
    invoice_object: dict[str, Any],
) -> dict[str, Any]:
    """
    Apply a paid notification to the placement invoice it refers to.

    Returns a small result dict describing what happened; every outcome is
    a successful acknowledgement.
    """
    stripe_invoice_id = invoice_object.get("id")
    if not isinstance(stripe_invoice_id, str) or not stripe_invoice_id:
        logger.warning("Paid notification without an invoice id")
        return {"outcome": "ignored"}

    invoice = await session.scalar(
        select(PlacementInvoice).where(PlacementInvoice.stripe_invoice_id == stripe_invoice_id)
    )
    if invoice is None:
        logger.warning(f"Paid notification for unknown invoice {stripe_invoice_id}")
        return {"outcome": "unmatched", "stripe_invoice_id": stripe_invoice_id}

    paid_at = _paid_at(invoice_object)
    # Conditional on the current status so a concurrent void is never overwritten
    result = await session.execute(
        update(PlacementInvoice)
        .where(
            PlacementInvoice.id == invoice.id,
            PlacementInvoice.status.in_(statuses_leading_to(InvoiceStatus.PAID)),
        )
        .values(
            status=InvoiceStatus.PAID,
            paid_at=paid_at,
            stripe_payment_status=invoice_object.get("status") or "paid",
        )
    )
    await session.commit()

    if result.rowcount == 0:
        await session.refresh(invoice)
        if invoice.status == InvoiceStatus.PAID:
            logger.info(f"Invoice {invoice.id} already paid; redelivery ignored")
            return {"outcome": "already_paid", "invoice_id": invoice.id}
        logger.warning(f"Paid notification for void invoice {invoice.id}; left void")
        return {"outcome": "void", "invoice_id": invoice.id}

    logger.info(f"Invoice {invoice.id} marked paid ({stripe_invoice_id})")
    log_audit_event(
        action=AuditAction.RECORD_PAYMENT,
        resource_type=ResourceType.INVOICE,
        resource_id=invoice.id,
        details={
            "stripe_invoice_id": stripe_invoice_id,
            "paid_at": isoformat(paid_at),
        },
    )
    return {"outcome": "paid", "invoice_id": invoice.id}


async def handle_invoicing_event(
    session: AsyncSession,
    payload: bytes,
    signature_header: Optional[str],
    secret: Optional[str],
    tolerance: Optional[int] = None,
) -> dict[str, Any]:
    """
    Verify and apply one provider notification.

    Args:
        session: Database session
        payload: Raw request body, exactly as received
        signature_header: Value of the ``Stripe-Signature`` header
        secret: Shared webhook secret
        tolerance: Allowed clock skew in seconds

    Returns:
        Acknowledgement body

    Raises:
        UnauthorizedError: If the notification cannot be authenticated
    """
    if tolerance is None:
        tolerance = settings.stripe_webhook_tolerance_seconds

    event = construct_event(payload, signature_header, secret, tolerance=tolerance)

    event_type = event.get("type")
    if event_type != INVOICE_PAID_EVENT:
        logger.debug(f"Ignoring invoicing event {event_type}")
        return {"received": True}

    data = event.get("data")
    invoice_object = data.get("object") if isinstance(data, dict) else None
    if not isinstance(invoice_object, dict):
        logger.warning(f"Event {event.get('id')} carries no invoice object")
        return {"received": True}

    result = await mark_invoice_paid(session, invoice_object)
    return {"received": True, **result}
