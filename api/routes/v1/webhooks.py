"""
Webhook endpoints for the invoicing provider.

The body is read raw: the signature covers the exact bytes sent.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_webhook_secret
from api.services.reconciliation import handle_invoicing_event
from database.engine import get_db

router = APIRouter()


@router.post("/stripe", summary="Stripe Webhook")
async def stripe_webhook(
    request: Request,
    secret: Optional[str] = Depends(get_webhook_secret),
    db: AsyncSession = Depends(get_db),
):
    """
    Receive Stripe events.

    Only ``invoice.paid`` changes state; other events are acknowledged.
    Unverifiable requests get 401.
    """
    payload = await request.body()
    return await handle_invoicing_event(
        db,
        payload=payload,
        signature_header=request.headers.get("stripe-signature"),
        secret=secret,
    )
