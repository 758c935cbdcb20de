"""Stripe integration for placement invoicing and webhook verification."""

import logging
from typing import Any, Dict, Optional

import stripe

from core.constants import INVOICE_DAYS_UNTIL_DUE
from core.errors import ExternalServiceError, UnauthorizedError
from core.integrations.invoicing import InvoiceRef

logger = logging.getLogger(__name__)


class StripeInvoicingService:
    """Stripe SDK client implementing the invoicing provider interface."""

    def __init__(self, api_key: str):
        """
        Initialize Stripe service.

        Args:
            api_key: Stripe secret key, sent with every request
        """
        self.api_key = api_key

    def _provider_error(self, operation: str, error: stripe.StripeError) -> ExternalServiceError:
        """Log a failed Stripe call and wrap it for the API layer."""
        if isinstance(error, stripe.APIConnectionError):
            logger.error(f"Stripe {operation} failed: provider unreachable")
            return ExternalServiceError("Invoicing provider is unreachable")
        message = error.user_message or "Invoicing provider rejected the request"
        logger.error(f"Stripe {operation} returned {error.http_status}: {message}")
        return ExternalServiceError(message)

    async def ensure_customer(self, employer_id: str, email: str, name: str) -> str:
        """Create a Stripe customer for an employer."""
        try:
            customer = await stripe.Customer.create_async(
                api_key=self.api_key,
                idempotency_key=f"customer-{employer_id}",
                email=email,
                name=name,
                metadata={"employer_id": employer_id},
            )
        except stripe.StripeError as e:
            raise self._provider_error("customer create", e) from e

        logger.info(f"Created Stripe customer {customer.id} for employer {employer_id}")
        return customer.id

    async def create_invoice(
        self,
        customer_ref: str,
        amount_cents: int,
        currency: str,
        description: str,
        idempotency_key: Optional[str] = None,
    ) -> InvoiceRef:
        """Create the placement line item and an invoice that collects it."""
        item_options: Dict[str, Any] = {"api_key": self.api_key}
        invoice_options: Dict[str, Any] = {"api_key": self.api_key}
        if idempotency_key:
            item_options["idempotency_key"] = f"{idempotency_key}-item"
            invoice_options["idempotency_key"] = f"{idempotency_key}-invoice"

        try:
            await stripe.InvoiceItem.create_async(
                customer=customer_ref,
                amount=amount_cents,
                currency=currency,
                description=description,
                **item_options,
            )
            invoice = await stripe.Invoice.create_async(
                customer=customer_ref,
                auto_advance=True,
                collection_method="send_invoice",
                days_until_due=INVOICE_DAYS_UNTIL_DUE,
                pending_invoice_items_behavior="include",
                **invoice_options,
            )
        except stripe.StripeError as e:
            raise self._provider_error("invoice create", e) from e

        return InvoiceRef(id=invoice.id, status=invoice.status)

    async def send_invoice(self, invoice_ref: str) -> str:
        """Send an invoice to the customer; Stripe finalizes it first."""
        try:
            invoice = await stripe.Invoice.send_invoice_async(invoice_ref, api_key=self.api_key)
        except stripe.StripeError as e:
            raise self._provider_error("invoice send", e) from e

        logger.info(f"Sent Stripe invoice {invoice.id}")
        return invoice.id


def construct_event(
    payload: bytes,
    sig_header: Optional[str],
    secret: Optional[str],
    tolerance: int = 300,
) -> Dict[str, Any]:
    """
    Verify a ``Stripe-Signature`` header against the raw body and parse it.

    Returns the event as a plain dict.

    Raises:
        UnauthorizedError: If the payload cannot be authenticated
    """
    if not secret:
        logger.warning("Rejected webhook: no signing secret configured")
        raise UnauthorizedError("Invalid webhook signature")
    if not sig_header:
        logger.warning("Rejected webhook: missing signature header")
        raise UnauthorizedError("Invalid webhook signature")

    try:
        event = stripe.Webhook.construct_event(
            payload=payload, sig_header=sig_header, secret=secret, tolerance=tolerance
        )
    except stripe.SignatureVerificationError as e:
        logger.warning(f"Rejected webhook: {e.user_message or 'signature mismatch'}")
        raise UnauthorizedError("Invalid webhook signature")
    except ValueError:
        logger.warning("Rejected webhook: payload is not valid JSON")
        raise UnauthorizedError("Invalid webhook signature")

    return event.to_dict()
