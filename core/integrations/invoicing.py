"""Invoicing provider interface used by the hire-confirmation workflow."""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class InvoiceRef:
    """Provider-side invoice identifier and its provider status."""

    id: str
    status: Optional[str] = None


class InvoicingProvider(Protocol):
    """
    Remote invoicing service.

    Every call is a separate remote request that may fail on its own; a
    failure surfaces as ``core.errors.ExternalServiceError``.
    """

    async def ensure_customer(self, employer_id: str, email: str, name: str) -> str:
        """Create a billing customer and return its reference."""
        ...

    async def create_invoice(
        self,
        customer_ref: str,
        amount_cents: int,
        currency: str,
        description: str,
        idempotency_key: Optional[str] = None,
    ) -> InvoiceRef:
        """Add a fixed-amount line item and open an invoice collecting it."""
        ...

    async def send_invoice(self, invoice_ref: str) -> str:
        """Finalize and send an invoice; returns the finalized invoice id."""
        ...
