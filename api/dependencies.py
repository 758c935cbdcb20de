"""FastAPI dependencies for dependency injection."""

from typing import Callable, Optional
from fastapi import Depends

from core.config import settings
from core.errors import ForbiddenError
from core.integrations.invoicing import InvoicingProvider
from core.integrations.stripe import StripeInvoicingService
from core.middleware.authentication import Principal, get_current_principal
from database.models.users import UserRole


def require_roles(*roles: UserRole) -> Callable:
    """
    Dependency factory that admits only principals holding one of ``roles``.

    Usage:
        @router.post("/introductions")
        async def create(principal: Principal = Depends(require_roles(UserRole.ADMIN))):
            ...
    """
    allowed = frozenset(roles)

    async def role_checker(
        principal: Principal = Depends(get_current_principal),
    ) -> Principal:
        if principal.role not in allowed:
            raise ForbiddenError(
                f"Requires role: {', '.join(sorted(role.value for role in allowed))}"
            )
        return principal

    return role_checker


require_admin = require_roles(UserRole.ADMIN)
require_employer = require_roles(UserRole.EMPLOYER)
require_candidate = require_roles(UserRole.CANDIDATE)


def get_invoicing_provider() -> Optional[InvoicingProvider]:
    """
    Invoicing provider for the hire workflow, or None when unconfigured.

    Without a Stripe key hires still succeed and invoices stay in draft.
    """
    if not settings.stripe_secret_key:
        return None
    return StripeInvoicingService(api_key=settings.stripe_secret_key)


def get_webhook_secret() -> Optional[str]:
    """Shared secret used to verify payment notifications."""
    return settings.stripe_webhook_secret
