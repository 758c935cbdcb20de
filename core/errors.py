"""
Typed domain errors.

Services raise these; the error handling layer turns them into the JSON
error envelope with the matching HTTP status and machine-readable code.
"""

from fastapi import status


class MarketplaceError(Exception):
    """Base exception for expected, user-facing failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_SERVER_ERROR"
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthorizedError(MarketplaceError):
    """Missing or invalid credential."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class ForbiddenError(MarketplaceError):
    """Authenticated but not entitled: wrong role, or not the resource owner."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFoundError(MarketplaceError):
    """Referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(MarketplaceError):
    """Uniqueness violation or a state transition that is not allowed."""

    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_message = "Resource already exists"


class InputValidationError(MarketplaceError):
    """Malformed input that passed schema parsing."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    default_message = "Invalid input provided"


class ExternalServiceError(MarketplaceError):
    """The invoicing provider call failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "EXTERNAL_SERVICE_ERROR"
    default_message = "The invoicing provider request failed"
