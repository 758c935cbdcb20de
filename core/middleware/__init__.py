"""
Core middleware package.

This package provides the HTTP middleware components:
- Error handling with sensitive data sanitization
- Structured request logging with masking
- JWT authentication producing a role-tagged principal
"""

from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    sanitize_error_message,
)

from core.middleware.logging import (
    StructuredLoggingMiddleware,
    setup_logging,
)

from core.middleware.authentication import (
    AuthenticationMiddleware,
    Principal,
    get_current_principal,
    get_optional_principal,
    AuthenticationError,
)

__all__ = [
    # Error handling
    "ErrorHandlingMiddleware",
    "setup_error_handlers",
    "sanitize_error_message",
    # Logging
    "StructuredLoggingMiddleware",
    "setup_logging",
    # Authentication
    "AuthenticationMiddleware",
    "Principal",
    "get_current_principal",
    "get_optional_principal",
    "AuthenticationError",
]
