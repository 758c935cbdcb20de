"""
Authentication middleware for verifying user identity.

This middleware:
1. Extracts the JWT from the Authorization header or the auth cookie
2. Validates signature, expiry and token type
3. Stores a role-tagged Principal in the request scope
4. Rejects protected requests that carry no valid token
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional
from datetime import datetime, timezone
import jwt
from fastapi import Request, status
from fastapi.responses import JSONResponse

from core.errors import UnauthorizedError
from core.security import verify_jwt_token, JWTPayload
from database.models.users import UserRole

logger = logging.getLogger(__name__)

# Public endpoints that don't require authentication
PUBLIC_ENDPOINTS = [
    "/",
    "/health",
    "/ready",
    "/api/v1/auth/login",
    "/api/v1/auth/register",
    "/api/v1/auth/logout",
    "/api/v1/webhooks/stripe",
    "/docs",
    "/redoc",
    "/openapi.json",
]

# Endpoints that are public for read-only access
PUBLIC_GET_ENDPOINTS = [
    "/api/v1/jobs",
]


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, tagged with its role."""

    user_id: str
    email: str
    role: UserRole


class AuthenticationError(Exception):
    """Base exception for authentication errors."""
    pass


class TokenExpiredError(AuthenticationError):
    """Raised when JWT token has expired."""
    pass


class TokenInvalidError(AuthenticationError):
    """Raised when JWT token is invalid."""
    pass


def principal_from_payload(payload: JWTPayload) -> Principal:
    """
    Build a Principal from verified token claims.

    Raises:
        TokenInvalidError: If a claim is missing or the role is unknown
    """
    user_id = payload.get("sub")
    email = payload.get("email")
    if not user_id or not email:
        raise TokenInvalidError("Token missing subject or email")
    try:
        role = UserRole(payload.get("role"))
    except ValueError:
        raise TokenInvalidError("Token carries an unknown role")
    return Principal(user_id=user_id, email=email, role=role)


class AuthenticationMiddleware:
    """
    Authentication middleware that validates user identity.

    Public endpoints pass through untouched, but a valid token on them is
    still decoded so handlers like ``/auth/me`` style lookups can use it.
    """

    def __init__(
        self,
        app: Callable,
        jwt_secret: str,
        jwt_algorithm: str = "HS256",
        cookie_name: str = "token",
    ):
        """
        Initialize authentication middleware.

        Args:
            app: ASGI application
            jwt_secret: Secret key for JWT verification
            jwt_algorithm: JWT signing algorithm
            cookie_name: Cookie that may carry the token
        """
        self.app = app
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm
        self.cookie_name = cookie_name

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        """
        Process requests with authentication validation.

        Args:
            scope: ASGI scope dictionary
            receive: ASGI receive function
            send: ASGI send function
        """
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        is_public = self._is_public_endpoint(request.method, request.url.path)

        try:
            token = self._extract_token(request)
            if not token:
                if is_public:
                    await self.app(scope, receive, send)
                    return
                raise TokenInvalidError("No authentication token provided")

            try:
                payload = verify_jwt_token(token, self.jwt_secret, self.jwt_algorithm)
            except jwt.ExpiredSignatureError:
                raise TokenExpiredError("Token has expired")
            except jwt.InvalidTokenError as e:
                raise TokenInvalidError(f"Invalid token: {str(e)}")

            scope["principal"] = principal_from_payload(payload)
            scope["jwt_payload"] = payload

        except TokenExpiredError:
            if not is_public:
                await self._send_error_response(
                    scope,
                    receive,
                    send,
                    code="TOKEN_EXPIRED",
                    message="Authentication token has expired. Please log in again.",
                )
                return
        except TokenInvalidError as e:
            if not is_public:
                logger.warning(f"Invalid token: {str(e)}")
                await self._send_error_response(
                    scope,
                    receive,
                    send,
                    code="UNAUTHORIZED",
                    message="Invalid or missing authentication token.",
                )
                return

        await self.app(scope, receive, send)

    def _is_public_endpoint(self, method: str, path: str) -> bool:
        """
        Check if endpoint is public (no auth required).

        Args:
            method: HTTP method
            path: Request path

        Returns:
            True if endpoint is public
        """
        if path in PUBLIC_ENDPOINTS:
            return True

        if method == "GET" and path in PUBLIC_GET_ENDPOINTS:
            return True

        public_prefixes = ["/health", "/docs", "/redoc", "/openapi"]
        return any(path.startswith(prefix) for prefix in public_prefixes)

    def _extract_token(self, request: Request) -> Optional[str]:
        """
        Extract JWT token from the Authorization header, then the cookie.

        Args:
            request: FastAPI request

        Returns:
            JWT token or None
        """
        auth_header = request.headers.get("Authorization")

        if auth_header and auth_header.startswith("Bearer "):
            return auth_header[7:]

        return request.cookies.get(self.cookie_name)

    async def _send_error_response(
        self,
        scope: dict,
        receive: Callable,
        send: Callable,
        code: str,
        message: str,
    ) -> None:
        """
        Send error response for authentication failures.
        """
        error_response = {
            "error": {
                "code": code,
                "message": message,
                "path": scope.get("path"),
                "method": scope.get("method"),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        }

        response = JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=error_response,
            headers={"WWW-Authenticate": "Bearer"},
        )

        await response(scope, receive, send)


def get_current_principal(request: Request) -> Principal:
    """
    Get the authenticated caller from request scope.

    Raises:
        UnauthorizedError: If no principal was attached
    """
    principal = request.scope.get("principal")
    if not principal:
        raise UnauthorizedError("Authentication required")
    return principal


def get_optional_principal(request: Request) -> Optional[Principal]:
    """Authenticated caller if any, otherwise None."""
    return request.scope.get("principal")
