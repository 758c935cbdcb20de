"""
Tests for authentication middleware.

Tests:
- Token extraction from the Authorization header and the cookie
- Public endpoint exemptions
- Principal construction
- Expired and invalid tokens
"""

import pytest
from datetime import timedelta
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from core.config import settings
from core.middleware.authentication import (
    AuthenticationMiddleware,
    Principal,
    TokenInvalidError,
    get_current_principal,
    get_optional_principal,
    principal_from_payload,
)
from core.middleware.error_handling import setup_error_handlers
from core.security import create_access_token
from database.models.users import UserRole


@pytest.fixture
def client():
    app = FastAPI()
    setup_error_handlers(app)

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.get("/api/v1/jobs")
    async def public_jobs(principal=Depends(get_optional_principal)):
        return {"authenticated": principal is not None}

    @app.post("/api/v1/jobs")
    async def post_job(principal: Principal = Depends(get_current_principal)):
        return {"user_id": principal.user_id}

    @app.get("/protected")
    async def protected(principal: Principal = Depends(get_current_principal)):
        return {"user_id": principal.user_id, "role": principal.role.value}

    app.add_middleware(
        AuthenticationMiddleware,
        jwt_secret=settings.jwt_secret_key,
        jwt_algorithm=settings.jwt_algorithm,
        cookie_name="token",
    )
    return TestClient(app)


@pytest.fixture
def employer_token():
    return create_access_token("user-42", "owner@clinic.test", "employer")


class TestAuthenticationMiddleware:
    """Test authentication middleware functionality."""

    def test_public_endpoint_no_auth(self, client):
        assert client.get("/health").status_code == 200

    def test_public_get_without_token(self, client):
        response = client.get("/api/v1/jobs")
        assert response.status_code == 200
        assert response.json() == {"authenticated": False}

    def test_public_get_still_decodes_token(self, client, employer_token):
        response = client.get("/api/v1/jobs", headers={"Authorization": f"Bearer {employer_token}"})
        assert response.json() == {"authenticated": True}

    def test_post_to_public_get_path_requires_auth(self, client):
        """Only GET on the job listing is public."""
        response = client.post("/api/v1/jobs")
        assert response.status_code == 401

    def test_protected_without_token(self, client):
        response = client.get("/protected")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_bearer_token(self, client, employer_token):
        response = client.get("/protected", headers={"Authorization": f"Bearer {employer_token}"})

        assert response.status_code == 200
        assert response.json() == {"user_id": "user-42", "role": "employer"}

    def test_cookie_token(self, client, employer_token):
        client.cookies.set("token", employer_token)
        response = client.get("/protected")

        assert response.status_code == 200
        assert response.json()["user_id"] == "user-42"

    def test_expired_token(self, client):
        token = create_access_token(
            "user-42", "owner@clinic.test", "employer", expires_delta=timedelta(seconds=-5)
        )
        response = client.get("/protected", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "TOKEN_EXPIRED"

    def test_token_signed_with_other_key(self, client):
        token = create_access_token(
            "user-42", "owner@clinic.test", "admin", secret_key="some-other-secret-key-0123456789"
        )
        response = client.get("/protected", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_unknown_role_rejected(self, client):
        token = create_access_token("user-42", "owner@clinic.test", "superuser")
        response = client.get("/protected", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestPrincipalFromPayload:
    def test_builds_principal(self):
        principal = principal_from_payload(
            {"sub": "u1", "email": "a@b.test", "role": "admin", "type": "access"}
        )
        assert principal == Principal(user_id="u1", email="a@b.test", role=UserRole.ADMIN)

    def test_missing_subject(self):
        with pytest.raises(TokenInvalidError):
            principal_from_payload({"email": "a@b.test", "role": "admin"})
