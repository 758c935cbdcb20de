"""Shared fixtures and utilities for tests."""

import os

# Settings are read at import time, so the environment is set before any
# application module is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret-key-min-32-chars-long-for-security"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["AUTH_COOKIE_SECURE"] = "false"
os.environ["JSON_LOGS"] = "false"
os.environ.pop("STRIPE_SECRET_KEY", None)
os.environ.pop("STRIPE_WEBHOOK_SECRET", None)

import json
import time
from typing import Any, Iterable, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
import stripe

from core.errors import ExternalServiceError
from core.integrations.invoicing import InvoiceRef
from core.security import create_access_token, hash_password
from core.utils.datetime import now
from database.engine import Base, get_db
from database.models.candidates import CandidateProfile, CandidateStatus
from database.models.employers import EmployerProfile
from database.models.introductions import Introduction
from database.models.invoices import PlacementInvoice  # noqa: F401
from database.models.jobs import JobPosting
from database.models.users import User, UserRole

WEBHOOK_SECRET = "whsec_test_secret"
TEST_PASSWORD = "correct-horse-battery"

_password_hash: Optional[str] = None


def _test_password_hash() -> str:
    global _password_hash
    if _password_hash is None:
        _password_hash = hash_password(TEST_PASSWORD)
    return _password_hash


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """Build a ``Stripe-Signature`` header for ``payload``."""
    ts = int(time.time()) if timestamp is None else timestamp
    signature = stripe.WebhookSignature._compute_signature(f"{ts}.{payload.decode()}", secret)
    return f"t={ts},v1={signature}"


def paid_event(stripe_invoice_id: str, paid_at: Optional[int] = None) -> bytes:
    """Raw body of an ``invoice.paid`` notification."""
    invoice: dict[str, Any] = {"id": stripe_invoice_id, "object": "invoice", "status": "paid"}
    if paid_at is not None:
        invoice["status_transitions"] = {"paid_at": paid_at}
    return json.dumps(
        {"id": "evt_test", "type": "invoice.paid", "data": {"object": invoice}}
    ).encode("utf-8")


class FakeInvoicingProvider:
    """
    In-memory invoicing provider.

    Records every call; ``fail_on`` names a method that raises
    ExternalServiceError instead of answering.
    """

    def __init__(
        self,
        invoice_id: str = "inv_123",
        customer_id: str = "cus_123",
        fail_on: Optional[str] = None,
    ):
        self.invoice_id = invoice_id
        self.customer_id = customer_id
        self.fail_on = fail_on
        self.calls: list[tuple[str, Any]] = []

    def _maybe_fail(self, method: str) -> None:
        if self.fail_on == method:
            raise ExternalServiceError(f"{method} failed")

    def calls_to(self, method: str) -> list[Any]:
        return [args for name, args in self.calls if name == method]

    async def ensure_customer(self, employer_id: str, email: str, name: str) -> str:
        self.calls.append(("ensure_customer", (employer_id, email, name)))
        self._maybe_fail("ensure_customer")
        return self.customer_id

    async def create_invoice(
        self,
        customer_ref: str,
        amount_cents: int,
        currency: str,
        description: str,
        idempotency_key: Optional[str] = None,
    ) -> InvoiceRef:
        self.calls.append(
            ("create_invoice", (customer_ref, amount_cents, currency, description, idempotency_key))
        )
        self._maybe_fail("create_invoice")
        return InvoiceRef(id=self.invoice_id, status="draft")

    async def send_invoice(self, invoice_ref: str) -> str:
        self.calls.append(("send_invoice", invoice_ref))
        self._maybe_fail("send_invoice")
        return invoice_ref


class Factory:
    """Creates persisted test records."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def user(self, role: UserRole, email: Optional[str] = None) -> User:
        user = User(
            email=email or f"{role.value}{self._next()}@example.com",
            password_hash=_test_password_hash(),
            role=role,
        )
        self.session.add(user)
        await self.session.commit()
        return user

    async def employer(
        self,
        accepted: bool = True,
        company_name: str = "Bayou Family Clinic",
        stripe_customer_id: Optional[str] = None,
    ) -> EmployerProfile:
        user = await self.user(UserRole.EMPLOYER)
        employer = EmployerProfile(
            user_id=user.id,
            company_name=company_name,
            contact_name="Dana Broussard",
            parish="East Baton Rouge",
            accepted_agreement_at=now() if accepted else None,
            stripe_customer_id=stripe_customer_id,
        )
        self.session.add(employer)
        await self.session.commit()
        return employer

    async def candidate(
        self,
        specialties: Iterable[str] = ("Medical Billing",),
        full_name: str = "Jordan Landry",
        status: CandidateStatus = CandidateStatus.ACTIVE,
    ) -> CandidateProfile:
        user = await self.user(UserRole.CANDIDATE)
        candidate = CandidateProfile(
            user_id=user.id,
            full_name=full_name,
            parish="Ascension",
            role_specialties=frozenset(specialties),
            experience_summary="Five years in a pediatric billing office",
            status=status,
        )
        self.session.add(candidate)
        await self.session.commit()
        return candidate

    async def job(
        self,
        employer: EmployerProfile,
        role_category: str = "Medical Billing",
        title: str = "Billing Specialist",
    ) -> JobPosting:
        job = JobPosting(
            employer_id=employer.id,
            title=title,
            description="Remote billing for a busy clinic",
            parish="East Baton Rouge",
            role_category=role_category,
        )
        self.session.add(job)
        await self.session.commit()
        return job

    async def introduction(self, job: JobPosting, candidate: CandidateProfile) -> Introduction:
        intro = Introduction(job_id=job.id, candidate_id=candidate.id, note="Strong fit")
        self.session.add(intro)
        await self.session.commit()
        return intro

    async def placement(
        self,
        role_category: str = "Medical Billing",
        stripe_customer_id: Optional[str] = None,
    ) -> tuple[EmployerProfile, JobPosting, CandidateProfile, Introduction]:
        """Employer with a job and one introduced candidate."""
        employer = await self.employer(stripe_customer_id=stripe_customer_id)
        job = await self.job(employer, role_category=role_category)
        candidate = await self.candidate(specialties=[role_category])
        intro = await self.introduction(job, candidate)
        return employer, job, candidate, intro

    async def owner_of(self, employer: EmployerProfile) -> User:
        return await self.session.get(User, employer.user_id)


def auth_headers(user: User) -> dict[str, str]:
    """Bearer header for ``user``."""
    token = create_access_token(user.id, user.email, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def factory(db_session):
    return Factory(db_session)


@pytest.fixture
def fake_provider():
    return FakeInvoicingProvider()


@pytest.fixture
def app(session_factory):
    """Application with the database and integrations overridden."""
    from api.dependencies import get_invoicing_provider, get_webhook_secret
    from api.main import app as fastapi_app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_invoicing_provider] = lambda: None
    fastapi_app.dependency_overrides[get_webhook_secret] = lambda: WEBHOOK_SECRET
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture(name="auth_headers")
def auth_headers_fixture():
    return auth_headers


@pytest.fixture(name="sign_payload")
def sign_payload_fixture():
    return sign_payload


@pytest.fixture(name="paid_event")
def paid_event_fixture():
    return paid_event
