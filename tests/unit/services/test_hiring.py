"""
Tests for hire confirmation and placement invoicing.

Covers the draft and sent paths, ownership and uniqueness of hires,
partial failure after the hire is recorded, and the repair operation.
"""

from datetime import date

import pytest
from sqlalchemy import func, select

from api.services.hiring import confirm_hire, ensure_invoice_for_hire, load_placement_context
from api.services.invoices import void_invoice
from core.errors import ConflictError, ExternalServiceError, ForbiddenError, NotFoundError
from core.middleware.authentication import Principal
from database.models.employers import EmployerProfile
from database.models.introductions import HireConfirmation
from database.models.invoices import InvoiceStatus, PlacementInvoice
from database.models.users import UserRole

START = date(2025, 9, 1)


def principal_for(user) -> Principal:
    return Principal(user_id=user.id, email=user.email, role=user.role)


async def count(session, model) -> int:
    return await session.scalar(select(func.count()).select_from(model))


class TestLoadPlacementContext:

    @pytest.mark.asyncio
    async def test_resolves_chain(self, db_session, factory):
        employer, job, candidate, intro = await factory.placement()
        owner = await factory.owner_of(employer)

        ctx = await load_placement_context(db_session, intro.id)

        assert ctx.job_id == job.id
        assert ctx.candidate_id == candidate.id
        assert ctx.candidate_name == candidate.full_name
        assert ctx.employer_id == employer.id
        assert ctx.employer_user_id == owner.id
        assert ctx.employer_email == owner.email
        assert ctx.stripe_customer_id is None

    @pytest.mark.asyncio
    async def test_unknown_introduction(self, db_session):
        with pytest.raises(NotFoundError):
            await load_placement_context(db_session, "missing")


class TestConfirmHire:

    @pytest.mark.asyncio
    async def test_without_provider_leaves_draft(self, db_session, factory):
        employer, job, candidate, intro = await factory.placement(role_category="Medical Coding")
        owner = await factory.owner_of(employer)

        result = await confirm_hire(db_session, intro.id, START, principal_for(owner), None)

        assert result["invoice_status"] == "draft"
        assert result["amount_cents"] == 450000
        assert result["currency"] == "usd"
        assert result["stripe_invoice_id"] is None
        assert result["introduction_id"] == intro.id

        invoice = await db_session.get(PlacementInvoice, result["invoice_id"])
        assert invoice.employer_id == employer.id
        assert invoice.candidate_id == candidate.id
        assert invoice.job_id == job.id
        hire = await db_session.get(HireConfirmation, result["hire_id"])
        assert hire.start_date == START

    @pytest.mark.asyncio
    async def test_with_provider_sends_invoice(self, db_session, factory, fake_provider):
        employer, _, candidate, intro = await factory.placement()
        owner = await factory.owner_of(employer)

        result = await confirm_hire(db_session, intro.id, START, principal_for(owner), fake_provider)

        assert result["invoice_status"] == "sent"
        assert result["stripe_invoice_id"] == "inv_123"
        assert fake_provider.calls_to("ensure_customer") == [
            (employer.id, owner.email, employer.company_name)
        ]
        assert fake_provider.calls_to("create_invoice") == [
            ("cus_123", 450000, "usd", f"Placement fee for {candidate.full_name}", f"placement-{intro.id}")
        ]
        assert fake_provider.calls_to("send_invoice") == ["inv_123"]

        await db_session.refresh(employer)
        assert employer.stripe_customer_id == "cus_123"

    @pytest.mark.asyncio
    async def test_existing_customer_reused(self, db_session, factory, fake_provider):
        employer, _, _, intro = await factory.placement(stripe_customer_id="cus_existing")
        owner = await factory.owner_of(employer)

        await confirm_hire(db_session, intro.id, START, principal_for(owner), fake_provider)

        assert fake_provider.calls_to("ensure_customer") == []
        assert fake_provider.calls_to("create_invoice")[0][0] == "cus_existing"

    @pytest.mark.asyncio
    async def test_second_confirmation_conflicts(self, db_session, factory):
        employer, _, _, intro = await factory.placement()
        owner = await factory.owner_of(employer)
        await confirm_hire(db_session, intro.id, START, principal_for(owner), None)

        with pytest.raises(ConflictError):
            await confirm_hire(db_session, intro.id, date(2025, 10, 1), principal_for(owner), None)

        assert await count(db_session, HireConfirmation) == 1
        assert await count(db_session, PlacementInvoice) == 1

    @pytest.mark.asyncio
    async def test_other_employer_forbidden(self, db_session, factory, fake_provider):
        _, _, _, intro = await factory.placement()
        other = await factory.owner_of(await factory.employer(company_name="Other Clinic"))

        with pytest.raises(ForbiddenError):
            await confirm_hire(db_session, intro.id, START, principal_for(other), fake_provider)

        assert await count(db_session, HireConfirmation) == 0
        assert fake_provider.calls == []

    @pytest.mark.asyncio
    async def test_unknown_introduction(self, db_session, factory):
        owner = await factory.user(UserRole.EMPLOYER)
        with pytest.raises(NotFoundError):
            await confirm_hire(db_session, "missing", START, principal_for(owner), None)

    @pytest.mark.asyncio
    async def test_provider_failure_keeps_hire(self, db_session, factory, fake_provider):
        employer, _, _, intro = await factory.placement()
        owner = await factory.owner_of(employer)
        fake_provider.fail_on = "send_invoice"

        with pytest.raises(ExternalServiceError):
            await confirm_hire(db_session, intro.id, START, principal_for(owner), fake_provider)

        assert await count(db_session, HireConfirmation) == 1
        assert await count(db_session, PlacementInvoice) == 0


class TestEnsureInvoiceForHire:

    @pytest.mark.asyncio
    async def test_no_hire(self, db_session, factory):
        _, _, _, intro = await factory.placement()
        with pytest.raises(NotFoundError):
            await ensure_invoice_for_hire(db_session, intro.id, None)

    @pytest.mark.asyncio
    async def test_issues_missing_invoice(self, db_session, factory, fake_provider):
        employer, _, _, intro = await factory.placement()
        owner = await factory.owner_of(employer)
        fake_provider.fail_on = "create_invoice"
        with pytest.raises(ExternalServiceError):
            await confirm_hire(db_session, intro.id, START, principal_for(owner), fake_provider)

        fake_provider.fail_on = None
        result = await ensure_invoice_for_hire(db_session, intro.id, fake_provider)

        assert result["invoice_status"] == "sent"
        assert result["stripe_invoice_id"] == "inv_123"
        # Same idempotency key on retry so the provider does not bill twice
        keys = {call[4] for call in fake_provider.calls_to("create_invoice")}
        assert keys == {f"placement-{intro.id}"}
        # Customer stored on the first attempt is reused
        assert len(fake_provider.calls_to("ensure_customer")) == 1

    @pytest.mark.asyncio
    async def test_sends_draft_once_provider_configured(self, db_session, factory, fake_provider):
        employer, _, _, intro = await factory.placement()
        owner = await factory.owner_of(employer)
        draft = await confirm_hire(db_session, intro.id, START, principal_for(owner), None)

        result = await ensure_invoice_for_hire(db_session, intro.id, fake_provider)

        assert result["invoice_id"] == draft["invoice_id"]
        assert result["hire_id"] == draft["hire_id"]
        assert result["invoice_status"] == "sent"
        assert result["stripe_invoice_id"] == "inv_123"
        assert await count(db_session, PlacementInvoice) == 1

    @pytest.mark.asyncio
    async def test_draft_without_provider_unchanged(self, db_session, factory):
        employer, _, _, intro = await factory.placement()
        owner = await factory.owner_of(employer)
        draft = await confirm_hire(db_session, intro.id, START, principal_for(owner), None)

        result = await ensure_invoice_for_hire(db_session, intro.id, None)

        assert result == draft

    @pytest.mark.asyncio
    async def test_sent_invoice_is_not_resent(self, db_session, factory, fake_provider):
        employer, _, _, intro = await factory.placement()
        owner = await factory.owner_of(employer)
        sent = await confirm_hire(db_session, intro.id, START, principal_for(owner), fake_provider)
        calls_before = len(fake_provider.calls)

        result = await ensure_invoice_for_hire(db_session, intro.id, fake_provider)

        assert result == sent
        assert len(fake_provider.calls) == calls_before

    @pytest.mark.asyncio
    async def test_void_draft_stays_void(self, db_session, factory, fake_provider):
        employer, _, _, intro = await factory.placement()
        owner = await factory.owner_of(employer)
        draft = await confirm_hire(db_session, intro.id, START, principal_for(owner), None)
        await void_invoice(db_session, draft["invoice_id"])

        result = await ensure_invoice_for_hire(db_session, intro.id, fake_provider)

        assert result["invoice_status"] == "void"
        assert fake_provider.calls == []


@pytest.mark.asyncio
async def test_customer_created_once_per_employer(db_session, factory, fake_provider):
    """Two hires for one employer share a billing customer."""
    employer = await factory.employer()
    owner = await factory.owner_of(employer)
    job = await factory.job(employer)
    first = await factory.introduction(job, await factory.candidate(full_name="A Hebert"))
    second = await factory.introduction(job, await factory.candidate(full_name="B Guidry"))

    await confirm_hire(db_session, first.id, START, principal_for(owner), fake_provider)
    fake_provider.invoice_id = "inv_456"
    await confirm_hire(db_session, second.id, START, principal_for(owner), fake_provider)

    assert len(fake_provider.calls_to("ensure_customer")) == 1
    stored = await db_session.scalar(
        select(EmployerProfile.stripe_customer_id).where(EmployerProfile.id == employer.id)
    )
    assert stored == "cus_123"
