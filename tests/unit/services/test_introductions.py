"""
Tests for the introduction ledger.
"""

from datetime import date

import pytest

from api.services.hiring import confirm_hire
from api.services.introductions import create_introduction, list_introductions
from core.errors import ConflictError, NotFoundError
from core.middleware.authentication import Principal


class TestCreateIntroduction:

    @pytest.mark.asyncio
    async def test_creates_introduction(self, db_session, factory):
        employer = await factory.employer()
        job = await factory.job(employer)
        candidate = await factory.candidate()

        intro_id = await create_introduction(db_session, job.id, candidate.id, note="Ten years in billing")

        rows = await list_introductions(db_session)
        assert [r["id"] for r in rows] == [intro_id]
        assert rows[0]["note"] == "Ten years in billing"
        assert rows[0]["company_name"] == employer.company_name
        assert rows[0]["candidate_name"] == candidate.full_name
        assert rows[0]["hire_id"] is None
        assert rows[0]["invoice_status"] is None

    @pytest.mark.asyncio
    async def test_duplicate_pair_conflicts(self, db_session, factory):
        employer = await factory.employer()
        job = await factory.job(employer)
        candidate = await factory.candidate()
        await create_introduction(db_session, job.id, candidate.id)

        with pytest.raises(ConflictError):
            await create_introduction(db_session, job.id, candidate.id)

        assert len(await list_introductions(db_session)) == 1

    @pytest.mark.asyncio
    async def test_same_candidate_other_job(self, db_session, factory):
        employer = await factory.employer()
        candidate = await factory.candidate()
        first = await factory.job(employer, title="Biller")
        second = await factory.job(employer, title="Coder", role_category="Medical Coding")

        await create_introduction(db_session, first.id, candidate.id)
        await create_introduction(db_session, second.id, candidate.id)

        assert len(await list_introductions(db_session)) == 2

    @pytest.mark.asyncio
    async def test_unknown_job(self, db_session, factory):
        candidate = await factory.candidate()
        with pytest.raises(NotFoundError):
            await create_introduction(db_session, "missing", candidate.id)

    @pytest.mark.asyncio
    async def test_unknown_candidate(self, db_session, factory):
        job = await factory.job(await factory.employer())
        with pytest.raises(NotFoundError):
            await create_introduction(db_session, job.id, "missing")


class TestListIntroductions:

    @pytest.mark.asyncio
    async def test_shows_hire_and_invoice_state(self, db_session, factory):
        employer, job, _, intro = await factory.placement()
        owner = await factory.owner_of(employer)
        result = await confirm_hire(
            db_session, intro.id, date(2025, 9, 1),
            Principal(user_id=owner.id, email=owner.email, role=owner.role), None,
        )

        rows = await list_introductions(db_session, job_id=job.id)

        assert rows[0]["hire_id"] == result["hire_id"]
        assert rows[0]["invoice_status"] == "draft"

    @pytest.mark.asyncio
    async def test_filter_by_job(self, db_session, factory):
        _, job, _, intro = await factory.placement()
        await factory.placement()

        rows = await list_introductions(db_session, job_id=job.id)

        assert [r["id"] for r in rows] == [intro.id]
