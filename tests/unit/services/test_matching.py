"""
Tests for candidate matching.
"""

import pytest
from sqlalchemy import text

from api.services.matching import candidate_matches, find_matches
from core.errors import NotFoundError
from database.models.candidates import CandidateStatus


class TestCandidateMatches:

    def test_exact_tag(self):
        assert candidate_matches("Medical Billing", {"Medical Billing", "Medical Coding"})

    def test_no_partial_or_case_insensitive_match(self):
        assert not candidate_matches("Medical Billing", {"medical billing"})
        assert not candidate_matches("Medical Billing", {"Medical Billing Lead"})

    def test_empty_specialties(self):
        assert not candidate_matches("Medical Billing", frozenset())


class TestFindMatches:

    @pytest.mark.asyncio
    async def test_only_matching_candidates(self, db_session, factory):
        employer = await factory.employer()
        job = await factory.job(employer, role_category="Medical Billing")
        c1 = await factory.candidate(specialties=["Medical Billing"], full_name="C One")
        await factory.candidate(specialties=["Scheduling Coordinator"], full_name="C Two")
        c3 = await factory.candidate(specialties=["Medical Billing"], full_name="C Three")

        await db_session.execute(
            text("UPDATE candidates SET role_specialties = :raw WHERE id = :id"),
            {"raw": "{not valid json", "id": c3.id},
        )
        await db_session.commit()
        db_session.expire_all()

        matches = await find_matches(db_session, job.id)

        assert [m["id"] for m in matches] == [c1.id]

    @pytest.mark.asyncio
    async def test_inactive_candidates_excluded(self, db_session, factory):
        employer = await factory.employer()
        job = await factory.job(employer, role_category="Medical Coding")
        await factory.candidate(specialties=["Medical Coding"], status=CandidateStatus.INACTIVE)

        assert await find_matches(db_session, job.id) == []

    @pytest.mark.asyncio
    async def test_multi_specialty_candidate(self, db_session, factory):
        employer = await factory.employer()
        job = await factory.job(employer, role_category="Insurance Verification")
        candidate = await factory.candidate(
            specialties=["Medical Billing", "Insurance Verification"]
        )

        matches = await find_matches(db_session, job.id)

        assert len(matches) == 1
        assert matches[0]["id"] == candidate.id
        assert matches[0]["role_specialties"] == ["Insurance Verification", "Medical Billing"]

    @pytest.mark.asyncio
    async def test_unknown_job(self, db_session):
        with pytest.raises(NotFoundError):
            await find_matches(db_session, "missing-job")
