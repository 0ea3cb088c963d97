"""Tests for JobService."""

import pytest

from models import ListingStatus
from services.exceptions import InvalidTransitionError, ListingNotFoundError, ValidationError
from services.job_service import JobService


@pytest.fixture
def job_service(test_settings, populated_store):
    """Create a JobService over the populated store."""
    return JobService(settings=test_settings, data_store=populated_store)


class TestGetListings:
    """Tests for get_listings()."""

    @pytest.mark.asyncio
    async def test_all_sorted_by_score(self, job_service, user_id):
        listings = await job_service.get_listings(user_id)
        assert [item.id for item in listings] == [
            "JOB-INITECH-BBB222",
            "JOB-GLOBEX-AAA111",
            "JOB-HOOLI-CCC333",
        ]

    @pytest.mark.asyncio
    async def test_filter_by_status(self, job_service, user_id):
        pending = await job_service.get_listings(user_id, status=ListingStatus.PENDING)
        assert [item.id for item in pending] == ["JOB-GLOBEX-AAA111"]

    @pytest.mark.asyncio
    async def test_invalid_limit(self, job_service, user_id):
        with pytest.raises(ValidationError):
            await job_service.get_listings(user_id, limit=0)

    @pytest.mark.asyncio
    async def test_get_missing_listing(self, job_service, user_id):
        with pytest.raises(ListingNotFoundError):
            await job_service.get_listing(user_id, "JOB-NOPE")

    @pytest.mark.asyncio
    async def test_other_user_cannot_see_listing(self, job_service):
        with pytest.raises(ListingNotFoundError):
            await job_service.get_listing("intruder", "JOB-GLOBEX-AAA111")


class TestSetStatus:
    """Tests for set_status()."""

    @pytest.mark.asyncio
    async def test_approve(self, job_service, user_id):
        updated = await job_service.set_status(user_id, "JOB-GLOBEX-AAA111", ListingStatus.APPROVED)

        assert updated.status == ListingStatus.APPROVED
        assert updated.apply_log[-1].step == "approved"
        assert updated.apply_log[-1].detail == "Status changed by user"

    @pytest.mark.asyncio
    async def test_note_recorded(self, job_service, user_id):
        updated = await job_service.set_status(
            user_id, "JOB-GLOBEX-AAA111", ListingStatus.SKIPPED, detail="Too far away"
        )
        assert updated.apply_log[-1].detail == "Too far away"

    @pytest.mark.asyncio
    async def test_disallowed_transition(self, job_service, user_id):
        with pytest.raises(InvalidTransitionError) as exc_info:
            await job_service.set_status(user_id, "JOB-GLOBEX-AAA111", ListingStatus.APPLIED)

        error = exc_info.value
        assert error.current == "pending"
        assert error.requested == "applied"
        assert error.details["allowed"] == ["approved", "manual_required", "skipped"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status",
        [ListingStatus.GENERATING_DOCS, ListingStatus.READY_TO_APPLY, ListingStatus.FAILED],
    )
    async def test_generated_statuses_rejected(self, job_service, user_id, status):
        with pytest.raises(ValidationError):
            await job_service.set_status(user_id, "JOB-INITECH-BBB222", status)

    @pytest.mark.asyncio
    async def test_missing_listing(self, job_service, user_id):
        with pytest.raises(ListingNotFoundError):
            await job_service.set_status(user_id, "JOB-NOPE", ListingStatus.APPROVED)

    @pytest.mark.asyncio
    async def test_rejected_change_leaves_listing_untouched(self, job_service, user_id):
        with pytest.raises(InvalidTransitionError):
            await job_service.set_status(user_id, "JOB-GLOBEX-AAA111", ListingStatus.APPLIED)

        listing = await job_service.get_listing(user_id, "JOB-GLOBEX-AAA111")
        assert listing.status == ListingStatus.PENDING
        assert listing.apply_log == []


class TestAuditLog:
    """Tests for add_note() and get_audit_log()."""

    @pytest.mark.asyncio
    async def test_add_note_keeps_status(self, job_service, user_id):
        log = await job_service.add_note(user_id, "JOB-GLOBEX-AAA111", "  Recruiter call on Friday ")

        assert [(entry.step, entry.detail) for entry in log] == [("note", "Recruiter call on Friday")]
        listing = await job_service.get_listing(user_id, "JOB-GLOBEX-AAA111")
        assert listing.status == ListingStatus.PENDING

    @pytest.mark.asyncio
    async def test_audit_log_in_order(self, job_service, user_id):
        await job_service.set_status(user_id, "JOB-GLOBEX-AAA111", ListingStatus.APPROVED)
        await job_service.add_note(user_id, "JOB-GLOBEX-AAA111", "Strong match")

        log = await job_service.get_audit_log(user_id, "JOB-GLOBEX-AAA111")
        assert [entry.step for entry in log] == ["approved", "note"]

    @pytest.mark.asyncio
    async def test_empty_note_rejected(self, job_service, user_id):
        with pytest.raises(ValidationError):
            await job_service.add_note(user_id, "JOB-GLOBEX-AAA111", "   ")

    @pytest.mark.asyncio
    async def test_missing_listing(self, job_service, user_id):
        with pytest.raises(ListingNotFoundError):
            await job_service.add_note(user_id, "JOB-NOPE", "hello")
        with pytest.raises(ListingNotFoundError):
            await job_service.get_audit_log(user_id, "JOB-NOPE")

class TestCountsAndDocuments:
    @pytest.mark.asyncio
    async def test_counts_include_every_status(self, job_service, user_id):
        counts = await job_service.get_counts(user_id)

        assert counts.total == 3
        assert counts.by_status["pending"] == 1
        assert counts.by_status["approved"] == 2
        assert counts.by_status["applied"] == 0
        assert set(counts.by_status) == {status.value for status in ListingStatus}

    @pytest.mark.asyncio
    async def test_counts_for_empty_user(self, job_service):
        counts = await job_service.get_counts("nobody")
        assert counts.total == 0
        assert all(value == 0 for value in counts.by_status.values())

    @pytest.mark.asyncio
    async def test_documents(self, job_service, user_id):
        documents = await job_service.get_documents(user_id, "JOB-INITECH-BBB222")
        assert documents.company == "Initech"
        assert documents.tailored_resume_text is None
        assert documents.apply_log == []
