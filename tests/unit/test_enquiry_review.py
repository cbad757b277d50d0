"""
Unit tests for EnquiryReviewWorkflow

Tests status transitions, note replacement, filtering, status counts and the
optional stale-update check.
"""
import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from testcademy.database import Base
from testcademy.exceptions import ConflictError, NotFoundError, ValidationError
from testcademy.models.enquiry import EnquiryStatus
from testcademy.services import enquiry_review
from testcademy.services.enquiry_review import EnquiryReviewWorkflow, next_timestamp, parse_status
from testcademy.services.enquiry_submission import EnquirySubmissionService, utcnow


@pytest.fixture
def make_enquiry(db_session, enquiry_data):
    """Factory submitting enquiries through the public service"""
    async def _make(**overrides):
        return await EnquirySubmissionService(db_session).submit({**enquiry_data, **overrides})
    return _make


@pytest.fixture
async def file_session_factory(tmp_path):
    """File-backed database so two sessions use separate connections"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/review.db")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


async def snapshot(workflow: EnquiryReviewWorkflow):
    return [
        (e.id, e.status, e.admin_notes, e.version, e.updated_at)
        for e in await workflow.list()
    ]


@pytest.mark.unit
class TestUpdateStatus:
    """Status transitions (pending -> contacted/approved/rejected and back)"""

    @pytest.mark.parametrize("status", EnquiryStatus.values())
    async def test_update_to_each_status(self, db_session, make_enquiry, status):
        """Test every status is reachable and keeps id and created_at"""
        enquiry = await make_enquiry()
        original_id = enquiry.id
        created_before = enquiry.created_at
        updated_before = enquiry.updated_at

        workflow = EnquiryReviewWorkflow(db_session)
        updated = await workflow.update_status(original_id, status)

        assert updated.status == status
        assert updated.id == original_id
        assert updated.created_at == created_before
        assert updated.updated_at > updated_before
        assert updated.version == 2

    async def test_accepts_string_id(self, db_session, make_enquiry):
        """Test the id may be given as a string"""
        enquiry = await make_enquiry()

        updated = await EnquiryReviewWorkflow(db_session).update_status(str(enquiry.id), "contacted")

        assert updated.status == "contacted"

    async def test_only_target_enquiry_changes(self, db_session, make_enquiry):
        """Test other enquiries are untouched by an update"""
        target = await make_enquiry()
        other = await make_enquiry()
        other_updated_at = other.updated_at

        workflow = EnquiryReviewWorkflow(db_session)
        await workflow.update_status(target.id, "approved")

        reloaded_other = await workflow.get(other.id)
        assert reloaded_other.status == "pending"
        assert reloaded_other.updated_at == other_updated_at

    async def test_any_transition_is_allowed(self, db_session, make_enquiry):
        """Test an approved enquiry can be moved back to pending"""
        enquiry = await make_enquiry()
        workflow = EnquiryReviewWorkflow(db_session)

        await workflow.update_status(enquiry.id, "approved")
        reopened = await workflow.update_status(enquiry.id, "pending")

        assert reopened.status == "pending"
        assert reopened.version == 3

    async def test_notes_replace_existing_notes(self, db_session, make_enquiry):
        """Test new notes replace the old ones entirely"""
        enquiry = await make_enquiry()
        workflow = EnquiryReviewWorkflow(db_session)

        await workflow.update_status(enquiry.id, "contacted", notes="Called once")
        updated = await workflow.update_status(enquiry.id, "contacted", notes="Sent brochure")

        assert updated.admin_notes == "Sent brochure"

    async def test_notes_kept_when_not_given(self, db_session, make_enquiry):
        """Test omitted notes leave the stored notes as they were"""
        enquiry = await make_enquiry()
        workflow = EnquiryReviewWorkflow(db_session)

        await workflow.update_status(enquiry.id, "contacted", notes="Called once")
        updated = await workflow.update_status(enquiry.id, "approved")

        assert updated.admin_notes == "Called once"

    async def test_repeated_update_is_idempotent(self, db_session, make_enquiry):
        """Test repeating an update keeps the state but advances updated_at"""
        enquiry = await make_enquiry()
        workflow = EnquiryReviewWorkflow(db_session)

        first = await workflow.update_status(enquiry.id, "approved", "note")
        first_updated_at = first.updated_at
        second = await workflow.update_status(enquiry.id, "approved", "note")

        assert second.status == "approved"
        assert second.admin_notes == "note"
        assert second.updated_at > first_updated_at

    async def test_updated_at_advances_when_clock_stalls(self, db_session, make_enquiry, monkeypatch):
        """Test updated_at is strictly later even if the clock has not moved"""
        enquiry = await make_enquiry()
        frozen = enquiry.updated_at
        monkeypatch.setattr(enquiry_review, "utcnow", lambda: frozen)

        updated = await EnquiryReviewWorkflow(db_session).update_status(enquiry.id, "contacted")

        assert updated.updated_at > frozen
        assert updated.updated_at >= updated.created_at

    async def test_timestamps_load_as_utc(self, db_session, make_enquiry):
        """Test stored timestamps come back timezone-aware in UTC"""
        enquiry = await make_enquiry()

        updated = await EnquiryReviewWorkflow(db_session).update_status(enquiry.id, "contacted")

        assert updated.created_at.tzinfo is not None
        assert updated.updated_at.utcoffset().total_seconds() == 0


@pytest.mark.unit
class TestUpdateStatusFailures:
    """Failed transitions leave the record set unchanged"""

    async def test_unknown_id_raises_not_found(self, db_session, make_enquiry):
        """Test an unknown id raises NotFoundError and writes nothing"""
        await make_enquiry()
        await make_enquiry()
        workflow = EnquiryReviewWorkflow(db_session)
        before = await snapshot(workflow)

        with pytest.raises(NotFoundError):
            await workflow.update_status(uuid.uuid4(), "approved", "note")

        assert await snapshot(workflow) == before

    async def test_malformed_id_raises_not_found(self, db_session):
        """Test a malformed id is treated as unknown"""
        with pytest.raises(NotFoundError):
            await EnquiryReviewWorkflow(db_session).update_status("not-a-uuid", "approved")

    @pytest.mark.parametrize("status", ["activated", "PENDING", "", None])
    async def test_invalid_status_raises_validation_error(self, db_session, make_enquiry, status):
        """Test a status outside the four values is rejected"""
        enquiry = await make_enquiry()
        workflow = EnquiryReviewWorkflow(db_session)
        before = await snapshot(workflow)

        with pytest.raises(ValidationError) as exc_info:
            await workflow.update_status(enquiry.id, status)

        assert exc_info.value.fields == ["status"]
        assert await snapshot(workflow) == before

    async def test_stale_version_raises_conflict(self, db_session, make_enquiry):
        """Test a second update based on the same version is rejected"""
        enquiry = await make_enquiry()
        workflow = EnquiryReviewWorkflow(db_session)

        # First admin saw version 1 and wins
        await workflow.update_status(enquiry.id, "contacted", "First admin", expected_version=1)
        before = await snapshot(workflow)

        # Second admin also saw version 1
        with pytest.raises(ConflictError) as exc_info:
            await workflow.update_status(enquiry.id, "rejected", "Second admin", expected_version=1)

        assert exc_info.value.current_version == 2
        assert await snapshot(workflow) == before

    async def test_concurrent_update_with_same_version(self, file_session_factory, enquiry_data, monkeypatch):
        """Test the write is rejected when another admin commits between read and write"""
        async with file_session_factory() as setup:
            enquiry = await EnquirySubmissionService(setup).submit(enquiry_data)

        async with file_session_factory() as first, file_session_factory() as second:
            first_workflow = EnquiryReviewWorkflow(first)
            stale = await first_workflow.get(enquiry.id)

            async def read_before_other_admin(enquiry_id):
                return stale

            monkeypatch.setattr(first_workflow, "get", read_before_other_admin)

            await EnquiryReviewWorkflow(second).update_status(
                enquiry.id, "rejected", "Second admin", expected_version=1
            )

            with pytest.raises(ConflictError) as exc_info:
                await first_workflow.update_status(
                    enquiry.id, "approved", "First admin", expected_version=1
                )

        assert exc_info.value.current_version == 2

        async with file_session_factory() as check:
            stored = await EnquiryReviewWorkflow(check).get(enquiry.id)

        assert stored.status == "rejected"
        assert stored.admin_notes == "Second admin"
        assert stored.version == 2

    async def test_concurrent_update_without_version_increments(self, file_session_factory, enquiry_data):
        """Test last-write-wins updates from two sessions each bump the version"""
        async with file_session_factory() as setup:
            enquiry = await EnquirySubmissionService(setup).submit(enquiry_data)

        async with file_session_factory() as first, file_session_factory() as second:
            await EnquiryReviewWorkflow(first).get(enquiry.id)
            await EnquiryReviewWorkflow(second).update_status(enquiry.id, "contacted", "Second admin")
            updated = await EnquiryReviewWorkflow(first).update_status(enquiry.id, "approved", "First admin")

        assert updated.status == "approved"
        assert updated.version == 3

    async def test_without_expected_version_last_write_wins(self, db_session, make_enquiry):
        """Test updates without a version are applied in order"""
        enquiry = await make_enquiry()
        workflow = EnquiryReviewWorkflow(db_session)

        await workflow.update_status(enquiry.id, "contacted", "First admin")
        updated = await workflow.update_status(enquiry.id, "rejected", "Second admin")

        assert updated.status == "rejected"
        assert updated.admin_notes == "Second admin"


@pytest.mark.unit
class TestListingAndCounts:
    """Filtered listing and aggregate status counts"""

    async def _seed(self, db_session, make_enquiry):
        """3 pending, 2 approved, 1 rejected"""
        workflow = EnquiryReviewWorkflow(db_session)
        enquiries = [await make_enquiry() for _ in range(6)]
        await workflow.update_status(enquiries[0].id, "approved")
        await workflow.update_status(enquiries[1].id, "approved")
        await workflow.update_status(enquiries[2].id, "rejected")
        return workflow

    async def test_aggregate_counts(self, db_session, make_enquiry):
        """Test counts per status for a mixed set"""
        workflow = await self._seed(db_session, make_enquiry)

        counts = await workflow.aggregate_counts()

        assert counts == {"pending": 3, "contacted": 0, "approved": 2, "rejected": 1}
        assert sum(counts.values()) == 6

    async def test_counts_ignore_list_filter(self, db_session, make_enquiry):
        """Test counts cover every enquiry whatever the list filter"""
        workflow = await self._seed(db_session, make_enquiry)

        approved = await workflow.list("approved")
        counts = await workflow.aggregate_counts()

        assert len(approved) == 2
        assert all(e.status == "approved" for e in approved)
        assert sum(counts.values()) == 6

    async def test_counts_empty_store(self, db_session):
        """Test all four statuses are reported as zero on an empty store"""
        counts = await EnquiryReviewWorkflow(db_session).aggregate_counts()

        assert counts == {"pending": 0, "contacted": 0, "approved": 0, "rejected": 0}

    @pytest.mark.parametrize("status_filter", [None, "", "all"])
    async def test_list_all(self, db_session, make_enquiry, status_filter):
        """Test an empty filter or "all" lists every enquiry"""
        workflow = await self._seed(db_session, make_enquiry)

        assert len(await workflow.list(status_filter)) == 6

    async def test_list_filter_without_matches(self, db_session, make_enquiry):
        """Test a filter with no matching enquiries returns an empty list"""
        workflow = await self._seed(db_session, make_enquiry)

        assert await workflow.list("contacted") == []

    async def test_list_newest_first(self, db_session, make_enquiry):
        """Test the list is ordered by created_at descending"""
        workflow = await self._seed(db_session, make_enquiry)

        created = [e.created_at for e in await workflow.list()]

        assert created == sorted(created, reverse=True)

    async def test_list_unknown_filter(self, db_session):
        """Test an unknown filter value is rejected"""
        with pytest.raises(ValidationError):
            await EnquiryReviewWorkflow(db_session).list("archived")

    async def test_get_unknown_id(self, db_session):
        """Test get raises NotFoundError for an unknown id"""
        with pytest.raises(NotFoundError, match="not found"):
            await EnquiryReviewWorkflow(db_session).get(uuid.uuid4())


class TestHelpers:
    """Pure helpers"""

    def test_parse_status(self):
        """Test strings and enum members both parse"""
        assert parse_status("rejected") is EnquiryStatus.REJECTED
        assert parse_status(EnquiryStatus.CONTACTED) is EnquiryStatus.CONTACTED

    def test_utcnow_is_aware_utc(self):
        """Test the service clock is timezone-aware UTC"""
        now = utcnow()

        assert now.tzinfo is not None
        assert now.utcoffset().total_seconds() == 0

    def test_next_timestamp_without_previous(self):
        """Test the first timestamp is simply now"""
        assert isinstance(next_timestamp(None), datetime)

    def test_next_timestamp_after_future_previous(self):
        """Test a previous value ahead of the clock is still exceeded"""
        future = datetime(2999, 1, 1, tzinfo=timezone.utc)

        assert next_timestamp(future) > future
