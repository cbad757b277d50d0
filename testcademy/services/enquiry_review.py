"""
Enquiry Review Workflow

Admin-side listing, filtering and status transitions of enquiries.

Any status may move to any other status; there is no transition table and no
automatic transition. Concurrent updates are last-write-wins unless the
caller passes the version it last saw (expected_version), in which case a
stale update is rejected with ConflictError.
"""
import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from testcademy.exceptions import ConflictError, NotFoundError, ValidationError
from testcademy.models.enquiry import Enquiry, EnquiryStatus
from testcademy.services.enquiry_submission import utcnow

logger = logging.getLogger(__name__)

ALL_STATUSES = "all"


def parse_status(value: Any) -> EnquiryStatus:
    """
    Convert a caller-supplied status into EnquiryStatus.

    Raises:
        ValidationError: If value is not one of the four statuses
    """
    try:
        return EnquiryStatus(value)
    except ValueError:
        raise ValidationError(
            f"Invalid status: {value!r}. Must be one of: {', '.join(EnquiryStatus.values())}",
            fields=["status"],
        )


def next_timestamp(previous: Optional[datetime]) -> datetime:
    """Return now, nudged forward so it is strictly after previous"""
    now = utcnow()
    if previous is None:
        return now

    if now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


class EnquiryReviewWorkflow:
    """Listing, counting and status updates for the admin enquiry manager"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list(self, status_filter: Optional[str] = None) -> List[Enquiry]:
        """
        List enquiries, newest first.

        Args:
            status_filter: None or "all" for every enquiry, otherwise one status value

        Raises:
            ValidationError: If the filter is not "all" or a known status
        """
        query = select(Enquiry).order_by(Enquiry.created_at.desc(), Enquiry.id)

        if status_filter not in (None, "", ALL_STATUSES):
            status = parse_status(status_filter)
            query = query.where(Enquiry.status == status.value)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def aggregate_counts(self) -> Dict[str, int]:
        """Count enquiries per status over the whole, unfiltered collection"""
        result = await self.session.execute(
            select(Enquiry.status, func.count(Enquiry.id)).group_by(Enquiry.status)
        )

        counts = {status: 0 for status in EnquiryStatus.values()}
        for status, count in result.all():
            counts[status] = count
        return counts

    async def get(self, enquiry_id: Any) -> Enquiry:
        """
        Fetch one enquiry, always re-reading the stored row.

        Raises:
            NotFoundError: If no enquiry has this id
        """
        try:
            key = enquiry_id if isinstance(enquiry_id, uuid.UUID) else uuid.UUID(str(enquiry_id))
        except ValueError:
            raise NotFoundError("Enquiry", enquiry_id)

        result = await self.session.execute(
            select(Enquiry)
            .where(Enquiry.id == key)
            .execution_options(populate_existing=True)
        )
        enquiry = result.scalar_one_or_none()
        if enquiry is None:
            raise NotFoundError("Enquiry", enquiry_id)
        return enquiry

    async def update_status(
        self,
        enquiry_id: Any,
        new_status: Any,
        notes: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> Enquiry:
        """
        Move an enquiry to a new status.

        Args:
            enquiry_id: Id of an existing enquiry
            new_status: One of pending, contacted, approved, rejected
            notes: Replaces admin_notes entirely when not None
            expected_version: Version the admin last saw; None disables the check

        Returns:
            The updated Enquiry

        Raises:
            ValidationError: Unknown status
            NotFoundError: Unknown id
            ConflictError: expected_version does not match the stored version
        """
        status = parse_status(new_status)
        enquiry = await self.get(enquiry_id)

        if expected_version is not None and expected_version != enquiry.version:
            self._reject_stale(enquiry.id, expected_version, enquiry.version)

        previous_status = enquiry.status
        values = {
            "status": status.value,
            "updated_at": next_timestamp(enquiry.updated_at),
            "version": Enquiry.version + 1,
        }
        if notes is not None:
            values["admin_notes"] = notes

        # The version guard makes the check and the write one statement
        stmt = update(Enquiry).where(Enquiry.id == enquiry.id)
        if expected_version is not None:
            stmt = stmt.where(Enquiry.version == expected_version)
        stmt = stmt.values(**values).execution_options(synchronize_session=False)

        try:
            result = await self.session.execute(stmt)
            if result.rowcount == 0:
                current_version = await self.session.scalar(
                    select(Enquiry.version).where(Enquiry.id == enquiry.id)
                )
                await self.session.rollback()
                if current_version is None:
                    raise NotFoundError("Enquiry", enquiry_id)
                self._reject_stale(enquiry.id, expected_version, current_version)
            await self.session.commit()
        except (NotFoundError, ConflictError):
            raise
        except Exception:
            await self.session.rollback()
            raise

        enquiry = await self.get(enquiry.id)
        logger.info(
            f"Enquiry {enquiry.id} status {previous_status} -> {enquiry.status} "
            f"(version {enquiry.version})"
        )
        return enquiry

    @staticmethod
    def _reject_stale(enquiry_id: uuid.UUID, expected_version: int, current_version: int):
        logger.warning(
            f"Stale update rejected for enquiry {enquiry_id}: "
            f"expected version {expected_version}, found {current_version}"
        )
        raise ConflictError("Enquiry", enquiry_id, expected_version, current_version)
