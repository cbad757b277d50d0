"""
Enquiry Submission Service

Accepts enquiries from the public contact form and enrollment modal,
re-validates the required fields and stores the record in the pending state.
No notification is sent from here; contacting the student is a manual admin
action (see contact_dispatch).
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from testcademy.exceptions import ValidationError
from testcademy.models.enquiry import Enquiry, EnquiryStatus

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("full_name", "email", "message")
OPTIONAL_FIELDS = ("phone", "course_id", "course_interest")


def utcnow() -> datetime:
    """Current UTC time as stored in the enquiry timestamps"""
    return datetime.now(timezone.utc)


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class EnquirySubmissionService:
    """Creates enquiries from untrusted public input"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def validate(self, data: Mapping[str, Any]) -> Dict[str, Optional[str]]:
        """
        Trim every field and check the required ones.

        Args:
            data: Raw submission (full_name, email, message, phone, course_id, course_interest)

        Returns:
            Cleaned field values, blank optional fields mapped to None

        Raises:
            ValidationError: naming every missing required field
        """
        cleaned = {name: _clean(data.get(name)) for name in REQUIRED_FIELDS + OPTIONAL_FIELDS}

        missing = [name for name in REQUIRED_FIELDS if not cleaned[name]]
        if missing:
            raise ValidationError(
                f"Missing required field(s): {', '.join(missing)}",
                fields=missing,
            )

        return cleaned

    async def submit(self, data: Mapping[str, Any]) -> Enquiry:
        """
        Persist a new enquiry in the pending state.

        Returns:
            The created Enquiry, including its assigned id
        """
        try:
            cleaned = self.validate(data)
        except ValidationError as e:
            logger.warning(f"Rejected enquiry submission: {e.message}")
            raise

        now = utcnow()
        enquiry = Enquiry(
            id=uuid.uuid4(),
            full_name=cleaned["full_name"],
            email=cleaned["email"],
            phone=cleaned["phone"],
            course_id=cleaned["course_id"],
            course_interest=cleaned["course_interest"],
            message=cleaned["message"],
            status=EnquiryStatus.PENDING.value,
            admin_notes=None,
            version=1,
            created_at=now,
            updated_at=now,
        )

        self.session.add(enquiry)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Enquiry {enquiry.id} submitted (course: {enquiry.course_id or 'general'})")
        return enquiry
