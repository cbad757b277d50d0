"""Enquiry model - Prospective student contact requests and their review state"""
import enum
import uuid

from sqlalchemy import Column, String, Integer, Text, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from testcademy.database import Base
from testcademy.models.types import UTCDateTime


class EnquiryStatus(str, enum.Enum):
    """Triage state of an enquiry"""

    PENDING = "pending"
    CONTACTED = "contacted"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def values(cls):
        return [status.value for status in cls]


class Enquiry(Base):
    """Enquiry submitted from the contact form or enrollment modal"""

    __tablename__ = "enquiries"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=False)
    phone = Column(String(50), nullable=True)
    course_id = Column(String(64), nullable=True)
    course_interest = Column(String(200), nullable=True)
    message = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=EnquiryStatus.PENDING.value)
    admin_notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(UTCDateTime, server_default=func.now(), nullable=False)
    updated_at = Column(UTCDateTime, server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'contacted', 'approved', 'rejected')",
            name="enquiry_status_check",
        ),
        CheckConstraint("updated_at >= created_at", name="enquiry_timestamps_check"),
        Index("idx_enquiries_status", "status"),
        Index("idx_enquiries_created_at", "created_at"),
    )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "course_id": self.course_id,
            "course_interest": self.course_interest,
            "message": self.message,
            "status": self.status,
            "admin_notes": self.admin_notes,
            "version": self.version,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Enquiry(id={self.id}, email={self.email}, status={self.status})>"
