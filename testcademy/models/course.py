"""Course model - Catalogue entries that enquiries and the home page refer to"""
from sqlalchemy import Column, String, Integer, Text, Numeric, Boolean, DateTime, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import uuid

from testcademy.database import Base


class Course(Base):
    """Course offered by the academy"""

    __tablename__ = "courses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=True)  # complete, fasttrack, automation, manual, sql, jmeter
    duration_days = Column(
        Integer,
        CheckConstraint("duration_days > 0"),
        nullable=False,
    )
    price = Column(Numeric(10, 2), nullable=False, default=149)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_courses_active", "is_active"),
    )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "duration_days": self.duration_days,
            "price": float(self.price) if self.price is not None else None,
            "is_active": self.is_active,
        }

    def __repr__(self):
        return f"<Course(id={self.id}, title={self.title}, active={self.is_active})>"
