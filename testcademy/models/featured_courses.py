"""FeaturedCourseSettings model - Home page course showcase (single-row table)"""
from sqlalchemy import Column, Integer, Boolean, DateTime, JSON, CheckConstraint
from sqlalchemy.sql import func

from testcademy.database import Base


class FeaturedCourseSettings(Base):
    """Selected featured courses - single-row table with id=1 constraint"""

    __tablename__ = "featured_course_settings"

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=False,
        default=1,
    )
    featured_course_ids = Column(JSON, nullable=False, default=list)
    show_featured_courses = Column(Boolean, nullable=False, default=True)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # Ensure single-row table constraint
    __table_args__ = (CheckConstraint("id = 1", name="featured_single_row_check"),)

    def __repr__(self):
        return (
            f"<FeaturedCourseSettings(ids={self.featured_course_ids}, "
            f"show={self.show_featured_courses})>"
        )
