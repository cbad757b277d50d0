"""SQLAlchemy ORM Models for the TestCademy Database Schema"""
from testcademy.models.enquiry import Enquiry, EnquiryStatus
from testcademy.models.course import Course
from testcademy.models.featured_courses import FeaturedCourseSettings

__all__ = [
    "Enquiry",
    "EnquiryStatus",
    "Course",
    "FeaturedCourseSettings",
]
